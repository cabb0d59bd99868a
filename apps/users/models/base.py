import uuid

from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel

from apps.users.managers import CustomUserManager

minecraft_username_validator = RegexValidator(
    regex=r"^[A-Za-z0-9_]{3,16}$",
    message="Minecraft usernames are 3-16 letters, digits or underscores.",
)


class CustomUser(AbstractUser, BaseModel):
    """
    A player account. Players log in with their Minecraft username, which is
    linked to the account when the in-game one-time code is confirmed.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # The username field is replaced by the Minecraft username.
    username = None

    mc_username = models.CharField(
        _("minecraft username"),
        max_length=16,
        unique=True,
        validators=[minecraft_username_validator],
    )
    mc_uuid = models.UUIDField(null=True, blank=True, unique=True)
    email = models.EmailField(_("email address"), blank=True)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    USERNAME_FIELD = "mc_username"
    REQUIRED_FIELDS = []

    objects = CustomUserManager()

    class Meta:
        db_table = "core_user"
        indexes = [
            models.Index(fields=["mc_username", "is_active"]),
        ]

    def __str__(self):
        return self.mc_username

    def get_full_name(self):
        return self.mc_username

    def get_short_name(self):
        return self.mc_username
