from django.contrib.auth.base_user import BaseUserManager


class CustomUserManager(BaseUserManager):
    """Manager for players identified by their Minecraft username."""

    use_in_migrations = True

    def _create_user(self, mc_username, password, **extra_fields):
        if not mc_username:
            raise ValueError("The Minecraft username must be set")
        email = extra_fields.pop("email", "")
        user = self.model(
            mc_username=mc_username,
            email=self.normalize_email(email) if email else "",
            **extra_fields,
        )
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, mc_username, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(mc_username, password, **extra_fields)

    def create_superuser(self, mc_username, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(mc_username, password, **extra_fields)
