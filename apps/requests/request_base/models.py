from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q

from apps.core.models import UUIDBaseModel
from apps.core.utils.currency import Currency

BOARD = getattr(settings, "REQUEST_BOARD_SETTINGS", {})


class RequestType(models.TextChoices):
    ITEM = "ITEM", "Item"
    GENERAL = "GENERAL", "General"


class RequestStatus(models.TextChoices):
    OPEN = "OPEN", "Open"
    IN_NEGOTIATION = "IN_NEGOTIATION", "In negotiation"
    ACCEPTED = "ACCEPTED", "Accepted"
    COMPLETED = "COMPLETED", "Completed"
    CANCELLED = "CANCELLED", "Cancelled"


# Badge configuration consumed by the presentation layer.
REQUEST_STATUS_CONFIG = {
    RequestStatus.OPEN: {"label": "Open", "variant": "success"},
    RequestStatus.IN_NEGOTIATION: {"label": "In negotiation", "variant": "warning"},
    RequestStatus.ACCEPTED: {"label": "Accepted", "variant": "info"},
    RequestStatus.COMPLETED: {"label": "Completed", "variant": "secondary"},
    RequestStatus.CANCELLED: {"label": "Cancelled", "variant": "danger"},
}

EDITABLE_STATUSES = (RequestStatus.OPEN, RequestStatus.CANCELLED)


class Request(UUIDBaseModel):
    title = models.CharField(max_length=BOARD.get("TITLE_MAX_LENGTH", 100))
    description = models.TextField(max_length=BOARD.get("DESCRIPTION_MAX_LENGTH", 1000))
    request_type = models.CharField(
        max_length=16, choices=RequestType.choices, default=RequestType.GENERAL
    )
    item = models.ForeignKey(
        "items.MinecraftItem",
        on_delete=models.PROTECT,
        related_name="requests",
        null=True,
        blank=True,
    )
    item_quantity = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[
            MinValueValidator(1),
            MaxValueValidator(BOARD.get("MAX_ITEM_QUANTITY", 999_999)),
        ],
    )
    suggested_price = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    currency = models.CharField(
        max_length=20, choices=Currency.choices, default=Currency.EMERALDS
    )
    status = models.CharField(
        max_length=20, choices=RequestStatus.choices, default=RequestStatus.OPEN
    )
    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="trade_requests",
    )
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "trade_requests"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "-created_at"]),
            models.Index(fields=["requester", "status"]),
            models.Index(fields=["request_type"]),
            models.Index(fields=["item"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(item__isnull=True, item_quantity__isnull=True)
                | Q(item__isnull=False, item_quantity__isnull=False),
                name="request_item_and_quantity_together",
            ),
            models.CheckConstraint(
                condition=~Q(request_type=RequestType.ITEM) | Q(item__isnull=False),
                name="request_item_type_has_item",
            ),
            models.CheckConstraint(
                condition=Q(suggested_price__isnull=True) | Q(suggested_price__gte=0),
                name="request_suggested_price_not_negative",
            ),
        ]

    def __str__(self):
        return f"{self.title} ({self.status})"

    @property
    def is_open(self):
        return self.status == RequestStatus.OPEN

    @property
    def is_editable(self):
        return self.status in EDITABLE_STATUSES

    @property
    def is_deletable(self):
        return self.status in EDITABLE_STATUSES

    @property
    def status_config(self):
        return REQUEST_STATUS_CONFIG[RequestStatus(self.status)]

    def latest_negotiation(self):
        """Most recent negotiation, failed ones included, or None."""
        return self.negotiations.order_by("-created_at").first()
