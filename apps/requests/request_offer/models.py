from django.conf import settings
from django.db import models
from django.db.models import Q

from apps.core.models import UUIDBaseModel
from apps.core.utils.currency import Currency

BOARD = getattr(settings, "REQUEST_BOARD_SETTINGS", {})


class OfferStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    ACCEPTED = "ACCEPTED", "Accepted"
    REJECTED = "REJECTED", "Rejected"
    WITHDRAWN = "WITHDRAWN", "Withdrawn"


OFFER_STATUS_CONFIG = {
    OfferStatus.PENDING: {"label": "Pending", "variant": "warning"},
    OfferStatus.ACCEPTED: {"label": "Accepted", "variant": "success"},
    OfferStatus.REJECTED: {"label": "Rejected", "variant": "danger"},
    OfferStatus.WITHDRAWN: {"label": "Withdrawn", "variant": "secondary"},
}


class RequestOffer(UUIDBaseModel):
    request = models.ForeignKey(
        "request_base.Request", on_delete=models.CASCADE, related_name="offers"
    )
    offerer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="request_offers",
    )
    offered_price = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    currency = models.CharField(
        max_length=20, choices=Currency.choices, default=Currency.EMERALDS
    )
    message = models.TextField(
        max_length=BOARD.get("MESSAGE_MAX_LENGTH", 500), blank=True, default=""
    )
    status = models.CharField(
        max_length=20, choices=OfferStatus.choices, default=OfferStatus.PENDING
    )

    class Meta:
        db_table = "request_offers"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["request", "status"]),
            models.Index(fields=["offerer", "status"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["request"],
                condition=Q(status=OfferStatus.ACCEPTED),
                name="request_single_accepted_offer",
            ),
            models.CheckConstraint(
                condition=Q(offered_price__isnull=True) | Q(offered_price__gte=0),
                name="request_offer_price_not_negative",
            ),
        ]

    def __str__(self):
        return f"Offer by {self.offerer} on {self.request_id} ({self.status})"

    @property
    def is_pending(self):
        return self.status == OfferStatus.PENDING

    @property
    def status_config(self):
        return OFFER_STATUS_CONFIG[OfferStatus(self.status)]
