from django.conf import settings
from django.db import models
from django.db.models import Q

from apps.core.models import UUIDBaseModel
from apps.core.utils.currency import Currency

BOARD = getattr(settings, "REQUEST_BOARD_SETTINGS", {})


class NegotiationStatus(models.TextChoices):
    IN_PROGRESS = "IN_PROGRESS", "In progress"
    AGREED = "AGREED", "Agreed"
    FAILED = "FAILED", "Failed"


class MessageType(models.TextChoices):
    MESSAGE = "MESSAGE", "Message"
    COUNTER_OFFER = "COUNTER_OFFER", "Counter offer"
    ACCEPT = "ACCEPT", "Accept"
    REJECT = "REJECT", "Reject"


NEGOTIATION_STATUS_CONFIG = {
    NegotiationStatus.IN_PROGRESS: {"label": "In progress", "variant": "warning"},
    NegotiationStatus.AGREED: {"label": "Agreed", "variant": "success"},
    NegotiationStatus.FAILED: {"label": "Failed", "variant": "danger"},
}


class RequestNegotiation(UUIDBaseModel):
    """
    Conversation between a requester and the offerer whose offer was accepted.

    The ``current_*`` and ``*_accepted`` columns hold the terms currently on
    the table. They are folded forward in the same transaction that appends
    each message, so reads never rescan the log.
    """

    request = models.ForeignKey(
        "request_base.Request", on_delete=models.CASCADE, related_name="negotiations"
    )
    accepted_offer = models.OneToOneField(
        "request_offer.RequestOffer",
        on_delete=models.CASCADE,
        related_name="negotiation",
    )
    status = models.CharField(
        max_length=20,
        choices=NegotiationStatus.choices,
        default=NegotiationStatus.IN_PROGRESS,
    )
    completed_at = models.DateTimeField(null=True, blank=True)

    # terms fixed when the negotiation opened; the log falls back to these
    opening_price = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    opening_currency = models.CharField(
        max_length=20, choices=Currency.choices, blank=True, default=""
    )

    current_price = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    current_currency = models.CharField(
        max_length=20, choices=Currency.choices, blank=True, default=""
    )
    pivot_message = models.ForeignKey(
        "NegotiationMessage",
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )
    requester_accepted = models.BooleanField(default=False)
    offerer_accepted = models.BooleanField(default=False)
    message_count = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "request_negotiations"
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["request", "status"])]
        constraints = [
            models.UniqueConstraint(
                fields=["request"],
                condition=~Q(status=NegotiationStatus.FAILED),
                name="request_single_live_negotiation",
            ),
        ]

    def __str__(self):
        return f"Negotiation on {self.request_id} ({self.status})"

    @property
    def is_active(self):
        return self.status == NegotiationStatus.IN_PROGRESS

    @property
    def requester_id(self):
        return self.request.requester_id

    @property
    def offerer_id(self):
        return self.accepted_offer.offerer_id

    def is_participant(self, user) -> bool:
        return user is not None and user.pk in (self.requester_id, self.offerer_id)

    @property
    def status_config(self):
        return NEGOTIATION_STATUS_CONFIG[NegotiationStatus(self.status)]


class NegotiationMessage(UUIDBaseModel):
    """Append-only entry in a negotiation log."""

    negotiation = models.ForeignKey(
        RequestNegotiation, on_delete=models.CASCADE, related_name="messages"
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="negotiation_messages",
    )
    message_type = models.CharField(
        max_length=20, choices=MessageType.choices, default=MessageType.MESSAGE
    )
    content = models.TextField(max_length=BOARD.get("MESSAGE_MAX_LENGTH", 500))
    price_offer = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    currency = models.CharField(
        max_length=20, choices=Currency.choices, blank=True, default=""
    )
    # position in the log, assigned under the negotiation row lock
    sequence = models.PositiveIntegerField()

    class Meta:
        db_table = "request_negotiation_messages"
        ordering = ["created_at", "sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["negotiation", "sequence"],
                name="negotiation_message_sequence_unique",
            ),
        ]

    def __str__(self):
        return f"{self.message_type} #{self.sequence} by {self.sender}"

    @property
    def payload(self):
        from apps.requests.request_negotiation.payloads import payload_from_record

        return payload_from_record(self)
