import logging
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import (
    Forbidden,
    InvalidOffer,
    InvalidTransition,
    NegotiationClosed,
    NotFound,
)
from apps.core.utils.action_result import service_action
from apps.core.utils.currency import compare
from apps.core.utils.lookups import get_or_not_found
from apps.requests.request_base.lifecycle import RequestLifecycle
from apps.requests.request_base.models import Request
from apps.requests.request_negotiation.models import (
    NegotiationMessage,
    NegotiationStatus,
    RequestNegotiation,
)
from apps.requests.request_negotiation.payloads import (
    Accept,
    CounterOffer,
    Reject,
    build_payload,
    record_fields,
)
from apps.requests.request_negotiation.resolver import (
    NO_TERMS,
    AcceptanceState,
    Participants,
    Terms,
    apply_message,
    resolve,
)
from apps.requests.utils.validation import require_user

logger = logging.getLogger("negotiation_performance")

BOARD = getattr(settings, "REQUEST_BOARD_SETTINGS", {})


def participants_of(negotiation: RequestNegotiation) -> Participants:
    return Participants(
        requester_id=negotiation.request.requester_id,
        offerer_id=negotiation.accepted_offer.offerer_id,
    )


def stored_state(negotiation: RequestNegotiation) -> AcceptanceState:
    """Acceptance state kept on the negotiation row."""
    pivot_sequence = None
    if negotiation.pivot_message_id is not None:
        pivot_sequence = negotiation.pivot_message.sequence
    return AcceptanceState(
        terms=Terms(
            price=negotiation.current_price,
            currency=negotiation.current_currency or None,
        ),
        requester_accepted=negotiation.requester_accepted,
        offerer_accepted=negotiation.offerer_accepted,
        pivot_sequence=pivot_sequence,
    )


def negotiation_fallback(negotiation: RequestNegotiation) -> Terms:
    """Terms seeded when the negotiation opened, unaffected by later request edits."""
    if negotiation.opening_price is None:
        return NO_TERMS
    return Terms(
        price=negotiation.opening_price,
        currency=negotiation.opening_currency or None,
    )


def resolve_negotiation(negotiation: RequestNegotiation) -> AcceptanceState:
    """Recompute the acceptance state from the full message log."""
    messages = negotiation.messages.order_by("created_at", "sequence")
    return resolve(messages, participants_of(negotiation), negotiation_fallback(negotiation))


class NegotiationValidationService:
    """Checks run before a message is appended"""

    @staticmethod
    def validate_content(content: Optional[str]) -> str:
        content = (content or "").strip()
        max_length = BOARD.get("MESSAGE_MAX_LENGTH", 500)
        if not content:
            raise InvalidOffer("Message content is required")
        if len(content) > max_length:
            raise InvalidOffer(f"Message cannot exceed {max_length} characters")
        return content

    @staticmethod
    def validate_accept(payload: Accept, state: AcceptanceState, role: str) -> None:
        if state.accepted_by(role):
            raise InvalidTransition("You have already accepted the current terms")
        terms = state.terms
        if payload.echoed_price is None or terms.price is None:
            return
        if compare(payload.echoed_price, terms.currency, terms.price, terms.currency) != 0:
            raise InvalidOffer("Accepted price does not match the current terms")


class NegotiationService:
    """Negotiation store: append messages and read negotiations"""

    @staticmethod
    @service_action
    def post_negotiation_message(
        negotiation_id,
        sender,
        message_type,
        content: str,
        price_offer=None,
        currency=None,
    ) -> NegotiationMessage:
        """
        Append a message to an active negotiation.

        The negotiation row stays locked until commit, so concurrent posts are
        applied one after the other and each sees the terms left by the
        previous one.
        """
        start_time = timezone.now()
        require_user(sender)

        payload = build_payload(message_type, price_offer, currency)
        content = NegotiationValidationService.validate_content(content)

        with transaction.atomic():
            negotiation = get_or_not_found(
                RequestNegotiation.objects.select_for_update(),
                negotiation_id,
                "Negotiation not found",
            )
            if negotiation.status != NegotiationStatus.IN_PROGRESS:
                raise NegotiationClosed()

            participants = participants_of(negotiation)
            if not negotiation.is_participant(sender):
                raise Forbidden("You are not part of this negotiation")
            role = participants.role_of(sender.pk)

            state = stored_state(negotiation)
            if isinstance(payload, Accept):
                NegotiationValidationService.validate_accept(payload, state, role)

            fields = record_fields(payload)
            if isinstance(payload, Accept) and payload.echoed_price is not None:
                fields["currency"] = state.terms.currency or ""

            sequence = negotiation.message_count + 1
            message = NegotiationMessage.objects.create(
                negotiation=negotiation,
                sender=sender,
                content=content,
                sequence=sequence,
                **fields,
            )

            state = apply_message(state, message, participants)
            NegotiationService._store_state(negotiation, state, message, sequence)

            if isinstance(payload, Reject):
                RequestLifecycle.fail_negotiation(negotiation)
            elif state.agreed:
                RequestLifecycle.agree_negotiation(negotiation)

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(
            f"{message.message_type} #{sequence} posted to negotiation {negotiation.pk} "
            f"in {duration:.2f}ms"
        )
        return message

    @staticmethod
    def _store_state(negotiation, state: AcceptanceState, message, sequence) -> None:
        negotiation.current_price = state.terms.price
        negotiation.current_currency = state.terms.currency or ""
        negotiation.requester_accepted = state.requester_accepted
        negotiation.offerer_accepted = state.offerer_accepted
        negotiation.message_count = sequence
        if isinstance(message.payload, CounterOffer):
            negotiation.pivot_message = message
        negotiation.save(
            update_fields=[
                "current_price",
                "current_currency",
                "requester_accepted",
                "offerer_accepted",
                "message_count",
                "pivot_message",
                "updated_at",
            ]
        )

    @staticmethod
    def checked_state(negotiation) -> AcceptanceState:
        """
        Resolve the log and compare it with the stored terms. A mismatch is
        logged and the resolved state wins.
        """
        resolved = resolve(
            sorted(negotiation.messages.all(), key=lambda m: (m.created_at, m.sequence)),
            participants_of(negotiation),
            negotiation_fallback(negotiation),
        )
        if resolved != stored_state(negotiation):
            logger.error(f"Stored terms of negotiation {negotiation.pk} disagree with its log")
        return resolved

    @staticmethod
    def _visible_negotiation(negotiation_id, viewer) -> RequestNegotiation:
        negotiation = get_or_not_found(
            RequestNegotiation.objects.select_related(
                "request", "request__requester", "accepted_offer", "accepted_offer__offerer"
            ).prefetch_related("messages__sender"),
            negotiation_id,
            "Negotiation not found",
        )
        if not negotiation.is_participant(viewer):
            raise Forbidden("You are not part of this negotiation")
        negotiation.terms_state = NegotiationService.checked_state(negotiation)
        return negotiation

    @staticmethod
    @service_action
    def get_negotiation(negotiation_id, viewer) -> RequestNegotiation:
        """A negotiation with its messages, visible to its two participants."""
        require_user(viewer)
        return NegotiationService._visible_negotiation(negotiation_id, viewer)

    @staticmethod
    @service_action
    def get_negotiation_for_request(request_id, viewer) -> RequestNegotiation:
        """The live (or most recent) negotiation of a request."""
        require_user(viewer)
        request = get_or_not_found(Request.objects.all(), request_id, "Request not found")
        negotiation = (
            RequestNegotiation.objects.filter(request=request)
            .exclude(status=NegotiationStatus.FAILED)
            .first()
        ) or request.latest_negotiation()
        if negotiation is None:
            raise NotFound("No negotiation found for this request")
        return NegotiationService._visible_negotiation(negotiation.pk, viewer)
