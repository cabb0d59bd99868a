import logging

from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import (
    Forbidden,
    InvalidTransition,
    NegotiationClosed,
    NotAgreed,
    NotFound,
    RequestNotOpen,
)
from apps.requests.request_base.models import Request, RequestStatus
from apps.requests.request_negotiation.models import (
    NegotiationStatus,
    RequestNegotiation,
)
from apps.requests.request_negotiation.resolver import fallback_terms
from apps.requests.request_offer.models import OfferStatus, RequestOffer

logger = logging.getLogger("request_lifecycle")


REQUEST_TRANSITIONS = {
    RequestStatus.OPEN: {RequestStatus.IN_NEGOTIATION, RequestStatus.CANCELLED},
    RequestStatus.IN_NEGOTIATION: {RequestStatus.OPEN, RequestStatus.ACCEPTED},
    RequestStatus.ACCEPTED: {RequestStatus.COMPLETED},
    RequestStatus.COMPLETED: set(),
    RequestStatus.CANCELLED: set(),
}

NEGOTIATION_TRANSITIONS = {
    NegotiationStatus.IN_PROGRESS: {NegotiationStatus.AGREED, NegotiationStatus.FAILED},
    NegotiationStatus.AGREED: set(),
    NegotiationStatus.FAILED: set(),
}


class RequestLifecycle:
    """
    Owns every status change of requests and negotiations.

    Each transition is a conditional update keyed on the expected current
    status. When the row has moved on since it was read, the update touches
    nothing and the stale-state error is raised; callers run inside
    ``transaction.atomic`` so everything written before it is rolled back.
    """

    @classmethod
    def _move_request(cls, request: Request, to_status, stale_error=InvalidTransition, **fields):
        from_status = RequestStatus(request.status)
        if to_status not in REQUEST_TRANSITIONS[from_status]:
            raise InvalidTransition(
                f"Cannot move request from {from_status.label} to {RequestStatus(to_status).label}"
            )

        now = timezone.now()
        updated = Request.objects.filter(pk=request.pk, status=from_status).update(
            status=to_status, updated_at=now, **fields
        )
        if updated == 0:
            logger.warning(
                f"Stale request {request.pk}: expected {from_status}, wanted {to_status}"
            )
            raise stale_error()

        request.status = to_status
        request.updated_at = now
        for name, value in fields.items():
            setattr(request, name, value)
        logger.info(f"Request {request.pk}: {from_status} -> {to_status}")
        return request

    @classmethod
    def _move_negotiation(cls, negotiation: RequestNegotiation, to_status, **fields):
        from_status = NegotiationStatus(negotiation.status)
        if to_status not in NEGOTIATION_TRANSITIONS[from_status]:
            raise NegotiationClosed()

        now = timezone.now()
        updated = RequestNegotiation.objects.filter(
            pk=negotiation.pk, status=from_status
        ).update(status=to_status, updated_at=now, **fields)
        if updated == 0:
            raise NegotiationClosed()

        negotiation.status = to_status
        negotiation.updated_at = now
        for name, value in fields.items():
            setattr(negotiation, name, value)
        logger.info(f"Negotiation {negotiation.pk}: {from_status} -> {to_status}")
        return negotiation

    @classmethod
    def open_negotiation(cls, request: Request, offer: RequestOffer) -> RequestNegotiation:
        """Move the request into negotiation and start the conversation for `offer`."""
        cls._move_request(request, RequestStatus.IN_NEGOTIATION, stale_error=RequestNotOpen)

        terms = fallback_terms(
            offer_price=offer.offered_price,
            offer_currency=offer.currency,
            suggested_price=request.suggested_price,
            suggested_currency=request.currency,
        )
        negotiation = RequestNegotiation.objects.create(
            request=request,
            accepted_offer=offer,
            opening_price=terms.price,
            opening_currency=terms.currency or "",
            current_price=terms.price,
            current_currency=terms.currency or "",
        )
        logger.info(
            f"Negotiation {negotiation.pk} opened for request {request.pk} with offer {offer.pk}"
        )
        return negotiation

    @classmethod
    def fail_negotiation(cls, negotiation: RequestNegotiation) -> RequestNegotiation:
        """Close a rejected negotiation and put the request back on the board."""
        now = timezone.now()
        cls._move_negotiation(negotiation, NegotiationStatus.FAILED, completed_at=now)
        # request before offer, the same order offer transitions lock in
        cls._move_request(negotiation.request, RequestStatus.OPEN)

        RequestOffer.objects.filter(
            pk=negotiation.accepted_offer_id, status=OfferStatus.ACCEPTED
        ).update(status=OfferStatus.REJECTED, updated_at=now)
        return negotiation

    @classmethod
    def agree_negotiation(cls, negotiation: RequestNegotiation) -> RequestNegotiation:
        cls._move_negotiation(
            negotiation, NegotiationStatus.AGREED, completed_at=timezone.now()
        )
        cls._move_request(negotiation.request, RequestStatus.ACCEPTED)
        return negotiation

    @classmethod
    @transaction.atomic
    def complete(cls, request_id, actor) -> Request:
        """
        Mark an accepted request as fulfilled.

        Only the offerer of the agreed negotiation may do this; the requester
        confirming their own trade is refused.
        """
        try:
            request = Request.objects.select_for_update().get(pk=request_id)
        except Request.DoesNotExist:
            raise NotFound("Request not found")

        negotiation = (
            RequestNegotiation.objects.select_related("accepted_offer")
            .filter(request=request)
            .exclude(status=NegotiationStatus.FAILED)
            .order_by("-created_at")
            .first()
        )
        if (
            actor is None
            or negotiation is None
            or negotiation.accepted_offer.offerer_id != actor.pk
        ):
            raise Forbidden("Only the accepted offerer can complete this request")
        if negotiation.status != NegotiationStatus.AGREED:
            raise NotAgreed()
        if request.status != RequestStatus.ACCEPTED:
            raise InvalidTransition("Only accepted requests can be completed")

        now = timezone.now()
        cls._move_request(request, RequestStatus.COMPLETED, completed_at=now)
        RequestNegotiation.objects.filter(pk=negotiation.pk).update(
            completed_at=now, updated_at=now
        )
        logger.info(f"Request {request.pk} completed by {actor.pk}")
        return request

    @classmethod
    @transaction.atomic
    def cancel(cls, request: Request, actor) -> Request:
        if actor is None or request.requester_id != actor.pk:
            raise Forbidden("Only the requester can cancel this request")
        if request.status != RequestStatus.OPEN:
            raise InvalidTransition("Only open requests can be cancelled")
        return cls._move_request(request, RequestStatus.CANCELLED)
