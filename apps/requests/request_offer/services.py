import logging
from typing import List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Max
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.core.exceptions import (
    Forbidden,
    InvalidOffer,
    InvalidTransition,
    RequestNotOpen,
    SelfOffer,
)
from apps.core.utils.action_result import service_action
from apps.core.utils.currency import Currency, validate_currency
from apps.core.utils.lookups import get_or_not_found
from apps.requests.request_base.lifecycle import RequestLifecycle
from apps.requests.request_base.models import Request, RequestStatus
from apps.requests.request_offer.models import OfferStatus, RequestOffer
from apps.requests.utils.validation import parse_price, require_user

logger = logging.getLogger("offers_performance")

BOARD = getattr(settings, "REQUEST_BOARD_SETTINGS", {})


class OfferValidationService:
    """Business rules checked before an offer is written"""

    @staticmethod
    def validate_new_offer(request: Request, offerer) -> None:
        if request.status != RequestStatus.OPEN:
            raise RequestNotOpen("This request is no longer accepting offers")
        if request.requester_id == offerer.pk:
            raise SelfOffer()

    @staticmethod
    def validate_message(message: Optional[str]) -> str:
        message = message or ""
        max_length = BOARD.get("MESSAGE_MAX_LENGTH", 500)
        if len(message) > max_length:
            raise InvalidOffer(f"Message cannot exceed {max_length} characters")
        return message


class OfferService:
    """Offer store: creation, listing and status transitions of request offers"""

    @staticmethod
    @service_action
    def create_offer(
        request_id,
        offerer,
        offered_price=None,
        currency=Currency.EMERALDS,
        message: Optional[str] = None,
    ) -> RequestOffer:
        """Make an offer on an open request."""
        start_time = timezone.now()
        require_user(offerer)

        price = parse_price(offered_price)
        message = OfferValidationService.validate_message(message)
        currency = validate_currency(currency or Currency.EMERALDS)

        # an acceptance holds this row lock while it rejects the pending offers
        with transaction.atomic():
            request = get_or_not_found(
                Request.objects.select_for_update(), request_id, "Request not found"
            )
            OfferValidationService.validate_new_offer(request, offerer)
            offer = RequestOffer.objects.create(
                request=request,
                offerer=offerer,
                offered_price=price,
                currency=currency,
                message=message,
            )

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Offer {offer.id} created on request {request.id} in {duration:.2f}ms")
        return offer

    @staticmethod
    @service_action
    def list_offers(request_id) -> List[RequestOffer]:
        """All offers on a request, newest first."""
        get_or_not_found(Request.objects.all(), request_id, "Request not found")
        return list(
            RequestOffer.objects.filter(request_id=request_id)
            .select_related("offerer")
            .order_by("-created_at")
        )

    @staticmethod
    @service_action
    def transition_offer(offer_id, actor, target_status) -> RequestOffer:
        """
        Accept, reject or withdraw a pending offer.

        Accepting rejects every other pending offer on the request and opens
        the negotiation in the same transaction. The request row is always
        locked before any of its offers.
        """
        start_time = timezone.now()
        require_user(actor)

        handlers = {
            OfferStatus.ACCEPTED: OfferService._accept,
            OfferStatus.REJECTED: OfferService._reject,
            OfferStatus.WITHDRAWN: OfferService._withdraw,
        }
        handler = handlers.get(target_status)
        if handler is None:
            raise InvalidTransition(f"Offers cannot be moved to {target_status}")

        with transaction.atomic():
            request_id = get_or_not_found(
                RequestOffer.objects.only("request_id"), offer_id, "Offer not found"
            ).request_id
            request = get_or_not_found(
                Request.objects.select_for_update(), request_id, "Request not found"
            )
            offer = get_or_not_found(
                RequestOffer.objects.select_for_update(), offer_id, "Offer not found"
            )
            offer.request = request
            offer = handler(offer, actor)

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(
            f"Offer {offer.id} moved to {offer.status} by {actor.pk} in {duration:.2f}ms"
        )
        return offer

    @staticmethod
    def _set_status(offer: RequestOffer, status) -> RequestOffer:
        updated = RequestOffer.objects.filter(
            pk=offer.pk, status=OfferStatus.PENDING
        ).update(status=status, updated_at=timezone.now())
        if updated == 0:
            raise InvalidTransition("Only pending offers can be changed")
        offer.status = status
        return offer

    @staticmethod
    def _accept(offer: RequestOffer, actor) -> RequestOffer:
        request = offer.request
        if request.requester_id != actor.pk:
            raise Forbidden("Only the requester can accept offers")
        if request.status != RequestStatus.OPEN:
            raise RequestNotOpen()
        if offer.status != OfferStatus.PENDING:
            raise InvalidTransition("Only pending offers can be accepted")

        OfferService._set_status(offer, OfferStatus.ACCEPTED)
        rejected = (
            RequestOffer.objects.filter(request=request, status=OfferStatus.PENDING)
            .exclude(pk=offer.pk)
            .update(status=OfferStatus.REJECTED, updated_at=timezone.now())
        )
        RequestLifecycle.open_negotiation(request, offer)

        logger.info(
            f"Offer {offer.pk} accepted on request {request.pk}, {rejected} sibling offers rejected"
        )
        return offer

    @staticmethod
    def _reject(offer: RequestOffer, actor) -> RequestOffer:
        if offer.request.requester_id != actor.pk:
            raise Forbidden("Only the requester can reject offers")
        if offer.status != OfferStatus.PENDING:
            raise InvalidTransition("Only pending offers can be rejected")
        return OfferService._set_status(offer, OfferStatus.REJECTED)

    @staticmethod
    def _withdraw(offer: RequestOffer, actor) -> RequestOffer:
        if offer.offerer_id != actor.pk:
            raise Forbidden("Only the offerer can withdraw this offer")
        if offer.status != OfferStatus.PENDING:
            raise InvalidTransition("Only pending offers can be withdrawn")
        return OfferService._set_status(offer, OfferStatus.WITHDRAWN)

    @staticmethod
    @service_action
    def list_accepted_offers(user) -> List[RequestOffer]:
        """
        The user's accepted offers with their request and negotiation, most
        recent negotiation activity first.
        """
        require_user(user)
        return list(
            RequestOffer.objects.filter(offerer=user, status=OfferStatus.ACCEPTED)
            .select_related("request", "request__requester", "negotiation")
            .annotate(
                last_activity=Coalesce(
                    Max("negotiation__messages__created_at"), "negotiation__created_at"
                )
            )
            .order_by("-last_activity", "-created_at")
        )
