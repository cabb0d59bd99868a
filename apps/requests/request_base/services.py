import logging
from typing import Dict, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q

from apps.core.exceptions import Forbidden, InvalidRequest, InvalidTransition, NotFound
from apps.core.utils.action_result import service_action
from apps.core.utils.currency import Currency, validate_currency
from apps.core.utils.lookups import get_or_not_found
from apps.items.services import ItemCatalog
from apps.requests.request_base.filters import RequestFilter
from apps.requests.request_base.lifecycle import RequestLifecycle
from apps.requests.request_base.models import Request, RequestStatus, RequestType
from apps.requests.request_negotiation.services import NegotiationService
from apps.requests.request_offer.models import OfferStatus, RequestOffer
from apps.requests.utils.validation import clean_text, parse_price, require_user

logger = logging.getLogger(__name__)

BOARD = getattr(settings, "REQUEST_BOARD_SETTINGS", {})

ORDERABLE_FIELDS = ("created_at", "updated_at", "suggested_price")
EDITABLE_FIELDS = ("title", "description", "suggested_price", "status")


def page_bounds(limit=None, offset=None):
    default_size = BOARD.get("DEFAULT_PAGE_SIZE", 20)
    max_size = BOARD.get("MAX_PAGE_SIZE", 50)
    try:
        limit = default_size if limit in (None, "") else int(limit)
        offset = 0 if offset in (None, "") else int(offset)
    except (TypeError, ValueError):
        raise InvalidRequest("limit and offset must be integers")
    if not 1 <= limit <= max_size:
        raise InvalidRequest(f"limit must be between 1 and {max_size}")
    if offset < 0:
        raise InvalidRequest("offset cannot be negative")
    return limit, offset


def paginate(queryset, limit, offset) -> Dict:
    total = queryset.count()
    rows = list(queryset[offset:offset + limit])
    return {"requests": rows, "total": total, "has_more": offset + len(rows) < total}


class RequestValidationService:
    """Field rules for request creation and updates"""

    @staticmethod
    def validate_title(title) -> str:
        return clean_text(title, "Title", BOARD.get("TITLE_MAX_LENGTH", 100))

    @staticmethod
    def validate_description(description) -> str:
        return clean_text(description, "Description", BOARD.get("DESCRIPTION_MAX_LENGTH", 1000))

    @staticmethod
    def validate_item(request_type, item_id, item_quantity):
        """Item and quantity come together; item requests must name one."""
        has_item = bool(item_id)
        has_quantity = item_quantity not in (None, "")

        if request_type == RequestType.ITEM and not (has_item and has_quantity):
            raise InvalidRequest("Item requests need an item and a quantity")
        if has_item != has_quantity:
            raise InvalidRequest("Item and quantity must be provided together")
        if not has_item:
            return None, None

        try:
            quantity = int(item_quantity)
        except (TypeError, ValueError):
            raise InvalidRequest("Quantity must be a whole number")
        max_quantity = BOARD.get("MAX_ITEM_QUANTITY", 999_999)
        if not 1 <= quantity <= max_quantity:
            raise InvalidRequest(f"Quantity must be between 1 and {max_quantity}")

        if not ItemCatalog.item_exists(item_id):
            raise NotFound("Selected item not found")
        return item_id, quantity


class RequestService:
    """Request CRUD, listing, search and statistics"""

    @staticmethod
    @service_action
    def create_request(
        user,
        title,
        description,
        request_type=RequestType.GENERAL,
        item_id=None,
        item_quantity=None,
        suggested_price=None,
        currency=Currency.EMERALDS,
    ) -> Request:
        require_user(user)
        if request_type not in RequestType.values:
            raise InvalidRequest(f"Unknown request type: {request_type!r}")

        title = RequestValidationService.validate_title(title)
        description = RequestValidationService.validate_description(description)
        item_id, item_quantity = RequestValidationService.validate_item(
            request_type, item_id, item_quantity
        )
        price = parse_price(suggested_price)
        currency = validate_currency(currency or Currency.EMERALDS)

        request = Request.objects.create(
            title=title,
            description=description,
            request_type=request_type,
            item_id=item_id,
            item_quantity=item_quantity,
            suggested_price=price,
            currency=currency,
            requester=user,
        )
        logger.info(f"Request {request.id} created by {user.pk} ({request_type})")
        return request

    @staticmethod
    @service_action
    def update_request(request_id, user, data: Dict) -> Request:
        """
        Edit the title, description or suggested price of an open or cancelled
        request. Setting ``status`` is only allowed to cancel it.
        """
        require_user(user)
        unknown = set(data) - set(EDITABLE_FIELDS)
        if unknown:
            raise InvalidRequest(f"These fields cannot be changed: {', '.join(sorted(unknown))}")

        with transaction.atomic():
            request = get_or_not_found(
                Request.objects.select_for_update(), request_id, "Request not found"
            )
            if request.requester_id != user.pk:
                raise Forbidden("Only the requester can edit this request")
            if not request.is_editable:
                raise InvalidTransition("Only open or cancelled requests can be edited")

            changed = []
            if "title" in data:
                request.title = RequestValidationService.validate_title(data["title"])
                changed.append("title")
            if "description" in data:
                request.description = RequestValidationService.validate_description(
                    data["description"]
                )
                changed.append("description")
            if "suggested_price" in data:
                request.suggested_price = parse_price(data["suggested_price"])
                changed.append("suggested_price")

            new_status = data.get("status")
            if new_status is not None and new_status != RequestStatus.CANCELLED:
                raise InvalidTransition("Status can only be changed to cancelled")

            if changed:
                request.save(update_fields=changed + ["updated_at"])
            if new_status == RequestStatus.CANCELLED:
                RequestLifecycle.cancel(request, user)

        logger.info(f"Request {request.id} updated by {user.pk}: {changed or [new_status]}")
        return request

    @staticmethod
    @service_action
    def cancel_request(request_id, user) -> Request:
        require_user(user)
        with transaction.atomic():
            request = get_or_not_found(
                Request.objects.select_for_update(), request_id, "Request not found"
            )
            return RequestLifecycle.cancel(request, user)

    @staticmethod
    @service_action
    def delete_request(request_id, user) -> None:
        require_user(user)
        with transaction.atomic():
            request = get_or_not_found(
                Request.objects.select_for_update(), request_id, "Request not found"
            )
            if request.requester_id != user.pk:
                raise Forbidden("Only the requester can delete this request")
            if not request.is_deletable:
                raise InvalidTransition("Only open or cancelled requests can be deleted")
            request.delete()
        logger.info(f"Request {request_id} deleted by {user.pk}")

    @staticmethod
    def _base_queryset():
        return Request.objects.select_related("requester", "item").annotate(
            offer_count=Count("offers")
        )

    @staticmethod
    @service_action
    def list_requests(
        filters: Optional[Dict] = None,
        limit=None,
        offset=None,
        order_by="created_at",
        order_direction="desc",
    ) -> Dict:
        limit, offset = page_bounds(limit, offset)
        if order_by not in ORDERABLE_FIELDS:
            raise InvalidRequest(f"Cannot order by {order_by!r}")
        if order_direction not in ("asc", "desc"):
            raise InvalidRequest("order_direction must be 'asc' or 'desc'")

        filterset = RequestFilter(data=filters or {}, queryset=RequestService._base_queryset())
        if not filterset.is_valid():
            raise InvalidRequest(f"Invalid filters: {dict(filterset.errors)}")

        prefix = "-" if order_direction == "desc" else ""
        queryset = filterset.qs.order_by(f"{prefix}{order_by}", "-id")
        return paginate(queryset, limit, offset)

    @staticmethod
    @service_action
    def search_requests(query, request_type=None, limit=None, offset=None) -> Dict:
        """Open requests whose title or description contains `query`."""
        limit, offset = page_bounds(limit, offset)
        query = (query or "").strip()
        if not query:
            raise InvalidRequest("Search query is required")

        queryset = RequestService._base_queryset().filter(
            Q(title__icontains=query) | Q(description__icontains=query),
            status=RequestStatus.OPEN,
        )
        if request_type:
            if request_type not in RequestType.values:
                raise InvalidRequest(f"Unknown request type: {request_type!r}")
            queryset = queryset.filter(request_type=request_type)
        return paginate(queryset.order_by("-created_at", "-id"), limit, offset)

    @staticmethod
    @service_action
    def get_request_details(request_id, viewer=None) -> Dict:
        """
        The request, its offers newest first and its latest negotiation.

        The negotiation and its log are only included for its two participants.
        """
        request = get_or_not_found(
            RequestService._base_queryset(), request_id, "Request not found"
        )
        offers = list(
            RequestOffer.objects.filter(request=request)
            .select_related("offerer")
            .order_by("-created_at")
        )
        negotiation = (
            request.negotiations.select_related(
                "request", "request__requester", "accepted_offer", "accepted_offer__offerer"
            )
            .prefetch_related("messages__sender")
            .order_by("-created_at")
            .first()
        )
        if negotiation is not None and not negotiation.is_participant(viewer):
            negotiation = None
        if negotiation is not None:
            negotiation.terms_state = NegotiationService.checked_state(negotiation)
        return {"request": request, "offers": offers, "negotiation": negotiation}

    @staticmethod
    @service_action
    def get_user_request_stats(user) -> Dict:
        require_user(user)
        requests = Request.objects.filter(requester=user).aggregate(
            total=Count("id"),
            open=Count("id", filter=Q(status=RequestStatus.OPEN)),
            completed=Count("id", filter=Q(status=RequestStatus.COMPLETED)),
        )
        offers = RequestOffer.objects.filter(offerer=user).aggregate(
            made=Count("id"),
            accepted=Count("id", filter=Q(status=OfferStatus.ACCEPTED)),
        )
        return {
            "total_requests": requests["total"],
            "open_requests": requests["open"],
            "completed_requests": requests["completed"],
            "offers_made": offers["made"],
            "accepted_offers": offers["accepted"],
        }

    @staticmethod
    @service_action
    def complete_request(request_id, user) -> Request:
        require_user(user)
        return RequestLifecycle.complete(request_id, user)
