from django.db import models
from rest_framework import status
from rest_framework.exceptions import Throttled
from rest_framework.response import Response
from rest_framework.views import exception_handler


class ErrorKind(models.TextChoices):
    """Typed failure reasons returned by every request board operation."""

    FORBIDDEN = "FORBIDDEN", "Forbidden"
    INVALID_TRANSITION = "INVALID_TRANSITION", "Invalid transition"
    REQUEST_NOT_OPEN = "REQUEST_NOT_OPEN", "Request not open"
    NEGOTIATION_CLOSED = "NEGOTIATION_CLOSED", "Negotiation closed"
    INVALID_OFFER = "INVALID_OFFER", "Invalid offer"
    INVALID_PRICE = "INVALID_PRICE", "Invalid price"
    INVALID_CURRENCY = "INVALID_CURRENCY", "Invalid currency"
    INVALID_REQUEST = "INVALID_REQUEST", "Invalid request"
    SELF_OFFER = "SELF_OFFER", "Self offer"
    NOT_FOUND = "NOT_FOUND", "Not found"
    NOT_AGREED = "NOT_AGREED", "Not agreed"


ERROR_STATUS_CODES = {
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorKind.REQUEST_NOT_OPEN: status.HTTP_409_CONFLICT,
    ErrorKind.NEGOTIATION_CLOSED: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_AGREED: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_OFFER: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_PRICE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_CURRENCY: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.SELF_OFFER: status.HTTP_400_BAD_REQUEST,
}


def status_code_for(kind) -> int:
    return ERROR_STATUS_CODES.get(kind, status.HTTP_400_BAD_REQUEST)


class MarketplaceError(Exception):
    """
    Base class for expected business-rule violations.

    Raised inside the domain layer and turned into an ``ActionResult`` at the
    service boundary, so callers never see it escape a public operation.
    """

    kind = ErrorKind.INVALID_TRANSITION
    default_message = "The operation is not allowed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @classmethod
    def for_kind(cls, kind, message=None):
        for subclass in MarketplaceError.__subclasses__():
            if subclass.kind == kind:
                return subclass(message)
        return MarketplaceError(message)


class Forbidden(MarketplaceError):
    kind = ErrorKind.FORBIDDEN
    default_message = "You are not allowed to perform this action"


class InvalidTransition(MarketplaceError):
    kind = ErrorKind.INVALID_TRANSITION
    default_message = "This action is not allowed in the current state"


class RequestNotOpen(MarketplaceError):
    kind = ErrorKind.REQUEST_NOT_OPEN
    default_message = "This request is no longer open"


class NegotiationClosed(MarketplaceError):
    kind = ErrorKind.NEGOTIATION_CLOSED
    default_message = "This negotiation is no longer active"


class InvalidOffer(MarketplaceError):
    kind = ErrorKind.INVALID_OFFER
    default_message = "Invalid offer"


class InvalidPrice(MarketplaceError):
    kind = ErrorKind.INVALID_PRICE
    default_message = "Invalid price"


class InvalidCurrency(MarketplaceError):
    kind = ErrorKind.INVALID_CURRENCY
    default_message = "Unknown currency"


class InvalidRequest(MarketplaceError):
    kind = ErrorKind.INVALID_REQUEST
    default_message = "Invalid request data"


class SelfOffer(MarketplaceError):
    kind = ErrorKind.SELF_OFFER
    default_message = "You cannot make an offer on your own request"


class NotFound(MarketplaceError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class NotAgreed(MarketplaceError):
    kind = ErrorKind.NOT_AGREED
    default_message = "Negotiation must be agreed upon before completing the request"


THROTTLE_MESSAGES = {
    "request_create": "Too many new requests. Please wait before posting another one.",
    "offer_create": "Too many offers. Please wait before making another offer.",
    "offer_transition": "Too many offer updates. Please slow down.",
    "negotiation_message": "Too many negotiation messages. Please wait a moment.",
}


def custom_exception_handler(exc, context):
    """
    Render marketplace errors and throttling in the standard
    ``{"status": "error", ...}`` envelope. Everything else gets DRF's
    default behaviour.
    """
    if isinstance(exc, MarketplaceError):
        code = status_code_for(exc.kind)
        return Response(
            {
                "status": "error",
                "status_code": code,
                "message": exc.message,
                "error": exc.kind,
                "data": None,
            },
            status=code,
        )

    response = exception_handler(exc, context)

    if isinstance(exc, Throttled) and response is not None:
        view = context.get("view", None)
        throttles = [] if view is None else getattr(view, "get_throttles", lambda: [])()
        scope = None
        if throttles:
            scope = getattr(throttles[0], "scope", None)

        wait_seconds = int(exc.wait) if exc.wait is not None else None

        if scope in THROTTLE_MESSAGES:
            detail = THROTTLE_MESSAGES[scope]
        elif wait_seconds is not None:
            detail = f"Request rate limit exceeded. Please wait {wait_seconds} seconds and try again."
        else:
            detail = "Request rate limit exceeded. Please try again later."

        response.data = {
            "status": "error",
            "message": detail,
            "retry_after": wait_seconds,
        }
        response.status_code = 429

    return response
