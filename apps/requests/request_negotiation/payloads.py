"""
Typed payloads for negotiation messages.

Each message type carries exactly the fields it needs, so a price can never
be attached to a chat line and a counter-offer can never lose its currency.
``build_payload`` validates raw input and is the only way the services
construct one.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import ClassVar, Optional, Union

from apps.core.exceptions import InvalidCurrency, InvalidOffer
from apps.core.utils.currency import Currency, validate_currency
from apps.requests.request_negotiation.models import MessageType


@dataclass(frozen=True)
class ChatMessage:
    message_type: ClassVar[str] = MessageType.MESSAGE


@dataclass(frozen=True)
class CounterOffer:
    price: Decimal
    currency: Currency
    message_type: ClassVar[str] = MessageType.COUNTER_OFFER


@dataclass(frozen=True)
class Accept:
    echoed_price: Optional[Decimal] = None
    message_type: ClassVar[str] = MessageType.ACCEPT


@dataclass(frozen=True)
class Reject:
    message_type: ClassVar[str] = MessageType.REJECT


Payload = Union[ChatMessage, CounterOffer, Accept, Reject]


def _parse_price(price) -> Optional[Decimal]:
    if price is None or price == "":
        return None
    try:
        value = price if isinstance(price, Decimal) else Decimal(str(price))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidOffer("Price must be a number")
    if not value.is_finite():
        raise InvalidOffer("Price must be a number")
    return value


def build_payload(message_type, price=None, currency=None) -> Payload:
    """Validate raw message fields and return the matching payload."""
    price = _parse_price(price)

    if message_type == MessageType.COUNTER_OFFER:
        if price is None or price <= 0:
            raise InvalidOffer("A counter offer needs a price greater than zero")
        if not currency:
            raise InvalidOffer("A counter offer needs a currency")
        try:
            return CounterOffer(price=price, currency=validate_currency(currency))
        except InvalidCurrency as e:
            raise InvalidOffer(e.message)

    if message_type == MessageType.ACCEPT:
        if price is not None and price <= 0:
            raise InvalidOffer("Accepted price must be greater than zero")
        return Accept(echoed_price=price)

    if message_type in (MessageType.MESSAGE, MessageType.REJECT):
        if price is not None:
            raise InvalidOffer(f"A {message_type} message cannot carry a price")
        return ChatMessage() if message_type == MessageType.MESSAGE else Reject()

    raise InvalidOffer(f"Unknown message type: {message_type!r}")


def payload_from_record(message) -> Payload:
    """Rebuild the payload of a stored ``NegotiationMessage``."""
    if message.message_type == MessageType.COUNTER_OFFER:
        return CounterOffer(
            price=message.price_offer, currency=Currency(message.currency)
        )
    if message.message_type == MessageType.ACCEPT:
        return Accept(echoed_price=message.price_offer)
    if message.message_type == MessageType.REJECT:
        return Reject()
    return ChatMessage()


def record_fields(payload: Payload) -> dict:
    """Column values to store for `payload`."""
    if isinstance(payload, CounterOffer):
        return {
            "message_type": payload.message_type,
            "price_offer": payload.price,
            "currency": payload.currency,
        }
    if isinstance(payload, Accept):
        return {
            "message_type": payload.message_type,
            "price_offer": payload.echoed_price,
            "currency": "",
        }
    return {"message_type": payload.message_type, "price_offer": None, "currency": ""}
