from decimal import Decimal, InvalidOperation
from typing import Optional

from django.conf import settings

from apps.core.exceptions import Forbidden, InvalidPrice, InvalidRequest

BOARD = getattr(settings, "REQUEST_BOARD_SETTINGS", {})


def require_user(user):
    if user is None or not getattr(user, "is_authenticated", False):
        raise Forbidden("Authentication required")
    return user


def parse_price(price, error=InvalidPrice) -> Optional[Decimal]:
    """Optional non-negative price within the board maximum."""
    if price is None or price == "":
        return None
    try:
        value = price if isinstance(price, Decimal) else Decimal(str(price))
    except (InvalidOperation, ValueError, TypeError):
        raise error("Price must be a number")
    if not value.is_finite():
        raise error("Price must be a number")
    max_price = BOARD.get("MAX_PRICE", 999_999)
    if value < 0:
        raise error("Price cannot be negative")
    if value > max_price:
        raise error(f"Price cannot exceed {max_price}")
    return value


def clean_text(value, field, max_length) -> str:
    """Stripped, non-empty text of at most `max_length` characters."""
    text = (value or "").strip()
    if not text:
        raise InvalidRequest(f"{field} is required")
    if len(text) > max_length:
        raise InvalidRequest(f"{field} cannot exceed {max_length} characters")
    return text
