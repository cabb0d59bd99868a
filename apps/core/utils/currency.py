"""
Currency value object for the two in-game units of value.

Emeralds are the base unit; one emerald block is worth nine emeralds. All
functions are pure and work on ``Decimal`` amounts.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import models

from apps.core.exceptions import InvalidCurrency

TWO_PLACES = Decimal("0.01")


class Currency(models.TextChoices):
    EMERALDS = "emeralds", "Emeralds"
    EMERALD_BLOCKS = "emerald_blocks", "Emerald Blocks"


BASE_CURRENCY = Currency.EMERALDS

# value of one unit, expressed in emeralds
EXCHANGE_RATES = {
    Currency.EMERALDS: Decimal("1"),
    Currency.EMERALD_BLOCKS: Decimal("9"),
}

CURRENCY_CONFIG = {
    Currency.EMERALDS: {"label": "Emeralds", "short_label": "E"},
    Currency.EMERALD_BLOCKS: {"label": "Emerald Blocks", "short_label": "EB"},
}


def validate_currency(currency) -> Currency:
    """Return the ``Currency`` member for `currency` or raise ``InvalidCurrency``."""
    try:
        return Currency(currency)
    except ValueError:
        raise InvalidCurrency(f"Unknown currency: {currency!r}")


def _as_decimal(amount) -> Decimal:
    try:
        return amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise ValueError(f"Not a numeric amount: {amount!r}")


def to_base(amount, currency) -> Decimal:
    """Value of `amount` `currency` in emeralds."""
    return _as_decimal(amount) * EXCHANGE_RATES[validate_currency(currency)]


def from_base(amount, currency) -> Decimal:
    """Value of `amount` emeralds in `currency`."""
    return _as_decimal(amount) / EXCHANGE_RATES[validate_currency(currency)]


def convert(amount, from_currency, to_currency) -> Decimal:
    """
    Convert between the two currencies using the fixed exchange table.

    Converting to the same currency returns the amount unchanged.
    """
    source = validate_currency(from_currency)
    target = validate_currency(to_currency)
    if source == target:
        return _as_decimal(amount)
    return from_base(to_base(amount, source), target)


def compare(amount1, currency1, amount2, currency2) -> Decimal:
    """Difference ``amount1 - amount2`` measured in emeralds."""
    return to_base(amount1, currency1) - to_base(amount2, currency2)


def minimum_in_currency(minimum_amount, minimum_currency, target_currency) -> Decimal:
    """`minimum_amount` expressed in `target_currency`, rounded for display."""
    converted = convert(minimum_amount, minimum_currency, target_currency)
    return converted.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def currency_label(currency) -> str:
    return CURRENCY_CONFIG[validate_currency(currency)]["label"]


def format_amount(amount, currency) -> str:
    """
    Locale-free display string with two decimals, e.g. ``"9.50 Emeralds"``.
    Missing amounts render as ``"Not specified"``.
    """
    if amount is None:
        return "Not specified"
    rounded = _as_decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return f"{rounded} {currency_label(currency)}"


def format_with_rate(amount, currency, show_equivalent=True) -> str:
    """Like ``format_amount`` but appends the emerald equivalent for blocks."""
    text = format_amount(amount, currency)
    if amount is None or not show_equivalent:
        return text
    if validate_currency(currency) == BASE_CURRENCY:
        return text
    equivalent = format_amount(to_base(amount, currency), BASE_CURRENCY)
    return f"{text} (≈ {equivalent})"
