from decimal import Decimal

import pytest

from apps.core.exceptions import InvalidCurrency
from apps.core.utils.currency import (
    Currency,
    compare,
    convert,
    currency_label,
    format_amount,
    format_with_rate,
    minimum_in_currency,
    to_base,
)


class TestConversion:
    def test_blocks_to_emeralds(self):
        assert convert(Decimal("2"), Currency.EMERALD_BLOCKS, Currency.EMERALDS) == Decimal("18")

    def test_emeralds_to_blocks(self):
        assert convert(Decimal("18"), Currency.EMERALDS, Currency.EMERALD_BLOCKS) == Decimal("2")

    def test_same_currency_is_identity(self):
        assert convert("7.25", "emeralds", "emeralds") == Decimal("7.25")

    def test_unknown_currency(self):
        with pytest.raises(InvalidCurrency):
            convert(1, "gold", Currency.EMERALDS)
        with pytest.raises(InvalidCurrency):
            to_base(1, "rubies")

    def test_compare_in_base_units(self):
        assert compare(1, Currency.EMERALD_BLOCKS, 9, Currency.EMERALDS) == 0
        assert compare(1, Currency.EMERALD_BLOCKS, 10, Currency.EMERALDS) == Decimal("-1")

    def test_minimum_in_currency_is_rounded(self):
        assert minimum_in_currency(10, Currency.EMERALDS, Currency.EMERALD_BLOCKS) == Decimal("1.11")


class TestFormatting:
    def test_two_decimals(self):
        assert format_amount(Decimal("9.5"), Currency.EMERALDS) == "9.50 Emeralds"

    def test_rounds_half_up(self):
        assert format_amount(Decimal("0.125"), Currency.EMERALDS) == "0.13 Emeralds"

    def test_missing_amount(self):
        assert format_amount(None, Currency.EMERALDS) == "Not specified"
        assert format_with_rate(None, Currency.EMERALD_BLOCKS) == "Not specified"

    def test_with_rate(self):
        assert (
            format_with_rate(Decimal("2"), Currency.EMERALD_BLOCKS)
            == "2.00 Emerald Blocks (≈ 18.00 Emeralds)"
        )

    def test_with_rate_for_base_currency(self):
        assert format_with_rate(Decimal("3"), Currency.EMERALDS) == "3.00 Emeralds"

    def test_equivalent_can_be_hidden(self):
        assert (
            format_with_rate(Decimal("2"), Currency.EMERALD_BLOCKS, show_equivalent=False)
            == "2.00 Emerald Blocks"
        )

    def test_labels(self):
        assert currency_label("emerald_blocks") == "Emerald Blocks"
