"""
Unit tests for the split policy.

Tests cover:
- Equal split rounding and accepted rounding drift
- Custom split validation and tolerance
- Amount parsing
"""
import pytest
from decimal import Decimal

from app.utils.splits import (
    SPLIT_TOLERANCE, SplitValidationError, equal_split, parse_amount,
    round_to_cents, validate_custom_split
)


@pytest.mark.unit
class TestRoundToCents:

    def test_half_rounds_up(self):
        assert round_to_cents(Decimal("33.335")) == Decimal("33.34")
        assert round_to_cents(Decimal("100.005")) == Decimal("100.01")

    def test_truncates_long_fractions(self):
        assert round_to_cents(Decimal("100") / Decimal("3")) == Decimal("33.33")


@pytest.mark.unit
class TestEqualSplit:

    def test_dinner_three_ways(self):
        shares = equal_split(Decimal("120"), ["alice", "bob", "carol"])
        assert shares == {"alice": Decimal("40.00"), "bob": Decimal("40.00"), "carol": Decimal("40.00")}

    def test_remainder_is_not_redistributed(self):
        shares = equal_split(Decimal("100"), ["a", "b", "c"])
        assert set(shares.values()) == {Decimal("33.33")}
        assert sum(shares.values()) == Decimal("99.99")

    def test_rounding_can_overshoot(self):
        shares = equal_split(Decimal("0.05"), ["a", "b"])
        assert shares == {"a": Decimal("0.03"), "b": Decimal("0.03")}

    @pytest.mark.parametrize("total", ["0.01", "10", "99.99", "100", "123.45", "1000.01", "7777.77"])
    @pytest.mark.parametrize("members", [1, 2, 3, 6, 7, 11])
    def test_shares_within_half_a_cent_each(self, total, members):
        total = Decimal(total)
        member_ids = [f"user{i}" for i in range(members)]

        shares = equal_split(total, member_ids)

        expected = round_to_cents(total / Decimal(members))
        assert all(share == expected for share in shares.values())
        assert abs(sum(shares.values()) - total) <= Decimal("0.005") * members

    def test_no_members(self):
        with pytest.raises(SplitValidationError, match="zero members"):
            equal_split(Decimal("10"), [])

    def test_non_positive_total(self):
        with pytest.raises(SplitValidationError):
            equal_split(Decimal("0"), ["a"])


@pytest.mark.unit
class TestValidateCustomSplit:

    def test_accepts_exact_sum(self):
        shares = validate_custom_split(Decimal("100"), {"alice": "70", "bob": 30})
        assert shares == {"alice": Decimal("70.00"), "bob": Decimal("30.00")}

    def test_accepts_difference_within_tolerance(self):
        shares = validate_custom_split(Decimal("100"), {"alice": "33.33", "bob": "33.33", "carol": "33.33"})
        assert sum(shares.values()) == Decimal("99.99")

    def test_accepts_floats(self):
        shares = validate_custom_split(Decimal("10.5"), {"alice": 5.25, "bob": 5.25})
        assert shares["alice"] == Decimal("5.25")

    def test_zero_share_is_allowed(self):
        shares = validate_custom_split(Decimal("40"), {"alice": "40", "bob": "0"})
        assert shares["bob"] == Decimal("0.00")

    def test_rejects_difference_beyond_tolerance(self):
        with pytest.raises(SplitValidationError, match="must equal the total"):
            validate_custom_split(Decimal("100"), {"alice": "50", "bob": "49.98"})

    def test_rejects_overshoot(self):
        with pytest.raises(SplitValidationError):
            validate_custom_split(Decimal("100"), {"alice": "60", "bob": "40.02"})

    @pytest.mark.parametrize("bad", ["abc", "", "12,50", None, True, "NaN", "Infinity"])
    def test_rejects_non_numeric(self, bad):
        with pytest.raises(SplitValidationError, match="Invalid share amount"):
            validate_custom_split(Decimal("10"), {"alice": "10", "bob": bad})

    def test_rejects_sub_cent_shares(self):
        with pytest.raises(SplitValidationError, match="more than 2 decimal places"):
            validate_custom_split(Decimal("5.00"), {"a": "1.005", "b": "1.005", "c": "1.005", "d": "1.005", "e": "0.98"})

    def test_accepted_shares_are_stored_as_given(self):
        shares = validate_custom_split(Decimal("10"), {"alice": "3.3", "bob": "6.70"})
        assert shares == {"alice": Decimal("3.30"), "bob": Decimal("6.70")}
        assert abs(sum(shares.values()) - Decimal("10")) <= SPLIT_TOLERANCE

    def test_rejects_negative(self):
        with pytest.raises(SplitValidationError, match="cannot be negative"):
            validate_custom_split(Decimal("10"), {"alice": "15", "bob": "-5"})

    def test_rejects_empty_split(self):
        with pytest.raises(SplitValidationError):
            validate_custom_split(Decimal("10"), {})

    def test_default_tolerance_is_one_cent(self):
        assert SPLIT_TOLERANCE == Decimal("0.01")


@pytest.mark.unit
class TestParseAmount:

    def test_strips_whitespace(self):
        assert parse_amount(" 12.50 ") == Decimal("12.50")

    def test_keeps_decimals(self):
        value = Decimal("3.14")
        assert parse_amount(value) is value

    def test_split_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_amount("twelve")
