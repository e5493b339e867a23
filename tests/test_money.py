from decimal import Decimal

import pytest

from casinoapi.core.exceptions import InvalidAmountError
from casinoapi.utils.money import MAX_AMOUNT, quantize, to_money, to_positive_money


class TestToMoney:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("100", "100.00"),
            (Decimal("1.005"), "1.01"),
            (0.1, "0.10"),
            (19.99, "19.99"),
            (7, "7.00"),
            (" 2.50 ", "2.50"),
            ("-4", "-4.00"),
        ],
    )
    def test_converts_to_two_decimals(self, value, expected):
        assert to_money(value) == Decimal(expected)

    @pytest.mark.parametrize("value", ["abc", "", None, True, float("inf"), "NaN", [1]])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(InvalidAmountError) as exc_info:
            to_money(value)

        assert exc_info.value.error_code == "BALANCE_002"
        assert exc_info.value.status_code == 422

    @pytest.mark.parametrize(
        "value", ["1e30", Decimal("1e27"), "1e400", 1e30, "-1e30", "10000000000.00"]
    )
    def test_rejects_amounts_above_maximum(self, value):
        with pytest.raises(InvalidAmountError) as exc_info:
            to_money(value)

        assert exc_info.value.error_code == "BALANCE_002"

    def test_accepts_maximum(self):
        assert to_money("9999999999.99") == MAX_AMOUNT
        assert to_money("-9999999999.99") == -MAX_AMOUNT

    def test_custom_maximum(self):
        assert to_money("500", max_amount=Decimal("500")) == Decimal("500.00")
        with pytest.raises(InvalidAmountError):
            to_money("500.01", max_amount=Decimal("500"))

    def test_quantize_rounds_half_up(self):
        assert quantize(Decimal("2.345")) == Decimal("2.35")
        assert quantize(Decimal("-2.345")) == Decimal("-2.35")


class TestToPositiveMoney:
    @pytest.mark.parametrize("value", ["0", "-0.01", "0.004"])
    def test_rejects_non_positive(self, value):
        with pytest.raises(InvalidAmountError):
            to_positive_money(value)

    def test_accepts_smallest_unit(self):
        assert to_positive_money("0.005") == Decimal("0.01")

    def test_respects_maximum(self):
        with pytest.raises(InvalidAmountError):
            to_positive_money("1e27")
