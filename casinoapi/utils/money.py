"""
금액 유틸리티

모든 금액은 소수점 2자리 Decimal 로 다룬다 (float 연산 금지).
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from casinoapi.core.exceptions import InvalidAmountError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# 컬럼 정밀도 상한: 잔액/금액 Numeric(12, 2), 베팅 요건 Numeric(14, 2)
MAX_AMOUNT = Decimal("9999999999.99")
MAX_TURNOVER = Decimal("999999999999.99")


def quantize(value: Decimal) -> Decimal:
    """소수점 2자리로 반올림 (ROUND_HALF_UP)"""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_money(value: Any, max_amount: Decimal = MAX_AMOUNT) -> Decimal:
    """외부 입력을 금액 Decimal 로 변환

    float 는 repr 문자열을 거쳐 변환하여 이진 부동소수 오차를 피한다.

    Raises:
        InvalidAmountError: 숫자가 아니거나 NaN/Infinity 이거나
            절댓값이 max_amount 를 넘는 경우
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    try:
        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, float):
            amount = Decimal(repr(value))
        else:
            amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmountError(f"Invalid amount: {value!r}")

    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be finite: {value!r}")
    if abs(amount) > max_amount:
        raise InvalidAmountError(
            "Amount exceeds the maximum allowed",
            details={"max_amount": str(max_amount)},
        )
    try:
        return quantize(amount)
    except InvalidOperation:
        raise InvalidAmountError(f"Invalid amount: {value!r}")


def to_positive_money(value: Any, max_amount: Decimal = MAX_AMOUNT) -> Decimal:
    """양수 금액만 허용 (0.005 처럼 반올림 후 0 이 되는 값도 거부)"""
    amount = to_money(value, max_amount)
    if amount <= ZERO:
        raise InvalidAmountError(
            "Amount must be positive", details={"amount": str(amount)}
        )
    return amount
