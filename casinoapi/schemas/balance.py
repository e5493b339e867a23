from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class BalanceOperationKind(str, Enum):
    BET = "bet"
    WIN = "win"
    DEPOSIT = "deposit"
    BONUS = "bonus"


class BalanceBreakdown(BaseModel):
    """잔액 구성 (실머니 / 보너스 / 출금 가능액)"""

    user_id: str = Field(..., description="사용자 ID")
    total_balance: Decimal = Field(..., description="총 잔액")
    bonus_balance: Decimal = Field(..., description="보너스 잔액 (총 잔액을 넘지 않음)")
    real_balance: Decimal = Field(..., description="실머니 잔액")
    available_for_withdrawal: Decimal = Field(..., description="출금 가능 금액")
    has_active_bonus: bool = Field(..., description="진행 중인 보너스 존재 여부")
    active_bonus_count: int = Field(0, description="진행 중인 보너스 수")

    class Config:
        from_attributes = True


class BalanceOperationRequest(BaseModel):
    """잔액 변경 요청 (bet / win / deposit / bonus)"""

    amount: Decimal = Field(..., description="금액 (양수, 소수점 2자리로 반올림)")
    kind: BalanceOperationKind = Field(..., description="연산 종류")
    reason: Optional[str] = Field(None, max_length=255, description="메모")


class WithdrawalRequest(BaseModel):
    """출금 요청"""

    amount: Decimal = Field(..., description="출금 금액")


class AdminBalanceAdjustmentRequest(BaseModel):
    """관리자 잔액 조정 요청"""

    user_id: str = Field(..., min_length=1, max_length=64, description="대상 사용자 ID")
    amount: Decimal = Field(..., description="조정 금액 (양수: 추가, 음수: 차감)")
    reason: str = Field(..., min_length=1, max_length=255, description="조정 사유")


class BalanceIntegrityResponse(BaseModel):
    """원장 재생(replay) 기반 잔액 정합성 검증 결과"""

    status: str = Field(..., description="검증 상태 (OK, MISMATCH)")
    user_id: str = Field(..., description="사용자 ID")
    stored_balance: Decimal = Field(..., description="user_balances 에 저장된 잔액")
    replayed_balance: Decimal = Field(..., description="원장을 처음부터 재생한 잔액")
    last_balance_after: Optional[Decimal] = Field(None, description="마지막 원장 항목의 balance_after")
    entry_count: int = Field(..., description="원장 항목 수")
    verified_at: str = Field(..., description="검증 시간")
