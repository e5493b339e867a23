from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from casinoapi.models.transaction import TransactionTypeEnum


class TransactionRecord(BaseModel):
    """거래 원장 항목"""

    id: int = Field(..., description="원장 항목 ID")
    user_id: str = Field(..., description="사용자 ID")
    type: TransactionTypeEnum = Field(..., description="거래 유형")
    amount: Decimal = Field(..., description="금액 (adjustment 는 부호 포함)")
    balance_before: Decimal = Field(..., description="거래 전 잔액")
    balance_after: Decimal = Field(..., description="거래 후 잔액")
    grant_id: Optional[int] = Field(None, description="관련 보너스 지급 ID")
    reason: Optional[str] = Field(None, description="거래 사유")
    created_at: Optional[datetime] = Field(None, description="생성 시간")

    class Config:
        from_attributes = True
