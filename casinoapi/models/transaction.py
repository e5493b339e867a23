"""
거래 원장 데이터 모델

잔액에 영향을 주는 모든 연산은 이 테이블에 한 행씩 기록된다.
한번 기록된 행은 수정/삭제하지 않는다 (Append-only Audit Trail).
"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Enum, Index, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from casinoapi.models.base import Base


class TransactionTypeEnum(enum.Enum):
    BET = "bet"
    WIN = "win"
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    BONUS = "bonus"
    FORFEIT = "forfeit"  # 보너스 취소로 몰수된 금액
    ADJUSTMENT = "adjustment"  # 관리자 조정, 시작 잔액 (amount 부호 = 증감 방향)


DEBIT_TYPES = frozenset(
    {TransactionTypeEnum.BET, TransactionTypeEnum.WITHDRAWAL, TransactionTypeEnum.FORFEIT}
)


def signed_delta(tx_type: TransactionTypeEnum, amount: Decimal) -> Decimal:
    """거래 유형에 따른 잔액 변동량"""
    if tx_type is TransactionTypeEnum.ADJUSTMENT:
        return amount
    if tx_type in DEBIT_TYPES:
        return -amount
    return amount


class Transaction(Base):
    """
    거래 원장 테이블

    - balance_before / balance_after 로 각 거래 전후 잔액을 보존
    - grant_id 는 보너스 관련 거래(bonus, forfeit)일 때만 채워진다
    """

    __tablename__ = "transactions"
    __table_args__ = (Index("ix_transactions_user_id_id", "user_id", "id"),)

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    type: Mapped[TransactionTypeEnum] = mapped_column(
        Enum(TransactionTypeEnum, name="transaction_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    balance_before: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    balance_after: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    grant_id: Mapped[Optional[int]] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
