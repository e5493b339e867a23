"""
프로모션 / 보너스 지급 데이터 모델

- promotions: 관리자가 등록하는 프로모션 정의 (회계 코어에서는 읽기 전용)
- user_promotions: 사용자가 입금으로 활성화한 보너스 지급 건과 베팅 요건 진행도
"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from casinoapi.models.base import BaseModel

ALL_DAYS = [0, 1, 2, 3, 4, 5, 6]


class BonusTypeEnum(enum.Enum):
    PERCENTAGE = "percentage"
    CASHBACK = "cashback"
    FREE_SPINS = "free_spins"


class TurnoverBasisEnum(enum.Enum):
    DEPOSIT_PLUS_BONUS = "deposit_plus_bonus"
    BONUS_ONLY = "bonus_only"


class GrantStatusEnum(enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def _values(enum_cls):
    return [member.value for member in enum_cls]


class Promotion(BaseModel):
    """
    프로모션 정의 테이블

    bonus_value 의 의미는 bonus_type 에 따라 다르다:
    - percentage: 입금액 대비 보너스 비율(%)
    - cashback: 고정 지급액
    - free_spins: 프리 스핀 횟수 (스핀당 금액은 free_spin_value)
    """

    __tablename__ = "promotions"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    bonus_type: Mapped[BonusTypeEnum] = mapped_column(
        Enum(BonusTypeEnum, name="bonus_type", values_callable=_values), nullable=False
    )
    bonus_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    free_spin_value: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    min_deposit: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    max_bonus: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    turnover_multiplier: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    turnover_basis: Mapped[TurnoverBasisEnum] = mapped_column(
        Enum(TurnoverBasisEnum, name="turnover_basis", values_callable=_values),
        nullable=False,
        default=TurnoverBasisEnum.DEPOSIT_PLUS_BONUS,
    )
    max_usage_per_day: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # 0=일요일 ... 6=토요일
    days_of_week: Mapped[List[int]] = mapped_column(JSON, nullable=False, default=lambda: list(ALL_DAYS))
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    starts_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    ends_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)


class BonusGrant(BaseModel):
    """
    보너스 지급 건 (user promotion)

    상태 전이:
    - ACTIVE -> COMPLETED: wagering_progress >= turnover_requirement 가 되는 순간 자동 전이
    - ACTIVE -> CANCELLED: 사용자/관리자 취소, 보너스 금액 몰수
    COMPLETED / CANCELLED 는 종료 상태이며 다시 바뀌지 않는다.
    """

    __tablename__ = "user_promotions"
    __table_args__ = (
        Index("ix_user_promotions_user_status", "user_id", "status"),
        Index("ix_user_promotions_user_promotion_created", "user_id", "promotion_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    promotion_id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), ForeignKey("promotions.id"), nullable=False
    )
    source_deposit_id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), ForeignKey("transactions.id"), nullable=False
    )
    bonus_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    turnover_requirement: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    wagering_progress: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0.00")
    )
    status: Mapped[GrantStatusEnum] = mapped_column(
        Enum(GrantStatusEnum, name="grant_status", values_callable=_values),
        nullable=False,
        default=GrantStatusEnum.ACTIVE,
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
