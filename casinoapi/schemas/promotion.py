from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union

import pytz
from pydantic import BaseModel, Field, field_validator, model_validator

from casinoapi.models.promotion import (
    ALL_DAYS,
    BonusTypeEnum,
    GrantStatusEnum,
    Promotion,
    TurnoverBasisEnum,
)
from casinoapi.schemas.balance import BalanceBreakdown


# ---------------------------------------------------------------------------
# 보너스 규칙 (tagged union)
# DB 의 bonus_type/bonus_value 조합은 경계에서 한 번만 해석하고,
# 이후 계산 로직은 규칙 타입으로만 분기한다.
# ---------------------------------------------------------------------------


class PercentageBonus(BaseModel):
    """입금액 대비 비율 보너스, cap 으로 상한"""

    kind: Literal["percentage"] = "percentage"
    value: Decimal = Field(..., description="보너스 비율 (%)")
    cap: Optional[Decimal] = Field(None, description="최대 보너스 금액")


class FlatCashback(BaseModel):
    """고정 금액 캐시백"""

    kind: Literal["cashback"] = "cashback"
    value: Decimal = Field(..., description="지급 금액")


class FreeSpins(BaseModel):
    """프리 스핀 (스핀 수 x 스핀당 금액)"""

    kind: Literal["free_spins"] = "free_spins"
    count: int = Field(..., ge=0, description="스핀 횟수")
    spin_value: Decimal = Field(..., description="스핀당 금액")
    cap: Optional[Decimal] = Field(None, description="최대 보너스 금액")


BonusRule = Annotated[
    Union[PercentageBonus, FlatCashback, FreeSpins], Field(discriminator="kind")
]


def bonus_rule_from_model(promotion: Promotion) -> Union[PercentageBonus, FlatCashback, FreeSpins]:
    if promotion.bonus_type is BonusTypeEnum.PERCENTAGE:
        return PercentageBonus(value=promotion.bonus_value, cap=promotion.max_bonus)
    if promotion.bonus_type is BonusTypeEnum.CASHBACK:
        return FlatCashback(value=promotion.bonus_value)
    if promotion.bonus_type is BonusTypeEnum.FREE_SPINS:
        return FreeSpins(
            count=int(promotion.bonus_value),
            spin_value=promotion.free_spin_value or Decimal("0.00"),
            cap=promotion.max_bonus,
        )
    raise ValueError(f"Unsupported bonus type: {promotion.bonus_type}")


class PromotionDefinition(BaseModel):
    """회계 코어가 사용하는 프로모션 정의"""

    id: int
    name: str
    description: Optional[str] = None
    rule: BonusRule
    min_deposit: Decimal
    turnover_multiplier: Decimal
    turnover_basis: TurnoverBasisEnum
    max_usage_per_day: int
    days_of_week: List[int]
    timezone: str
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    is_active: bool

    @classmethod
    def from_model(cls, promotion: Promotion) -> "PromotionDefinition":
        return cls(
            id=promotion.id,
            name=promotion.name,
            description=promotion.description,
            rule=bonus_rule_from_model(promotion),
            min_deposit=promotion.min_deposit,
            turnover_multiplier=promotion.turnover_multiplier,
            turnover_basis=promotion.turnover_basis,
            max_usage_per_day=promotion.max_usage_per_day,
            days_of_week=list(promotion.days_of_week or []),
            timezone=promotion.timezone,
            starts_at=promotion.starts_at,
            ends_at=promotion.ends_at,
            is_active=promotion.is_active,
        )


class PromotionSummary(PromotionDefinition):
    """프로모션 목록 응답 항목"""

    available_now: bool = Field(..., description="현재 시점 활성화 가능 여부")
    available_days: str = Field(..., description="이용 가능 요일 표시")


class PromotionCreate(BaseModel):
    """관리자 프로모션 생성 요청"""

    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = Field(None, max_length=1000)
    bonus_type: BonusTypeEnum
    bonus_value: Decimal = Field(..., gt=0)
    free_spin_value: Optional[Decimal] = Field(None, gt=0)
    min_deposit: Decimal = Field(Decimal("0.00"), ge=0)
    max_bonus: Optional[Decimal] = Field(None, gt=0)
    turnover_multiplier: Decimal = Field(..., ge=0, le=1000)
    turnover_basis: TurnoverBasisEnum = TurnoverBasisEnum.DEPOSIT_PLUS_BONUS
    max_usage_per_day: int = Field(1, ge=1)
    days_of_week: List[int] = Field(default_factory=lambda: list(ALL_DAYS))
    timezone: str = "UTC"
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, value: List[int]) -> List[int]:
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("days_of_week must contain values between 0 (Sunday) and 6 (Saturday)")
        return sorted(set(value))

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        if value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {value}")
        return value

    @model_validator(mode="after")
    def validate_shape(self) -> "PromotionCreate":
        if self.bonus_type is BonusTypeEnum.FREE_SPINS:
            if self.free_spin_value is None:
                raise ValueError("free_spin_value is required for free_spins promotions")
            if self.bonus_value != self.bonus_value.to_integral_value():
                raise ValueError("bonus_value must be a whole number of spins")
        if self.starts_at and self.ends_at and self.ends_at <= self.starts_at:
            raise ValueError("ends_at must be after starts_at")
        return self


class PromotionStatusUpdate(BaseModel):
    is_active: bool


class BonusGrantSchema(BaseModel):
    """보너스 지급 건"""

    id: int
    user_id: str
    promotion_id: int
    source_deposit_id: int
    bonus_amount: Decimal
    turnover_requirement: Decimal
    wagering_progress: Decimal
    status: GrantStatusEnum
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def remaining_wagering(self) -> Decimal:
        return max(self.turnover_requirement - self.wagering_progress, Decimal("0.00"))


class PromotionActivationRequest(BaseModel):
    """프로모션 활성화 (입금 + 보너스) 요청"""

    deposit_amount: Decimal = Field(..., description="입금액")


class PromotionActivationResponse(BaseModel):
    grant: BonusGrantSchema
    balance: BalanceBreakdown
