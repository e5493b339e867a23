"""
보너스 추적기 (Bonus Tracker)

사용자의 진행 중인 보너스와 베팅 요건(turnover) 진행도를 관리한다.

핵심 규칙:
1. 보너스 금액은 프로모션의 BonusRule 타입으로만 계산한다
2. 베팅 요건은 프로모션별 정책(turnover_basis)에 따라 계산한다
3. 베팅액은 오래된 보너스부터 남은 요건만큼 채워 넣는다
4. 요건을 채운 보너스는 즉시 COMPLETED 로 전이한다

이 클래스는 커밋하지 않는다. 모든 변경은 BalanceEngine 이 잡은
사용자 잔액 락(트랜잭션) 안에서 호출되어야 한다.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional, Union

from sqlalchemy.orm import Session

from casinoapi.core.exceptions import (
    BalanceLimitExceededError,
    GrantNotActiveError,
    GrantNotFoundError,
    IneligiblePromotionError,
)
from casinoapi.models.promotion import BonusGrant, GrantStatusEnum, TurnoverBasisEnum
from casinoapi.repositories.bonus_grant_repository import BonusGrantRepository
from casinoapi.repositories.promotion_repository import PromotionRepository
from casinoapi.schemas.promotion import (
    BonusGrantSchema,
    FlatCashback,
    FreeSpins,
    PercentageBonus,
    PromotionDefinition,
)
from casinoapi.utils.money import MAX_AMOUNT, MAX_TURNOVER, ZERO, quantize
from casinoapi.utils.promotion_schedule import is_available_on_day, is_within_window
from casinoapi.utils.timezone_utils import local_day_bounds_utc, utc_now

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def compute_bonus_amount(
    rule: Union[PercentageBonus, FlatCashback, FreeSpins], deposit_amount: Decimal
) -> Decimal:
    """BonusRule 에 따른 보너스 금액"""
    if isinstance(rule, PercentageBonus):
        amount = deposit_amount * rule.value / HUNDRED
        if rule.cap is not None:
            amount = min(amount, rule.cap)
        return quantize(amount)
    if isinstance(rule, FlatCashback):
        return quantize(rule.value)
    if isinstance(rule, FreeSpins):
        amount = rule.spin_value * rule.count
        if rule.cap is not None:
            amount = min(amount, rule.cap)
        return quantize(amount)
    raise TypeError(f"Unsupported bonus rule: {type(rule).__name__}")


def compute_turnover_requirement(
    basis: TurnoverBasisEnum,
    multiplier: Decimal,
    deposit_amount: Decimal,
    bonus_amount: Decimal,
) -> Decimal:
    """베팅 요건 = (입금+보너스) x 배수 또는 보너스 x 배수"""
    if basis is TurnoverBasisEnum.BONUS_ONLY:
        base = bonus_amount
    else:
        base = deposit_amount + bonus_amount
    return quantize(base * multiplier)


class BonusTracker:
    def __init__(
        self,
        db: Session,
        fallback_timezone: str = "UTC",
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.fallback_timezone = fallback_timezone
        self.clock = clock
        self.grant_repo = BonusGrantRepository(db)
        self.promotion_repo = PromotionRepository(db)

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------

    def get_active_grants(self, user_id: str) -> List[BonusGrantSchema]:
        """진행 중인 보너스 (오래된 순)"""
        return [
            BonusGrantSchema.model_validate(grant)
            for grant in self.grant_repo.list_active(user_id)
        ]

    def active_grant_models(self, user_id: str, for_update: bool = False) -> List[BonusGrant]:
        return self.grant_repo.list_active(user_id, for_update=for_update)

    def list_grants(
        self, user_id: str, status: Optional[GrantStatusEnum] = None
    ) -> List[BonusGrantSchema]:
        return [
            BonusGrantSchema.model_validate(grant)
            for grant in self.grant_repo.list_for_user(user_id, status)
        ]

    # ------------------------------------------------------------------
    # 지급
    # ------------------------------------------------------------------

    def check_eligibility(
        self,
        user_id: str,
        promotion: Optional[PromotionDefinition],
        deposit_amount: Decimal,
        now: datetime,
    ) -> PromotionDefinition:
        """프로모션 활성화 조건 검증

        Raises:
            IneligiblePromotionError: 조건 중 하나라도 만족하지 못한 경우
        """
        if promotion is None:
            raise IneligiblePromotionError("Promotion not found")

        details = {"promotion_id": promotion.id}
        if not promotion.is_active:
            raise IneligiblePromotionError("Promotion is not active", details=details)

        if deposit_amount < promotion.min_deposit:
            raise IneligiblePromotionError(
                f"Minimum deposit for this promotion is {promotion.min_deposit}",
                details={**details, "min_deposit": str(promotion.min_deposit)},
            )

        if not is_within_window(promotion, now):
            raise IneligiblePromotionError(
                "Promotion is outside its validity period", details=details
            )

        if not is_available_on_day(promotion, now, self.fallback_timezone):
            raise IneligiblePromotionError(
                "Promotion is not available today", details=details
            )

        day_start, day_end = local_day_bounds_utc(
            now, promotion.timezone, self.fallback_timezone
        )
        used_today = self.grant_repo.count_created_between(
            user_id, promotion.id, day_start, day_end
        )
        if used_today >= promotion.max_usage_per_day:
            raise IneligiblePromotionError(
                "Daily usage limit reached for this promotion",
                details={**details, "max_usage_per_day": promotion.max_usage_per_day},
            )
        return promotion

    def grant_bonus(
        self,
        user_id: str,
        promotion_id: int,
        deposit_id: int,
        deposit_amount: Decimal,
        now: Optional[datetime] = None,
    ) -> BonusGrantSchema:
        """입금 건을 근거로 보너스 지급 건 생성 (잔액 반영은 호출자 책임)"""
        now = now or self.clock()
        promotion = self.check_eligibility(
            user_id, self.promotion_repo.get_by_id(promotion_id), deposit_amount, now
        )

        bonus_amount = compute_bonus_amount(promotion.rule, deposit_amount)
        requirement = compute_turnover_requirement(
            promotion.turnover_basis,
            promotion.turnover_multiplier,
            deposit_amount,
            bonus_amount,
        )
        if bonus_amount > MAX_AMOUNT or requirement > MAX_TURNOVER:
            raise BalanceLimitExceededError(
                "Bonus or wagering requirement exceeds the storable maximum",
                details={
                    "bonus_amount": str(bonus_amount),
                    "turnover_requirement": str(requirement),
                },
            )
        # 요건이 0 이면 생성 시점에 이미 충족된 상태
        status = GrantStatusEnum.ACTIVE if requirement > ZERO else GrantStatusEnum.COMPLETED

        grant = self.grant_repo.add(
            user_id=user_id,
            promotion_id=promotion.id,
            source_deposit_id=deposit_id,
            bonus_amount=bonus_amount,
            turnover_requirement=requirement,
            status=status,
            now=now,
        )
        logger.info(
            f"Granted bonus {bonus_amount} (turnover {requirement}) "
            f"from promotion {promotion.id} to user {user_id}"
        )
        return BonusGrantSchema.model_validate(grant)

    # ------------------------------------------------------------------
    # 베팅 요건 진행
    # ------------------------------------------------------------------

    def record_wager(
        self, user_id: str, stake: Decimal, now: Optional[datetime] = None
    ) -> None:
        """베팅액을 진행 중인 보너스에 오래된 순으로 배분

        각 보너스는 남은 요건만큼만 받고, 남는 금액은 다음 보너스로 넘어간다.
        모든 보너스를 채우고 남은 금액은 버린다.
        """
        if stake <= ZERO:
            return
        now = now or self.clock()

        remaining = stake
        for grant in self.grant_repo.list_active(user_id, for_update=True):
            if remaining <= ZERO:
                break
            needed = grant.turnover_requirement - grant.wagering_progress
            credit = min(needed, remaining)
            if credit > ZERO:
                grant.wagering_progress = grant.wagering_progress + credit
                remaining -= credit
            if grant.wagering_progress >= grant.turnover_requirement:
                grant.status = GrantStatusEnum.COMPLETED
                grant.completed_at = now
                logger.info(
                    f"Bonus grant {grant.id} of user {user_id} completed wagering "
                    f"({grant.wagering_progress}/{grant.turnover_requirement})"
                )
            grant.updated_at = now
        self.db.flush()

    # ------------------------------------------------------------------
    # 취소
    # ------------------------------------------------------------------

    def cancel_grant(
        self, user_id: str, grant_id: int, now: Optional[datetime] = None
    ) -> BonusGrantSchema:
        """보너스 취소 (잔액 몰수는 BalanceEngine 이 처리)

        Raises:
            GrantNotFoundError: 해당 사용자의 지급 건이 없는 경우
            GrantNotActiveError: 이미 완료/취소된 경우
        """
        now = now or self.clock()
        grant = self.grant_repo.get_for_user(user_id, grant_id, for_update=True)
        if grant is None:
            raise GrantNotFoundError(details={"grant_id": grant_id})
        if grant.status is not GrantStatusEnum.ACTIVE:
            raise GrantNotActiveError(
                details={"grant_id": grant_id, "status": grant.status.value}
            )

        grant.status = GrantStatusEnum.CANCELLED
        grant.cancelled_at = now
        grant.updated_at = now
        self.db.flush()
        logger.info(f"Bonus grant {grant_id} of user {user_id} cancelled")
        return BonusGrantSchema.model_validate(grant)
