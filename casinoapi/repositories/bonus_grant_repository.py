from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import asc, desc, func, select
from sqlalchemy.orm import Session

from casinoapi.models.promotion import BonusGrant, GrantStatusEnum


class BonusGrantRepository:
    """보너스 지급(user_promotions) 리포지토리"""

    def __init__(self, db: Session):
        self.db = db

    def list_active(self, user_id: str, for_update: bool = False) -> List[BonusGrant]:
        """진행 중인 보너스를 오래된 순서로 조회"""
        stmt = (
            select(BonusGrant)
            .where(
                BonusGrant.user_id == user_id,
                BonusGrant.status == GrantStatusEnum.ACTIVE,
            )
            .order_by(asc(BonusGrant.created_at), asc(BonusGrant.id))
        )
        if for_update:
            stmt = stmt.with_for_update()
        return list(self.db.execute(stmt).scalars().all())

    def list_for_user(
        self, user_id: str, status: Optional[GrantStatusEnum] = None
    ) -> List[BonusGrant]:
        """보너스 지급 이력 (최신순)"""
        stmt = select(BonusGrant).where(BonusGrant.user_id == user_id)
        if status is not None:
            stmt = stmt.where(BonusGrant.status == status)
        stmt = stmt.order_by(desc(BonusGrant.id))
        return list(self.db.execute(stmt).scalars().all())

    def get_for_user(
        self, user_id: str, grant_id: int, for_update: bool = False
    ) -> Optional[BonusGrant]:
        """다른 사용자의 지급 건은 존재하지 않는 것으로 취급"""
        stmt = select(BonusGrant).where(
            BonusGrant.id == grant_id, BonusGrant.user_id == user_id
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def add(
        self,
        user_id: str,
        promotion_id: int,
        source_deposit_id: int,
        bonus_amount: Decimal,
        turnover_requirement: Decimal,
        status: GrantStatusEnum,
        now: datetime,
    ) -> BonusGrant:
        grant = BonusGrant(
            user_id=user_id,
            promotion_id=promotion_id,
            source_deposit_id=source_deposit_id,
            bonus_amount=bonus_amount,
            turnover_requirement=turnover_requirement,
            wagering_progress=Decimal("0.00"),
            status=status,
            completed_at=now if status is GrantStatusEnum.COMPLETED else None,
            created_at=now,
            updated_at=now,
        )
        self.db.add(grant)
        self.db.flush()
        return grant

    def count_created_between(
        self, user_id: str, promotion_id: int, start: datetime, end: datetime
    ) -> int:
        """[start, end) 구간에 생성된 지급 건 수 (상태 무관, 일일 사용 횟수 판단용)"""
        stmt = select(func.count(BonusGrant.id)).where(
            BonusGrant.user_id == user_id,
            BonusGrant.promotion_id == promotion_id,
            BonusGrant.created_at >= start,
            BonusGrant.created_at < end,
        )
        return self.db.execute(stmt).scalar_one()
