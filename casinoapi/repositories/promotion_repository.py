from typing import Any, List, Optional

from sqlalchemy import asc, select
from sqlalchemy.orm import Session

from casinoapi.models.promotion import Promotion
from casinoapi.repositories.base import BaseRepository
from casinoapi.schemas.promotion import PromotionDefinition


class PromotionRepository(BaseRepository[Promotion, PromotionDefinition]):
    """프로모션 카탈로그 리포지토리"""

    def __init__(self, db: Session):
        super().__init__(Promotion, PromotionDefinition, db)

    def _to_schema(self, model_instance: Any) -> Optional[PromotionDefinition]:
        """bonus_type/bonus_value 조합을 BonusRule 로 변환하여 반환"""
        if model_instance is None:
            return None
        return PromotionDefinition.from_model(model_instance)

    def list_definitions(self, only_active: bool = False) -> List[PromotionDefinition]:
        stmt = select(Promotion).order_by(asc(Promotion.id))
        if only_active:
            stmt = stmt.where(Promotion.is_active.is_(True))
        return [self._to_schema(row) for row in self.db.execute(stmt).scalars().all()]
