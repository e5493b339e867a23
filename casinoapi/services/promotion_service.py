from datetime import datetime
from typing import Callable, List
import logging

from sqlalchemy.orm import Session

from casinoapi.config import Settings
from casinoapi.core.exceptions import NotFoundError
from casinoapi.repositories.promotion_repository import PromotionRepository
from casinoapi.schemas.promotion import (
    PromotionCreate,
    PromotionDefinition,
    PromotionSummary,
)
from casinoapi.utils.promotion_schedule import available_days_display, is_available_at
from casinoapi.utils.timezone_utils import utc_now

logger = logging.getLogger(__name__)


class PromotionService:
    """프로모션 카탈로그 관리 서비스 (관리자 등록 / 사용자 목록)"""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.settings = settings
        self.clock = clock
        self.promotion_repo = PromotionRepository(db)

    def create_promotion(self, request: PromotionCreate, admin_id: str) -> PromotionDefinition:
        """프로모션 등록"""
        promotion = self.promotion_repo.create(
            commit=True,
            **request.model_dump(),
            is_active=True,
            created_by=admin_id,
        )
        logger.info(f"Admin {admin_id} created promotion {promotion.id} ({promotion.name})")
        return promotion

    def list_promotions(self, only_active: bool = True) -> List[PromotionSummary]:
        """프로모션 목록 (현재 이용 가능 여부 포함)"""
        now = self.clock()
        fallback = self.settings.DEFAULT_TIMEZONE
        return [
            PromotionSummary(
                **definition.model_dump(),
                available_now=is_available_at(definition, now, fallback),
                available_days=available_days_display(definition.days_of_week),
            )
            for definition in self.promotion_repo.list_definitions(only_active)
        ]

    def get_promotion(self, promotion_id: int) -> PromotionDefinition:
        promotion = self.promotion_repo.get_by_id(promotion_id)
        if promotion is None:
            raise NotFoundError(
                "Promotion not found", details={"promotion_id": promotion_id}
            )
        return promotion

    def set_promotion_status(self, promotion_id: int, is_active: bool) -> PromotionDefinition:
        """프로모션 활성/비활성 전환"""
        promotion = self.promotion_repo.update(
            promotion_id, commit=True, is_active=is_active
        )
        if promotion is None:
            raise NotFoundError(
                "Promotion not found", details={"promotion_id": promotion_id}
            )
        logger.info(f"Promotion {promotion_id} is_active set to {is_active}")
        return promotion
