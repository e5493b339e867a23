from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional, Tuple
import logging

from sqlalchemy.orm import Session

from casinoapi.config import Settings
from casinoapi.models.promotion import GrantStatusEnum
from casinoapi.schemas.balance import (
    BalanceBreakdown,
    BalanceIntegrityResponse,
    BalanceOperationKind,
)
from casinoapi.schemas.promotion import BonusGrantSchema
from casinoapi.schemas.transaction import TransactionRecord
from casinoapi.services.balance_engine import BalanceEngine
from casinoapi.services.notifier import BalanceNotifier
from casinoapi.utils.timezone_utils import utc_now

logger = logging.getLogger(__name__)


class WalletService:
    """지갑(잔액/보너스/거래 내역) 관련 비즈니스 로직을 담당하는 서비스"""

    def __init__(
        self,
        db: Session,
        settings: Settings,
        notifier: Optional[BalanceNotifier] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.settings = settings
        self.engine = BalanceEngine(db, settings, notifier=notifier, clock=clock)
        self.recorder = self.engine.recorder
        self.bonus_tracker = self.engine.bonus_tracker

    def get_balance(self, user_id: str) -> BalanceBreakdown:
        """사용자 잔액 구성 조회

        Args:
            user_id: 사용자 ID

        Returns:
            BalanceBreakdown: 총 잔액 / 보너스 / 실머니 / 출금 가능액
        """
        breakdown = self.engine.get_breakdown(user_id)
        logger.info(
            f"Retrieved balance for user {user_id}: {breakdown.total_balance}"
        )
        return breakdown

    def apply_operation(
        self,
        user_id: str,
        amount: Decimal,
        kind: BalanceOperationKind,
        reason: Optional[str] = None,
    ) -> BalanceBreakdown:
        """bet / win / deposit / bonus 적용"""
        breakdown = self.engine.apply_operation(user_id, amount, kind, reason)
        logger.info(f"Applied {kind.value} of {amount} for user {user_id}")
        return breakdown

    def withdraw(self, user_id: str, amount: Decimal) -> BalanceBreakdown:
        breakdown = self.engine.withdraw(user_id, amount)
        logger.info(f"Withdrew {amount} for user {user_id}")
        return breakdown

    def activate_promotion(
        self, user_id: str, promotion_id: int, deposit_amount: Decimal
    ) -> Tuple[BonusGrantSchema, BalanceBreakdown]:
        """입금과 함께 프로모션 활성화

        Returns:
            (보너스 지급 건, 갱신된 잔액 구성)
        """
        grant, breakdown = self.engine.activate_promotion(
            user_id, promotion_id, deposit_amount
        )
        logger.info(
            f"Activated promotion {promotion_id} for user {user_id}: "
            f"grant {grant.id}, bonus {grant.bonus_amount}"
        )
        return grant, breakdown

    def cancel_promotion(self, user_id: str, grant_id: int) -> BalanceBreakdown:
        breakdown = self.engine.cancel_promotion(user_id, grant_id)
        logger.info(f"Cancelled bonus grant {grant_id} for user {user_id}")
        return breakdown

    def get_history(
        self, user_id: str, limit: Optional[int] = None
    ) -> List[TransactionRecord]:
        """거래 내역 (최신순)

        Args:
            user_id: 사용자 ID
            limit: 조회 건수 (1-100, 기본 HISTORY_DEFAULT_LIMIT)
        """
        if limit is None:
            limit = self.settings.HISTORY_DEFAULT_LIMIT
        entries = self.recorder.history(user_id, limit)
        logger.info(f"Retrieved {len(entries)} transactions for user {user_id}")
        return entries

    def list_grants(
        self, user_id: str, status: Optional[GrantStatusEnum] = None
    ) -> List[BonusGrantSchema]:
        return self.bonus_tracker.list_grants(user_id, status)

    def adjust_balance(
        self, admin_id: str, user_id: str, delta: Decimal, reason: str
    ) -> BalanceBreakdown:
        """관리자 잔액 조정"""
        breakdown = self.engine.adjust_balance(user_id, delta, reason, admin_id)
        logger.info(
            f"Admin {admin_id} adjusted balance of user {user_id} by {delta}: {reason}"
        )
        return breakdown

    def verify_integrity(self, user_id: str) -> BalanceIntegrityResponse:
        return self.engine.verify_integrity(user_id)
