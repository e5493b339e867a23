"""
거래 기록기 (Transaction Recorder)

잔액에 영향을 주는 모든 연산의 감사 기록을 남긴다.
record() 는 호출자의 트랜잭션 안에서 flush 만 수행하므로,
기록 실패 시 잔액 변경까지 함께 롤백된다.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from casinoapi.core.exceptions import InvalidLimitError
from casinoapi.models.transaction import TransactionTypeEnum, signed_delta
from casinoapi.repositories.transaction_repository import TransactionRepository
from casinoapi.schemas.transaction import TransactionRecord
from casinoapi.utils.money import ZERO

logger = logging.getLogger(__name__)

MIN_HISTORY_LIMIT = 1
MAX_HISTORY_LIMIT = 100


class TransactionRecorder:
    def __init__(self, db: Session, max_limit: int = MAX_HISTORY_LIMIT):
        self.db = db
        self.max_limit = min(max_limit, MAX_HISTORY_LIMIT)
        self.transaction_repo = TransactionRepository(db)

    def record(
        self,
        user_id: str,
        tx_type: TransactionTypeEnum,
        amount: Decimal,
        balance_before: Decimal,
        balance_after: Decimal,
        created_at: datetime,
        grant_id: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> TransactionRecord:
        """원장 항목 기록

        Raises:
            ValueError: balance_before + 변동량 != balance_after 인 경우 (프로그래밍 오류)
        """
        if balance_before + signed_delta(tx_type, amount) != balance_after:
            raise ValueError(
                f"Ledger entry does not balance: {balance_before} {tx_type.value} {amount} -> {balance_after}"
            )

        entry = self.transaction_repo.add(
            user_id=user_id,
            tx_type=tx_type,
            amount=amount,
            balance_before=balance_before,
            balance_after=balance_after,
            created_at=created_at,
            grant_id=grant_id,
            reason=reason,
        )
        logger.debug(
            f"Recorded {tx_type.value} {amount} for user {user_id}: {balance_before} -> {balance_after}"
        )
        return TransactionRecord.model_validate(entry)

    def history(self, user_id: str, limit: int) -> List[TransactionRecord]:
        """최신순 거래 내역

        Raises:
            InvalidLimitError: limit 이 1~100 범위를 벗어난 경우
        """
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise InvalidLimitError(details={"limit": str(limit)})
        if limit < MIN_HISTORY_LIMIT or limit > self.max_limit:
            raise InvalidLimitError(
                f"Limit must be between {MIN_HISTORY_LIMIT} and {self.max_limit}",
                details={"limit": limit},
            )

        entries = self.transaction_repo.list_recent(user_id, limit)
        return [TransactionRecord.model_validate(entry) for entry in entries]

    def replay(self, user_id: str) -> Decimal:
        """원장을 0 부터 순서대로 재생한 잔액"""
        balance = ZERO
        for entry in self.transaction_repo.list_chronological(user_id):
            balance += signed_delta(entry.type, entry.amount)
        return balance

    def last_entry(self, user_id: str) -> Optional[TransactionRecord]:
        entries = self.transaction_repo.list_recent(user_id, 1)
        return TransactionRecord.model_validate(entries[0]) if entries else None

    def count(self, user_id: str) -> int:
        return self.transaction_repo.count(user_id)
