"""
거래 원장 리포지토리

원장은 INSERT 와 조회만 지원한다. UPDATE/DELETE 메서드는 의도적으로 없다.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import asc, desc, func, select
from sqlalchemy.orm import Session

from casinoapi.models.transaction import Transaction, TransactionTypeEnum


class TransactionRepository:
    def __init__(self, db: Session):
        self.db = db

    def add(
        self,
        user_id: str,
        tx_type: TransactionTypeEnum,
        amount: Decimal,
        balance_before: Decimal,
        balance_after: Decimal,
        created_at: datetime,
        grant_id: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> Transaction:
        entry = Transaction(
            user_id=user_id,
            type=tx_type,
            amount=amount,
            balance_before=balance_before,
            balance_after=balance_after,
            grant_id=grant_id,
            reason=reason,
            created_at=created_at,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def list_recent(self, user_id: str, limit: int) -> List[Transaction]:
        """최신순 조회 (id 역순)"""
        stmt = (
            select(Transaction)
            .where(Transaction.user_id == user_id)
            .order_by(desc(Transaction.id))
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_chronological(self, user_id: str) -> List[Transaction]:
        """원장 재생용 전체 조회 (id 순)"""
        stmt = (
            select(Transaction)
            .where(Transaction.user_id == user_id)
            .order_by(asc(Transaction.id))
        )
        return list(self.db.execute(stmt).scalars().all())

    def count(self, user_id: str) -> int:
        stmt = select(func.count(Transaction.id)).where(Transaction.user_id == user_id)
        return self.db.execute(stmt).scalar_one()
