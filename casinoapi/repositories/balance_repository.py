"""
잔액 리포지토리

잔액 행은 모든 변경 연산의 "사용자 단위 락" 역할을 한다.
변경 연산은 항상 lock_for_update() 로 시작해야 한다.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from casinoapi.models.balance import UserBalance


class BalanceRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id: str) -> Optional[UserBalance]:
        """잠금 없이 현재 잔액 행 조회 (조회 전용 경로)"""
        return self.db.execute(
            select(UserBalance).where(UserBalance.user_id == user_id)
        ).scalar_one_or_none()

    def lock_for_update(
        self, user_id: str, starting_balance: Decimal, now: datetime
    ) -> Tuple[UserBalance, bool]:
        """
        사용자 잔액 행을 SELECT ... FOR UPDATE 로 잠그고 반환 (없으면 생성)

        Returns:
            (잔액 행, 이번 호출에서 생성되었는지 여부)

        Note:
            트랜잭션의 첫 작업으로 호출되어야 한다. 동시 생성 경쟁으로
            IntegrityError 가 나면 롤백 후 다른 요청이 만든 행을 다시 잠근다.
        """
        stmt = (
            select(UserBalance)
            .where(UserBalance.user_id == user_id)
            .with_for_update()
        )
        row = self.db.execute(stmt).scalar_one_or_none()
        if row is not None:
            return row, False

        row = UserBalance(
            user_id=user_id,
            total_balance=starting_balance,
            created_at=now,
            updated_at=now,
        )
        self.db.add(row)
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            return self.db.execute(stmt).scalar_one(), False
        return row, True

    def save_total(self, row: UserBalance, new_total: Decimal, now: datetime) -> None:
        """총 잔액 저장

        금액 변동이 없어도 updated_at 을 갱신하여 version 을 올린다.
        (보너스 진행도만 바뀌는 연산도 같은 사용자의 동시 쓰기와 충돌 감지)
        """
        row.total_balance = new_total
        row.updated_at = now
        flag_modified(row, "updated_at")
        self.db.flush()
