"""
잔액 데이터 모델

사용자별 현재 잔액 한 행. 실제 변경 이력은 transactions 원장에 남는다.
"""

from decimal import Decimal

from sqlalchemy import BigInteger, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from casinoapi.models.base import BaseModel


class UserBalance(BaseModel):
    """
    사용자 잔액 테이블

    - total_balance 는 사용자가 보유한 금액의 단일 진실 공급원(Single Source of Truth)
    - BalanceEngine 외부에서는 절대 수정하지 않는다
    - version 은 SQLAlchemy version_id_col 로, 모든 UPDATE 마다 증가한다.
      동시에 같은 행을 갱신하려는 요청은 StaleDataError 로 실패하고 재시도된다.
    """

    __tablename__ = "user_balances"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    user_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    total_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
