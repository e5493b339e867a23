import enum
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """모든 테이블의 declarative base"""

    def to_log_dict(self) -> Dict[str, Any]:
        """로그 출력용 딕셔너리 (Decimal/Enum/datetime 은 문자열로)"""
        result: Dict[str, Any] = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, Decimal):
                value = str(value)
            elif isinstance(value, enum.Enum):
                value = value.value
            elif isinstance(value, datetime):
                value = value.isoformat()
            result[column.name] = value
        return result


class TimestampMixin:
    """생성/수정 시각. 서비스가 주입한 시계 값을 우선 사용하고, 없으면 DB now()"""

    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class BaseModel(Base, TimestampMixin):
    """변경 가능한 엔티티(잔액, 프로모션, 보너스 지급)의 베이스 클래스"""

    __abstract__ = True
