from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from casinoapi.config import Settings
from casinoapi.models import Base
from casinoapi.models.promotion import BonusTypeEnum, Promotion, TurnoverBasisEnum
from casinoapi.services.balance_engine import BalanceEngine
from casinoapi.services.notifier import BalanceNotifier

# 2026-03-04 은 수요일 (0=일요일 기준 3)
WEDNESDAY_NOON = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """테스트용 시계 - advance() 로만 시간이 흐른다"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    TestingSession = sessionmaker(
        bind=db_engine, autocommit=False, autoflush=False, expire_on_commit=False
    )
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        BALANCE_TX_MAX_ATTEMPTS=3,
        BALANCE_TX_RETRY_BACKOFF=0.0,
    )


@pytest.fixture
def clock():
    return FixedClock(WEDNESDAY_NOON)


@pytest.fixture
def notifier():
    return Mock(spec=BalanceNotifier)


@pytest.fixture
def balance_engine(db_session, settings, notifier, clock):
    return BalanceEngine(
        db_session, settings, notifier=notifier, clock=clock, sleep=Mock()
    )


@pytest.fixture
def make_promotion(db_session):
    """프로모션 행 생성 팩토리 (기본값: 100% / 상한 50 / 10배 / 매일)"""

    def _make(**overrides) -> Promotion:
        data = {
            "name": "Welcome Bonus",
            "bonus_type": BonusTypeEnum.PERCENTAGE,
            "bonus_value": Decimal("100.00"),
            "min_deposit": Decimal("0.00"),
            "max_bonus": Decimal("50.00"),
            "turnover_multiplier": Decimal("10.00"),
            "turnover_basis": TurnoverBasisEnum.DEPOSIT_PLUS_BONUS,
            "max_usage_per_day": 1,
            "days_of_week": [0, 1, 2, 3, 4, 5, 6],
            "timezone": "UTC",
            "is_active": True,
        }
        data.update(overrides)
        promotion = Promotion(**data)
        db_session.add(promotion)
        db_session.commit()
        return promotion

    return _make
