from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session, sessionmaker

from casinoapi.database.connection import SessionLocal


def get_db() -> Iterator[Session]:
    """요청 단위 세션

    변경 연산은 서비스(BalanceEngine)가 직접 커밋/롤백한다.
    조회만 한 요청이 남긴 열린 트랜잭션은 여기서 정리한다.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        if db.in_transaction():
            db.rollback()
        db.close()


@contextmanager
def get_db_context(factory: sessionmaker = SessionLocal) -> Iterator[Session]:
    """스크립트용 세션 (정상 종료 시 커밋, 예외 시 롤백)"""
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
