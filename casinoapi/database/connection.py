from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from casinoapi.config import Settings, settings


def build_engine(app_settings: Settings) -> Engine:
    url = app_settings.database_url
    if url.startswith("sqlite"):
        # 로컬/테스트용: 스레드 간 커넥션 공유 허용
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        url,
        pool_size=app_settings.DB_POOL_SIZE,
        max_overflow=app_settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,  # 연결 유효성 검사
        pool_recycle=3600,  # 1시간마다 연결 재생성
        connect_args={
            "options": (
                f"-c lock_timeout={app_settings.DB_LOCK_TIMEOUT_MS} "
                f"-c statement_timeout={app_settings.DB_STATEMENT_TIMEOUT_MS}"
            )
        },
    )


engine = build_engine(settings)

# Use expire_on_commit=False to avoid DetachedInstanceError when accessing
# attributes after commit within the same request scope (common FastAPI pattern).
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)
