from decimal import Decimal
from functools import lru_cache
from typing import List, Optional
from urllib.parse import quote_plus

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file="casinoapi/.env",
        env_file_encoding="utf-8",
        extra="allow",
    )
    # Application
    APP_NAME: str = "Casino Wallet API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = ["*"]

    # Database
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DATABASE: str = "casino"

    # DATABASE_URL 이 설정되면 POSTGRES_* 조합보다 우선한다 (테스트/로컬 sqlite 등)
    DATABASE_URL: Optional[str] = None
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_LOCK_TIMEOUT_MS: int = 5000  # 잔액 행 락 대기 한도
    DB_STATEMENT_TIMEOUT_MS: int = 15000

    @property
    def database_url(self) -> str:
        """Construct database URL from individual components"""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        # URL encode the password to handle special characters
        encoded_password = quote_plus(self.POSTGRES_PASSWORD)
        return f"postgresql+psycopg2://{self.POSTGRES_USERNAME}:{encoded_password}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DATABASE}"

    # Wallet
    # 잔액 레코드 최초 생성 시 지급액
    STARTING_BALANCE: Decimal = Field(default=Decimal("0.00"), ge=0, le=Decimal("9999999999.99"))
    # 1회 금액 및 총 잔액 상한 (Numeric(12, 2) 범위 이내)
    MAX_AMOUNT: Decimal = Field(default=Decimal("9999999999.99"), gt=0, le=Decimal("9999999999.99"))
    DEFAULT_TIMEZONE: str = "UTC"  # 프로모션 타임존이 잘못된 경우 사용
    HISTORY_DEFAULT_LIMIT: int = 20
    HISTORY_MAX_LIMIT: int = 100

    # 동시성 충돌(버전 불일치, 락 타임아웃) 재시도 정책
    BALANCE_TX_MAX_ATTEMPTS: int = 5
    BALANCE_TX_RETRY_BACKOFF: float = 0.05

    # Notifications: "log" | "redis"
    BALANCE_NOTIFIER: str = "log"
    BALANCE_NOTIFY_CHANNEL: str = "balance-updates"

    # Redis
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""

    return settings
