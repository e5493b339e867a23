"""
Balance notifier - post-commit observer for balance changes.
- Called by BalanceEngine only after the transaction has committed
- Never raises exceptions (logs a warning on failure)
- Lazy Redis connection
"""

import logging
from typing import Optional

import redis

from casinoapi.config import Settings
from casinoapi.schemas.balance import BalanceBreakdown

logger = logging.getLogger(__name__)


class BalanceNotifier:
    """잔액 변경 알림 인터페이스"""

    def notify(self, breakdown: BalanceBreakdown) -> None:
        raise NotImplementedError


class LoggingBalanceNotifier(BalanceNotifier):
    """로그로만 남기는 기본 알림기"""

    def notify(self, breakdown: BalanceBreakdown) -> None:
        logger.info(
            f"Balance updated for user {breakdown.user_id}: "
            f"total={breakdown.total_balance} bonus={breakdown.bonus_balance} "
            f"withdrawable={breakdown.available_for_withdrawal}"
        )


class RedisBalanceNotifier(BalanceNotifier):
    """Redis pub/sub 채널 `{channel}:{user_id}` 로 잔액 JSON 발행"""

    def __init__(self, settings: Settings, client: Optional[redis.Redis] = None):
        self._settings = settings
        self._client = client
        self.channel = settings.BALANCE_NOTIFY_CHANNEL

    def _get_client(self) -> Optional[redis.Redis]:
        if self._client is None:
            try:
                redis_kwargs = {
                    "host": self._settings.REDIS_HOST,
                    "port": self._settings.REDIS_PORT,
                    "db": self._settings.REDIS_DB,
                    "decode_responses": True,
                    "socket_connect_timeout": 5,
                    "socket_keepalive": True,
                    "health_check_interval": 30,
                }
                if self._settings.REDIS_PASSWORD:
                    redis_kwargs["password"] = self._settings.REDIS_PASSWORD

                self._client = redis.Redis(**redis_kwargs)
            except Exception as e:
                logger.warning(f"Redis connection failed: {e}")
                self._client = None
        return self._client

    def notify(self, breakdown: BalanceBreakdown) -> None:
        channel = f"{self.channel}:{breakdown.user_id}"
        try:
            client = self._get_client()
            if client is None:
                return
            client.publish(channel, breakdown.model_dump_json())
        except Exception as e:
            logger.warning(f"Redis PUBLISH failed for {channel}: {e}")

    def close(self) -> None:
        if self._client:
            self._client.close()
