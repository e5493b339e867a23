# Repository layer - Data access with Pydantic responses

from .base import BaseRepository
from .balance_repository import BalanceRepository
from .transaction_repository import TransactionRepository
from .bonus_grant_repository import BonusGrantRepository
from .promotion_repository import PromotionRepository

__all__ = [
    "BaseRepository",
    "BalanceRepository",
    "TransactionRepository",
    "BonusGrantRepository",
    "PromotionRepository",
]
