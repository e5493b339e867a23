from .base import Base
from .balance import UserBalance
from .transaction import Transaction, TransactionTypeEnum
from .promotion import BonusGrant, BonusTypeEnum, GrantStatusEnum, Promotion, TurnoverBasisEnum

__all__ = [
    "Base",
    "UserBalance",
    "Transaction",
    "TransactionTypeEnum",
    "Promotion",
    "BonusGrant",
    "BonusTypeEnum",
    "GrantStatusEnum",
    "TurnoverBasisEnum",
]
