from .balance import BalanceBreakdown, BalanceOperationKind
from .transaction import TransactionRecord
from .promotion import BonusGrantSchema, PromotionDefinition
