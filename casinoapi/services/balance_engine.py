"""
잔액 엔진 (Balance Engine)

total_balance 를 변경하는 유일한 코드.

모든 변경 연산은 하나의 DB 트랜잭션으로 실행된다:
1. 사용자 잔액 행 잠금 (SELECT ... FOR UPDATE, 없으면 생성)
2. 진행 중인 보너스 조회/갱신 (BonusTracker)
3. 새 잔액 계산 및 저장 (version 증가)
4. 원장 기록 (TransactionRecorder)
5. 커밋 후 알림 (BalanceNotifier)

버전 충돌(StaleDataError)이나 락 타임아웃(OperationalError)은
BALANCE_TX_MAX_ATTEMPTS 까지 재시도하고, 그래도 실패하면 StorageUnavailableError.
비즈니스 오류는 롤백 후 그대로 전파한다.
"""

import logging
import time
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional, Tuple, TypeVar, Union

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from casinoapi.config import Settings
from casinoapi.core.exceptions import (
    BalanceLimitExceededError,
    BaseAPIException,
    InsufficientBalanceError,
    InvalidAmountError,
    StorageUnavailableError,
    ValidationError,
    WithdrawalLockedError,
)
from casinoapi.models.balance import UserBalance
from casinoapi.models.transaction import TransactionTypeEnum
from casinoapi.repositories.balance_repository import BalanceRepository
from casinoapi.schemas.balance import (
    BalanceBreakdown,
    BalanceIntegrityResponse,
    BalanceOperationKind,
)
from casinoapi.schemas.promotion import BonusGrantSchema
from casinoapi.services.bonus_tracker import BonusTracker
from casinoapi.services.notifier import BalanceNotifier, LoggingBalanceNotifier
from casinoapi.services.transaction_recorder import TransactionRecorder
from casinoapi.utils.money import ZERO, quantize, to_money, to_positive_money
from casinoapi.utils.timezone_utils import utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")


def compute_breakdown(
    user_id: str, total_balance: Decimal, active_grants: Iterable[Any]
) -> BalanceBreakdown:
    """총 잔액과 진행 중인 보너스로 잔액 구성 계산

    bonus_balance 는 총 잔액을 넘지 않는다 (보너스를 베팅으로 잃은 경우).
    진행 중인 보너스가 하나라도 있으면 출금 가능액은 0.
    """
    grants = list(active_grants)
    total = quantize(total_balance)
    bonus_sum = sum((grant.bonus_amount for grant in grants), ZERO)
    bonus_balance = quantize(min(bonus_sum, total))
    real_balance = total - bonus_balance
    has_active_bonus = len(grants) > 0

    return BalanceBreakdown(
        user_id=user_id,
        total_balance=total,
        bonus_balance=bonus_balance,
        real_balance=real_balance,
        available_for_withdrawal=ZERO if has_active_bonus else real_balance,
        has_active_bonus=has_active_bonus,
        active_bonus_count=len(grants),
    )


class BalanceEngine:
    def __init__(
        self,
        db: Session,
        settings: Settings,
        notifier: Optional[BalanceNotifier] = None,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.db = db
        self.settings = settings
        self.notifier = notifier or LoggingBalanceNotifier()
        self.clock = clock
        self.sleep = sleep
        self.starting_balance = to_money(settings.STARTING_BALANCE)
        self.max_amount = to_money(settings.MAX_AMOUNT)
        self.balance_repo = BalanceRepository(db)
        self.recorder = TransactionRecorder(db, settings.HISTORY_MAX_LIMIT)
        self.bonus_tracker = BonusTracker(db, settings.DEFAULT_TIMEZONE, clock)

    # ------------------------------------------------------------------
    # 조회
    # ------------------------------------------------------------------

    def get_breakdown(self, user_id: str) -> BalanceBreakdown:
        """현재 잔액 구성 (잔액 행이 없으면 시작 잔액 기준)"""
        row = self.balance_repo.get_by_user(user_id)
        total = row.total_balance if row is not None else self.starting_balance
        return compute_breakdown(
            user_id, total, self.bonus_tracker.active_grant_models(user_id)
        )

    def verify_integrity(self, user_id: str) -> BalanceIntegrityResponse:
        """원장을 0 부터 재생한 결과와 저장된 잔액 비교"""
        row = self.balance_repo.get_by_user(user_id)
        stored = row.total_balance if row is not None else ZERO
        replayed = self.recorder.replay(user_id)
        last_entry = self.recorder.last_entry(user_id)
        last_balance_after = last_entry.balance_after if last_entry else None

        is_valid = replayed == stored and (
            last_balance_after is None or last_balance_after == stored
        )
        if not is_valid:
            logger.warning(
                f"Ledger mismatch for user {user_id}: stored={stored} "
                f"replayed={replayed} last_balance_after={last_balance_after} "
                f"row={row.to_log_dict() if row is not None else None}"
            )

        return BalanceIntegrityResponse(
            status="OK" if is_valid else "MISMATCH",
            user_id=user_id,
            stored_balance=stored,
            replayed_balance=replayed,
            last_balance_after=last_balance_after,
            entry_count=self.recorder.count(user_id),
            verified_at=self.clock().isoformat(),
        )

    # ------------------------------------------------------------------
    # 변경 연산
    # ------------------------------------------------------------------

    def apply_operation(
        self,
        user_id: str,
        amount: Any,
        kind: Union[BalanceOperationKind, str],
        reason: Optional[str] = None,
    ) -> BalanceBreakdown:
        """bet / win / deposit / bonus 적용

        Raises:
            InvalidAmountError: 금액이 양수가 아니거나 숫자가 아닌 경우
            InsufficientBalanceError: 베팅액이 총 잔액보다 큰 경우
            StorageUnavailableError: 재시도 후에도 커밋하지 못한 경우
        """
        amount = to_positive_money(amount, self.max_amount)
        try:
            kind = BalanceOperationKind(kind)
        except ValueError:
            raise ValidationError(
                f"Unsupported operation kind: {kind}", details={"kind": str(kind)}
            )

        def work(now: datetime) -> Tuple[BalanceBreakdown, BalanceBreakdown]:
            row = self._lock(user_id, now)
            before = row.total_balance
            if kind is BalanceOperationKind.BET:
                if amount > before:
                    raise InsufficientBalanceError(
                        details={"required": str(amount), "available": str(before)}
                    )
                after = before - amount
            else:
                after = before + amount
                self._check_limit(after)

            self.balance_repo.save_total(row, after, now)
            self.recorder.record(
                user_id=user_id,
                tx_type=TransactionTypeEnum(kind.value),
                amount=amount,
                balance_before=before,
                balance_after=after,
                created_at=now,
                reason=reason,
            )
            if kind is BalanceOperationKind.BET:
                self.bonus_tracker.record_wager(user_id, amount, now)

            breakdown = self._breakdown_for(user_id, after)
            return breakdown, breakdown

        return self._run_atomic(kind.value, user_id, work)

    def withdraw(self, user_id: str, amount: Any) -> BalanceBreakdown:
        """출금 (진행 중인 보너스가 있으면 불가)

        Raises:
            InvalidAmountError: 금액이 양수가 아닌 경우
            WithdrawalLockedError: 베팅 요건을 채우지 않은 보너스가 있는 경우
            InsufficientBalanceError: 출금 가능액을 초과한 경우
        """
        amount = to_positive_money(amount, self.max_amount)

        def work(now: datetime) -> Tuple[BalanceBreakdown, BalanceBreakdown]:
            row = self._lock(user_id, now)
            before = row.total_balance
            current = compute_breakdown(
                user_id,
                before,
                self.bonus_tracker.active_grant_models(user_id, for_update=True),
            )
            if current.has_active_bonus:
                raise WithdrawalLockedError(
                    details={"active_bonus_count": current.active_bonus_count}
                )
            if amount > current.available_for_withdrawal:
                raise InsufficientBalanceError(
                    details={
                        "required": str(amount),
                        "available": str(current.available_for_withdrawal),
                    }
                )

            after = before - amount
            self.balance_repo.save_total(row, after, now)
            self.recorder.record(
                user_id=user_id,
                tx_type=TransactionTypeEnum.WITHDRAWAL,
                amount=amount,
                balance_before=before,
                balance_after=after,
                created_at=now,
            )
            breakdown = self._breakdown_for(user_id, after)
            return breakdown, breakdown

        return self._run_atomic("withdrawal", user_id, work)

    def activate_promotion(
        self, user_id: str, promotion_id: int, deposit_amount: Any
    ) -> Tuple[BonusGrantSchema, BalanceBreakdown]:
        """입금 + 보너스 지급을 하나의 트랜잭션으로 처리

        조건 미달(IneligiblePromotionError)이면 입금까지 함께 롤백된다.
        """
        deposit_amount = to_positive_money(deposit_amount, self.max_amount)

        def work(now: datetime):
            row = self._lock(user_id, now)
            before = row.total_balance
            total = before + deposit_amount
            self._check_limit(total)

            deposit = self.recorder.record(
                user_id=user_id,
                tx_type=TransactionTypeEnum.DEPOSIT,
                amount=deposit_amount,
                balance_before=before,
                balance_after=total,
                created_at=now,
                reason=f"Deposit for promotion {promotion_id}",
            )
            grant = self.bonus_tracker.grant_bonus(
                user_id, promotion_id, deposit.id, deposit_amount, now
            )
            if grant.bonus_amount > ZERO:
                self._check_limit(total + grant.bonus_amount)
                self.recorder.record(
                    user_id=user_id,
                    tx_type=TransactionTypeEnum.BONUS,
                    amount=grant.bonus_amount,
                    balance_before=total,
                    balance_after=total + grant.bonus_amount,
                    created_at=now,
                    grant_id=grant.id,
                    reason=f"Bonus from promotion {promotion_id}",
                )
                total += grant.bonus_amount

            self.balance_repo.save_total(row, total, now)
            breakdown = self._breakdown_for(user_id, total)
            return (grant, breakdown), breakdown

        return self._run_atomic("activate_promotion", user_id, work)

    def cancel_promotion(self, user_id: str, grant_id: int) -> BalanceBreakdown:
        """보너스 취소 및 보너스 금액 몰수 (총 잔액을 넘지 않는 범위)"""

        def work(now: datetime) -> Tuple[BalanceBreakdown, BalanceBreakdown]:
            row = self._lock(user_id, now)
            before = row.total_balance
            grant = self.bonus_tracker.cancel_grant(user_id, grant_id, now)

            forfeit = min(grant.bonus_amount, before)
            after = before - forfeit
            if forfeit > ZERO:
                self.recorder.record(
                    user_id=user_id,
                    tx_type=TransactionTypeEnum.FORFEIT,
                    amount=forfeit,
                    balance_before=before,
                    balance_after=after,
                    created_at=now,
                    grant_id=grant.id,
                    reason="Bonus cancelled",
                )
            self.balance_repo.save_total(row, after, now)
            breakdown = self._breakdown_for(user_id, after)
            return breakdown, breakdown

        return self._run_atomic("cancel_promotion", user_id, work)

    def adjust_balance(
        self, user_id: str, delta: Any, reason: str, admin_id: str
    ) -> BalanceBreakdown:
        """관리자 잔액 조정 (양수: 추가, 음수: 차감)

        Raises:
            InvalidAmountError: 조정액이 0 이거나 숫자가 아닌 경우
            InsufficientBalanceError: 조정 후 잔액이 음수가 되는 경우
        """
        delta = to_money(delta, self.max_amount)
        if delta == ZERO:
            raise InvalidAmountError("Adjustment amount must be non-zero")

        def work(now: datetime) -> Tuple[BalanceBreakdown, BalanceBreakdown]:
            row = self._lock(user_id, now)
            before = row.total_balance
            after = before + delta
            if after < ZERO:
                raise InsufficientBalanceError(
                    details={"required": str(-delta), "available": str(before)}
                )
            self._check_limit(after)

            self.balance_repo.save_total(row, after, now)
            self.recorder.record(
                user_id=user_id,
                tx_type=TransactionTypeEnum.ADJUSTMENT,
                amount=delta,
                balance_before=before,
                balance_after=after,
                created_at=now,
                reason=f"[admin:{admin_id}] {reason}",
            )
            breakdown = self._breakdown_for(user_id, after)
            return breakdown, breakdown

        return self._run_atomic("adjustment", user_id, work)

    # ------------------------------------------------------------------
    # 내부
    # ------------------------------------------------------------------

    def _lock(self, user_id: str, now: datetime) -> UserBalance:
        """잔액 행 잠금. 새로 만든 행의 시작 잔액은 원장에도 남긴다."""
        row, created = self.balance_repo.lock_for_update(
            user_id, self.starting_balance, now
        )
        if created and self.starting_balance != ZERO:
            self.recorder.record(
                user_id=user_id,
                tx_type=TransactionTypeEnum.ADJUSTMENT,
                amount=self.starting_balance,
                balance_before=ZERO,
                balance_after=self.starting_balance,
                created_at=now,
                reason="Opening balance",
            )
        return row

    def _check_limit(self, total: Decimal) -> None:
        """저장 전에 새 총 잔액이 상한 이내인지 확인"""
        if total > self.max_amount:
            raise BalanceLimitExceededError(
                details={"balance_after": str(total), "max_balance": str(self.max_amount)}
            )

    def _breakdown_for(self, user_id: str, total: Decimal) -> BalanceBreakdown:
        return compute_breakdown(
            user_id, total, self.bonus_tracker.active_grant_models(user_id)
        )

    def _run_atomic(
        self,
        operation: str,
        user_id: str,
        work: Callable[[datetime], Tuple[T, BalanceBreakdown]],
    ) -> T:
        """work 를 하나의 트랜잭션으로 실행하고 커밋 후 알림"""
        attempts = max(1, self.settings.BALANCE_TX_MAX_ATTEMPTS)
        for attempt in range(1, attempts + 1):
            try:
                result, breakdown = work(self.clock())
                self.db.commit()
            except BaseAPIException as e:
                self.db.rollback()
                logger.warning(f"{operation} rejected for user {user_id}: {e.message}")
                raise
            except (StaleDataError, OperationalError) as e:
                self.db.rollback()
                if attempt >= attempts:
                    logger.error(
                        f"{operation} for user {user_id} failed after {attempts} attempts: {e}"
                    )
                    raise StorageUnavailableError(
                        details={"operation": operation, "attempts": attempts}
                    ) from e
                logger.warning(
                    f"{operation} for user {user_id} conflicted "
                    f"(attempt {attempt}/{attempts}), retrying: {e}"
                )
                self.sleep(self.settings.BALANCE_TX_RETRY_BACKOFF * attempt)
                continue
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"{operation} for user {user_id} failed: {e}")
                raise StorageUnavailableError(details={"operation": operation}) from e
            except Exception:
                self.db.rollback()
                raise

            logger.info(
                f"{operation} committed for user {user_id}: total={breakdown.total_balance}"
            )
            self._notify(breakdown)
            return result

        # attempts >= 1 이므로 도달하지 않음
        raise StorageUnavailableError(details={"operation": operation})

    def _notify(self, breakdown: BalanceBreakdown) -> None:
        try:
            self.notifier.notify(breakdown)
        except Exception as e:
            logger.warning(f"Balance notifier failed for user {breakdown.user_id}: {e}")
