from decimal import Decimal

import pytest

from casinoapi.core.exceptions import InvalidLimitError
from casinoapi.models.transaction import TransactionTypeEnum, signed_delta
from casinoapi.services.transaction_recorder import TransactionRecorder

USER = "player-1"


@pytest.fixture
def recorder(db_session):
    return TransactionRecorder(db_session)


def record(recorder, clock, tx_type, amount, before, after, **kwargs):
    return recorder.record(
        user_id=kwargs.pop("user_id", USER),
        tx_type=tx_type,
        amount=Decimal(amount),
        balance_before=Decimal(before),
        balance_after=Decimal(after),
        created_at=clock(),
        **kwargs,
    )


class TestSignedDelta:
    @pytest.mark.parametrize(
        "tx_type, expected",
        [
            (TransactionTypeEnum.BET, "-10"),
            (TransactionTypeEnum.WITHDRAWAL, "-10"),
            (TransactionTypeEnum.FORFEIT, "-10"),
            (TransactionTypeEnum.WIN, "10"),
            (TransactionTypeEnum.DEPOSIT, "10"),
            (TransactionTypeEnum.BONUS, "10"),
            (TransactionTypeEnum.ADJUSTMENT, "10"),
        ],
    )
    def test_signed_delta(self, tx_type, expected):
        assert signed_delta(tx_type, Decimal("10")) == Decimal(expected)

    def test_negative_adjustment_keeps_sign(self):
        assert signed_delta(TransactionTypeEnum.ADJUSTMENT, Decimal("-3")) == Decimal("-3")


class TestRecord:
    def test_record_returns_entry(self, recorder, clock, db_session):
        entry = record(
            recorder, clock, TransactionTypeEnum.DEPOSIT, "100.00", "0.00", "100.00",
            reason="first deposit",
        )
        db_session.commit()

        assert entry.id is not None
        assert entry.type is TransactionTypeEnum.DEPOSIT
        assert entry.reason == "first deposit"
        assert recorder.count(USER) == 1

    def test_unbalanced_entry_is_rejected(self, recorder, clock):
        with pytest.raises(ValueError):
            record(recorder, clock, TransactionTypeEnum.BET, "10.00", "100.00", "100.00")

        assert recorder.count(USER) == 0

    def test_rollback_discards_entry(self, recorder, clock, db_session):
        record(recorder, clock, TransactionTypeEnum.DEPOSIT, "5.00", "0.00", "5.00")
        db_session.rollback()

        assert recorder.count(USER) == 0


class TestHistory:
    @pytest.mark.parametrize("limit", [0, -1, 101, 150, "20", 2.5, True, None])
    def test_invalid_limit(self, recorder, limit):
        with pytest.raises(InvalidLimitError) as exc_info:
            recorder.history(USER, limit)

        assert exc_info.value.error_code == "HISTORY_001"

    def test_limit_bounds_are_inclusive(self, recorder, clock):
        record(recorder, clock, TransactionTypeEnum.DEPOSIT, "5.00", "0.00", "5.00")

        assert len(recorder.history(USER, 1)) == 1
        assert len(recorder.history(USER, 100)) == 1

    def test_newest_first_and_scoped_to_user(self, recorder, clock):
        record(recorder, clock, TransactionTypeEnum.DEPOSIT, "50.00", "0.00", "50.00")
        record(recorder, clock, TransactionTypeEnum.BET, "20.00", "50.00", "30.00")
        record(
            recorder, clock, TransactionTypeEnum.DEPOSIT, "1.00", "0.00", "1.00",
            user_id="someone-else",
        )

        history = recorder.history(USER, 20)

        assert [entry.type for entry in history] == [
            TransactionTypeEnum.BET,
            TransactionTypeEnum.DEPOSIT,
        ]
        assert all(entry.user_id == USER for entry in history)

    def test_empty_history(self, recorder):
        assert recorder.history(USER, 20) == []
        assert recorder.last_entry(USER) is None


class TestReplay:
    def test_replay_sums_signed_deltas(self, recorder, clock):
        record(recorder, clock, TransactionTypeEnum.DEPOSIT, "100.00", "0.00", "100.00")
        record(recorder, clock, TransactionTypeEnum.BONUS, "50.00", "100.00", "150.00")
        record(recorder, clock, TransactionTypeEnum.BET, "30.00", "150.00", "120.00")
        record(recorder, clock, TransactionTypeEnum.FORFEIT, "50.00", "120.00", "70.00")
        record(recorder, clock, TransactionTypeEnum.ADJUSTMENT, "-20.00", "70.00", "50.00")
        record(recorder, clock, TransactionTypeEnum.WITHDRAWAL, "10.00", "50.00", "40.00")

        assert recorder.replay(USER) == Decimal("40.00")
        assert recorder.last_entry(USER).balance_after == Decimal("40.00")
