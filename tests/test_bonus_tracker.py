from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from casinoapi.core.exceptions import (
    BalanceLimitExceededError,
    GrantNotActiveError,
    GrantNotFoundError,
    IneligiblePromotionError,
)
from casinoapi.models.promotion import BonusTypeEnum, GrantStatusEnum, TurnoverBasisEnum
from casinoapi.schemas.promotion import FlatCashback, FreeSpins, PercentageBonus
from casinoapi.services.bonus_tracker import (
    compute_bonus_amount,
    compute_turnover_requirement,
)

USER = "player-1"


class TestBonusArithmetic:
    @pytest.mark.parametrize(
        "rule, deposit, expected",
        [
            (PercentageBonus(value=Decimal("100"), cap=Decimal("50")), "100", "50.00"),
            (PercentageBonus(value=Decimal("25"), cap=None), "80", "20.00"),
            (PercentageBonus(value=Decimal("10"), cap=None), "0.05", "0.01"),
            (FlatCashback(value=Decimal("15")), "1000", "15.00"),
            (FreeSpins(count=20, spin_value=Decimal("0.50"), cap=None), "10", "10.00"),
            (FreeSpins(count=20, spin_value=Decimal("0.50"), cap=Decimal("5")), "10", "5.00"),
        ],
    )
    def test_bonus_amount(self, rule, deposit, expected):
        assert compute_bonus_amount(rule, Decimal(deposit)) == Decimal(expected)

    def test_turnover_deposit_plus_bonus(self):
        requirement = compute_turnover_requirement(
            TurnoverBasisEnum.DEPOSIT_PLUS_BONUS,
            Decimal("10"),
            Decimal("100.00"),
            Decimal("50.00"),
        )
        assert requirement == Decimal("1500.00")

    def test_turnover_bonus_only(self):
        requirement = compute_turnover_requirement(
            TurnoverBasisEnum.BONUS_ONLY,
            Decimal("10"),
            Decimal("100.00"),
            Decimal("50.00"),
        )
        assert requirement == Decimal("500.00")


class TestEligibility:
    def test_inactive_promotion(self, balance_engine, make_promotion):
        promotion = make_promotion(is_active=False)

        with pytest.raises(IneligiblePromotionError) as exc_info:
            balance_engine.activate_promotion(USER, promotion.id, "100")

        assert exc_info.value.error_code == "PROMOTION_001"

    def test_day_of_week(self, balance_engine, make_promotion):
        weekend_only = make_promotion(days_of_week=[0, 6])

        with pytest.raises(IneligiblePromotionError):
            balance_engine.activate_promotion(USER, weekend_only.id, "100")

    def test_validity_window(self, balance_engine, make_promotion, clock):
        promotion = make_promotion(
            starts_at=clock.now + timedelta(days=1),
            ends_at=clock.now + timedelta(days=8),
        )

        with pytest.raises(IneligiblePromotionError):
            balance_engine.activate_promotion(USER, promotion.id, "100")

        clock.advance(days=2)
        grant, _ = balance_engine.activate_promotion(USER, promotion.id, "100")
        assert grant.promotion_id == promotion.id

        clock.advance(days=7)
        with pytest.raises(IneligiblePromotionError):
            balance_engine.activate_promotion(USER, promotion.id, "100")

    def test_day_of_week_uses_promotion_timezone(self, balance_engine, make_promotion, clock):
        # 수요일 12:00 UTC = 수요일 21:00 KST
        thursday_in_seoul = make_promotion(days_of_week=[4], timezone="Asia/Seoul")

        with pytest.raises(IneligiblePromotionError):
            balance_engine.activate_promotion(USER, thursday_in_seoul.id, "100")

        clock.advance(hours=4)  # 목요일 01:00 KST
        grant, _ = balance_engine.activate_promotion(USER, thursday_in_seoul.id, "100")
        assert grant.status is GrantStatusEnum.ACTIVE

    def test_daily_usage_counts_local_day(self, balance_engine, make_promotion, clock):
        promotion = make_promotion(timezone="Asia/Seoul", max_usage_per_day=1)
        clock.now = datetime(2026, 3, 4, 14, 0, tzinfo=timezone.utc)  # 23:00 KST
        balance_engine.activate_promotion(USER, promotion.id, "100")

        clock.now = datetime(2026, 3, 4, 16, 0, tzinfo=timezone.utc)  # 다음날 01:00 KST
        grant, _ = balance_engine.activate_promotion(USER, promotion.id, "100")

        assert grant.status is GrantStatusEnum.ACTIVE

    def test_max_usage_per_day_above_one(self, balance_engine, make_promotion):
        promotion = make_promotion(max_usage_per_day=2)

        balance_engine.activate_promotion(USER, promotion.id, "100")
        balance_engine.activate_promotion(USER, promotion.id, "100")
        with pytest.raises(IneligiblePromotionError):
            balance_engine.activate_promotion(USER, promotion.id, "100")

    def test_cancelled_grants_count_towards_daily_usage(self, balance_engine, make_promotion):
        promotion = make_promotion()
        grant, _ = balance_engine.activate_promotion(USER, promotion.id, "100")
        balance_engine.cancel_promotion(USER, grant.id)

        with pytest.raises(IneligiblePromotionError):
            balance_engine.activate_promotion(USER, promotion.id, "100")

    def test_free_spins_activation(self, balance_engine, make_promotion):
        promotion = make_promotion(
            bonus_type=BonusTypeEnum.FREE_SPINS,
            bonus_value=Decimal("20"),
            free_spin_value=Decimal("0.50"),
            max_bonus=None,
            turnover_basis=TurnoverBasisEnum.BONUS_ONLY,
        )

        grant, breakdown = balance_engine.activate_promotion(USER, promotion.id, "10")

        assert grant.bonus_amount == Decimal("10.00")
        assert grant.turnover_requirement == Decimal("100.00")
        assert breakdown.total_balance == Decimal("20.00")

    def test_turnover_requirement_above_storable_maximum(self, balance_engine, make_promotion):
        promotion = make_promotion(max_bonus=None, turnover_multiplier=Decimal("99.00"))

        with pytest.raises(BalanceLimitExceededError):
            balance_engine.activate_promotion(USER, promotion.id, "9000000000")

        assert balance_engine.get_breakdown(USER).total_balance == Decimal("0.00")
        assert balance_engine.recorder.count(USER) == 0
        assert balance_engine.bonus_tracker.list_grants(USER) == []


class TestRecordWager:
    def _two_grants(self, balance_engine, make_promotion, clock):
        first = make_promotion(
            name="First",
            bonus_type=BonusTypeEnum.CASHBACK,
            bonus_value=Decimal("10.00"),
            max_bonus=None,
            turnover_basis=TurnoverBasisEnum.BONUS_ONLY,
        )
        second = make_promotion(
            name="Second",
            bonus_type=BonusTypeEnum.CASHBACK,
            bonus_value=Decimal("20.00"),
            max_bonus=None,
            turnover_multiplier=Decimal("5.00"),
            turnover_basis=TurnoverBasisEnum.BONUS_ONLY,
        )
        older, _ = balance_engine.activate_promotion(USER, first.id, "500")
        clock.advance(minutes=1)
        newer, _ = balance_engine.activate_promotion(USER, second.id, "500")
        return older, newer

    def test_oldest_grant_is_filled_first(self, balance_engine, make_promotion, clock):
        older, newer = self._two_grants(balance_engine, make_promotion, clock)
        tracker = balance_engine.bonus_tracker

        tracker.record_wager(USER, Decimal("150.00"))

        grants = {grant.id: grant for grant in tracker.list_grants(USER)}
        assert grants[older.id].status is GrantStatusEnum.COMPLETED
        assert grants[older.id].wagering_progress == Decimal("100.00")
        assert grants[newer.id].status is GrantStatusEnum.ACTIVE
        assert grants[newer.id].wagering_progress == Decimal("50.00")
        assert grants[newer.id].remaining_wagering == Decimal("50.00")

    def test_excess_stake_is_dropped(self, balance_engine, make_promotion, clock):
        older, newer = self._two_grants(balance_engine, make_promotion, clock)
        tracker = balance_engine.bonus_tracker

        tracker.record_wager(USER, Decimal("1000.00"))

        grants = tracker.list_grants(USER)
        assert all(grant.status is GrantStatusEnum.COMPLETED for grant in grants)
        assert {grant.wagering_progress for grant in grants} == {Decimal("100.00")}
        assert tracker.get_active_grants(USER) == []

    def test_completed_at_is_set(self, balance_engine, make_promotion, clock):
        self._two_grants(balance_engine, make_promotion, clock)

        balance_engine.bonus_tracker.record_wager(USER, Decimal("100.00"))

        completed = balance_engine.bonus_tracker.list_grants(USER, GrantStatusEnum.COMPLETED)
        assert len(completed) == 1
        assert completed[0].completed_at is not None

    def test_no_active_grants_is_noop(self, balance_engine):
        balance_engine.bonus_tracker.record_wager(USER, Decimal("50.00"))

        assert balance_engine.bonus_tracker.list_grants(USER) == []


class TestCancelGrant:
    def test_unknown_grant(self, balance_engine):
        with pytest.raises(GrantNotFoundError):
            balance_engine.cancel_promotion(USER, 12345)

    def test_other_users_grant_is_not_found(self, balance_engine, make_promotion):
        promotion = make_promotion()
        grant, _ = balance_engine.activate_promotion("someone-else", promotion.id, "100")

        with pytest.raises(GrantNotFoundError):
            balance_engine.cancel_promotion(USER, grant.id)

    def test_terminal_grant_cannot_be_cancelled(self, balance_engine, make_promotion):
        promotion = make_promotion()
        grant, _ = balance_engine.activate_promotion(USER, promotion.id, "100")
        balance_engine.cancel_promotion(USER, grant.id)

        with pytest.raises(GrantNotActiveError) as exc_info:
            balance_engine.cancel_promotion(USER, grant.id)

        assert exc_info.value.status_code == 409
        assert balance_engine.get_breakdown(USER).total_balance == Decimal("100.00")
