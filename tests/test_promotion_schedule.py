from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from casinoapi.models.promotion import TurnoverBasisEnum
from casinoapi.schemas.promotion import PercentageBonus, PromotionDefinition
from casinoapi.utils.promotion_schedule import (
    available_days_display,
    is_available_at,
    is_available_on_day,
    is_within_window,
)
from casinoapi.utils.timezone_utils import js_weekday, local_day_bounds_utc, to_local

WEDNESDAY_NOON = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)


def definition(**overrides) -> PromotionDefinition:
    data = {
        "id": 1,
        "name": "Reload",
        "rule": PercentageBonus(value=Decimal("50"), cap=None),
        "min_deposit": Decimal("10.00"),
        "turnover_multiplier": Decimal("20"),
        "turnover_basis": TurnoverBasisEnum.BONUS_ONLY,
        "max_usage_per_day": 1,
        "days_of_week": [0, 1, 2, 3, 4, 5, 6],
        "timezone": "UTC",
        "is_active": True,
    }
    data.update(overrides)
    return PromotionDefinition(**data)


class TestTimezoneUtils:
    def test_js_weekday_starts_on_sunday(self):
        assert js_weekday(datetime(2026, 3, 1)) == 0  # 일요일
        assert js_weekday(WEDNESDAY_NOON) == 3
        assert js_weekday(datetime(2026, 3, 7)) == 6  # 토요일

    def test_unknown_timezone_falls_back(self):
        local = to_local(WEDNESDAY_NOON, "Mars/Olympus", "UTC")

        assert local.utcoffset() == timedelta(0)

    def test_local_day_bounds(self):
        start, end = local_day_bounds_utc(WEDNESDAY_NOON, "Asia/Seoul")

        assert start == datetime(2026, 3, 3, 15, 0, tzinfo=timezone.utc)
        assert end == datetime(2026, 3, 4, 15, 0, tzinfo=timezone.utc)

    def test_local_day_bounds_across_dst(self):
        # 2026-03-08 미국 서머타임 시작: 하루가 23시간
        start, end = local_day_bounds_utc(
            datetime(2026, 3, 8, 18, 0, tzinfo=timezone.utc), "America/New_York"
        )

        assert start == datetime(2026, 3, 8, 5, 0, tzinfo=timezone.utc)
        assert end - start == timedelta(hours=23)


class TestAvailability:
    def test_available_every_day(self):
        assert is_available_at(definition(), WEDNESDAY_NOON) is True

    def test_inactive_is_never_available(self):
        assert is_available_at(definition(is_active=False), WEDNESDAY_NOON) is False

    def test_day_filter(self):
        assert is_available_on_day(definition(days_of_week=[3]), WEDNESDAY_NOON) is True
        assert is_available_on_day(definition(days_of_week=[0, 6]), WEDNESDAY_NOON) is False

    def test_day_filter_uses_promotion_timezone(self):
        # 수요일 12:00 UTC 는 호놀룰루에서 수요일 02:00, 오클랜드에서 목요일 01:00
        assert is_available_on_day(
            definition(days_of_week=[3], timezone="Pacific/Honolulu"), WEDNESDAY_NOON
        )
        assert is_available_on_day(
            definition(days_of_week=[4], timezone="Pacific/Auckland"), WEDNESDAY_NOON
        )

    def test_window_is_half_open(self):
        promotion = definition(
            starts_at=WEDNESDAY_NOON, ends_at=WEDNESDAY_NOON + timedelta(hours=1)
        )

        assert is_within_window(promotion, WEDNESDAY_NOON) is True
        assert is_within_window(promotion, WEDNESDAY_NOON - timedelta(seconds=1)) is False
        assert is_within_window(promotion, WEDNESDAY_NOON + timedelta(hours=1)) is False

    def test_naive_window_is_treated_as_utc(self):
        promotion = definition(starts_at=datetime(2026, 3, 4, 13, 0))

        assert is_within_window(promotion, WEDNESDAY_NOON) is False


class TestAvailableDaysDisplay:
    @pytest.mark.parametrize(
        "days, expected",
        [
            ([0, 1, 2, 3, 4, 5, 6], "Every day"),
            ([], "No days selected"),
            ([5, 1, 1], "Monday, Friday"),
            ([0], "Sunday"),
        ],
    )
    def test_display(self, days, expected):
        assert available_days_display(days) == expected
