"""
프로모션 이용 가능 시점 판단

- 요일은 프로모션 타임존 기준 (0=일요일 ... 6=토요일)
- starts_at / ends_at 이 있으면 [starts_at, ends_at) 구간에서만 이용 가능
"""

from datetime import datetime
from typing import Iterable, List

from casinoapi.schemas.promotion import PromotionDefinition
from casinoapi.utils.timezone_utils import ensure_utc, js_weekday, to_local

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def is_within_window(promotion: PromotionDefinition, now: datetime) -> bool:
    now_utc = ensure_utc(now)
    if promotion.starts_at and now_utc < ensure_utc(promotion.starts_at):
        return False
    if promotion.ends_at and now_utc >= ensure_utc(promotion.ends_at):
        return False
    return True


def is_available_on_day(
    promotion: PromotionDefinition, now: datetime, fallback_tz: str = "UTC"
) -> bool:
    local_now = to_local(now, promotion.timezone, fallback_tz)
    return js_weekday(local_now) in promotion.days_of_week


def is_available_at(
    promotion: PromotionDefinition, now: datetime, fallback_tz: str = "UTC"
) -> bool:
    """활성 상태이며 현재 요일/기간에 이용 가능한지 여부"""
    if not promotion.is_active:
        return False
    return is_within_window(promotion, now) and is_available_on_day(
        promotion, now, fallback_tz
    )


def available_days_display(days_of_week: Iterable[int]) -> str:
    """요일 목록을 사람이 읽는 문자열로 변환 (예: "Monday, Wednesday")"""
    days: List[int] = sorted(set(days_of_week))
    if not days:
        return "No days selected"
    if days == list(range(7)):
        return "Every day"
    return ", ".join(DAY_NAMES[day] for day in days)
