"""
타임존 유틸리티

프로모션은 각자의 IANA 타임존 기준으로 요일/일일 사용 횟수를 판단한다.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Tuple

import pytz

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """현재 UTC 시간을 반환합니다."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """naive datetime 은 UTC 로 간주합니다."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def resolve_timezone(name: str, fallback: str = "UTC"):
    """타임존 이름을 pytz 타임존으로 변환 (잘못된 이름이면 fallback)"""
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone '{name}', falling back to {fallback}")
        return pytz.timezone(fallback)


def to_local(dt: datetime, tz_name: str, fallback: str = "UTC") -> datetime:
    """UTC(또는 임의 타임존) datetime 을 지정 타임존의 로컬 시간으로 변환합니다."""
    return ensure_utc(dt).astimezone(resolve_timezone(tz_name, fallback))


def js_weekday(dt: datetime) -> int:
    """일요일=0 ... 토요일=6 형식의 요일 번호"""
    return (dt.weekday() + 1) % 7


def local_day_bounds_utc(
    dt: datetime, tz_name: str, fallback: str = "UTC"
) -> Tuple[datetime, datetime]:
    """dt 가 속한 로컬 날짜의 [시작, 다음날 시작) 구간을 UTC 로 반환합니다.

    DST 전환일도 정확히 처리하기 위해 pytz localize 를 사용한다.
    """
    tz = resolve_timezone(tz_name, fallback)
    local = ensure_utc(dt).astimezone(tz)
    start_naive = datetime(local.year, local.month, local.day)
    next_naive = start_naive + timedelta(days=1)
    start = tz.localize(start_naive).astimezone(timezone.utc)
    end = tz.localize(next_naive).astimezone(timezone.utc)
    return start, end
