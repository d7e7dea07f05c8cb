"""날짜/시간 유틸리티 — UTC 정규화와 로컬 달력 일자 계산.

Date/time helpers — UTC normalisation and local calendar-day bucketing.
Every day-based filter and report goes through local_day() so the
single-day filter and the range report bucket identically.
"""

from datetime import date, datetime, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

from app.config import settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """타임존 없는 값은 UTC로 간주합니다 (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@lru_cache(maxsize=8)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def report_zone() -> ZoneInfo:
    """설정된 보고서 시간대 (REPORT_TIMEZONE)."""
    return _zone(settings.REPORT_TIMEZONE)


def local_day(value: datetime, tz: ZoneInfo | None = None) -> date:
    """로컬 달력 기준 일자 (calendar day in the report time zone, not the UTC day)."""
    return as_utc(value).astimezone(tz or report_zone()).date()


def to_epoch_ms(value: datetime) -> int:
    return int(as_utc(value).timestamp() * 1000)
