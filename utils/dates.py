# utils/dates.py
"""
Calendar helpers for the team's reporting period (month + week 1-4),
evaluated in the configured timezone.
"""

import calendar
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from config.settings import settings

MONTHS = list(calendar.month_name)[1:]
DAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']


def local_tz(name: Optional[str] = None) -> ZoneInfo:
    return ZoneInfo(name or settings.TIMEZONE)


def now_local(tz: Optional[ZoneInfo] = None) -> datetime:
    """Current time in the team's timezone"""
    return datetime.now(tz or local_tz())


def canonical_month(value) -> Optional[str]:
    """'march' / 'MARCH' -> 'March'; anything else -> None"""
    if not isinstance(value, str):
        return None
    cleaned = value.strip().capitalize()
    return cleaned if cleaned in MONTHS else None


def week_of_month(day: date) -> int:
    """Reporting week: days 1-7 -> 1 ... days 22+ -> 4"""
    return min(4, (day.day - 1) // 7 + 1)


def cron_weekday(day: date) -> int:
    """Day of week with Sunday = 0"""
    return (day.weekday() + 1) % 7


def day_name(day_of_week: int) -> str:
    if 0 <= day_of_week < len(DAY_NAMES):
        return DAY_NAMES[day_of_week]
    return DAY_NAMES[0]
