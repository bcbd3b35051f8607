"""School bell schedule: maps wall-clock hours to period numbers.

08:00-12:00 are periods 1-4, 12:00-13:00 is lunch, 13:00-17:00 are periods 5-8.
"""

from datetime import datetime
from typing import Dict, Optional

from school_admin.core.timetable_grid import DAYS

PERIOD_HOURS: Dict[int, int] = {
    8: 1,
    9: 2,
    10: 3,
    11: 4,
    13: 5,
    14: 6,
    15: 7,
    16: 8,
}
LUNCH_HOUR = 12

_WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def current_period(now: datetime) -> Optional[int]:
    return PERIOD_HOURS.get(now.hour)


def current_day(now: datetime) -> Optional[str]:
    """Weekday name when it is a school day, else None."""
    name = _WEEKDAY_NAMES[now.weekday()]
    return name if name in DAYS else None


def is_current_cell(day: str, period: int, now: datetime) -> bool:
    period_now = current_period(now)
    if period_now is None:
        return False
    return day == current_day(now) and period == period_now
