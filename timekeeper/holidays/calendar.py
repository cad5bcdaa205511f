"""
National and regional public holidays.

Fixed-date holidays plus the movable feasts derived from Easter Sunday.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache
from typing import List, Optional, Tuple

NATIONAL = "national"
REGIONAL = "regional"

FIXED_HOLIDAYS = [
    (1, 1, "New Year's Day", NATIONAL),
    (1, 6, "Epiphany", NATIONAL),
    (5, 1, "Labour Day", NATIONAL),
    (8, 15, "Assumption of Mary", NATIONAL),
    (10, 12, "National Day", NATIONAL),
    (11, 1, "All Saints' Day", NATIONAL),
    (12, 6, "Constitution Day", NATIONAL),
    (12, 8, "Immaculate Conception", NATIONAL),
    (12, 25, "Christmas Day", NATIONAL),
    (9, 8, "Regional Day", REGIONAL),
    (5, 22, "Local Festivity", REGIONAL),
    (9, 9, "Local Festivity", REGIONAL),
]

# Offsets in days from Easter Sunday
EASTER_HOLIDAYS = [
    (-3, "Holy Thursday", NATIONAL),
    (-2, "Good Friday", NATIONAL),
    (-47, "Carnival Tuesday", REGIONAL),
    (1, "Easter Monday", REGIONAL),
]


@dataclass(frozen=True)
class Holiday:
    date: date
    name: str
    type: str


def easter_sunday(year: int) -> date:
    """Gregorian Easter Sunday (Butcher's algorithm)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


@lru_cache(maxsize=32)
def _holidays_for_year(year: int) -> Tuple[Holiday, ...]:
    holidays = [Holiday(date(year, month, day), name, kind) for month, day, name, kind in FIXED_HOLIDAYS]

    easter = easter_sunday(year)
    holidays.extend(
        Holiday(easter + timedelta(days=offset), name, kind) for offset, name, kind in EASTER_HOLIDAYS
    )
    return tuple(sorted(holidays, key=lambda holiday: holiday.date))


def holidays_for_year(year: int) -> List[Holiday]:
    return list(_holidays_for_year(year))


def holidays_for_month(year: int, month: int) -> List[Holiday]:
    return [holiday for holiday in _holidays_for_year(year) if holiday.date.month == month]


def get_holiday(day: date) -> Optional[Holiday]:
    for holiday in _holidays_for_year(day.year):
        if holiday.date == day:
            return holiday
    return None


def is_holiday(day: date) -> bool:
    return get_holiday(day) is not None
