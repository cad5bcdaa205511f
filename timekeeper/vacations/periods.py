"""
Vacation periods run from 1 March to the last day of the following February.

A period is identified by the calendar year of its March. Employees may book
days in the current period and in the next one.
"""

import calendar
from datetime import date
from typing import List, Tuple


def period_year(day: date) -> int:
    return day.year if day.month >= 3 else day.year - 1


def period_bounds(year: int) -> Tuple[date, date]:
    last_february_day = calendar.monthrange(year + 1, 2)[1]
    return date(year, 3, 1), date(year + 1, 2, last_february_day)


def active_period_years(today: date) -> List[int]:
    current = period_year(today)
    return [current, current + 1]


def prorated_allowance(hire_date: date, year: int, yearly_days: int = 22) -> int:
    """Days granted for a period to an employee hired on ``hire_date``.

    Hired before the period: the full allowance. Hired during it: the share
    of the months left from the hire month to February. Hired later: none.
    """
    start, end = period_bounds(year)
    if hire_date is None or hire_date < start:
        return yearly_days
    if hire_date > end:
        return 0

    months_into_period = (hire_date.year - start.year) * 12 + hire_date.month - start.month
    months_remaining = 12 - months_into_period
    # yearly_days / 12 * months_remaining, halves rounded up, in integers
    allowance = (2 * yearly_days * months_remaining + 12) // 24
    return max(0, min(yearly_days, allowance))
