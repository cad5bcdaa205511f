"""
Monthly hour-bank regularization planning.

Fills the days of the current month that have no time entry with standard
working blocks until the employee reaches the monthly hours target:

* Monday to Friday: a morning block 09:00-14:00 and an afternoon block 17:00-20:00
* Saturday: a single block 11:00-14:00
* Sunday: never

Weekday blocks are used first in chronological order, then Saturday blocks.
The last block used is shortened so the total lands exactly on the target.
Everything is computed in whole minutes.
"""

import re
from calendar import SATURDAY, SUNDAY
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Set

DURATION_PATTERN = re.compile(r"(\d+):(\d+):(\d+)")

MORNING_SLOT = (time(9, 0), time(14, 0))
AFTERNOON_SLOT = (time(17, 0), time(20, 0))
SATURDAY_SLOT = (time(11, 0), time(14, 0))


def parse_duration_minutes(value: Optional[str]) -> int:
    """Whole minutes of an ``HH:MM:SS`` duration; anything unparsable is 0."""
    if not value:
        return 0
    match = DURATION_PATTERN.match(str(value).strip())
    if not match:
        return 0
    hours, minutes, _ = (int(part) for part in match.groups())
    return hours * 60 + minutes


def parse_duration_hours(value: Optional[str]) -> float:
    """Hours plus minutes/60 of an ``HH:MM:SS`` duration; seconds are ignored."""
    return parse_duration_minutes(value) / 60


def format_duration(delta: timedelta) -> str:
    total_seconds = max(int(delta.total_seconds()), 0)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


@dataclass
class Slot:
    day: date
    start: time
    end: time
    segment: int

    @property
    def minutes(self) -> int:
        return (self.end.hour * 60 + self.end.minute) - (self.start.hour * 60 + self.start.minute)


@dataclass
class PlannedEntry:
    day: date
    segment: int
    check_in: datetime
    check_out: datetime

    @property
    def minutes(self) -> int:
        return int((self.check_out - self.check_in).total_seconds() // 60)

    @property
    def total_hours(self) -> str:
        return format_duration(self.check_out - self.check_in)


def candidate_slots(today: date, occupied: Set[date]) -> List[Slot]:
    """Free slots from the 1st of today's month up to and including today."""
    weekday_slots = []
    saturday_slots = []

    day = today.replace(day=1)
    while day <= today:
        weekday = day.weekday()
        if day in occupied or weekday == SUNDAY:
            pass
        elif weekday == SATURDAY:
            saturday_slots.append(Slot(day, *SATURDAY_SLOT, segment=0))
        else:
            weekday_slots.append(Slot(day, *MORNING_SLOT, segment=0))
            weekday_slots.append(Slot(day, *AFTERNOON_SLOT, segment=1))
        day += timedelta(days=1)

    weekday_slots.sort(key=lambda slot: (slot.day, slot.start))
    saturday_slots.sort(key=lambda slot: slot.day)
    return weekday_slots + saturday_slots


def plan_regularization(
    today: date,
    worked_minutes: int,
    occupied: Iterable[date],
    target_minutes: int = 160 * 60
) -> List[PlannedEntry]:
    """Greedy fill of free slots until ``worked_minutes`` reaches the target."""
    remaining = target_minutes - worked_minutes
    if remaining <= 0:
        return []

    planned = []
    for slot in candidate_slots(today, set(occupied)):
        if remaining <= 0:
            break
        used = min(slot.minutes, remaining)
        check_in = datetime.combine(slot.day, slot.start)
        planned.append(PlannedEntry(
            day=slot.day,
            segment=slot.segment,
            check_in=check_in,
            check_out=check_in + timedelta(minutes=used)
        ))
        remaining -= used

    return planned
