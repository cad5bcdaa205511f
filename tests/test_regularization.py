from datetime import date, datetime, time, timedelta

import pytest

from timekeeper.attendance.models import TimeEntry, EntryStatus
from timekeeper.attendance.regularization import (
    candidate_slots,
    format_duration,
    parse_duration_hours,
    parse_duration_minutes,
    plan_regularization
)
from timekeeper.attendance.service import AttendanceService, AUTO_REGULARIZED_NOTE
from timekeeper.core.exceptions import InsufficientPermissionsError
from timekeeper.employees.models import Role

# Monday 10 March 2025; the 1st and 8th are Saturdays, the 2nd and 9th Sundays
TODAY = date(2025, 3, 10)


@pytest.mark.parametrize("value,expected", [
    ("08:30:00", 8.5),
    ("05:00:59", 5.0),
    ("158:15:00", 158.25),
    ("", 0),
    (None, 0),
    ("garbage", 0),
])
def test_parse_duration_hours(value, expected):
    assert parse_duration_hours(value) == expected


def test_format_duration():
    assert format_duration(timedelta(hours=7, minutes=5, seconds=3)) == "07:05:03"
    assert parse_duration_minutes(format_duration(timedelta(hours=3, minutes=20))) == 200


def test_candidate_slots_skip_sundays_and_occupied_days():
    slots = candidate_slots(TODAY, occupied={date(2025, 3, 4)})

    days = {slot.day for slot in slots}
    assert date(2025, 3, 2) not in days
    assert date(2025, 3, 9) not in days
    assert date(2025, 3, 4) not in days
    assert max(days) == TODAY


def test_weekday_slots_come_before_saturdays():
    slots = candidate_slots(TODAY, occupied=set())

    assert [slot.day.weekday() for slot in slots[-2:]] == [5, 5]
    assert all(slot.day.weekday() < 5 for slot in slots[:-2])
    assert slots[0].start == time(9, 0) and slots[0].segment == 0
    assert slots[1].start == time(17, 0) and slots[1].segment == 1
    assert slots[-1].start == time(11, 0) and slots[-1].minutes == 180


def test_plan_shortens_last_block_to_hit_target():
    planned = plan_regularization(TODAY, worked_minutes=150 * 60, occupied=set())

    assert [(p.day, p.segment) for p in planned] == [
        (date(2025, 3, 3), 0),
        (date(2025, 3, 3), 1),
        (date(2025, 3, 4), 0),
    ]
    assert planned[-1].check_out == datetime(2025, 3, 4, 11, 0)
    assert sum(p.minutes for p in planned) == 10 * 60


def test_plan_falls_back_to_saturdays():
    # Six weekdays give 48h; the rest comes from Saturday the 1st
    planned = plan_regularization(TODAY, worked_minutes=110 * 60, occupied=set())

    assert planned[-1].day == date(2025, 3, 1)
    assert planned[-1].check_in == datetime(2025, 3, 1, 11, 0)
    assert planned[-1].check_out == datetime(2025, 3, 1, 13, 0)


def test_plan_when_slots_run_out():
    planned = plan_regularization(TODAY, worked_minutes=0, occupied=set())

    # 6 weekdays x 2 blocks + 2 Saturdays, 54 hours in total
    assert len(planned) == 14
    assert sum(p.minutes for p in planned) == 54 * 60


def test_plan_nothing_when_target_reached():
    assert plan_regularization(TODAY, worked_minutes=160 * 60, occupied=set()) == []
    assert plan_regularization(TODAY, worked_minutes=170 * 60, occupied=set()) == []


def test_auto_regularize_caps_month_at_target(db, admin, employee):
    db.add(TimeEntry(
        user_id=employee.id,
        company_id=employee.company_id,
        date=date(2025, 3, 3),
        segment=0,
        check_in_time=datetime(2025, 3, 3, 9, 0),
        check_out_time=datetime(2025, 3, 3, 17, 0),
        total_hours="158:30:00",
        status=EntryStatus.CHECKED_OUT
    ))
    db.commit()

    result = AttendanceService(db).auto_regularize(employee.id, admin, today=TODAY)

    assert result["worked_hours"] == 158.5
    assert result["added_hours"] == 1.5
    assert result["total_hours"] == 160
    assert len(result["entries"]) == 1

    entry = result["entries"][0]
    assert entry.date == date(2025, 3, 4)
    assert entry.total_hours == "01:30:00"
    assert entry.notes == AUTO_REGULARIZED_NOTE
    assert entry.status == EntryStatus.CHECKED_OUT

    entries = db.query(TimeEntry).filter(TimeEntry.user_id == employee.id).all()
    assert all(e.date <= TODAY and e.date.weekday() != 6 for e in entries)


def test_auto_regularize_requires_same_company(db, make_company, make_profile, admin):
    outsider = make_profile(Role.EMPLOYEE, make_company("Other"))

    with pytest.raises(InsufficientPermissionsError):
        AttendanceService(db).auto_regularize(outsider.id, admin, today=TODAY)
