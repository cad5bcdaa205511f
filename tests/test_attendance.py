from datetime import date, datetime, time, timedelta

import pytest

from timekeeper.attendance.models import EntryStatus, TimeEntry
from timekeeper.attendance.service import AttendanceService, MANUAL_REGULARIZED_NOTE
from timekeeper.core.exceptions import AttendanceStateError, ResourceAlreadyExistsError, ValidationError
from timekeeper.vacations.models import RequestStatus, VacationRequest

MORNING = datetime(2025, 6, 16, 9, 0)


def test_check_in_then_out_records_duration(db, employee):
    service = AttendanceService(db)

    entry = service.check_in(employee, latitude=40.4168, longitude=-3.7038, now=MORNING)
    assert entry.status == EntryStatus.CHECKED_IN
    assert entry.check_in_latitude == pytest.approx(40.4168)

    closed = service.check_out(employee, now=datetime(2025, 6, 16, 17, 45, 30))
    assert closed.id == entry.id
    assert closed.status == EntryStatus.CHECKED_OUT
    assert closed.total_hours == "08:45:30"
    assert closed.check_out_latitude is None


def test_second_check_in_same_day_is_rejected(db, employee):
    service = AttendanceService(db)
    service.check_in(employee, now=MORNING)
    service.check_out(employee, now=datetime(2025, 6, 16, 13, 0))

    with pytest.raises(AttendanceStateError):
        service.check_in(employee, now=datetime(2025, 6, 16, 15, 0))


def test_check_out_without_open_entry_is_rejected(db, employee):
    with pytest.raises(AttendanceStateError):
        AttendanceService(db).check_out(employee, now=MORNING)


def test_today_state(db, employee):
    service = AttendanceService(db)
    today = MORNING.date()

    assert service.get_today_state(employee, today=today)["status"] == "not_started"
    service.check_in(employee, now=MORNING)
    state = service.get_today_state(employee, today=today)
    assert state["status"] == "checked_in"
    assert len(state["entries"]) == 1


def test_manual_regularization_upserts_entry(db, admin, employee):
    service = AttendanceService(db)
    day = date(2025, 6, 13)

    service.regularize_day(employee.id, day, time(9, 0), time(13, 0), admin, today=date(2025, 6, 16))
    entry = service.regularize_day(employee.id, day, time(8, 0), time(16, 30), admin, today=date(2025, 6, 16))

    assert db.query(TimeEntry).filter(TimeEntry.user_id == employee.id).count() == 1
    assert entry.total_hours == "08:30:00"
    assert entry.notes == MANUAL_REGULARIZED_NOTE


@pytest.mark.parametrize("day,check_in,check_out", [
    (date(2025, 6, 20), time(9, 0), time(17, 0)),
    (date(2025, 6, 13), time(17, 0), time(9, 0)),
])
def test_manual_regularization_validation(db, admin, employee, day, check_in, check_out):
    with pytest.raises(ValidationError):
        AttendanceService(db).regularize_day(employee.id, day, check_in, check_out, admin, today=date(2025, 6, 16))


def test_working_hours_summary_excludes_vacation_days(db, admin, employee):
    service = AttendanceService(db)
    # Monday 2 June to Friday 13 June 2025: ten working days
    service.regularize_day(employee.id, date(2025, 6, 2), time(9, 0), time(17, 30), admin, today=date(2025, 6, 16))
    db.add(VacationRequest(
        user_id=employee.id,
        company_id=employee.company_id,
        start_date=date(2025, 6, 6),
        end_date=date(2025, 6, 9),
        total_days=4,
        status=RequestStatus.APPROVED
    ))
    db.commit()

    summary = service.working_hours_summary(employee.id, date(2025, 6, 2), date(2025, 6, 13), admin)

    assert summary["total_hours"] == 8.5
    assert summary["working_days"] == 10
    assert summary["vacation_days"] == 2
    assert summary["effective_working_days"] == 8
    assert summary["expected_hours"] == 64


def test_check_in_endpoint(client, employee, auth_headers):
    headers = auth_headers(employee)

    first = client.post("/api/v1/attendance/check-in", headers=headers)
    second = client.post("/api/v1/attendance/check-in", headers=headers)

    assert first.status_code == 201
    assert first.json()["status"] == "checked_in"
    assert second.status_code == 409
    assert second.json()["error_code"] == "ATTENDANCE_STATE_ERROR"

    today = client.get("/api/v1/attendance/today", headers=headers)
    assert today.json()["status"] == "checked_in"


def test_endpoints_require_a_token(client, db):
    response = client.get("/api/v1/attendance/today")

    assert response.status_code == 401


def test_second_entry_for_same_day_hits_unique_constraint(db, employee):
    service = AttendanceService(db)
    service.check_in(employee, now=MORNING)

    db.add(TimeEntry(
        user_id=employee.id, company_id=employee.company_id, date=MORNING.date(), segment=0,
        check_in_time=datetime(2025, 6, 16, 9, 0, 1), status=EntryStatus.CHECKED_IN
    ))
    with pytest.raises(ResourceAlreadyExistsError) as exc_info:
        service.safe_commit("Error recording check-in", resource_type="TimeEntry")

    assert exc_info.value.status_code == 409
    assert db.query(TimeEntry).filter(TimeEntry.user_id == employee.id).count() == 1


def test_admin_edit_normalizes_offset_aware_times(db, admin, employee):
    service = AttendanceService(db)
    entry = service.check_in(employee, now=MORNING)

    edited = service.update_entry(
        entry.id, {"check_out_time": datetime(2025, 6, 16, 17, 0).astimezone()}, admin
    )

    assert edited.check_out_time == datetime(2025, 6, 16, 17, 0)
    assert edited.total_hours == "08:00:00"
    assert edited.status == EntryStatus.CHECKED_OUT


def test_admin_edit_cannot_move_times_to_another_day(db, admin, employee):
    service = AttendanceService(db)
    entry = service.check_in(employee, now=MORNING)

    with pytest.raises(ValidationError):
        service.update_entry(entry.id, {"check_out_time": datetime(2025, 6, 17, 1, 0)}, admin)


def test_edit_endpoint_rejects_utc_time_on_other_day(client, admin, employee, auth_headers):
    entry = client.post("/api/v1/attendance/check-in", headers=auth_headers(employee)).json()
    later = date.fromisoformat(entry["date"]) + timedelta(days=3)

    response = client.put(
        f"/api/v1/attendance/entries/{entry['id']}",
        json={"check_out_time": f"{later.isoformat()}T23:59:00Z"},
        headers=auth_headers(admin)
    )

    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"
