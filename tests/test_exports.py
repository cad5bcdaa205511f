from datetime import date, datetime, time

from timekeeper.attendance.models import EntryStatus, TimeEntry
from timekeeper.exports.service import ATTENDANCE_HEADERS, render_csv
from timekeeper.schedule_changes.models import ScheduleChangeRequest
from timekeeper.vacations.models import RequestStatus, VacationRequest


def test_render_csv_quotes_every_cell():
    text = render_csv(["Name", "Note"], [["Ana", 'Said "hi"'], ["", "x,y"]])

    assert text.splitlines() == [
        '"Name","Note"',
        '"Ana","Said ""hi"""',
        '"","x,y"',
    ]


def test_attendance_export(client, db, admin, employee, auth_headers):
    db.add(TimeEntry(
        user_id=employee.id, company_id=employee.company_id, date=date(2025, 6, 2), segment=0,
        check_in_time=datetime(2025, 6, 2, 9, 0), check_in_latitude=40.5, check_in_longitude=-3.5,
        check_out_time=datetime(2025, 6, 2, 17, 0), total_hours="08:00:00", status=EntryStatus.CHECKED_OUT
    ))
    db.commit()

    response = client.get(
        "/api/v1/exports/attendance",
        params={"start_date": "2025-06-01", "end_date": "2025-06-30"},
        headers=auth_headers(admin)
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attendance_2025-06-01_2025-06-30.csv" in response.headers["content-disposition"]

    lines = response.text.splitlines()
    assert lines[0] == ",".join(f'"{header}"' for header in ATTENDANCE_HEADERS)
    assert lines[1] == (
        '"2025-06-02","Eve Employee","{code}","Sales","09:00:00","40.5, -3.5",'
        '"17:00:00","Not available","08:00:00","checked_out"'
    ).format(code=employee.employee_id)


def test_vacation_export_only_includes_requests_inside_range(client, db, admin, employee, auth_headers):
    db.add_all([
        VacationRequest(
            user_id=employee.id, company_id=employee.company_id, start_date=date(2025, 7, 1),
            end_date=date(2025, 7, 3), total_days=3, status=RequestStatus.APPROVED, reason='Trip "north"'
        ),
        VacationRequest(
            user_id=employee.id, company_id=employee.company_id, start_date=date(2025, 7, 30),
            end_date=date(2025, 8, 2), total_days=4, status=RequestStatus.PENDING
        ),
    ])
    db.commit()

    response = client.get(
        "/api/v1/exports/vacations",
        params={"start_date": "2025-07-01", "end_date": "2025-07-31"},
        headers=auth_headers(admin)
    )

    lines = response.text.splitlines()
    assert len(lines) == 2
    assert '"Trip ""north"""' in lines[1]
    assert '"2025-07-01","2025-07-03","3","approved"' in lines[1]


def test_schedule_change_export(client, db, admin, employee, auth_headers):
    db.add(ScheduleChangeRequest(
        user_id=employee.id, company_id=employee.company_id, requested_date=date(2025, 6, 4),
        requested_check_in=time(8, 0), requested_check_out=time(16, 0), reason="Doctor",
        status=RequestStatus.PENDING
    ))
    db.commit()

    response = client.get(
        "/api/v1/exports/schedule_changes",
        params={"start_date": "2025-06-01", "end_date": "2025-06-30"},
        headers=auth_headers(admin)
    )

    assert response.status_code == 200
    assert '"2025-06-04","","","08:00:00","16:00:00","Doctor","pending",""' in response.text


def test_export_rejects_unknown_kind_and_employees(client, admin, employee, auth_headers):
    params = {"start_date": "2025-06-01", "end_date": "2025-06-30"}

    unknown = client.get("/api/v1/exports/payroll", params=params, headers=auth_headers(admin))
    forbidden = client.get("/api/v1/exports/attendance", params=params, headers=auth_headers(employee))

    assert unknown.status_code == 422
    assert forbidden.status_code == 403
