from datetime import date, datetime, time

from timekeeper.attendance.models import EntryStatus, TimeEntry
from timekeeper.employees.models import Role
from timekeeper.notifications.models import Notification, NotificationType
from timekeeper.notifications.service import NotificationService
from timekeeper.schedule_changes.service import ScheduleChangeService
from timekeeper.vacations.models import RequestStatus


def test_schedule_change_snapshots_current_times(db, admin, employee):
    db.add(TimeEntry(
        user_id=employee.id, company_id=employee.company_id, date=date(2025, 6, 2), segment=0,
        check_in_time=datetime(2025, 6, 2, 9, 15), check_out_time=datetime(2025, 6, 2, 17, 5),
        total_hours="07:50:00", status=EntryStatus.CHECKED_OUT
    ))
    db.commit()
    service = ScheduleChangeService(db)

    request = service.create_request(employee, date(2025, 6, 2), time(8, 0), time(16, 0), "Early shift")
    without_entry = service.create_request(employee, date(2025, 6, 3), time(8, 0), time(16, 0), "Early shift")

    assert request.current_check_in == time(9, 15)
    assert request.current_check_out == time(17, 5)
    assert without_entry.current_check_in is None
    assert request.status == RequestStatus.PENDING

    decided = service.decide_request(request.id, RequestStatus.APPROVED, admin, comments="Fine")
    assert decided.admin_comments == "Fine"
    assert decided.approved_by == admin.id


def test_company_admins_are_notified_only_within_company(db, admin, employee, make_company, make_profile):
    other_admin = make_profile(Role.ADMIN, make_company("Other"))

    ScheduleChangeService(db).create_request(employee, date(2025, 6, 2), time(8, 0), time(16, 0), "Early")

    assert db.query(Notification).filter(Notification.user_id == admin.id).count() == 1
    assert db.query(Notification).filter(Notification.user_id == other_admin.id).count() == 0


def test_legacy_rows_notify_super_admins(db, super_admin, make_profile):
    legacy = make_profile(Role.EMPLOYEE, None)

    recipients = NotificationService(db).notify_company_admins(
        None, "Title", "Message", NotificationType.VACATION, exclude_id=legacy.id
    )

    assert recipients == [super_admin.id]


def test_inbox_endpoints(client, db, employee, auth_headers):
    service = NotificationService(db)
    first = service.notify(employee.id, "One", "First", NotificationType.VACATION)
    service.notify(employee.id, "Two", "Second", NotificationType.EXTRA_HOURS)
    db.commit()
    headers = auth_headers(employee)

    assert client.get("/api/v1/notifications/unread-count", headers=headers).json() == {"unread": 2}

    read = client.post(f"/api/v1/notifications/{first.id}/read", headers=headers)
    assert read.status_code == 200
    assert read.json()["is_read"] is True
    assert client.get("/api/v1/notifications/unread-count", headers=headers).json() == {"unread": 1}

    assert client.post("/api/v1/notifications/read-all", headers=headers).json() == {"updated": 1}
    assert len(client.get("/api/v1/notifications/", headers=headers).json()) == 2


def test_other_users_notifications_are_hidden(client, db, admin, employee, auth_headers):
    notification = NotificationService(db).notify(admin.id, "Private", "Admin only", NotificationType.VACATION)
    db.commit()

    response = client.post(f"/api/v1/notifications/{notification.id}/read", headers=auth_headers(employee))

    assert response.status_code == 404
