from datetime import date, datetime

from timekeeper.attendance.models import EntryStatus, TimeEntry
from timekeeper.auth.models import User
from timekeeper.companies.service import MIGRATION_TABLES
from timekeeper.employees.models import Profile, Role
from timekeeper.extra_hours.models import ExtraHour
from timekeeper.notifications.models import Notification, NotificationType
from timekeeper.vacations.models import RequestStatus, VacationRequest


def _new_employee(**overrides):
    payload = {
        "full_name": "Nora New",
        "email": "nora@example.com",
        "password": "hunter22",
        "role": "employee",
        "department": "Support",
        "employee_id": "S-100",
    }
    payload.update(overrides)
    return payload


def test_admin_creates_employee_in_own_company(client, db, admin, make_company, auth_headers):
    other = make_company("Other")

    response = client.post(
        "/api/v1/functions/create-employee",
        json=_new_employee(company_id=str(other.id)),
        headers=auth_headers(admin)
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["employee"]["company_id"] == str(admin.company_id)
    assert body["employee"]["role"] == "employee"

    login = client.post("/api/v1/auth/login", json={"email": "nora@example.com", "password": "hunter22"})
    assert login.status_code == 200
    assert login.json()["token_type"] == "bearer"


def test_create_employee_rejects_short_password(client, admin, auth_headers):
    response = client.post(
        "/api/v1/functions/create-employee",
        json=_new_employee(password="12345"),
        headers=auth_headers(admin)
    )

    assert response.status_code == 422


def test_create_employee_rejects_duplicates(client, admin, employee, auth_headers):
    duplicate_email = client.post(
        "/api/v1/functions/create-employee",
        json=_new_employee(email=employee.email, employee_id="S-200"),
        headers=auth_headers(admin)
    )
    duplicate_code = client.post(
        "/api/v1/functions/create-employee",
        json=_new_employee(employee_id=employee.employee_id),
        headers=auth_headers(admin)
    )

    assert duplicate_email.status_code == 409
    assert duplicate_code.status_code == 409


def test_employees_cannot_create_employees(client, employee, auth_headers):
    response = client.post(
        "/api/v1/functions/create-employee",
        json=_new_employee(),
        headers=auth_headers(employee)
    )

    assert response.status_code == 403


def test_only_super_admin_grants_super_admin(client, admin, auth_headers):
    response = client.post(
        "/api/v1/functions/create-employee",
        json=_new_employee(role="super_admin"),
        headers=auth_headers(admin)
    )

    assert response.status_code == 403


def test_delete_employee_cascades(client, db, admin, employee, auth_headers):
    db.add_all([
        TimeEntry(
            user_id=employee.id, company_id=employee.company_id, date=date(2025, 6, 2), segment=0,
            check_in_time=datetime(2025, 6, 2, 9, 0), status=EntryStatus.CHECKED_IN
        ),
        VacationRequest(
            user_id=employee.id, company_id=employee.company_id, start_date=date(2025, 7, 1),
            end_date=date(2025, 7, 2), total_days=2, status=RequestStatus.PENDING
        ),
        ExtraHour(user_id=employee.id, company_id=employee.company_id, hours=3, date=date(2025, 6, 2), granted_by=admin.id),
        Notification(user_id=employee.id, title="Hi", message="Welcome", type=NotificationType.VACATION),
    ])
    db.commit()
    employee_id = employee.id

    response = client.post(
        "/api/v1/functions/delete-employee",
        json={"employee_id": str(employee_id)},
        headers=auth_headers(admin)
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["deleted"]["time_entries"] == 1
    assert body["deleted"]["vacation_requests"] == 1
    assert body["deleted"]["extra_hours"] == 1
    assert body["deleted"]["notifications"] == 1

    db.expire_all()
    assert db.get(Profile, employee_id) is None
    assert db.get(User, employee_id) is None
    assert db.query(TimeEntry).count() == 0


def test_admin_cannot_delete_self(client, admin, auth_headers):
    response = client.post(
        "/api/v1/functions/delete-employee",
        json={"employee_id": str(admin.id)},
        headers=auth_headers(admin)
    )

    assert response.status_code == 422


def test_admin_cannot_delete_other_company_employee(client, admin, make_company, make_profile, auth_headers):
    outsider = make_profile(Role.EMPLOYEE, make_company("Other"))

    response = client.post(
        "/api/v1/functions/delete-employee",
        json={"employee_id": str(outsider.id)},
        headers=auth_headers(admin)
    )

    assert response.status_code == 403


def test_migrate_company_data(client, db, super_admin, make_company, make_profile, auth_headers):
    legacy_user = make_profile(Role.EMPLOYEE, None)
    target = make_company("Target")
    db.add_all([
        TimeEntry(
            user_id=legacy_user.id, date=date(2025, 6, 2), segment=0,
            check_in_time=datetime(2025, 6, 2, 9, 0), status=EntryStatus.CHECKED_IN
        ),
        TimeEntry(
            user_id=legacy_user.id, date=date(2025, 6, 3), segment=0,
            check_in_time=datetime(2025, 6, 3, 9, 0), status=EntryStatus.CHECKED_IN
        ),
        Notification(user_id=legacy_user.id, title="Hi", message="Welcome", type=NotificationType.VACATION),
    ])
    db.commit()

    response = client.post(
        "/api/v1/functions/migrate-company-data",
        json={"companyId": str(target.id)},
        headers=auth_headers(super_admin)
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["totalUpdated"] == 3
    assert body["details"]["time_entries"] == 2
    assert body["details"]["notifications"] == 1
    assert set(body["details"]) == {name for name, _ in MIGRATION_TABLES}

    db.expire_all()
    assert db.query(TimeEntry).filter(TimeEntry.company_id.is_(None)).count() == 0


def test_migrate_requires_super_admin(client, admin, company, auth_headers):
    response = client.post(
        "/api/v1/functions/migrate-company-data",
        json={"companyId": str(company.id)},
        headers=auth_headers(admin)
    )

    assert response.status_code == 403
