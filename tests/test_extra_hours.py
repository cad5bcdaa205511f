from datetime import date, timedelta

import pytest

from timekeeper.core.exceptions import InsufficientBalanceError, ValidationError
from timekeeper.extra_hours.service import ExtraHoursService
from timekeeper.vacations.models import RequestStatus

TODAY = date(2025, 6, 15)
TOMORROW = TODAY + timedelta(days=1)


def test_balance_combines_grants_compensatory_days_and_approved_usage(db, admin, employee):
    service = ExtraHoursService(db)
    service.grant_hours(employee.id, 6.5, TODAY, admin, reason="Inventory")
    service.add_compensatory_day(employee.id, TODAY, admin, days_count=2)

    request = service.create_request(employee, 4, TOMORROW, today=TODAY)
    service.decide_request(request.id, RequestStatus.APPROVED, admin)
    service.create_request(employee, 3, TOMORROW, today=TODAY)

    balance = service.get_balance(employee)

    assert balance["earned"] == 6.5
    assert balance["compensatory_days"] == 2
    assert balance["compensatory_hours"] == 16
    # Pending requests do not debit
    assert balance["used"] == 4
    assert balance["available"] == 18.5
    assert balance["available_days"] == 2


@pytest.mark.parametrize("hours,requested_date", [
    (0, TOMORROW),
    (-2, TOMORROW),
    (1, TODAY),
    (1, TODAY - timedelta(days=3)),
])
def test_invalid_requests_are_rejected(db, admin, employee, hours, requested_date):
    service = ExtraHoursService(db)
    service.grant_hours(employee.id, 10, TODAY, admin)

    with pytest.raises(ValidationError):
        service.create_request(employee, hours, requested_date, today=TODAY)


def test_request_above_available_is_rejected(db, admin, employee):
    service = ExtraHoursService(db)
    service.grant_hours(employee.id, 5, TODAY, admin)

    with pytest.raises(InsufficientBalanceError):
        service.create_request(employee, 5.5, TOMORROW, today=TODAY)


def test_approval_that_would_go_negative_is_blocked(db, admin, employee):
    service = ExtraHoursService(db)
    service.grant_hours(employee.id, 10, TODAY, admin)
    first = service.create_request(employee, 8, TOMORROW, today=TODAY)
    second = service.create_request(employee, 8, TOMORROW, today=TODAY)

    service.decide_request(first.id, RequestStatus.APPROVED, admin)

    with pytest.raises(InsufficientBalanceError):
        service.decide_request(second.id, RequestStatus.APPROVED, admin)
    assert service.get_balance(employee)["available"] == 2

    rejected = service.decide_request(second.id, RequestStatus.REJECTED, admin, comments="Not enough hours")
    assert rejected.status == RequestStatus.REJECTED
    assert rejected.admin_comments == "Not enough hours"
    assert service.get_balance(employee)["available"] == 2


def test_grant_requires_positive_hours(db, admin, employee):
    with pytest.raises(ValidationError):
        ExtraHoursService(db).grant_hours(employee.id, 0, TODAY, admin)


def test_compensatory_day_edit_and_delete(db, admin, employee):
    service = ExtraHoursService(db)
    day = service.add_compensatory_day(employee.id, TODAY, admin)

    service.update_compensatory_day(day.id, {"days_count": 3}, admin)
    assert service.get_balance(employee)["available"] == 24

    service.delete_compensatory_day(day.id, admin)
    assert service.get_balance(employee)["available"] == 0


def test_balance_endpoint(client, db, admin, employee, auth_headers):
    ExtraHoursService(db).grant_hours(employee.id, 12, TODAY, admin)

    response = client.get("/api/v1/extra-hours/balance", headers=auth_headers(employee))

    assert response.status_code == 200
    assert response.json()["available"] == 12
    assert response.json()["available_days"] == 1


@pytest.mark.parametrize("hours", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_hours_are_rejected(db, admin, employee, hours):
    service = ExtraHoursService(db)
    service.grant_hours(employee.id, 10, TODAY, admin)

    with pytest.raises(ValidationError):
        service.grant_hours(employee.id, hours, TODAY, admin)
    with pytest.raises(ValidationError):
        service.create_request(employee, hours, TOMORROW, today=TODAY)

    assert service.get_balance(employee)["available"] == 10


def test_grant_endpoint_rejects_infinite_hours(client, admin, employee, auth_headers):
    headers = {**auth_headers(admin), "Content-Type": "application/json"}
    body = '{"employee_id": "%s", "hours": Infinity, "date": "%s"}' % (employee.id, TODAY.isoformat())

    response = client.post("/api/v1/extra-hours/grants", content=body, headers=headers)

    assert response.status_code == 422
    assert client.get("/api/v1/extra-hours/balance", headers=auth_headers(employee)).json()["available"] == 0
