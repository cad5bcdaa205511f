from datetime import date

import pytest

from timekeeper.companies.service import CompanyService
from timekeeper.core.exceptions import ResourceInactiveError
from timekeeper.employees.models import Role
from timekeeper.vacations.models import RequestStatus, VacationRequest


def test_company_crud(client, super_admin, auth_headers):
    headers = auth_headers(super_admin)

    created = client.post(
        "/api/v1/companies/",
        json={"name": "Globex", "contact_email": "hr@globex.example"},
        headers=headers
    )
    assert created.status_code == 201
    company_id = created.json()["id"]
    assert created.json()["is_active"] is True

    renamed = client.put(f"/api/v1/companies/{company_id}", json={"name": "Globex Corp"}, headers=headers)
    assert renamed.json()["name"] == "Globex Corp"

    toggled = client.post(f"/api/v1/companies/{company_id}/toggle-active", headers=headers)
    assert toggled.json()["is_active"] is False

    names = [company["name"] for company in client.get("/api/v1/companies/", headers=headers).json()]
    assert "Globex Corp" in names

    assert client.delete(f"/api/v1/companies/{company_id}", headers=headers).status_code == 200
    assert client.get(f"/api/v1/companies/{company_id}", headers=headers).status_code == 404


def test_company_routes_require_super_admin(client, admin, auth_headers):
    response = client.get("/api/v1/companies/", headers=auth_headers(admin))

    assert response.status_code == 403


def test_create_company_admin(client, super_admin, company, auth_headers):
    response = client.post(
        f"/api/v1/companies/{company.id}/admins",
        json={"full_name": "Carla Chief", "email": "carla@example.com", "password": "s3cret!"},
        headers=auth_headers(super_admin)
    )

    assert response.status_code == 201
    assert response.json()["role"] == "admin"
    assert response.json()["company_id"] == str(company.id)

    staff = client.get(f"/api/v1/companies/{company.id}/employees", headers=auth_headers(super_admin)).json()
    assert [member["email"] for member in staff] == ["carla@example.com"]


def test_inactive_company_cannot_get_admins(db, super_admin, make_company):
    dormant = make_company("Dormant", is_active=False)

    with pytest.raises(ResourceInactiveError):
        CompanyService(db).create_company_admin(
            dormant.id,
            {"full_name": "Dan", "email": "dan@example.com", "password": "abcdef"},
            super_admin
        )


def test_company_with_employees_cannot_be_deleted(client, super_admin, employee, company, auth_headers):
    response = client.delete(f"/api/v1/companies/{company.id}", headers=auth_headers(super_admin))

    assert response.status_code == 422


def test_migration_only_touches_rows_without_company(db, super_admin, make_company, make_profile):
    first = make_company("First")
    second = make_company("Second")
    member = make_profile(Role.EMPLOYEE, first)
    db.add_all([
        VacationRequest(user_id=member.id, company_id=first.id, start_date=date(2025, 7, 1),
                        end_date=date(2025, 7, 1), total_days=1, status=RequestStatus.PENDING),
        VacationRequest(user_id=member.id, company_id=None, start_date=date(2025, 8, 1),
                        end_date=date(2025, 8, 1), total_days=1, status=RequestStatus.PENDING),
    ])
    db.commit()

    result = CompanyService(db).migrate_company_data(second.id)

    assert result["details"]["vacation_requests"] == 1
    assert result["totalUpdated"] == 1
    owners = {request.start_date: request.company_id for request in db.query(VacationRequest).all()}
    assert owners == {date(2025, 7, 1): first.id, date(2025, 8, 1): second.id}
