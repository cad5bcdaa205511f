from decimal import Decimal

import pytest

from timekeeper.core.config import settings
from timekeeper.employees.models import Role
from timekeeper.payrolls.service import calculate_net_salary


def _payroll(employee, **overrides):
    payload = {
        "employee_id": str(employee.id),
        "month": 5,
        "year": 2025,
        "base_salary": "2000.00",
        "overtime_hours": "10",
        "overtime_rate": "15.50",
        "bonuses": "100",
        "deductions": "105",
    }
    payload.update(overrides)
    return payload


def test_calculate_net_salary():
    assert calculate_net_salary(Decimal("2000"), Decimal("10"), Decimal("15.5"), Decimal("100"), Decimal("105")) == Decimal("2150.00")
    assert calculate_net_salary(Decimal("1500"), deductions=Decimal("0.333")) == Decimal("1499.67")


def test_create_and_read_payroll(client, admin, employee, make_profile, company, auth_headers):
    created = client.post("/api/v1/payrolls/", json=_payroll(employee), headers=auth_headers(admin))

    assert created.status_code == 201
    body = created.json()
    assert Decimal(str(body["net_salary"])) == Decimal("2150")
    assert body["status"] == "draft"

    own = client.get(f"/api/v1/payrolls/{body['id']}", headers=auth_headers(employee))
    assert own.status_code == 200

    colleague = make_profile(Role.EMPLOYEE, company)
    hidden = client.get(f"/api/v1/payrolls/{body['id']}", headers=auth_headers(colleague))
    assert hidden.status_code == 404


def test_duplicate_month_is_rejected(client, admin, employee, auth_headers):
    client.post("/api/v1/payrolls/", json=_payroll(employee), headers=auth_headers(admin))
    duplicate = client.post("/api/v1/payrolls/", json=_payroll(employee), headers=auth_headers(admin))

    assert duplicate.status_code == 409
    assert "existing_id" in duplicate.json()["error_data"]


def test_update_recomputes_net_salary(client, admin, employee, auth_headers):
    created = client.post("/api/v1/payrolls/", json=_payroll(employee), headers=auth_headers(admin)).json()

    updated = client.put(
        f"/api/v1/payrolls/{created['id']}",
        json={"bonuses": "0", "status": "approved"},
        headers=auth_headers(admin)
    )

    assert updated.status_code == 200
    assert Decimal(str(updated.json()["net_salary"])) == Decimal("2050")
    assert updated.json()["status"] == "approved"


def test_document_upload_and_download(client, admin, employee, auth_headers, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path))
    created = client.post("/api/v1/payrolls/", json=_payroll(employee), headers=auth_headers(admin)).json()

    uploaded = client.post(
        f"/api/v1/payrolls/{created['id']}/document",
        files={"file": ("may.pdf", b"%PDF-1.4 payslip", "application/pdf")},
        headers=auth_headers(admin)
    )
    assert uploaded.status_code == 200
    assert uploaded.json()["file_url"].endswith(f"{created['id']}.pdf")
    assert (tmp_path / "payroll" / f"{created['id']}.pdf").exists()

    downloaded = client.get(f"/api/v1/payrolls/{created['id']}/document", headers=auth_headers(employee))
    assert downloaded.status_code == 200
    assert downloaded.content == b"%PDF-1.4 payslip"


def test_document_must_be_pdf(client, admin, employee, auth_headers, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path))
    created = client.post("/api/v1/payrolls/", json=_payroll(employee), headers=auth_headers(admin)).json()

    response = client.post(
        f"/api/v1/payrolls/{created['id']}/document",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers(admin)
    )

    assert response.status_code == 400
