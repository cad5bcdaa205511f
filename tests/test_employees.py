from timekeeper.employees.models import Role


def test_admin_lists_only_own_company(client, admin, employee, make_company, make_profile, auth_headers):
    make_profile(Role.EMPLOYEE, make_company("Other"), full_name="Oscar Outsider")

    response = client.get("/api/v1/employees/", headers=auth_headers(admin))

    assert response.status_code == 200
    assert sorted(member["full_name"] for member in response.json()) == ["Ada Admin", "Eve Employee"]


def test_search_and_department_filters(client, admin, employee, auth_headers):
    headers = auth_headers(admin)

    by_name = client.get("/api/v1/employees/", params={"search": "eve"}, headers=headers).json()
    by_department = client.get("/api/v1/employees/", params={"department": "Sales"}, headers=headers).json()

    assert [member["id"] for member in by_name] == [str(employee.id)]
    assert [member["id"] for member in by_department] == [str(employee.id)]


def test_employee_sees_only_self(client, employee, admin, auth_headers):
    headers = auth_headers(employee)

    assert client.get(f"/api/v1/employees/{employee.id}", headers=headers).status_code == 200
    assert client.get(f"/api/v1/employees/{admin.id}", headers=headers).status_code == 404
    assert client.get("/api/v1/employees/", headers=headers).status_code == 403


def test_update_employee_validates_phone(client, admin, employee, auth_headers):
    headers = auth_headers(admin)

    ok = client.put(f"/api/v1/employees/{employee.id}", json={"phone": "+34 600 123 456"}, headers=headers)
    bad = client.put(f"/api/v1/employees/{employee.id}", json={"phone": "12"}, headers=headers)

    assert ok.status_code == 200
    assert bad.status_code == 422


def test_health_endpoint(client, db):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["database"] == "healthy"
    assert response.json()["cache"] == {"status": "unavailable"}
