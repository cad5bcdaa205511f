import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENABLE_REDIS_CACHE"] = "false"
os.environ["ENABLE_RATE_LIMITING"] = "false"
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-at-least-32-bytes!")

from datetime import date

import pytest
from fastapi.testclient import TestClient

from timekeeper.main import app
from timekeeper.core.database import Base, SessionLocal, engine
from timekeeper.core.security import create_access_token, get_password_hash
from timekeeper.auth.models import User
from timekeeper.companies.models import Company
from timekeeper.employees.models import Profile, Role

PASSWORD = "secret123"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def make_company(db):
    def _make(name="Acme", is_active=True):
        company = Company(name=name, is_active=is_active)
        db.add(company)
        db.commit()
        db.refresh(company)
        return company
    return _make


@pytest.fixture
def make_profile(db):
    counter = {"n": 0}

    def _make(role=Role.EMPLOYEE, company=None, hire_date=date(2020, 1, 15), **fields):
        counter["n"] += 1
        email = fields.pop("email", f"user{counter['n']}@example.com")
        user = User(email=email, password_hash=get_password_hash(PASSWORD))
        db.add(user)
        db.flush()
        profile = Profile(
            id=user.id,
            full_name=fields.pop("full_name", f"User {counter['n']}"),
            email=email,
            role=role.value if isinstance(role, Role) else role,
            company_id=company.id if company else None,
            hire_date=hire_date,
            employee_id=fields.pop("employee_id", f"E{counter['n']:03d}"),
            **fields
        )
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile
    return _make


@pytest.fixture
def company(make_company):
    return make_company()


@pytest.fixture
def admin(make_profile, company):
    return make_profile(Role.ADMIN, company, full_name="Ada Admin")


@pytest.fixture
def employee(make_profile, company):
    return make_profile(Role.EMPLOYEE, company, full_name="Eve Employee", department="Sales")


@pytest.fixture
def super_admin(make_profile):
    return make_profile(Role.SUPER_ADMIN, None, full_name="Sam Super")


@pytest.fixture
def auth_headers():
    def _headers(profile):
        token = create_access_token({"sub": str(profile.id)})
        return {"Authorization": f"Bearer {token}"}
    return _headers
