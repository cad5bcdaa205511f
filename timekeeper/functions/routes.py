from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from timekeeper.core.database import get_db
from timekeeper.core.dependencies import get_current_admin_user, get_current_super_admin
from timekeeper.core.route_decorators import log_route_access
from timekeeper.employees.models import Profile
from timekeeper.employees.schemas import EmployeeCreate
from timekeeper.employees.service import EmployeeService
from timekeeper.companies.service import CompanyService
from timekeeper.functions.schemas import (
    CreateEmployeeResponse,
    DeleteEmployeeRequest,
    DeleteEmployeeResponse,
    MigrateCompanyDataRequest,
    MigrateCompanyDataResponse
)

router = APIRouter(prefix="/functions", tags=["functions"])


@router.post("/create-employee", response_model=CreateEmployeeResponse)
@log_route_access
async def create_employee(
    request: Request,
    payload: EmployeeCreate,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Create the sign-in identity and the profile of a new employee."""
    employee = EmployeeService(db).create_employee(payload.model_dump(), current_user)
    return {"success": True, "employee": employee}


@router.post("/delete-employee", response_model=DeleteEmployeeResponse)
@log_route_access
async def delete_employee(
    request: Request,
    payload: DeleteEmployeeRequest,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Delete an employee together with all of their records."""
    return EmployeeService(db).delete_employee(payload.employee_id, current_user)


@router.post("/migrate-company-data", response_model=MigrateCompanyDataResponse)
@log_route_access
async def migrate_company_data(
    request: Request,
    payload: MigrateCompanyDataRequest,
    current_user: Profile = Depends(get_current_super_admin),
    db: Session = Depends(get_db)
):
    """Attach every record without a company to the given company."""
    return CompanyService(db).migrate_company_data(payload.company_id)
