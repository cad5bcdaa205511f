from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
from timekeeper.core.database import get_db
from timekeeper.core.dependencies import get_current_super_admin
from timekeeper.employees.models import Profile
from timekeeper.employees.schemas import EmployeeResponse
from timekeeper.companies.schemas import CompanyCreate, CompanyUpdate, CompanyResponse, CompanyAdminCreate
from timekeeper.companies.service import CompanyService

router = APIRouter(prefix="/companies", tags=["companies"])


@router.post("/", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(
    company_data: CompanyCreate,
    current_user: Profile = Depends(get_current_super_admin),
    db: Session = Depends(get_db)
):
    return CompanyService(db).create_company(company_data.model_dump())


@router.get("/", response_model=List[CompanyResponse])
async def list_companies(
    include_inactive: bool = Query(True),
    current_user: Profile = Depends(get_current_super_admin),
    db: Session = Depends(get_db)
):
    return CompanyService(db).list_companies(include_inactive)


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: UUID,
    current_user: Profile = Depends(get_current_super_admin),
    db: Session = Depends(get_db)
):
    return CompanyService(db).get_company(company_id)


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: UUID,
    company_data: CompanyUpdate,
    current_user: Profile = Depends(get_current_super_admin),
    db: Session = Depends(get_db)
):
    return CompanyService(db).update_company(company_id, company_data.model_dump(exclude_unset=True))


@router.post("/{company_id}/toggle-active", response_model=CompanyResponse)
async def toggle_company(
    company_id: UUID,
    current_user: Profile = Depends(get_current_super_admin),
    db: Session = Depends(get_db)
):
    return CompanyService(db).toggle_active(company_id)


@router.delete("/{company_id}")
async def delete_company(
    company_id: UUID,
    current_user: Profile = Depends(get_current_super_admin),
    db: Session = Depends(get_db)
):
    CompanyService(db).delete_company(company_id)
    return {"message": "Company deleted successfully"}


@router.get("/{company_id}/employees", response_model=List[EmployeeResponse])
async def list_company_employees(
    company_id: UUID,
    current_user: Profile = Depends(get_current_super_admin),
    db: Session = Depends(get_db)
):
    return CompanyService(db).list_company_employees(company_id)


@router.post("/{company_id}/admins", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_company_admin(
    company_id: UUID,
    admin_data: CompanyAdminCreate,
    current_user: Profile = Depends(get_current_super_admin),
    db: Session = Depends(get_db)
):
    """Create the administrator account of a company."""
    return CompanyService(db).create_company_admin(company_id, admin_data.model_dump(), current_user)
