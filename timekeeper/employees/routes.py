from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from timekeeper.core.database import get_db
from timekeeper.core.dependencies import get_current_user, get_current_admin_user
from timekeeper.employees.models import Profile
from timekeeper.employees.schemas import EmployeeUpdate, EmployeeResponse
from timekeeper.employees.service import EmployeeService

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("/", response_model=List[EmployeeResponse])
async def get_employees(
    include_inactive: bool = Query(False),
    department: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Employees of the caller's company (all companies for super admins)."""
    return EmployeeService(db).list_employees(
        current_user,
        include_inactive=include_inactive,
        department=department,
        search=search,
        skip=skip,
        limit=limit
    )


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return EmployeeService(db).get_employee(employee_id, current_user)


@router.put("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: UUID,
    employee_data: EmployeeUpdate,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    update_data = employee_data.model_dump(exclude_unset=True)
    return EmployeeService(db).update_employee(employee_id, update_data, current_user)


@router.post("/{employee_id}/deactivate", response_model=EmployeeResponse)
async def deactivate_employee(
    employee_id: UUID,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Block sign-in while keeping the employee's history."""
    return EmployeeService(db).deactivate_employee(employee_id, current_user)
