from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from timekeeper.core.database import get_db
from timekeeper.core.dependencies import get_current_user, get_current_admin_user
from timekeeper.employees.models import Profile
from timekeeper.payrolls.schemas import PayrollCreate, PayrollUpdate, PayrollResponse
from timekeeper.payrolls.service import PayrollService

router = APIRouter(prefix="/payrolls", tags=["payrolls"])


@router.post("/", response_model=PayrollResponse, status_code=status.HTTP_201_CREATED)
async def create_payroll(
    payroll_data: PayrollCreate,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Create a payroll record."""
    return PayrollService(db).create_record(payroll_data.model_dump(), current_user)


@router.get("/", response_model=List[PayrollResponse])
async def list_payrolls(
    employee_id: Optional[UUID] = Query(None),
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Own payslips for employees, company payroll for admins."""
    return PayrollService(db).list_records(current_user, employee_id, year, month, skip, limit)


@router.get("/{payroll_id}", response_model=PayrollResponse)
async def get_payroll(
    payroll_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return PayrollService(db).get_record(payroll_id, current_user)


@router.put("/{payroll_id}", response_model=PayrollResponse)
async def update_payroll(
    payroll_id: UUID,
    payroll_data: PayrollUpdate,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    update_data = payroll_data.model_dump(exclude_unset=True)
    return PayrollService(db).update_record(payroll_id, update_data, current_user)


@router.delete("/{payroll_id}")
async def delete_payroll(
    payroll_id: UUID,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    PayrollService(db).delete_record(payroll_id, current_user)
    return {"message": "Payroll record deleted successfully"}


@router.post("/{payroll_id}/document", response_model=PayrollResponse)
async def upload_payroll_document(
    payroll_id: UUID,
    file: UploadFile = File(...),
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Attach the payslip document (admin only)."""
    return await PayrollService(db).upload_document(payroll_id, file, current_user)


@router.get("/{payroll_id}/document")
async def download_payroll_document(
    payroll_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    path, filename = PayrollService(db).get_document_path(payroll_id, current_user)
    return FileResponse(path, filename=filename)
