from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from timekeeper.core.database import get_db
from timekeeper.core.dependencies import get_current_user, get_current_admin_user
from timekeeper.employees.models import Profile
from timekeeper.vacations.models import RequestStatus
from timekeeper.vacations.periods import period_bounds
from timekeeper.vacations.schemas import (
    VacationRequestCreate,
    VacationRequestUpdate,
    VacationRequestResponse,
    VacationRequestCreated,
    OverAllocationWarning,
    RequestDecision,
    VacationBalanceResponse,
    VacationBalanceUpdate,
    VacationPeriodResponse
)
from timekeeper.vacations.service import VacationService

router = APIRouter(prefix="/vacations", tags=["vacations"])


@router.post("/requests", response_model=VacationRequestCreated, status_code=status.HTTP_201_CREATED)
async def create_vacation_request(
    request_data: VacationRequestCreate,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Request vacation days; over-allocation is flagged, not refused."""
    request, warning = VacationService(db).create_request(
        current_user,
        request_data.start_date,
        request_data.end_date,
        request_data.reason
    )
    response = VacationRequestCreated.model_validate(request)
    if warning:
        response.warning = OverAllocationWarning(**warning)
    return response


@router.get("/requests", response_model=List[VacationRequestResponse])
async def list_vacation_requests(
    status_filter: Optional[RequestStatus] = Query(None, alias="status"),
    employee_id: Optional[UUID] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Own requests for employees, company requests for admins; newest first."""
    return VacationService(db).list_requests(current_user, status_filter, employee_id, skip, limit)


@router.get("/requests/{request_id}", response_model=VacationRequestResponse)
async def get_vacation_request(
    request_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return VacationService(db).get_request(request_id, current_user)


@router.put("/requests/{request_id}", response_model=VacationRequestResponse)
async def update_vacation_request(
    request_id: UUID,
    request_data: VacationRequestUpdate,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    update_data = request_data.model_dump(exclude_unset=True)
    return VacationService(db).update_request(request_id, update_data, current_user)


@router.post("/requests/{request_id}/decision", response_model=VacationRequestResponse)
async def decide_vacation_request(
    request_id: UUID,
    decision: RequestDecision,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Approve or reject a pending request (admin only)."""
    return VacationService(db).decide_request(request_id, decision.status, current_user, decision.comments)


@router.delete("/requests/{request_id}")
async def delete_vacation_request(
    request_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    VacationService(db).delete_request(request_id, current_user)
    return {"message": "Vacation request deleted successfully"}


@router.get("/balance", response_model=VacationBalanceResponse)
async def get_my_balance(
    year: Optional[int] = Query(None),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return VacationService(db).get_balance(current_user, year=year)


@router.get("/balance/{employee_id}", response_model=VacationBalanceResponse)
async def get_employee_balance(
    employee_id: UUID,
    year: Optional[int] = Query(None),
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    return VacationService(db).get_balance(current_user, employee_id=employee_id, year=year)


@router.put("/balance/{employee_id}", response_model=VacationBalanceResponse)
async def set_employee_balance(
    employee_id: UUID,
    balance_data: VacationBalanceUpdate,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Override an employee's allowance for a period (admin only)."""
    balance = VacationService(db).set_balance_total(
        employee_id, balance_data.year, balance_data.total_days, current_user
    )
    start, end = period_bounds(balance.year)
    return {
        "user_id": balance.user_id,
        "year": balance.year,
        "period_start": start,
        "period_end": end,
        "total_days": balance.total_days,
        "used_days": balance.used_days,
        "remaining_days": balance.remaining_days
    }


@router.get("/periods", response_model=List[VacationPeriodResponse])
async def get_active_periods(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """The current and next vacation periods."""
    return VacationService(db).active_periods()
