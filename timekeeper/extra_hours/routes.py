from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from timekeeper.core.database import get_db
from timekeeper.core.dependencies import get_current_user, get_current_admin_user
from timekeeper.employees.models import Profile
from timekeeper.vacations.models import RequestStatus
from timekeeper.vacations.schemas import RequestDecision
from timekeeper.extra_hours.schemas import (
    ExtraHourCreate,
    ExtraHourResponse,
    CompensatoryDayCreate,
    CompensatoryDayUpdate,
    CompensatoryDayResponse,
    ExtraHoursRequestCreate,
    ExtraHoursRequestResponse,
    ExtraHoursBalanceResponse
)
from timekeeper.extra_hours.service import ExtraHoursService

router = APIRouter(prefix="/extra-hours", tags=["extra-hours"])


@router.get("/balance", response_model=ExtraHoursBalanceResponse)
async def get_my_balance(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ExtraHoursService(db).get_balance(current_user)


@router.get("/balance/{employee_id}", response_model=ExtraHoursBalanceResponse)
async def get_employee_balance(
    employee_id: UUID,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    return ExtraHoursService(db).get_balance_for(current_user, employee_id)


# Grants

@router.post("/grants", response_model=ExtraHourResponse, status_code=status.HTTP_201_CREATED)
async def grant_extra_hours(
    grant_data: ExtraHourCreate,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Credit hours to an employee (admin only)."""
    return ExtraHoursService(db).grant_hours(
        grant_data.employee_id, grant_data.hours, grant_data.date, current_user, grant_data.reason
    )


@router.get("/grants", response_model=List[ExtraHourResponse])
async def list_grants(
    employee_id: Optional[UUID] = Query(None),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ExtraHoursService(db).list_grants(current_user, employee_id)


@router.delete("/grants/{grant_id}")
async def delete_grant(
    grant_id: UUID,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    ExtraHoursService(db).delete_grant(grant_id, current_user)
    return {"message": "Extra hours deleted successfully"}


# Compensatory days

@router.post("/compensatory-days", response_model=CompensatoryDayResponse, status_code=status.HTTP_201_CREATED)
async def add_compensatory_day(
    day_data: CompensatoryDayCreate,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    return ExtraHoursService(db).add_compensatory_day(
        day_data.employee_id, day_data.date, current_user, day_data.days_count, day_data.reason
    )


@router.get("/compensatory-days", response_model=List[CompensatoryDayResponse])
async def list_compensatory_days(
    employee_id: Optional[UUID] = Query(None),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ExtraHoursService(db).list_compensatory_days(current_user, employee_id)


@router.put("/compensatory-days/{day_id}", response_model=CompensatoryDayResponse)
async def update_compensatory_day(
    day_id: UUID,
    day_data: CompensatoryDayUpdate,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    update_data = day_data.model_dump(exclude_unset=True)
    return ExtraHoursService(db).update_compensatory_day(day_id, update_data, current_user)


@router.delete("/compensatory-days/{day_id}")
async def delete_compensatory_day(
    day_id: UUID,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    ExtraHoursService(db).delete_compensatory_day(day_id, current_user)
    return {"message": "Compensatory day deleted successfully"}


# Usage requests

@router.post("/requests", response_model=ExtraHoursRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_extra_hours_request(
    request_data: ExtraHoursRequestCreate,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Ask to take banked hours on a future day."""
    return ExtraHoursService(db).create_request(
        current_user, request_data.hours_requested, request_data.requested_date, request_data.reason
    )


@router.get("/requests", response_model=List[ExtraHoursRequestResponse])
async def list_extra_hours_requests(
    status_filter: Optional[RequestStatus] = Query(None, alias="status"),
    employee_id: Optional[UUID] = Query(None),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ExtraHoursService(db).list_requests(current_user, status_filter, employee_id)


@router.post("/requests/{request_id}/decision", response_model=ExtraHoursRequestResponse)
async def decide_extra_hours_request(
    request_id: UUID,
    decision: RequestDecision,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Approve or reject a pending request (admin only)."""
    return ExtraHoursService(db).decide_request(request_id, decision.status, current_user, decision.comments)


@router.delete("/requests/{request_id}")
async def delete_extra_hours_request(
    request_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ExtraHoursService(db).delete_request(request_id, current_user)
    return {"message": "Extra hours request deleted successfully"}
