from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from uuid import UUID
from timekeeper.core.database import get_db
from timekeeper.core.dependencies import get_current_user, get_current_admin_user
from timekeeper.employees.models import Profile
from timekeeper.attendance.schemas import (
    LocationPayload,
    TimeEntryResponse,
    TodayStateResponse,
    TimeEntryUpdate,
    ManualRegularizationRequest,
    AutoRegularizationRequest,
    AutoRegularizationResponse,
    WorkingHoursSummary
)
from timekeeper.attendance.service import AttendanceService

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post("/check-in", response_model=TimeEntryResponse, status_code=status.HTTP_201_CREATED)
async def check_in(
    location: Optional[LocationPayload] = None,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Clock in for today."""
    location = location or LocationPayload()
    return AttendanceService(db).check_in(current_user, location.latitude, location.longitude)


@router.post("/check-out", response_model=TimeEntryResponse)
async def check_out(
    location: Optional[LocationPayload] = None,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Clock out of the open entry."""
    location = location or LocationPayload()
    return AttendanceService(db).check_out(current_user, location.latitude, location.longitude)


@router.get("/today", response_model=TodayStateResponse)
async def get_today_state(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Today's clock state; polled by clients."""
    return AttendanceService(db).get_today_state(current_user)


@router.get("/entries", response_model=List[TimeEntryResponse])
async def list_entries(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    employee_id: Optional[UUID] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Time entries visible to the caller, newest first."""
    return AttendanceService(db).list_entries(
        current_user,
        start_date=start_date,
        end_date=end_date,
        employee_id=employee_id,
        skip=skip,
        limit=limit
    )


@router.get("/summary", response_model=WorkingHoursSummary)
async def get_working_hours_summary(
    start_date: date = Query(...),
    end_date: date = Query(...),
    employee_id: Optional[UUID] = Query(None),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Worked versus expected hours for a date range."""
    return AttendanceService(db).working_hours_summary(employee_id, start_date, end_date, current_user)


@router.get("/entries/{entry_id}", response_model=TimeEntryResponse)
async def get_entry(
    entry_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return AttendanceService(db).get_entry(entry_id, current_user)


@router.put("/entries/{entry_id}", response_model=TimeEntryResponse)
async def update_entry(
    entry_id: UUID,
    entry_data: TimeEntryUpdate,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Correct an entry's times or notes (admin only)."""
    update_data = entry_data.model_dump(exclude_unset=True)
    return AttendanceService(db).update_entry(entry_id, update_data, current_user)


@router.delete("/entries/{entry_id}")
async def delete_entry(
    entry_id: UUID,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Delete an entry (admin only)."""
    AttendanceService(db).delete_entry(entry_id, current_user)
    return {"message": "Time entry deleted successfully"}


@router.post("/regularize", response_model=TimeEntryResponse)
async def regularize_day(
    request: ManualRegularizationRequest,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Record explicit times for an employee's past or current day."""
    return AttendanceService(db).regularize_day(
        request.employee_id,
        request.date,
        request.check_in,
        request.check_out,
        current_user,
        notes=request.notes
    )


@router.post("/auto-regularize", response_model=AutoRegularizationResponse)
async def auto_regularize(
    request: AutoRegularizationRequest,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Fill this month's free days up to the monthly hours target."""
    return AttendanceService(db).auto_regularize(request.employee_id, current_user)
