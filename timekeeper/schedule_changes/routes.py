from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID
from timekeeper.core.database import get_db
from timekeeper.core.dependencies import get_current_user, get_current_admin_user
from timekeeper.employees.models import Profile
from timekeeper.vacations.models import RequestStatus
from timekeeper.vacations.schemas import RequestDecision
from timekeeper.schedule_changes.schemas import ScheduleChangeCreate, ScheduleChangeResponse
from timekeeper.schedule_changes.service import ScheduleChangeService

router = APIRouter(prefix="/schedule-changes", tags=["schedule-changes"])


@router.post("/", response_model=ScheduleChangeResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule_change(
    change_data: ScheduleChangeCreate,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Request different hours for a day."""
    return ScheduleChangeService(db).create_request(
        current_user,
        change_data.requested_date,
        change_data.requested_check_in,
        change_data.requested_check_out,
        change_data.reason
    )


@router.get("/", response_model=List[ScheduleChangeResponse])
async def list_schedule_changes(
    status_filter: Optional[RequestStatus] = Query(None, alias="status"),
    employee_id: Optional[UUID] = Query(None),
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ScheduleChangeService(db).list_requests(current_user, status_filter, employee_id)


@router.get("/{request_id}", response_model=ScheduleChangeResponse)
async def get_schedule_change(
    request_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return ScheduleChangeService(db).get_request(request_id, current_user)


@router.post("/{request_id}/decision", response_model=ScheduleChangeResponse)
async def decide_schedule_change(
    request_id: UUID,
    decision: RequestDecision,
    current_user: Profile = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Approve or reject a pending request (admin only)."""
    return ScheduleChangeService(db).decide_request(request_id, decision.status, current_user, decision.comments)


@router.delete("/{request_id}")
async def delete_schedule_change(
    request_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    ScheduleChangeService(db).delete_request(request_id, current_user)
    return {"message": "Schedule change request deleted successfully"}
