from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime, time
from uuid import UUID
from timekeeper.vacations.models import RequestStatus


class ScheduleChangeCreate(BaseModel):
    requested_date: date
    requested_check_in: time
    requested_check_out: time
    reason: str = Field(..., min_length=1, max_length=1000)


class ScheduleChangeResponse(BaseModel):
    id: UUID
    user_id: UUID
    company_id: Optional[UUID] = None
    requested_date: date
    current_check_in: Optional[time] = None
    current_check_out: Optional[time] = None
    requested_check_in: time
    requested_check_out: time
    reason: str
    status: RequestStatus
    admin_comments: Optional[str] = None
    approved_by: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
