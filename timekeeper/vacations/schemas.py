from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from uuid import UUID
from timekeeper.vacations.models import RequestStatus


class VacationRequestCreate(BaseModel):
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=1000)


class VacationRequestUpdate(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = Field(None, max_length=1000)
    comments: Optional[str] = None


class RequestDecision(BaseModel):
    status: RequestStatus
    comments: Optional[str] = None


class VacationRequestResponse(BaseModel):
    id: UUID
    user_id: UUID
    company_id: Optional[UUID] = None
    start_date: date
    end_date: date
    total_days: int
    status: RequestStatus
    reason: Optional[str] = None
    comments: Optional[str] = None
    approved_by: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OverAllocationWarning(BaseModel):
    code: str
    requested_days: int
    available_days: int


class VacationRequestCreated(VacationRequestResponse):
    warning: Optional[OverAllocationWarning] = None


class VacationBalanceResponse(BaseModel):
    user_id: UUID
    year: int
    period_start: date
    period_end: date
    total_days: int
    used_days: int
    remaining_days: int


class VacationBalanceUpdate(BaseModel):
    year: int
    total_days: int = Field(..., ge=0, le=366)


class VacationPeriodResponse(BaseModel):
    year: int
    period_start: date
    period_end: date
    is_current: bool
