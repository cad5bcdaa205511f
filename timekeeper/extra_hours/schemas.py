from pydantic import BaseModel, Field
from typing import Optional
import datetime as dt
from datetime import date, datetime
from uuid import UUID
from timekeeper.vacations.models import RequestStatus


class ExtraHourCreate(BaseModel):
    employee_id: UUID
    hours: float = Field(..., gt=0, allow_inf_nan=False)
    date: dt.date
    reason: Optional[str] = None


class ExtraHourResponse(BaseModel):
    id: UUID
    user_id: UUID
    company_id: Optional[UUID] = None
    hours: float
    date: dt.date
    reason: Optional[str] = None
    granted_by: Optional[UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CompensatoryDayCreate(BaseModel):
    employee_id: UUID
    date: dt.date
    days_count: int = 1
    reason: Optional[str] = None


class CompensatoryDayUpdate(BaseModel):
    date: Optional[dt.date] = None
    days_count: Optional[int] = None
    reason: Optional[str] = None


class CompensatoryDayResponse(BaseModel):
    id: UUID
    user_id: UUID
    company_id: Optional[UUID] = None
    date: dt.date
    days_count: int
    reason: Optional[str] = None
    granted_by: Optional[UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExtraHoursRequestCreate(BaseModel):
    hours_requested: float = Field(..., gt=0, allow_inf_nan=False)
    requested_date: date
    reason: Optional[str] = Field(None, max_length=1000)


class ExtraHoursRequestResponse(BaseModel):
    id: UUID
    user_id: UUID
    company_id: Optional[UUID] = None
    hours_requested: float
    requested_date: date
    reason: Optional[str] = None
    status: RequestStatus
    admin_comments: Optional[str] = None
    approved_by: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExtraHoursBalanceResponse(BaseModel):
    user_id: UUID
    earned: float
    compensatory_days: int
    compensatory_hours: float
    used: float
    available: float
    available_days: int
