from pydantic import BaseModel, Field
from typing import Optional, List
import datetime as dt
from datetime import datetime, date, time
from uuid import UUID
from timekeeper.attendance.models import EntryStatus


class LocationPayload(BaseModel):
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class TimeEntryResponse(BaseModel):
    id: UUID
    user_id: UUID
    company_id: Optional[UUID] = None
    date: dt.date
    segment: int
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    check_in_latitude: Optional[float] = None
    check_in_longitude: Optional[float] = None
    check_out_latitude: Optional[float] = None
    check_out_longitude: Optional[float] = None
    total_hours: Optional[str] = None
    status: EntryStatus
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class TodayStateResponse(BaseModel):
    date: dt.date
    status: str  # not_started, checked_in, checked_out
    entries: List[TimeEntryResponse]


class TimeEntryUpdate(BaseModel):
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    notes: Optional[str] = None


class ManualRegularizationRequest(BaseModel):
    employee_id: UUID
    date: dt.date
    check_in: time
    check_out: time
    notes: Optional[str] = None


class AutoRegularizationRequest(BaseModel):
    employee_id: UUID


class AutoRegularizationResponse(BaseModel):
    employee_id: UUID
    worked_hours: float
    added_hours: float
    total_hours: float
    entries: List[TimeEntryResponse]


class WorkingHoursSummary(BaseModel):
    employee_id: UUID
    start_date: date
    end_date: date
    total_hours: float
    working_days: int
    vacation_days: int
    effective_working_days: int
    expected_hours: int
