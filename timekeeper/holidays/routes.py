from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from pydantic import BaseModel
import datetime as dt
from timekeeper.core.dependencies import get_current_user
from timekeeper.core.exceptions import ValidationError
from timekeeper.holidays.calendar import holidays_for_year, holidays_for_month

router = APIRouter(prefix="/holidays", tags=["holidays"])


class HolidayResponse(BaseModel):
    date: dt.date
    name: str
    type: str

    class Config:
        from_attributes = True


@router.get("/", response_model=List[HolidayResponse])
async def list_holidays(
    year: int = Query(..., ge=1900, le=2200),
    month: Optional[int] = Query(None),
    current_user=Depends(get_current_user)
):
    """Public holidays of a year, optionally narrowed to one month."""
    if month is None:
        return holidays_for_year(year)
    if month < 1 or month > 12:
        raise ValidationError("Month must be between 1 and 12", field="month", value=month)
    return holidays_for_month(year, month)
