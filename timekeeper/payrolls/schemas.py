from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from timekeeper.payrolls.models import PayrollStatus


class PayrollCreate(BaseModel):
    employee_id: UUID
    month: int = Field(..., ge=1, le=12)
    year: int
    base_salary: Decimal = Field(..., ge=0)
    overtime_hours: Decimal = Field(Decimal("0"), ge=0)
    overtime_rate: Decimal = Field(Decimal("0"), ge=0)
    deductions: Decimal = Field(Decimal("0"), ge=0)
    bonuses: Decimal = Field(Decimal("0"), ge=0)


class PayrollUpdate(BaseModel):
    base_salary: Optional[Decimal] = None
    overtime_hours: Optional[Decimal] = None
    overtime_rate: Optional[Decimal] = None
    deductions: Optional[Decimal] = None
    bonuses: Optional[Decimal] = None
    status: Optional[PayrollStatus] = None


class PayrollResponse(BaseModel):
    id: UUID
    user_id: UUID
    company_id: Optional[UUID] = None
    month: int
    year: int
    base_salary: Decimal
    overtime_hours: Decimal
    overtime_rate: Decimal
    deductions: Decimal
    bonuses: Decimal
    net_salary: Decimal
    status: PayrollStatus
    file_url: Optional[str] = None
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
