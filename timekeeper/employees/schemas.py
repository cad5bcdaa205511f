from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import date, datetime
from uuid import UUID


class EmployeeCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str
    role: str = "employee"
    department: Optional[str] = None
    employee_id: Optional[str] = None
    phone: Optional[str] = None
    hire_date: Optional[date] = None
    company_id: Optional[UUID] = None


class EmployeeUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    department: Optional[str] = None
    employee_id: Optional[str] = None
    phone: Optional[str] = None
    hire_date: Optional[date] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None


class EmployeeResponse(BaseModel):
    id: UUID
    full_name: str
    email: str
    role: str
    department: Optional[str] = None
    employee_id: Optional[str] = None
    phone: Optional[str] = None
    hire_date: Optional[date] = None
    company_id: Optional[UUID] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
