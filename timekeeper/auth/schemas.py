from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import date
from uuid import UUID


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class CurrentUserResponse(BaseModel):
    id: UUID
    email: str
    full_name: str
    role: str
    department: Optional[str] = None
    employee_id: Optional[str] = None
    hire_date: Optional[date] = None
    company_id: Optional[UUID] = None
    is_active: bool

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshTokenRequest(BaseModel):
    refresh_token: str
