from pydantic import BaseModel, Field
from typing import Dict
from uuid import UUID
from timekeeper.employees.schemas import EmployeeResponse


class CreateEmployeeResponse(BaseModel):
    success: bool
    employee: EmployeeResponse


class DeleteEmployeeRequest(BaseModel):
    employee_id: UUID


class DeleteEmployeeResponse(BaseModel):
    success: bool
    employee_id: UUID
    deleted: Dict[str, int]


class MigrateCompanyDataRequest(BaseModel):
    company_id: UUID = Field(..., alias="companyId")

    class Config:
        populate_by_name = True


class MigrateCompanyDataResponse(BaseModel):
    success: bool
    totalUpdated: int
    details: Dict[str, int]
