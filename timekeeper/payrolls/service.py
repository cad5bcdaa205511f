from typing import List, Optional, Dict, Any, Tuple
from decimal import Decimal
import os
import logging
from fastapi import UploadFile
from sqlalchemy.orm import Session
from timekeeper.payrolls.models import PayrollRecord, PayrollStatus
from timekeeper.employees.models import Profile
from timekeeper.core.service_base import BaseService
from timekeeper.core.exceptions import (
    FileTooLargeError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    ValidationError
)
from timekeeper.core.validators import validate_month, sanitize_filename
from timekeeper.core.config import settings

logger = logging.getLogger(__name__)

MONEY_FIELDS = ("base_salary", "overtime_hours", "overtime_rate", "deductions", "bonuses")


def calculate_net_salary(
    base_salary: Decimal,
    overtime_hours: Decimal = Decimal("0"),
    overtime_rate: Decimal = Decimal("0"),
    bonuses: Decimal = Decimal("0"),
    deductions: Decimal = Decimal("0")
) -> Decimal:
    """net = base + overtime hours x overtime rate + bonuses - deductions"""
    net = (
        Decimal(base_salary)
        + Decimal(overtime_hours or 0) * Decimal(overtime_rate or 0)
        + Decimal(bonuses or 0)
        - Decimal(deductions or 0)
    )
    return net.quantize(Decimal("0.01"))


class PayrollService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def create_record(self, payroll_data: Dict[str, Any], caller: Profile) -> PayrollRecord:
        """Create a monthly payroll record for an employee (admin)."""
        employee = self.get_employee_for_admin(payroll_data["employee_id"], caller)
        validate_month(payroll_data["month"], payroll_data["year"])
        for field in MONEY_FIELDS:
            if (payroll_data.get(field) or 0) < 0:
                raise ValidationError(f"{field} cannot be negative", field=field, value=str(payroll_data[field]))

        existing = self.db.query(PayrollRecord).filter(
            PayrollRecord.user_id == employee.id,
            PayrollRecord.month == payroll_data["month"],
            PayrollRecord.year == payroll_data["year"]
        ).first()
        if existing:
            raise ResourceAlreadyExistsError(
                "PayrollRecord",
                detail="Payroll already exists for this employee and month",
                error_data={"existing_id": str(existing.id)}
            )

        amounts = {field: Decimal(payroll_data.get(field) or 0) for field in MONEY_FIELDS}
        record = PayrollRecord(
            user_id=employee.id,
            company_id=employee.company_id,
            month=payroll_data["month"],
            year=payroll_data["year"],
            net_salary=calculate_net_salary(**amounts),
            status=PayrollStatus.DRAFT,
            created_by=caller.id,
            **amounts
        )
        self.db.add(record)
        self.safe_commit("Error creating payroll record", resource_type="PayrollRecord")
        self.db.refresh(record)

        self.log_service_action(
            "create_payroll", "PayrollRecord", str(record.id),
            {"user_id": str(employee.id), "month": record.month, "year": record.year}
        )
        return record

    def list_records(
        self,
        caller: Profile,
        employee_id=None,
        year: Optional[int] = None,
        month: Optional[int] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[PayrollRecord]:
        query = self.scope_to_caller(self.db.query(PayrollRecord), PayrollRecord, caller)
        if employee_id:
            query = query.filter(PayrollRecord.user_id == employee_id)
        if year:
            query = query.filter(PayrollRecord.year == year)
        if month:
            query = query.filter(PayrollRecord.month == month)

        query = query.order_by(PayrollRecord.year.desc(), PayrollRecord.month.desc())
        return self.paginate_query(query, skip, limit).all()

    def get_record(self, record_id, caller: Profile) -> PayrollRecord:
        record = self.get_or_404(PayrollRecord, record_id, "PayrollRecord")
        return self.ensure_visible(record, caller, "PayrollRecord")

    def _get_record_for_admin(self, record_id, caller: Profile) -> PayrollRecord:
        record = self.get_or_404(PayrollRecord, record_id, "PayrollRecord")
        self.get_employee_for_admin(record.user_id, caller)
        return record

    def update_record(self, record_id, update_data: Dict[str, Any], caller: Profile) -> PayrollRecord:
        """Update amounts or status; the net salary follows the amounts."""
        record = self._get_record_for_admin(record_id, caller)

        for field, value in update_data.items():
            if field in MONEY_FIELDS:
                if value is None or value < 0:
                    raise ValidationError(f"{field} must be a non-negative amount", field=field, value=str(value))
                setattr(record, field, Decimal(value))
            elif field == "status":
                record.status = PayrollStatus(value)

        record.net_salary = calculate_net_salary(
            record.base_salary, record.overtime_hours, record.overtime_rate, record.bonuses, record.deductions
        )

        self.safe_commit("Error updating payroll record", resource_type="PayrollRecord")
        self.db.refresh(record)
        self.log_service_action("update_payroll", "PayrollRecord", str(record.id), {"updated_by": str(caller.id)})
        return record

    def delete_record(self, record_id, caller: Profile) -> bool:
        record = self._get_record_for_admin(record_id, caller)
        file_url = record.file_url

        self.db.delete(record)
        self.safe_commit("Error deleting payroll record", resource_type="PayrollRecord")

        if file_url and os.path.exists(file_url):
            os.remove(file_url)
        self.log_service_action("delete_payroll", "PayrollRecord", str(record_id), {"deleted_by": str(caller.id)})
        return True

    # Documents

    async def upload_document(self, record_id, file: UploadFile, caller: Profile) -> PayrollRecord:
        """Store the payslip as <upload_dir>/payroll/<record id>.<ext>."""
        record = self._get_record_for_admin(record_id, caller)
        self.handle_file_validation(file, settings.payroll_file_types, settings.max_upload_size)

        content = await file.read()
        if len(content) > settings.max_upload_size:
            raise FileTooLargeError(max_size=settings.max_upload_size, actual_size=len(content))

        extension = os.path.splitext(sanitize_filename(file.filename))[1].lower() or ".pdf"
        directory = os.path.join(settings.upload_dir, "payroll")
        os.makedirs(directory, exist_ok=True)
        path = os.path.join(directory, f"{record.id}{extension}")

        with open(path, "wb") as buffer:
            buffer.write(content)

        record.file_url = path
        self.safe_commit("Error saving payroll document", resource_type="PayrollRecord")
        self.db.refresh(record)

        self.log_service_action(
            "upload_payroll_document", "PayrollRecord", str(record.id),
            {"path": path, "size": len(content)}
        )
        return record

    def get_document_path(self, record_id, caller: Profile) -> Tuple[str, str]:
        """Path and download name of a record's document (owner or admin)."""
        record = self.get_record(record_id, caller)
        if not record.file_url or not os.path.exists(record.file_url):
            raise ResourceNotFoundError("PayrollDocument", str(record_id))

        extension = os.path.splitext(record.file_url)[1]
        filename = f"payroll_{record.year}_{record.month:02d}{extension}"
        return record.file_url, filename
