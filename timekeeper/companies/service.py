from typing import List, Dict, Any
import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from timekeeper.companies.models import Company
from timekeeper.employees.models import Profile, Role
from timekeeper.employees.service import EmployeeService
from timekeeper.attendance.models import TimeEntry
from timekeeper.vacations.models import VacationRequest, VacationBalance
from timekeeper.extra_hours.models import ExtraHour, ExtraHoursRequest, CompensatoryDay
from timekeeper.schedule_changes.models import ScheduleChangeRequest
from timekeeper.payrolls.models import PayrollRecord
from timekeeper.notifications.models import Notification
from timekeeper.core.service_base import BaseService
from timekeeper.core.exceptions import ResourceInactiveError, ValidationError

logger = logging.getLogger(__name__)

# Tables whose legacy rows (company_id NULL) are adopted by a company
MIGRATION_TABLES = [
    ("payroll_records", PayrollRecord),
    ("vacation_requests", VacationRequest),
    ("vacation_balance", VacationBalance),
    ("time_entries", TimeEntry),
    ("schedule_changes", ScheduleChangeRequest),
    ("compensatory_days", CompensatoryDay),
    ("extra_hours", ExtraHour),
    ("extra_hours_requests", ExtraHoursRequest),
    ("notifications", Notification),
]


class CompanyService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def create_company(self, company_data: Dict[str, Any]) -> Company:
        company = Company(**company_data)
        self.db.add(company)
        self.safe_commit("Error creating company", resource_type="Company")
        self.db.refresh(company)

        self.log_service_action("create_company", "Company", str(company.id), {"company_name": company.name})
        return company

    def list_companies(self, include_inactive: bool = True) -> List[Company]:
        query = self.db.query(Company)
        if not include_inactive:
            query = query.filter(Company.is_active.is_(True))
        return query.order_by(Company.name).all()

    def get_company(self, company_id) -> Company:
        return self.get_or_404(Company, company_id, "Company")

    def update_company(self, company_id, update_data: Dict[str, Any]) -> Company:
        company = self.get_company(company_id)
        for field, value in update_data.items():
            setattr(company, field, value)

        self.safe_commit("Error updating company", resource_type="Company")
        self.db.refresh(company)
        self.log_service_action("update_company", "Company", str(company.id))
        return company

    def toggle_active(self, company_id) -> Company:
        company = self.get_company(company_id)
        company.is_active = not company.is_active

        self.safe_commit("Error updating company", resource_type="Company")
        self.db.refresh(company)
        self.log_service_action("toggle_company", "Company", str(company.id), {"is_active": company.is_active})
        return company

    def delete_company(self, company_id) -> bool:
        """Delete a company that no longer has employees."""
        company = self.get_company(company_id)
        if self.db.query(Profile).filter(Profile.company_id == company.id).count():
            raise ValidationError(
                detail="Company still has employees; deactivate it instead",
                field="company_id",
                value=str(company.id)
            )

        self.db.delete(company)
        self.safe_commit("Error deleting company", resource_type="Company")
        self.log_service_action("delete_company", "Company", str(company_id))
        return True

    def list_company_employees(self, company_id) -> List[Profile]:
        company = self.get_company(company_id)
        return self.db.query(Profile).filter(Profile.company_id == company.id).order_by(Profile.full_name).all()

    def create_company_admin(self, company_id, admin_data: Dict[str, Any], caller: Profile) -> Profile:
        company = self.get_company(company_id)
        if not company.is_active:
            raise ResourceInactiveError("Company", str(company.id))

        admin_data = {**admin_data, "role": Role.ADMIN.value, "company_id": company.id}
        return EmployeeService(self.db).create_employee(admin_data, caller)

    def migrate_company_data(self, company_id) -> Dict[str, Any]:
        """Assign every row without a company to ``company_id``.

        Tables are committed one at a time; a failing table is logged,
        reported with a count of 0 and the remaining tables still run.
        """
        company = self.get_company(company_id)
        logger.info(f"Starting data migration for company {company.id}")

        details: Dict[str, int] = {}
        total_updated = 0

        for table_name, model in MIGRATION_TABLES:
            try:
                count = self.db.query(model).filter(model.company_id.is_(None)).update(
                    {model.company_id: company.id}, synchronize_session=False
                )
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error migrating {table_name} to company {company.id}: {str(e)}")
                details[table_name] = 0
                continue

            details[table_name] = count
            total_updated += count
            logger.info(f"Updated {count} records in {table_name}")

        self.log_service_action(
            "migrate_company_data", "Company", str(company.id), {"total_updated": total_updated}
        )
        return {"success": True, "totalUpdated": total_updated, "details": details}
