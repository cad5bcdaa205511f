from typing import List, Optional, Dict, Any
import logging
import uuid
from sqlalchemy.orm import Session
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from timekeeper.employees.models import Profile, Role, ADMIN_ROLES
from timekeeper.auth.models import User
from timekeeper.auth.service import AuthService
from timekeeper.companies.models import Company
from timekeeper.attendance.models import TimeEntry
from timekeeper.vacations.models import VacationRequest, VacationBalance
from timekeeper.extra_hours.models import ExtraHour, ExtraHoursRequest, CompensatoryDay
from timekeeper.schedule_changes.models import ScheduleChangeRequest
from timekeeper.payrolls.models import PayrollRecord
from timekeeper.notifications.models import Notification
from timekeeper.core.service_base import BaseService
from timekeeper.core.exceptions import (
    CascadeDeleteError,
    InsufficientPermissionsError,
    ResourceInactiveError,
    ValidationError
)
from timekeeper.core.validators import validate_password, validate_phone

logger = logging.getLogger(__name__)

# Rows owned by an employee, removed before the profile itself
DEPENDENT_TABLES = [
    ("time_entries", TimeEntry),
    ("vacation_requests", VacationRequest),
    ("vacation_balance", VacationBalance),
    ("extra_hours", ExtraHour),
    ("extra_hours_requests", ExtraHoursRequest),
    ("compensatory_days", CompensatoryDay),
    ("schedule_changes", ScheduleChangeRequest),
    ("payroll_records", PayrollRecord),
    ("notifications", Notification),
]

# Columns on other employees' rows that may point at the deleted employee
ACTOR_COLUMNS = [
    VacationRequest.approved_by,
    ExtraHour.granted_by,
    ExtraHoursRequest.approved_by,
    CompensatoryDay.granted_by,
    ScheduleChangeRequest.approved_by,
    PayrollRecord.created_by,
]

UPDATABLE_FIELDS = ("full_name", "department", "employee_id", "phone", "hire_date", "role", "is_active")


class EmployeeService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def _check_role_assignment(self, role: str, caller: Profile):
        if role not in [r.value for r in Role]:
            raise ValidationError(f"Unknown role: {role}", field="role", value=role)
        if role == Role.SUPER_ADMIN and caller.role != Role.SUPER_ADMIN:
            raise InsufficientPermissionsError("Only super administrators can grant the super_admin role")

    def create_employee(self, employee_data: Dict[str, Any], caller: Profile) -> Profile:
        """Create the platform identity and the profile in one transaction."""
        if caller.role not in ADMIN_ROLES:
            raise InsufficientPermissionsError("Administrator role required")

        validate_password(employee_data.get("password"))
        role = employee_data.get("role") or Role.EMPLOYEE.value
        self._check_role_assignment(role, caller)

        # Admins can only staff their own company
        if caller.role == Role.SUPER_ADMIN:
            company_id = employee_data.get("company_id")
            if company_id:
                company = self.get_or_404(Company, company_id, "Company")
                if not company.is_active:
                    raise ResourceInactiveError("Company", str(company.id))
        else:
            company_id = caller.company_id

        email = employee_data["email"].strip().lower()
        self.check_unique_constraint(Profile, "email", email, "Employee")
        if employee_data.get("employee_id"):
            self.check_unique_constraint(Profile, "employee_id", employee_data["employee_id"], "Employee")

        user = AuthService(self.db).create_user(email, employee_data["password"], user_id=uuid.uuid4())
        profile = Profile(
            id=user.id,
            full_name=employee_data["full_name"].strip(),
            email=email,
            role=role,
            department=employee_data.get("department"),
            employee_id=employee_data.get("employee_id") or None,
            phone=validate_phone(employee_data.get("phone")),
            hire_date=employee_data.get("hire_date"),
            company_id=company_id
        )
        self.db.add(profile)
        self.safe_commit("Error creating employee", resource_type="Employee")
        self.db.refresh(profile)

        self.log_service_action(
            "create_employee", "Employee", str(profile.id),
            {"role": role, "company_id": str(company_id) if company_id else None, "created_by": str(caller.id)}
        )
        return profile

    def list_employees(
        self,
        caller: Profile,
        include_inactive: bool = False,
        department: Optional[str] = None,
        search: Optional[str] = None,
        company_id=None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Profile]:
        query = self.scope_to_caller(self.db.query(Profile), Profile, caller)

        if not include_inactive:
            query = query.filter(Profile.is_active.is_(True))
        if department:
            query = query.filter(Profile.department == department)
        if company_id:
            query = query.filter(Profile.company_id == company_id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Profile.full_name.ilike(pattern),
                Profile.email.ilike(pattern),
                Profile.employee_id.ilike(pattern)
            ))

        query = query.order_by(Profile.full_name)
        return self.paginate_query(query, skip, limit).all()

    def get_employee(self, employee_id, caller: Profile) -> Profile:
        employee = self.get_or_404(Profile, employee_id, "Employee")
        return self.ensure_visible(employee, caller, "Employee")

    def update_employee(self, employee_id, update_data: Dict[str, Any], caller: Profile) -> Profile:
        employee = self.get_employee_for_admin(employee_id, caller)

        if "role" in update_data and update_data["role"]:
            self._check_role_assignment(update_data["role"], caller)
        if update_data.get("employee_id"):
            self.check_unique_constraint(
                Profile, "employee_id", update_data["employee_id"], "Employee", exclude_id=employee.id
            )
        if "phone" in update_data:
            update_data["phone"] = validate_phone(update_data["phone"])

        for field, value in update_data.items():
            if field in UPDATABLE_FIELDS:
                setattr(employee, field, value)
        if "is_active" in update_data and employee.user:
            employee.user.is_active = update_data["is_active"]

        self.safe_commit("Error updating employee", resource_type="Employee")
        self.db.refresh(employee)
        self.log_service_action("update_employee", "Employee", str(employee.id), {"updated_by": str(caller.id)})
        return employee

    def deactivate_employee(self, employee_id, caller: Profile) -> Profile:
        """Soft delete: the employee can no longer sign in; history is kept."""
        return self.update_employee(employee_id, {"is_active": False}, caller)

    def delete_employee(self, employee_id, caller: Profile) -> Dict[str, Any]:
        """Remove an employee and everything they own.

        Each dependent table is cleared inside its own savepoint so that every
        failing table is reported, not only the first one. The profile and
        then the identity are removed only when all tables succeeded.
        """
        if caller.role not in ADMIN_ROLES:
            raise InsufficientPermissionsError("Administrator role required")
        employee = self.get_employee_for_admin(employee_id, caller)
        if employee.id == caller.id:
            raise ValidationError("Administrators cannot delete their own account", field="employee_id")

        deleted: Dict[str, int] = {}
        failed: List[str] = []

        for table_name, model in DEPENDENT_TABLES:
            try:
                with self.db.begin_nested():
                    deleted[table_name] = self.db.query(model).filter(
                        model.user_id == employee.id
                    ).delete(synchronize_session=False)
            except SQLAlchemyError as e:
                logger.error(f"Error deleting {table_name} rows of employee {employee.id}: {str(e)}")
                failed.append(table_name)

        for column in ACTOR_COLUMNS:
            try:
                with self.db.begin_nested():
                    self.db.query(column.class_).filter(column == employee.id).update(
                        {column: None}, synchronize_session=False
                    )
            except SQLAlchemyError as e:
                logger.error(f"Error detaching {column} from employee {employee.id}: {str(e)}")
                failed.append(column.class_.__tablename__)

        if failed:
            self.db.rollback()
            raise CascadeDeleteError(str(employee.id), failed)

        user = self.db.get(User, employee.id)
        self.db.delete(employee)
        self.db.flush()
        if user:
            self.db.delete(user)
        self.safe_commit("Error deleting employee", resource_type="Employee")

        self.log_service_action(
            "delete_employee", "Employee", str(employee_id),
            {"deleted_rows": deleted, "deleted_by": str(caller.id)}
        )
        return {"success": True, "employee_id": str(employee_id), "deleted": deleted}

