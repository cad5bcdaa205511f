from typing import List, Optional, Dict, Any
from datetime import date, datetime, timedelta, timezone
import math
import logging
from sqlalchemy.orm import Session
from sqlalchemy import and_, func
from timekeeper.extra_hours.models import ExtraHour, ExtraHoursRequest, CompensatoryDay
from timekeeper.vacations.models import RequestStatus
from timekeeper.employees.models import Profile
from timekeeper.notifications.models import NotificationType
from timekeeper.notifications.service import NotificationService
from timekeeper.core.service_base import BaseService
from timekeeper.core.exceptions import (
    InsufficientBalanceError,
    InsufficientPermissionsError,
    ValidationError
)
from timekeeper.core.config import settings

logger = logging.getLogger(__name__)


def _check_positive_hours(hours, field: str) -> None:
    if hours is None or not math.isfinite(hours) or hours <= 0:
        raise ValidationError("Hours must be a positive number", field=field, value=str(hours))


class ExtraHoursService(BaseService):
    """Hour bank: admin grants and compensatory days credit it, approved requests debit it."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.notifications = NotificationService(db)

    def _sum(self, column, *criteria) -> float:
        return float(self.db.query(func.coalesce(func.sum(column), 0)).filter(*criteria).scalar() or 0)

    def get_balance(self, employee: Profile) -> Dict[str, Any]:
        """available = granted hours + compensatory days x 8 - approved request hours."""
        earned = self._sum(ExtraHour.hours, ExtraHour.user_id == employee.id)
        compensatory_days = int(self._sum(CompensatoryDay.days_count, CompensatoryDay.user_id == employee.id))
        compensatory_hours = compensatory_days * settings.hours_per_day
        used = self._sum(
            ExtraHoursRequest.hours_requested,
            ExtraHoursRequest.user_id == employee.id,
            ExtraHoursRequest.status == RequestStatus.APPROVED
        )
        available = earned + compensatory_hours - used

        return {
            "user_id": employee.id,
            "earned": earned,
            "compensatory_days": compensatory_days,
            "compensatory_hours": compensatory_hours,
            "used": used,
            "available": available,
            "available_days": math.floor(available / settings.hours_per_day) if available > 0 else 0
        }

    def get_balance_for(self, caller: Profile, employee_id=None) -> Dict[str, Any]:
        if employee_id is None or employee_id == caller.id:
            return self.get_balance(caller)
        return self.get_balance(self.get_employee_for_admin(employee_id, caller))

    # Grants

    def grant_hours(
        self,
        employee_id,
        hours: float,
        day: date,
        caller: Profile,
        reason: Optional[str] = None
    ) -> ExtraHour:
        """Credit hours to an employee; takes effect immediately."""
        _check_positive_hours(hours, "hours")

        employee = self.get_employee_for_admin(employee_id, caller)
        grant = ExtraHour(
            user_id=employee.id,
            company_id=employee.company_id,
            hours=hours,
            date=day,
            reason=reason,
            granted_by=caller.id
        )
        self.db.add(grant)
        self.safe_commit("Error granting extra hours", resource_type="ExtraHour")
        self.db.refresh(grant)

        self.log_service_action(
            "grant_extra_hours", "ExtraHour", str(grant.id),
            {"user_id": str(employee.id), "hours": hours, "granted_by": str(caller.id)}
        )
        return grant

    def list_grants(self, caller: Profile, employee_id=None) -> List[ExtraHour]:
        query = self.scope_to_caller(self.db.query(ExtraHour), ExtraHour, caller)
        if employee_id:
            query = query.filter(ExtraHour.user_id == employee_id)
        return query.order_by(ExtraHour.date.desc()).all()

    def delete_grant(self, grant_id, caller: Profile) -> bool:
        grant = self.get_or_404(ExtraHour, grant_id, "ExtraHour")
        self.get_employee_for_admin(grant.user_id, caller)

        self.db.delete(grant)
        self.safe_commit("Error deleting extra hours", resource_type="ExtraHour")
        self.log_service_action("delete_extra_hours", "ExtraHour", str(grant_id), {"deleted_by": str(caller.id)})
        return True

    # Compensatory days

    def add_compensatory_day(
        self,
        employee_id,
        day: date,
        caller: Profile,
        days_count: int = 1,
        reason: Optional[str] = None
    ) -> CompensatoryDay:
        if days_count is None or days_count <= 0:
            raise ValidationError("Days count must be a positive number", field="days_count", value=days_count)

        employee = self.get_employee_for_admin(employee_id, caller)
        compensatory_day = CompensatoryDay(
            user_id=employee.id,
            company_id=employee.company_id,
            date=day,
            days_count=days_count,
            reason=reason,
            granted_by=caller.id
        )
        self.db.add(compensatory_day)
        self.safe_commit("Error adding compensatory day", resource_type="CompensatoryDay")
        self.db.refresh(compensatory_day)

        self.log_service_action(
            "add_compensatory_day", "CompensatoryDay", str(compensatory_day.id),
            {"user_id": str(employee.id), "days_count": days_count}
        )
        return compensatory_day

    def update_compensatory_day(self, day_id, update_data: Dict[str, Any], caller: Profile) -> CompensatoryDay:
        compensatory_day = self.get_or_404(CompensatoryDay, day_id, "CompensatoryDay")
        self.get_employee_for_admin(compensatory_day.user_id, caller)

        if "days_count" in update_data and (update_data["days_count"] or 0) <= 0:
            raise ValidationError("Days count must be a positive number", field="days_count", value=update_data["days_count"])

        for field, value in update_data.items():
            setattr(compensatory_day, field, value)

        self.safe_commit("Error updating compensatory day", resource_type="CompensatoryDay")
        self.db.refresh(compensatory_day)
        self.log_service_action("update_compensatory_day", "CompensatoryDay", str(compensatory_day.id))
        return compensatory_day

    def list_compensatory_days(self, caller: Profile, employee_id=None) -> List[CompensatoryDay]:
        query = self.scope_to_caller(self.db.query(CompensatoryDay), CompensatoryDay, caller)
        if employee_id:
            query = query.filter(CompensatoryDay.user_id == employee_id)
        return query.order_by(CompensatoryDay.date.desc()).all()

    def delete_compensatory_day(self, day_id, caller: Profile) -> bool:
        compensatory_day = self.get_or_404(CompensatoryDay, day_id, "CompensatoryDay")
        self.get_employee_for_admin(compensatory_day.user_id, caller)

        self.db.delete(compensatory_day)
        self.safe_commit("Error deleting compensatory day", resource_type="CompensatoryDay")
        self.log_service_action("delete_compensatory_day", "CompensatoryDay", str(day_id), {"deleted_by": str(caller.id)})
        return True

    # Usage requests

    def create_request(
        self,
        employee: Profile,
        hours: float,
        requested_date: date,
        reason: Optional[str] = None,
        today: date = None
    ) -> ExtraHoursRequest:
        """Ask to take banked hours on a future day."""
        today = today or date.today()

        _check_positive_hours(hours, "hours_requested")

        earliest = today + timedelta(days=1)
        if requested_date < earliest:
            raise ValidationError(
                detail=f"Requested date must be on or after {earliest.isoformat()}",
                field="requested_date",
                value=requested_date.isoformat()
            )

        available = self.get_balance(employee)["available"]
        if hours > available:
            raise InsufficientBalanceError(requested=hours, available=available)

        request = ExtraHoursRequest(
            user_id=employee.id,
            company_id=employee.company_id,
            hours_requested=hours,
            requested_date=requested_date,
            reason=reason,
            status=RequestStatus.PENDING
        )
        self.db.add(request)
        self.db.flush()

        recipients = self.notifications.notify_company_admins(
            employee.company_id,
            "New extra hours request",
            f"{employee.full_name} requested {hours:g} hour(s) off on {requested_date.isoformat()}",
            NotificationType.EXTRA_HOURS,
            related_id=request.id,
            exclude_id=employee.id
        )

        self.safe_commit("Error creating extra hours request", resource_type="ExtraHoursRequest")
        self.db.refresh(request)
        self.notifications.invalidate_unread(recipients)

        self.log_service_action(
            "create_extra_hours_request", "ExtraHoursRequest", str(request.id),
            {"user_id": str(employee.id), "hours": hours}
        )
        return request

    def list_requests(
        self,
        caller: Profile,
        status: Optional[RequestStatus] = None,
        employee_id=None
    ) -> List[ExtraHoursRequest]:
        query = self.scope_to_caller(self.db.query(ExtraHoursRequest), ExtraHoursRequest, caller)
        if status:
            query = query.filter(ExtraHoursRequest.status == status)
        if employee_id:
            query = query.filter(ExtraHoursRequest.user_id == employee_id)
        return query.order_by(ExtraHoursRequest.created_at.desc()).all()

    def decide_request(
        self,
        request_id,
        decision: RequestStatus,
        caller: Profile,
        comments: Optional[str] = None
    ) -> ExtraHoursRequest:
        """Approve (debits the bank) or reject (no balance effect) a pending request."""
        if decision not in (RequestStatus.APPROVED, RequestStatus.REJECTED):
            raise ValidationError("Decision must be approved or rejected", field="status", value=decision)

        request = self.get_or_404(ExtraHoursRequest, request_id, "ExtraHoursRequest")
        employee = self.get_employee_for_admin(request.user_id, caller)
        if request.status != RequestStatus.PENDING:
            raise ValidationError(
                detail=f"Request is already {request.status.value}",
                field="status",
                value=request.status.value
            )

        if decision == RequestStatus.APPROVED:
            available = self.get_balance(employee)["available"]
            if not math.isfinite(request.hours_requested) or available - request.hours_requested < 0:
                raise InsufficientBalanceError(
                    requested=request.hours_requested,
                    available=available,
                    error_data={"request_id": str(request.id)}
                )

        request.status = decision
        request.approved_by = caller.id
        request.approved_at = datetime.now(timezone.utc)
        if comments is not None:
            request.admin_comments = comments

        verb = "approved" if decision == RequestStatus.APPROVED else "rejected"
        self.notifications.notify(
            employee.id,
            f"Extra hours request {verb}",
            f"Your request for {request.hours_requested:g} hour(s) on {request.requested_date.isoformat()} was {verb}",
            NotificationType.EXTRA_HOURS,
            related_id=request.id,
            company_id=employee.company_id
        )

        self.safe_commit("Error updating extra hours request", resource_type="ExtraHoursRequest")
        self.db.refresh(request)
        self.notifications.invalidate_unread([employee.id])

        self.log_service_action(
            f"{verb}_extra_hours_request", "ExtraHoursRequest", str(request.id),
            {"decided_by": str(caller.id), "hours": request.hours_requested}
        )
        return request

    def delete_request(self, request_id, caller: Profile) -> bool:
        request = self.get_or_404(ExtraHoursRequest, request_id, "ExtraHoursRequest")

        if caller.is_admin:
            self.get_employee_for_admin(request.user_id, caller)
        else:
            self.ensure_visible(request, caller, "ExtraHoursRequest")
            if request.status != RequestStatus.PENDING:
                raise InsufficientPermissionsError("Only pending requests can be withdrawn")

        self.db.delete(request)
        self.safe_commit("Error deleting extra hours request", resource_type="ExtraHoursRequest")
        self.log_service_action("delete_extra_hours_request", "ExtraHoursRequest", str(request_id), {"deleted_by": str(caller.id)})
        return True
