from typing import List, Optional
from datetime import date, datetime, time, timezone
import logging
from sqlalchemy.orm import Session
from sqlalchemy import and_
from timekeeper.schedule_changes.models import ScheduleChangeRequest
from timekeeper.attendance.models import TimeEntry
from timekeeper.vacations.models import RequestStatus
from timekeeper.employees.models import Profile
from timekeeper.notifications.models import NotificationType
from timekeeper.notifications.service import NotificationService
from timekeeper.core.service_base import BaseService
from timekeeper.core.exceptions import InsufficientPermissionsError, ValidationError
from timekeeper.core.validators import validate_time_order

logger = logging.getLogger(__name__)


class ScheduleChangeService(BaseService):
    """Requests to change the recorded hours of a day.

    Approval only records the decision; time entries are corrected
    separately through attendance regularization.
    """

    def __init__(self, db: Session):
        super().__init__(db)
        self.notifications = NotificationService(db)

    def create_request(
        self,
        employee: Profile,
        requested_date: date,
        requested_check_in: time,
        requested_check_out: time,
        reason: str
    ) -> ScheduleChangeRequest:
        validate_time_order(requested_check_in, requested_check_out, field="requested_check_out")
        if not reason or not reason.strip():
            raise ValidationError("A reason is required", field="reason")

        # Snapshot the times currently recorded for that day
        entry = self.db.query(TimeEntry).filter(
            and_(TimeEntry.user_id == employee.id, TimeEntry.date == requested_date, TimeEntry.segment == 0)
        ).first()
        current_check_in = entry.check_in_time.time() if entry and entry.check_in_time else None
        current_check_out = entry.check_out_time.time() if entry and entry.check_out_time else None

        request = ScheduleChangeRequest(
            user_id=employee.id,
            company_id=employee.company_id,
            requested_date=requested_date,
            current_check_in=current_check_in,
            current_check_out=current_check_out,
            requested_check_in=requested_check_in,
            requested_check_out=requested_check_out,
            reason=reason.strip(),
            status=RequestStatus.PENDING
        )
        self.db.add(request)
        self.db.flush()

        recipients = self.notifications.notify_company_admins(
            employee.company_id,
            "New schedule change request",
            f"{employee.full_name} requested a schedule change for {requested_date.isoformat()}",
            NotificationType.SCHEDULE_CHANGE,
            related_id=request.id,
            exclude_id=employee.id
        )

        self.safe_commit("Error creating schedule change request", resource_type="ScheduleChangeRequest")
        self.db.refresh(request)
        self.notifications.invalidate_unread(recipients)

        self.log_service_action(
            "create_schedule_change", "ScheduleChangeRequest", str(request.id),
            {"user_id": str(employee.id), "requested_date": requested_date.isoformat()}
        )
        return request

    def list_requests(
        self,
        caller: Profile,
        status: Optional[RequestStatus] = None,
        employee_id=None
    ) -> List[ScheduleChangeRequest]:
        query = self.scope_to_caller(self.db.query(ScheduleChangeRequest), ScheduleChangeRequest, caller)
        if status:
            query = query.filter(ScheduleChangeRequest.status == status)
        if employee_id:
            query = query.filter(ScheduleChangeRequest.user_id == employee_id)
        return query.order_by(ScheduleChangeRequest.created_at.desc()).all()

    def get_request(self, request_id, caller: Profile) -> ScheduleChangeRequest:
        request = self.get_or_404(ScheduleChangeRequest, request_id, "ScheduleChangeRequest")
        return self.ensure_visible(request, caller, "ScheduleChangeRequest")

    def decide_request(
        self,
        request_id,
        decision: RequestStatus,
        caller: Profile,
        comments: Optional[str] = None
    ) -> ScheduleChangeRequest:
        if decision not in (RequestStatus.APPROVED, RequestStatus.REJECTED):
            raise ValidationError("Decision must be approved or rejected", field="status", value=decision)

        request = self.get_or_404(ScheduleChangeRequest, request_id, "ScheduleChangeRequest")
        employee = self.get_employee_for_admin(request.user_id, caller)
        if request.status != RequestStatus.PENDING:
            raise ValidationError(
                detail=f"Request is already {request.status.value}",
                field="status",
                value=request.status.value
            )

        request.status = decision
        request.approved_by = caller.id
        request.approved_at = datetime.now(timezone.utc)
        if comments is not None:
            request.admin_comments = comments

        verb = "approved" if decision == RequestStatus.APPROVED else "rejected"
        self.notifications.notify(
            employee.id,
            f"Schedule change {verb}",
            f"Your schedule change for {request.requested_date.isoformat()} was {verb}",
            NotificationType.SCHEDULE_CHANGE,
            related_id=request.id,
            company_id=employee.company_id
        )

        self.safe_commit("Error updating schedule change request", resource_type="ScheduleChangeRequest")
        self.db.refresh(request)
        self.notifications.invalidate_unread([employee.id])

        self.log_service_action(
            f"{verb}_schedule_change", "ScheduleChangeRequest", str(request.id),
            {"decided_by": str(caller.id)}
        )
        return request

    def delete_request(self, request_id, caller: Profile) -> bool:
        request = self.get_or_404(ScheduleChangeRequest, request_id, "ScheduleChangeRequest")

        if caller.is_admin:
            self.get_employee_for_admin(request.user_id, caller)
        else:
            self.ensure_visible(request, caller, "ScheduleChangeRequest")
            if request.status != RequestStatus.PENDING:
                raise InsufficientPermissionsError("Only pending requests can be withdrawn")

        self.db.delete(request)
        self.safe_commit("Error deleting schedule change request", resource_type="ScheduleChangeRequest")
        self.log_service_action("delete_schedule_change", "ScheduleChangeRequest", str(request_id), {"deleted_by": str(caller.id)})
        return True
