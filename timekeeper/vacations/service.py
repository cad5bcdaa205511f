from typing import List, Optional, Dict, Any, Tuple
from datetime import date, datetime, timezone
import logging
from sqlalchemy.orm import Session
from sqlalchemy import and_, func
from sqlalchemy.exc import IntegrityError
from timekeeper.vacations.models import VacationRequest, VacationBalance, RequestStatus
from timekeeper.vacations.periods import period_year, period_bounds, active_period_years, prorated_allowance
from timekeeper.employees.models import Profile
from timekeeper.notifications.models import NotificationType
from timekeeper.notifications.service import NotificationService
from timekeeper.core.service_base import BaseService
from timekeeper.core.exceptions import (
    OverlappingRequestError,
    ValidationError,
    InsufficientPermissionsError
)
from timekeeper.core.validators import validate_date_range
from timekeeper.core.config import settings

logger = logging.getLogger(__name__)

EXCEEDS_AVAILABLE_MARKER = "[EXCEEDS_AVAILABLE_DAYS]"


class VacationService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.notifications = NotificationService(db)

    # Balances

    def _period_days(self, user_id, year: int, statuses, exclude_id=None) -> int:
        """Sum of total_days of requests starting inside the period."""
        start, end = period_bounds(year)
        query = self.db.query(func.coalesce(func.sum(VacationRequest.total_days), 0)).filter(
            and_(
                VacationRequest.user_id == user_id,
                VacationRequest.status.in_(statuses),
                VacationRequest.start_date >= start,
                VacationRequest.start_date <= end
            )
        )
        if exclude_id:
            query = query.filter(VacationRequest.id != exclude_id)
        return int(query.scalar() or 0)

    def get_or_create_balance(self, employee: Profile, year: int) -> VacationBalance:
        """Balance row of a period; created from the prorated allowance when missing."""
        balance = self.db.query(VacationBalance).filter(
            and_(VacationBalance.user_id == employee.id, VacationBalance.year == year)
        ).first()
        if balance:
            return balance

        total_days = prorated_allowance(employee.hire_date, year, settings.default_vacation_days)
        used_days = self._period_days(employee.id, year, [RequestStatus.APPROVED])
        balance = VacationBalance(
            user_id=employee.id,
            company_id=employee.company_id,
            year=year,
            total_days=total_days,
            used_days=used_days,
            remaining_days=total_days - used_days
        )
        try:
            with self.db.begin_nested():
                self.db.add(balance)
        except IntegrityError:
            # Another request created the row first
            return self.db.query(VacationBalance).filter(
                and_(VacationBalance.user_id == employee.id, VacationBalance.year == year)
            ).one()
        logger.info(f"Created vacation balance for {employee.id} period {year}: {total_days} days")
        return balance

    def recompute_balance(self, employee: Profile, year: int) -> VacationBalance:
        """used = approved days starting in the period; remaining = total - used."""
        balance = self.get_or_create_balance(employee, year)
        balance.used_days = self._period_days(employee.id, year, [RequestStatus.APPROVED])
        balance.remaining_days = balance.total_days - balance.used_days
        return balance

    def available_days(self, employee: Profile, year: int, today: date = None) -> int:
        """Days an employee can still book in a period."""
        today = today or date.today()
        if year <= period_year(today):
            return self.get_or_create_balance(employee, year).remaining_days

        allowance = prorated_allowance(employee.hire_date, year, settings.default_vacation_days)
        booked = self._period_days(employee.id, year, [RequestStatus.PENDING, RequestStatus.APPROVED])
        return allowance - booked

    def get_balance(
        self,
        caller: Profile,
        employee_id=None,
        year: Optional[int] = None,
        today: date = None
    ) -> Dict[str, Any]:
        today = today or date.today()
        if employee_id is None or employee_id == caller.id:
            employee = caller
        else:
            employee = self.get_employee_for_admin(employee_id, caller)

        year = year or period_year(today)
        start, end = period_bounds(year)

        if year <= period_year(today):
            balance = self.get_or_create_balance(employee, year)
            self.safe_commit("Error loading vacation balance", resource_type="VacationBalance")
            total_days, used_days, remaining_days = balance.total_days, balance.used_days, balance.remaining_days
        else:
            total_days = prorated_allowance(employee.hire_date, year, settings.default_vacation_days)
            used_days = self._period_days(employee.id, year, [RequestStatus.PENDING, RequestStatus.APPROVED])
            remaining_days = total_days - used_days

        return {
            "user_id": employee.id,
            "year": year,
            "period_start": start,
            "period_end": end,
            "total_days": total_days,
            "used_days": used_days,
            "remaining_days": remaining_days
        }

    def set_balance_total(self, employee_id, year: int, total_days: int, caller: Profile) -> VacationBalance:
        """Override a period's allowance (admin)."""
        if total_days < 0:
            raise ValidationError("Total days cannot be negative", field="total_days", value=total_days)

        employee = self.get_employee_for_admin(employee_id, caller)
        balance = self.get_or_create_balance(employee, year)
        balance.total_days = total_days
        self.recompute_balance(employee, year)

        self.safe_commit("Error updating vacation balance", resource_type="VacationBalance")
        self.db.refresh(balance)
        self.log_service_action(
            "set_balance_total", "VacationBalance", str(balance.id),
            {"user_id": str(employee.id), "year": year, "total_days": total_days}
        )
        return balance

    def active_periods(self, today: date = None) -> List[Dict[str, Any]]:
        today = today or date.today()
        current = period_year(today)
        periods = []
        for year in active_period_years(today):
            start, end = period_bounds(year)
            periods.append({"year": year, "period_start": start, "period_end": end, "is_current": year == current})
        return periods

    # Requests

    def resolve_request_period(self, start_date: date, end_date: date, today: date = None) -> int:
        """The active period that contains the whole range."""
        today = today or date.today()
        for year in active_period_years(today):
            start, end = period_bounds(year)
            if start <= start_date and end_date <= end:
                return year

        windows = [
            f"{period_bounds(year)[0].isoformat()} - {period_bounds(year)[1].isoformat()}"
            for year in active_period_years(today)
        ]
        raise ValidationError(
            detail=f"Dates must fall within the current period ({windows[0]}) or the next period ({windows[1]})",
            error_data={"allowed_periods": windows}
        )

    def _check_overlap(self, user_id, start_date: date, end_date: date, exclude_id=None):
        query = self.db.query(VacationRequest).filter(
            and_(
                VacationRequest.user_id == user_id,
                VacationRequest.status != RequestStatus.REJECTED,
                VacationRequest.start_date <= end_date,
                VacationRequest.end_date >= start_date
            )
        )
        if exclude_id:
            query = query.filter(VacationRequest.id != exclude_id)

        conflict = query.first()
        if conflict:
            raise OverlappingRequestError(
                detail="A vacation request already exists for these dates or part of them",
                conflicting_id=str(conflict.id),
                error_data={
                    "conflicting_start": conflict.start_date.isoformat(),
                    "conflicting_end": conflict.end_date.isoformat()
                }
            )

    def create_request(
        self,
        employee: Profile,
        start_date: date,
        end_date: date,
        reason: Optional[str] = None,
        today: date = None
    ) -> Tuple[VacationRequest, Optional[Dict[str, Any]]]:
        """Create a pending request.

        Requests above the available balance are still created; the reason
        carries a marker and a warning payload is returned for the caller.
        """
        validate_date_range(start_date, end_date)
        year = self.resolve_request_period(start_date, end_date, today)
        self._check_overlap(employee.id, start_date, end_date)

        total_days = (end_date - start_date).days + 1
        available = self.available_days(employee, year, today)

        warning = None
        if total_days > available:
            warning = {
                "code": "EXCEEDS_AVAILABLE_DAYS",
                "requested_days": total_days,
                "available_days": available
            }
            reason = f"{EXCEEDS_AVAILABLE_MARKER} {reason}" if reason else EXCEEDS_AVAILABLE_MARKER

        request = VacationRequest(
            user_id=employee.id,
            company_id=employee.company_id,
            start_date=start_date,
            end_date=end_date,
            total_days=total_days,
            status=RequestStatus.PENDING,
            reason=reason
        )
        self.db.add(request)
        self.db.flush()

        recipients = self.notifications.notify_company_admins(
            employee.company_id,
            "New vacation request",
            f"{employee.full_name} requested {total_days} day(s) from {start_date.isoformat()} to {end_date.isoformat()}",
            NotificationType.VACATION,
            related_id=request.id,
            exclude_id=employee.id
        )

        self.safe_commit("Error creating vacation request", resource_type="VacationRequest")
        self.db.refresh(request)
        self.notifications.invalidate_unread(recipients)

        self.log_service_action(
            "create_vacation_request", "VacationRequest", str(request.id),
            {"user_id": str(employee.id), "total_days": total_days, "flagged": warning is not None}
        )
        return request, warning

    def list_requests(
        self,
        caller: Profile,
        status: Optional[RequestStatus] = None,
        employee_id=None,
        skip: int = 0,
        limit: int = 100
    ) -> List[VacationRequest]:
        query = self.scope_to_caller(self.db.query(VacationRequest), VacationRequest, caller)
        if status:
            query = query.filter(VacationRequest.status == status)
        if employee_id:
            query = query.filter(VacationRequest.user_id == employee_id)

        query = query.order_by(VacationRequest.created_at.desc())
        return self.paginate_query(query, skip, limit).all()

    def get_request(self, request_id, caller: Profile) -> VacationRequest:
        request = self.get_or_404(VacationRequest, request_id, "VacationRequest")
        return self.ensure_visible(request, caller, "VacationRequest")

    def decide_request(
        self,
        request_id,
        decision: RequestStatus,
        caller: Profile,
        comments: Optional[str] = None
    ) -> VacationRequest:
        """Approve or reject a pending request and refresh the period balance."""
        if decision not in (RequestStatus.APPROVED, RequestStatus.REJECTED):
            raise ValidationError("Decision must be approved or rejected", field="status", value=decision)

        request = self.get_or_404(VacationRequest, request_id, "VacationRequest")
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
            request.comments = comments

        self.db.flush()
        self.recompute_balance(employee, period_year(request.start_date))

        verb = "approved" if decision == RequestStatus.APPROVED else "rejected"
        self.notifications.notify(
            employee.id,
            f"Vacation request {verb}",
            f"Your vacation request from {request.start_date.isoformat()} to {request.end_date.isoformat()} was {verb}",
            NotificationType.VACATION,
            related_id=request.id,
            company_id=employee.company_id
        )

        self.safe_commit("Error updating vacation request", resource_type="VacationRequest")
        self.db.refresh(request)
        self.notifications.invalidate_unread([employee.id])

        self.log_service_action(
            f"{verb}_vacation_request", "VacationRequest", str(request.id),
            {"decided_by": str(caller.id)}
        )
        return request

    def update_request(self, request_id, update_data: Dict[str, Any], caller: Profile, today: date = None) -> VacationRequest:
        """Edit dates or reason (admin); balances of both periods are refreshed."""
        request = self.get_or_404(VacationRequest, request_id, "VacationRequest")
        employee = self.get_employee_for_admin(request.user_id, caller)

        start_date = update_data.get("start_date", request.start_date)
        end_date = update_data.get("end_date", request.end_date)
        validate_date_range(start_date, end_date)
        old_year = period_year(request.start_date)

        if start_date != request.start_date or end_date != request.end_date:
            new_year = self.resolve_request_period(start_date, end_date, today)
            self._check_overlap(employee.id, start_date, end_date, exclude_id=request.id)
        else:
            new_year = old_year

        request.start_date = start_date
        request.end_date = end_date
        request.total_days = (end_date - start_date).days + 1
        for field in ("reason", "comments"):
            if field in update_data:
                setattr(request, field, update_data[field])

        self.db.flush()
        for year in {old_year, new_year}:
            self.recompute_balance(employee, year)

        self.safe_commit("Error updating vacation request", resource_type="VacationRequest")
        self.db.refresh(request)
        self.log_service_action("update_vacation_request", "VacationRequest", str(request.id), {"updated_by": str(caller.id)})
        return request

    def delete_request(self, request_id, caller: Profile) -> bool:
        """Admins delete any request of their company; employees only their pending ones."""
        request = self.get_or_404(VacationRequest, request_id, "VacationRequest")

        if caller.is_admin:
            employee = self.get_employee_for_admin(request.user_id, caller)
        else:
            self.ensure_visible(request, caller, "VacationRequest")
            if request.status != RequestStatus.PENDING:
                raise InsufficientPermissionsError("Only pending requests can be withdrawn")
            employee = caller

        year = period_year(request.start_date)
        self.db.delete(request)
        self.db.flush()
        self.recompute_balance(employee, year)

        self.safe_commit("Error deleting vacation request", resource_type="VacationRequest")
        self.log_service_action("delete_vacation_request", "VacationRequest", str(request_id), {"deleted_by": str(caller.id)})
        return True
