from typing import List, Optional, Dict, Any
from datetime import date, datetime, time, timedelta
import calendar
import logging
from sqlalchemy.orm import Session
from sqlalchemy import and_
from timekeeper.attendance.models import TimeEntry, EntryStatus
from timekeeper.attendance.regularization import (
    format_duration,
    parse_duration_hours,
    parse_duration_minutes,
    plan_regularization
)
from timekeeper.attendance.schemas import TimeEntryResponse
from timekeeper.employees.models import Profile
from timekeeper.vacations.models import VacationRequest, RequestStatus
from timekeeper.core.service_base import BaseService
from timekeeper.core.exceptions import AttendanceStateError
from timekeeper.core.validators import (
    normalize_entry_timestamp,
    validate_date_range,
    validate_not_future,
    validate_time_order
)
from timekeeper.core.redis_service import redis_service
from timekeeper.core.config import settings

logger = logging.getLogger(__name__)

AUTO_REGULARIZED_NOTE = "Auto-regularized by administrator"
MANUAL_REGULARIZED_NOTE = "Regularized by administrator"


class AttendanceService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    # Clock in / out

    def check_in(
        self,
        user: Profile,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        now: datetime = None
    ) -> TimeEntry:
        """Open today's entry. Only one entry per employee and day."""
        now = now or datetime.now()
        today = now.date()

        existing = self.db.query(TimeEntry).filter(
            and_(TimeEntry.user_id == user.id, TimeEntry.date == today)
        ).first()
        if existing:
            raise AttendanceStateError(
                "Already checked in today",
                employee_id=str(user.id),
                error_data={"entry_id": str(existing.id), "status": existing.status.value}
            )

        entry = TimeEntry(
            user_id=user.id,
            company_id=user.company_id,
            date=today,
            segment=0,
            check_in_time=now,
            check_in_latitude=latitude,
            check_in_longitude=longitude,
            status=EntryStatus.CHECKED_IN
        )
        self.db.add(entry)
        # A concurrent check-in for the same day trips the unique constraint here
        self.safe_commit("Error recording check-in", resource_type="TimeEntry")
        self.db.refresh(entry)

        redis_service.invalidate(redis_service.today_key(user.id))
        self.log_service_action("check_in", "TimeEntry", str(entry.id), {"user_id": str(user.id)})
        return entry

    def check_out(
        self,
        user: Profile,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        now: datetime = None
    ) -> TimeEntry:
        """Close the employee's most recent open entry."""
        now = now or datetime.now()

        entry = self.db.query(TimeEntry).filter(
            and_(TimeEntry.user_id == user.id, TimeEntry.status == EntryStatus.CHECKED_IN)
        ).order_by(TimeEntry.date.desc(), TimeEntry.check_in_time.desc()).first()

        if not entry:
            raise AttendanceStateError("No open check-in to close", employee_id=str(user.id))

        entry.check_out_time = now
        entry.check_out_latitude = latitude
        entry.check_out_longitude = longitude
        entry.total_hours = format_duration(now - entry.check_in_time)
        entry.status = EntryStatus.CHECKED_OUT

        self.safe_commit("Error recording check-out", resource_type="TimeEntry")
        self.db.refresh(entry)

        redis_service.invalidate(redis_service.today_key(user.id))
        self.log_service_action(
            "check_out", "TimeEntry", str(entry.id),
            {"user_id": str(user.id), "total_hours": entry.total_hours}
        )
        return entry

    def get_today_state(self, user: Profile, today: date = None) -> Dict[str, Any]:
        """Today's entries and clock state; cached briefly because clients poll it."""
        today = today or date.today()
        cache_key = redis_service.today_key(user.id)

        cached = redis_service.get_json(cache_key)
        if cached and cached.get("date") == today.isoformat():
            return cached

        entries = self.db.query(TimeEntry).filter(
            and_(TimeEntry.user_id == user.id, TimeEntry.date == today)
        ).order_by(TimeEntry.segment).all()

        if not entries:
            state = "not_started"
        elif any(entry.status == EntryStatus.CHECKED_IN for entry in entries):
            state = "checked_in"
        else:
            state = "checked_out"

        result = {
            "date": today.isoformat(),
            "status": state,
            "entries": [TimeEntryResponse.model_validate(entry).model_dump(mode="json") for entry in entries]
        }
        redis_service.set_json(cache_key, result)
        return result

    # Queries

    def list_entries(
        self,
        caller: Profile,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_id=None,
        skip: int = 0,
        limit: int = 100
    ) -> List[TimeEntry]:
        query = self.scope_to_caller(self.db.query(TimeEntry), TimeEntry, caller)

        if employee_id:
            query = query.filter(TimeEntry.user_id == employee_id)
        if start_date:
            query = query.filter(TimeEntry.date >= start_date)
        if end_date:
            query = query.filter(TimeEntry.date <= end_date)

        query = query.order_by(TimeEntry.date.desc(), TimeEntry.segment)
        return self.paginate_query(query, skip, limit).all()

    def get_entry(self, entry_id, caller: Profile) -> TimeEntry:
        entry = self.get_or_404(TimeEntry, entry_id, "TimeEntry")
        return self.ensure_visible(entry, caller, "TimeEntry")

    # Administrative corrections

    def _get_entry_for_admin(self, entry_id, caller: Profile) -> TimeEntry:
        entry = self.get_or_404(TimeEntry, entry_id, "TimeEntry")
        self.get_employee_for_admin(entry.user_id, caller)
        return entry

    def update_entry(self, entry_id, update_data: Dict[str, Any], caller: Profile) -> TimeEntry:
        """Edit times or notes; total hours follow the new times."""
        entry = self._get_entry_for_admin(entry_id, caller)

        update_data = dict(update_data)
        for field in ("check_in_time", "check_out_time"):
            if field in update_data:
                update_data[field] = normalize_entry_timestamp(update_data[field], entry.date, field)

        validate_time_order(
            update_data.get("check_in_time", entry.check_in_time),
            update_data.get("check_out_time", entry.check_out_time)
        )
        for field, value in update_data.items():
            setattr(entry, field, value)

        if entry.check_in_time and entry.check_out_time:
            entry.total_hours = format_duration(entry.check_out_time - entry.check_in_time)
            entry.status = EntryStatus.CHECKED_OUT

        self.safe_commit("Error updating time entry", resource_type="TimeEntry")
        self.db.refresh(entry)

        redis_service.invalidate(redis_service.today_key(entry.user_id))
        self.log_service_action("update_entry", "TimeEntry", str(entry.id), {"updated_by": str(caller.id)})
        return entry

    def delete_entry(self, entry_id, caller: Profile) -> bool:
        entry = self._get_entry_for_admin(entry_id, caller)
        user_id = entry.user_id

        self.db.delete(entry)
        self.safe_commit("Error deleting time entry", resource_type="TimeEntry")

        redis_service.invalidate(redis_service.today_key(user_id))
        self.log_service_action("delete_entry", "TimeEntry", str(entry_id), {"deleted_by": str(caller.id)})
        return True

    def regularize_day(
        self,
        employee_id,
        day: date,
        check_in: time,
        check_out: time,
        caller: Profile,
        notes: Optional[str] = None,
        today: date = None
    ) -> TimeEntry:
        """Create or overwrite the clock-in entry of a past or current day."""
        today = today or date.today()
        employee = self.get_employee_for_admin(employee_id, caller)
        validate_not_future(day, today)
        validate_time_order(check_in, check_out)

        check_in_time = datetime.combine(day, check_in)
        check_out_time = datetime.combine(day, check_out)

        entry = self.db.query(TimeEntry).filter(
            and_(TimeEntry.user_id == employee.id, TimeEntry.date == day, TimeEntry.segment == 0)
        ).first()
        if not entry:
            entry = TimeEntry(user_id=employee.id, company_id=employee.company_id, date=day, segment=0)
            self.db.add(entry)

        entry.check_in_time = check_in_time
        entry.check_out_time = check_out_time
        entry.total_hours = format_duration(check_out_time - check_in_time)
        entry.status = EntryStatus.CHECKED_OUT
        entry.notes = notes or MANUAL_REGULARIZED_NOTE

        self.safe_commit("Error regularizing time entry", resource_type="TimeEntry")
        self.db.refresh(entry)

        redis_service.invalidate(redis_service.today_key(employee.id))
        self.log_service_action(
            "regularize_day", "TimeEntry", str(entry.id),
            {"user_id": str(employee.id), "day": day.isoformat(), "regularized_by": str(caller.id)}
        )
        return entry

    def auto_regularize(self, employee_id, caller: Profile, today: date = None) -> Dict[str, Any]:
        """Fill free days of the current month up to the monthly hours target."""
        today = today or date.today()
        employee = self.get_employee_for_admin(employee_id, caller)

        month_start = today.replace(day=1)
        month_end = today.replace(day=calendar.monthrange(today.year, today.month)[1])
        month_entries = self.db.query(TimeEntry).filter(
            and_(
                TimeEntry.user_id == employee.id,
                TimeEntry.date >= month_start,
                TimeEntry.date <= month_end
            )
        ).all()

        worked_minutes = sum(parse_duration_minutes(entry.total_hours) for entry in month_entries)
        occupied = {entry.date for entry in month_entries}
        target_minutes = settings.monthly_hours_target * 60

        planned = plan_regularization(today, worked_minutes, occupied, target_minutes)

        entries = [
            TimeEntry(
                user_id=employee.id,
                company_id=employee.company_id,
                date=item.day,
                segment=item.segment,
                check_in_time=item.check_in,
                check_out_time=item.check_out,
                total_hours=item.total_hours,
                status=EntryStatus.CHECKED_OUT,
                notes=AUTO_REGULARIZED_NOTE
            )
            for item in planned
        ]

        if entries:
            # Single batch: either every synthesized entry lands or none does
            self.db.add_all(entries)
            self.safe_commit("Error auto-regularizing time entries", resource_type="TimeEntry")
            for entry in entries:
                self.db.refresh(entry)
            redis_service.invalidate(redis_service.today_key(employee.id))

        added_minutes = sum(item.minutes for item in planned)
        self.log_service_action(
            "auto_regularize", "TimeEntry",
            extra_data={
                "user_id": str(employee.id),
                "entries_created": len(entries),
                "added_minutes": added_minutes,
                "regularized_by": str(caller.id)
            }
        )

        return {
            "employee_id": employee.id,
            "worked_hours": round(worked_minutes / 60, 2),
            "added_hours": round(added_minutes / 60, 2),
            "total_hours": round((worked_minutes + added_minutes) / 60, 2),
            "entries": entries
        }

    # Reporting

    def working_hours_summary(
        self,
        employee_id,
        start_date: date,
        end_date: date,
        caller: Profile
    ) -> Dict[str, Any]:
        """Worked hours against the expected hours of the range's working days."""
        validate_date_range(start_date, end_date, max_days=366)
        if employee_id is None or employee_id == caller.id:
            employee = caller
        else:
            employee = self.get_employee_for_admin(employee_id, caller)

        entries = self.db.query(TimeEntry).filter(
            and_(
                TimeEntry.user_id == employee.id,
                TimeEntry.status == EntryStatus.CHECKED_OUT,
                TimeEntry.date >= start_date,
                TimeEntry.date <= end_date
            )
        ).all()
        total_hours = round(sum(parse_duration_hours(entry.total_hours) for entry in entries), 1)

        working_days = {
            start_date + timedelta(days=offset)
            for offset in range((end_date - start_date).days + 1)
            if (start_date + timedelta(days=offset)).weekday() < 5
        }

        vacations = self.db.query(VacationRequest).filter(
            and_(
                VacationRequest.user_id == employee.id,
                VacationRequest.status == RequestStatus.APPROVED,
                VacationRequest.start_date <= end_date,
                VacationRequest.end_date >= start_date
            )
        ).all()
        vacation_days = set()
        for vacation in vacations:
            day = max(vacation.start_date, start_date)
            while day <= min(vacation.end_date, end_date):
                if day in working_days:
                    vacation_days.add(day)
                day += timedelta(days=1)

        effective_days = len(working_days) - len(vacation_days)

        return {
            "employee_id": employee.id,
            "start_date": start_date,
            "end_date": end_date,
            "total_hours": total_hours,
            "working_days": len(working_days),
            "vacation_days": len(vacation_days),
            "effective_working_days": effective_days,
            "expected_hours": effective_days * settings.hours_per_day
        }
