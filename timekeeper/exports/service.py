from typing import List, Tuple
from datetime import date
import csv
import io
import logging
from sqlalchemy.orm import Session, joinedload
from timekeeper.attendance.models import TimeEntry
from timekeeper.vacations.models import VacationRequest
from timekeeper.schedule_changes.models import ScheduleChangeRequest
from timekeeper.employees.models import Profile
from timekeeper.core.service_base import BaseService
from timekeeper.core.validators import validate_date_range
from timekeeper.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

EXPORT_KINDS = ("attendance", "vacations", "schedule_changes")

ATTENDANCE_HEADERS = [
    "Date", "Employee", "Employee ID", "Department", "Check-in Time", "Check-in Location",
    "Check-out Time", "Check-out Location", "Total Hours", "Status"
]
VACATION_HEADERS = [
    "Employee", "Employee ID", "Department", "Start Date", "End Date", "Total Days",
    "Status", "Reason", "Comments", "Requested On"
]
SCHEDULE_CHANGE_HEADERS = [
    "Employee", "Employee ID", "Department", "Date", "Current Check-in", "Current Check-out",
    "Requested Check-in", "Requested Check-out", "Reason", "Status", "Admin Comments"
]

LOCATION_UNAVAILABLE = "Not available"


def _text(value) -> str:
    if value is None:
        return ""
    if hasattr(value, "value"):
        return str(value.value)
    return str(value)


def _location(latitude, longitude) -> str:
    if latitude is None or longitude is None:
        return LOCATION_UNAVAILABLE
    return f"{latitude}, {longitude}"


def _profile_cells(profile: Profile) -> List[str]:
    if profile is None:
        return ["", "", ""]
    return [_text(profile.full_name), _text(profile.employee_id), _text(profile.department)]


def render_csv(headers: List[str], rows: List[List[str]]) -> str:
    """Every cell double-quoted, embedded quotes doubled."""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return output.getvalue()


class ExportService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def export(self, kind: str, start_date: date, end_date: date, caller: Profile) -> Tuple[str, str]:
        """Render one record kind for a date range; returns (filename, csv text)."""
        if kind not in EXPORT_KINDS:
            raise ValidationError(
                detail=f"Unknown export type. Allowed: {', '.join(EXPORT_KINDS)}",
                field="kind",
                value=kind
            )
        validate_date_range(start_date, end_date)

        builder = getattr(self, f"_{kind}_rows")
        headers, rows = builder(start_date, end_date, caller)

        self.log_service_action(
            "export_csv", extra_data={"kind": kind, "rows": len(rows), "exported_by": str(caller.id)}
        )
        return f"{kind}_{start_date.isoformat()}_{end_date.isoformat()}.csv", render_csv(headers, rows)

    def _attendance_rows(self, start_date: date, end_date: date, caller: Profile):
        query = self.scope_to_caller(self.db.query(TimeEntry), TimeEntry, caller)
        entries = query.options(joinedload(TimeEntry.employee)).filter(
            TimeEntry.date >= start_date,
            TimeEntry.date <= end_date
        ).order_by(TimeEntry.date.desc(), TimeEntry.segment).all()

        rows = []
        for entry in entries:
            profile = entry.employee
            rows.append([
                _text(entry.date),
                *_profile_cells(profile),
                entry.check_in_time.strftime("%H:%M:%S") if entry.check_in_time else "",
                _location(entry.check_in_latitude, entry.check_in_longitude),
                entry.check_out_time.strftime("%H:%M:%S") if entry.check_out_time else "",
                _location(entry.check_out_latitude, entry.check_out_longitude),
                _text(entry.total_hours),
                _text(entry.status)
            ])
        return ATTENDANCE_HEADERS, rows

    def _vacations_rows(self, start_date: date, end_date: date, caller: Profile):
        query = self.scope_to_caller(self.db.query(VacationRequest), VacationRequest, caller)
        requests = query.options(joinedload(VacationRequest.employee)).filter(
            VacationRequest.start_date >= start_date,
            VacationRequest.end_date <= end_date
        ).order_by(VacationRequest.start_date.desc()).all()

        rows = []
        for request in requests:
            rows.append([
                *_profile_cells(request.employee),
                _text(request.start_date),
                _text(request.end_date),
                _text(request.total_days),
                _text(request.status),
                _text(request.reason),
                _text(request.comments),
                request.created_at.strftime("%d/%m/%Y") if request.created_at else ""
            ])
        return VACATION_HEADERS, rows

    def _schedule_changes_rows(self, start_date: date, end_date: date, caller: Profile):
        query = self.scope_to_caller(self.db.query(ScheduleChangeRequest), ScheduleChangeRequest, caller)
        changes = query.options(joinedload(ScheduleChangeRequest.employee)).filter(
            ScheduleChangeRequest.requested_date >= start_date,
            ScheduleChangeRequest.requested_date <= end_date
        ).order_by(ScheduleChangeRequest.requested_date.desc()).all()

        rows = []
        for change in changes:
            rows.append([
                *_profile_cells(change.employee),
                _text(change.requested_date),
                _text(change.current_check_in),
                _text(change.current_check_out),
                _text(change.requested_check_in),
                _text(change.requested_check_out),
                _text(change.reason),
                _text(change.status),
                _text(change.admin_comments)
            ])
        return SCHEDULE_CHANGE_HEADERS, rows
