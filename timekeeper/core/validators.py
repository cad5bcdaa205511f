"""
Validation Utilities for the Timekeeper HR Service
"""

import re
from typing import Optional
from datetime import date, datetime

from timekeeper.core.config import settings
from timekeeper.core.exceptions import ValidationError


def validate_password(password: str, min_length: int = None) -> str:
    """Validate password length."""
    min_length = min_length or settings.min_password_length

    if not password or not isinstance(password, str):
        raise ValidationError(
            detail="Password is required",
            field="password"
        )

    if len(password) < min_length:
        raise ValidationError(
            detail=f"Password must be at least {min_length} characters long",
            field="password",
            error_data={"min_length": min_length, "actual_length": len(password)}
        )

    return password


def validate_phone(phone: str) -> Optional[str]:
    """Validate phone number format."""
    if not phone:
        return None

    digits_only = re.sub(r'\D', '', phone)

    if len(digits_only) < 9 or len(digits_only) > 15:
        raise ValidationError(
            detail="Phone number must be between 9 and 15 digits",
            field="phone",
            value=phone
        )

    return phone.strip()


def validate_date_range(start_date: date, end_date: date, max_days: int = None):
    """Validate an inclusive date range; a single day is allowed."""
    if end_date < start_date:
        raise ValidationError(
            detail="End date cannot be before start date",
            error_data={
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat()
            }
        )

    if max_days is not None and (end_date - start_date).days + 1 > max_days:
        raise ValidationError(
            detail=f"Date range cannot exceed {max_days} days",
            error_data={
                "max_days": max_days,
                "actual_days": (end_date - start_date).days + 1
            }
        )


def validate_time_order(check_in, check_out, field: str = "check_out_time"):
    """Check-out must come strictly after check-in (times or datetimes)."""
    if check_in is None or check_out is None:
        return
    if check_out <= check_in:
        raise ValidationError(
            detail="Check-out time must be after check-in time",
            field=field,
            value=str(check_out),
            error_data={"check_in": str(check_in)}
        )


def normalize_entry_timestamp(value: datetime, day: date, field: str) -> datetime:
    """Convert to naive local time and require it to fall on the entry's date."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    if value.date() != day:
        raise ValidationError(
            detail=f"Time must fall on {day.isoformat()}",
            field=field,
            value=value.isoformat()
        )
    return value


def validate_not_future(value: date, today: date, field: str = "date"):
    if value > today:
        raise ValidationError(
            detail="Date cannot be in the future",
            field=field,
            value=value.isoformat()
        )


def validate_month(month: int, year: int):
    if month < 1 or month > 12:
        raise ValidationError(
            detail="Month must be between 1 and 12",
            field="month",
            value=month
        )
    if year < 2000 or year > datetime.now().year + 1:
        raise ValidationError(
            detail=f"Year must be between 2000 and {datetime.now().year + 1}",
            field="year",
            value=year
        )


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe storage."""
    if not filename:
        return "unnamed_file"

    # Remove path components
    filename = filename.split('/')[-1].split('\\')[-1]

    # Remove or replace dangerous characters
    filename = re.sub(r'[<>:"/\\|?*]', '_', filename)

    filename = filename.strip('. ')

    if not filename:
        return "unnamed_file"

    return filename[:255]
