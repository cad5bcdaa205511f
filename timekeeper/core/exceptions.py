"""
Custom Exception Classes for the Timekeeper HR Service
"""

from typing import Any, Dict, List, Optional
from fastapi import HTTPException, status


class BaseAPIException(HTTPException):
    """Base exception class for API errors with enhanced error details."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        error_data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.error_data = error_data or {}


# Authentication & Authorization Exceptions
class AuthenticationError(BaseAPIException):
    """Authentication failed."""

    def __init__(self, detail: str = "Authentication failed", error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="AUTH_FAILED",
            error_data=error_data,
            headers={"WWW-Authenticate": "Bearer"}
        )


class InvalidTokenError(BaseAPIException):
    """Invalid or expired token."""

    def __init__(self, detail: str = "Invalid or expired token", error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code="INVALID_TOKEN",
            error_data=error_data,
            headers={"WWW-Authenticate": "Bearer"}
        )


class InsufficientPermissionsError(BaseAPIException):
    """User doesn't have required permissions."""

    def __init__(self, detail: str = "Insufficient permissions", error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="INSUFFICIENT_PERMISSIONS",
            error_data=error_data
        )


# Resource Exceptions
class ResourceNotFoundError(BaseAPIException):
    """Requested resource not found."""

    def __init__(self, resource_type: str, resource_id: str = None, error_data: Optional[Dict[str, Any]] = None):
        detail = f"{resource_type} not found"
        if resource_id:
            detail += f" (ID: {resource_id})"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="RESOURCE_NOT_FOUND",
            error_data={"resource_type": resource_type, "resource_id": resource_id, **(error_data or {})}
        )


class ResourceAlreadyExistsError(BaseAPIException):
    """Resource already exists."""

    def __init__(
        self,
        resource_type: str,
        field: str = None,
        value: str = None,
        error_data: Optional[Dict[str, Any]] = None,
        detail: str = None
    ):
        if detail is None:
            detail = f"{resource_type} already exists"
            if field and value:
                detail += f" with {field}: {value}"

        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="RESOURCE_ALREADY_EXISTS",
            error_data={"resource_type": resource_type, "field": field, "value": value, **(error_data or {})}
        )


class ResourceInactiveError(BaseAPIException):
    """Resource is inactive or disabled."""

    def __init__(self, resource_type: str, resource_id: str = None, error_data: Optional[Dict[str, Any]] = None):
        detail = f"{resource_type} is inactive"
        if resource_id:
            detail += f" (ID: {resource_id})"

        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="RESOURCE_INACTIVE",
            error_data={"resource_type": resource_type, "resource_id": resource_id, **(error_data or {})}
        )


# Validation Exceptions
class ValidationError(BaseAPIException):
    """Data validation failed."""

    def __init__(self, detail: str, field: str = None, value: Any = None, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code="VALIDATION_ERROR",
            error_data={"field": field, "value": value, **(error_data or {})}
        )


class InvalidFileError(BaseAPIException):
    """Invalid file uploaded."""

    def __init__(self, detail: str = "Invalid file", file_type: str = None, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="INVALID_FILE",
            error_data={"file_type": file_type, **(error_data or {})}
        )


class FileTooLargeError(BaseAPIException):
    """File size exceeds limit."""

    def __init__(self, max_size: int, actual_size: int = None, error_data: Optional[Dict[str, Any]] = None):
        detail = f"File size exceeds maximum limit of {max_size} bytes"
        if actual_size:
            detail += f" (uploaded: {actual_size} bytes)"

        super().__init__(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=detail,
            error_code="FILE_TOO_LARGE",
            error_data={"max_size": max_size, "actual_size": actual_size, **(error_data or {})}
        )


# Business Logic Exceptions
class AttendanceStateError(BaseAPIException):
    """Check-in / check-out not allowed in the current attendance state."""

    def __init__(self, detail: str, employee_id: str = None, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="ATTENDANCE_STATE_ERROR",
            error_data={"employee_id": employee_id, **(error_data or {})}
        )


class OverlappingRequestError(BaseAPIException):
    """A request overlaps an existing non-rejected request."""

    def __init__(self, detail: str = "Request overlaps an existing request", conflicting_id: str = None, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="OVERLAPPING_REQUEST",
            error_data={"conflicting_id": conflicting_id, **(error_data or {})}
        )


class InsufficientBalanceError(BaseAPIException):
    """Requested amount exceeds the available balance."""

    def __init__(self, requested: float, available: float, unit: str = "hours", error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Requested {requested:g} {unit} but only {available:g} {unit} are available",
            error_code="INSUFFICIENT_BALANCE",
            error_data={"requested": requested, "available": available, "unit": unit, **(error_data or {})}
        )


class CascadeDeleteError(BaseAPIException):
    """One or more dependent tables could not be cleaned up."""

    def __init__(self, employee_id: str, failed_tables: List[str], error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error deleting employee {employee_id}: failed on {', '.join(failed_tables)}",
            error_code="CASCADE_DELETE_FAILED",
            error_data={"employee_id": employee_id, "failed_tables": failed_tables, **(error_data or {})}
        )


# Database Exceptions
class DatabaseError(BaseAPIException):
    """Database operation failed."""

    def __init__(self, detail: str = "Database operation failed", operation: str = None, error_data: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code="DATABASE_ERROR",
            error_data={"operation": operation, **(error_data or {})}
        )
