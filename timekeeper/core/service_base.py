"""
Base Service Class with Enhanced Error Handling
"""

import logging
from typing import Any, Dict
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from timekeeper.core.exceptions import (
    DatabaseError,
    ResourceNotFoundError,
    ResourceAlreadyExistsError,
    InsufficientPermissionsError,
    ValidationError,
    InvalidFileError,
    FileTooLargeError
)
from timekeeper.employees.models import Profile, Role

logger = logging.getLogger(__name__)


class BaseService:
    """Base service class with common error handling patterns."""

    def __init__(self, db: Session):
        self.db = db

    def safe_commit(self, error_message: str = "Database operation failed", resource_type: str = "Resource") -> bool:
        """Commit the current transaction, rolling back and translating failures."""
        try:
            self.db.commit()
            return True
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Integrity error during commit: {str(e)}")
            raise ResourceAlreadyExistsError(
                resource_type=resource_type,
                error_data={"original_error": str(e.orig)}
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error during commit: {str(e)}")
            raise DatabaseError(
                detail=error_message,
                error_data={"original_error": str(e)}
            )

    def get_or_404(self, model_class, resource_id, resource_type: str = None):
        """Get resource by ID or raise 404 error."""
        try:
            resource = self.db.get(model_class, resource_id)
        except SQLAlchemyError as e:
            logger.error(f"Database error in get_or_404: {str(e)}")
            raise DatabaseError(
                detail=f"Error retrieving {resource_type or model_class.__name__}",
                error_data={"resource_id": str(resource_id), "original_error": str(e)}
            )

        if not resource:
            raise ResourceNotFoundError(
                resource_type=resource_type or model_class.__name__,
                resource_id=str(resource_id)
            )
        return resource

    def check_unique_constraint(
        self,
        model_class,
        field_name: str,
        field_value: Any,
        resource_type: str = None,
        exclude_id=None
    ):
        """Raise ResourceAlreadyExistsError if another row already holds the value."""
        query = self.db.query(model_class).filter(
            getattr(model_class, field_name) == field_value
        )

        if exclude_id:
            query = query.filter(model_class.id != exclude_id)

        if query.first():
            raise ResourceAlreadyExistsError(
                resource_type=resource_type or model_class.__name__,
                field=field_name,
                value=str(field_value)
            )

    # Tenant visibility

    def scope_to_caller(self, query, model_class, caller: Profile):
        """Restrict a query to the rows the caller may see."""
        if caller.role == Role.SUPER_ADMIN:
            return query
        if caller.role == Role.ADMIN:
            return query.filter(model_class.company_id == caller.company_id)
        owner_column = getattr(model_class, "user_id", None)
        if owner_column is None:
            owner_column = model_class.id
        return query.filter(owner_column == caller.id)

    def ensure_visible(self, record, caller: Profile, resource_type: str = None):
        """Raise 404 for records outside the caller's tenant or ownership."""
        if caller.role == Role.SUPER_ADMIN:
            return record
        if caller.role == Role.ADMIN and record.company_id == caller.company_id:
            return record
        owner_id = getattr(record, "user_id", record.id)
        if owner_id == caller.id:
            return record
        raise ResourceNotFoundError(
            resource_type=resource_type or type(record).__name__,
            resource_id=str(record.id)
        )

    def get_employee_for_admin(self, employee_id, caller: Profile) -> Profile:
        """Load a profile an admin acts upon, enforcing the company boundary."""
        employee = self.get_or_404(Profile, employee_id, "Employee")
        if caller.role == Role.SUPER_ADMIN:
            return employee
        if caller.role != Role.ADMIN or employee.company_id != caller.company_id:
            raise InsufficientPermissionsError(
                detail="Employee belongs to another company",
                error_data={"employee_id": str(employee_id)}
            )
        return employee

    def paginate_query(self, query, skip: int = 0, limit: int = 100):
        """Apply pagination to query with validation."""
        if skip < 0:
            raise ValidationError(
                detail="Skip parameter cannot be negative",
                field="skip",
                value=skip
            )

        if limit <= 0 or limit > 1000:
            raise ValidationError(
                detail="Limit parameter must be between 1 and 1000",
                field="limit",
                value=limit
            )

        return query.offset(skip).limit(limit)

    def log_service_action(
        self,
        action: str,
        resource_type: str = None,
        resource_id: str = None,
        extra_data: Dict[str, Any] = None
    ):
        """Log service actions for auditing."""
        log_data = {
            "action": action,
            "service": self.__class__.__name__
        }

        if resource_type:
            log_data["resource_type"] = resource_type
        if resource_id:
            log_data["resource_id"] = str(resource_id)
        if extra_data:
            log_data.update(extra_data)

        logger.info(f"Service action: {action}", extra=log_data)

    def handle_file_validation(
        self,
        file,
        allowed_types: list = None,
        max_size: int = None
    ):
        """Validate uploaded files."""
        if not file or not file.filename:
            raise InvalidFileError("No file provided")

        if allowed_types and file.content_type:
            if not any(file.content_type.startswith(allowed_type) for allowed_type in allowed_types):
                raise InvalidFileError(
                    detail=f"Invalid file type. Allowed types: {', '.join(allowed_types)}",
                    file_type=file.content_type,
                    error_data={"allowed_types": allowed_types}
                )

        if max_size and getattr(file, "size", None):
            if file.size > max_size:
                raise FileTooLargeError(
                    max_size=max_size,
                    actual_size=file.size
                )

        return True
