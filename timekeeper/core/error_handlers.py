"""
Global Error Handlers for the Timekeeper HR Service
"""

import logging
import traceback
from typing import Dict, Any
from datetime import datetime

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError, HTTPException
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import (
    SQLAlchemyError,
    IntegrityError,
    DataError,
    OperationalError,
    InvalidRequestError
)
from psycopg2.errors import (
    UniqueViolation,
    ForeignKeyViolation,
    InvalidTextRepresentation,
    ConnectionException
)

from timekeeper.core.exceptions import BaseAPIException
from timekeeper.core.config import settings

# Set up logger
logger = logging.getLogger(__name__)


def create_error_response(
    status_code: int,
    detail: str,
    error_code: str = None,
    error_data: Dict[str, Any] = None,
    request_id: str = None,
    headers: Dict[str, str] = None
) -> JSONResponse:
    """Create the uniform error body returned for every failed request."""

    content = {
        "error": True,
        "status_code": status_code,
        "detail": detail,
        "timestamp": datetime.utcnow().isoformat(),
    }

    if error_code:
        content["error_code"] = error_code

    if error_data:
        content["error_data"] = error_data

    if request_id:
        content["request_id"] = request_id

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        headers=headers
    )


def _request_context(request: Request) -> Dict[str, Any]:
    return {
        "request_id": getattr(request.state, "request_id", None),
        "path": request.url.path,
        "method": request.method
    }


async def base_api_exception_handler(request: Request, exc: BaseAPIException) -> JSONResponse:
    """Handle custom API exceptions."""
    context = _request_context(request)

    logger.warning(
        f"API Exception: {exc.error_code or 'UNKNOWN'} - {exc.detail}",
        extra={"status_code": exc.status_code, "error_code": exc.error_code, **context}
    )

    return create_error_response(
        status_code=exc.status_code,
        detail=exc.detail,
        error_code=exc.error_code,
        error_data=exc.error_data,
        request_id=context["request_id"],
        headers=exc.headers
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle plain FastAPI / Starlette HTTP exceptions."""
    context = _request_context(request)

    logger.warning(
        f"HTTP Exception: {exc.status_code} - {exc.detail}",
        extra={"status_code": exc.status_code, **context}
    )

    return create_error_response(
        status_code=exc.status_code,
        detail=str(exc.detail),
        error_code="HTTP_EXCEPTION",
        request_id=context["request_id"],
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body / query validation errors."""
    context = _request_context(request)

    validation_errors = [
        {
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    logger.warning(
        f"Validation Error: {len(validation_errors)} validation error(s)",
        extra={"validation_errors": validation_errors, **context}
    )

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail="Request validation failed",
        error_code="VALIDATION_ERROR",
        error_data={"validation_errors": validation_errors},
        request_id=context["request_id"]
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle database errors that escaped the service layer."""
    context = _request_context(request)
    orig = getattr(exc, "orig", None)

    if isinstance(exc, IntegrityError):
        if isinstance(orig, UniqueViolation):
            detail, error_code, status_code = (
                "Resource already exists with the provided data", "DUPLICATE_RESOURCE", status.HTTP_409_CONFLICT
            )
        elif isinstance(orig, ForeignKeyViolation):
            detail, error_code, status_code = (
                "Referenced resource does not exist", "INVALID_REFERENCE", status.HTTP_400_BAD_REQUEST
            )
        else:
            detail, error_code, status_code = (
                "Data integrity constraint violated", "INTEGRITY_ERROR", status.HTTP_409_CONFLICT
            )
    elif isinstance(exc, DataError):
        if isinstance(orig, InvalidTextRepresentation):
            detail, error_code = "Invalid data format provided", "INVALID_DATA_FORMAT"
        else:
            detail, error_code = "Invalid data provided", "DATA_ERROR"
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, OperationalError):
        if isinstance(orig, ConnectionException):
            detail, error_code, status_code = (
                "Database connection failed", "DATABASE_CONNECTION_ERROR", status.HTTP_503_SERVICE_UNAVAILABLE
            )
        else:
            detail, error_code, status_code = (
                "Database operation failed", "DATABASE_OPERATION_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR
            )
    elif isinstance(exc, InvalidRequestError):
        detail, error_code, status_code = (
            "Invalid database request", "INVALID_DB_REQUEST", status.HTTP_400_BAD_REQUEST
        )
    else:
        detail, error_code, status_code = (
            "Database error occurred", "DATABASE_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    logger.error(
        f"Database Error: {error_code} - {detail}",
        extra={"exception_type": type(exc).__name__, "error_details": str(exc), **context}
    )

    error_data = None
    if settings.debug:
        error_data = {"exception_type": type(exc).__name__, "original_error": str(exc)}

    return create_error_response(
        status_code=status_code,
        detail=detail,
        error_code=error_code,
        error_data=error_data,
        request_id=context["request_id"]
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other unhandled exceptions."""
    context = _request_context(request)

    logger.error(
        f"Unhandled Exception: {type(exc).__name__} - {str(exc)}",
        extra={"exception_type": type(exc).__name__, "traceback": traceback.format_exc(), **context}
    )

    if settings.debug:
        detail = f"Internal server error: {str(exc)}"
        error_data = {"exception_type": type(exc).__name__}
    else:
        detail = "An unexpected error occurred. Please try again later."
        error_data = None

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail,
        error_code="INTERNAL_SERVER_ERROR",
        error_data=error_data,
        request_id=context["request_id"]
    )


# Error handler mapping
ERROR_HANDLERS = {
    BaseAPIException: base_api_exception_handler,
    HTTPException: http_exception_handler,
    StarletteHTTPException: http_exception_handler,
    RequestValidationError: validation_exception_handler,
    SQLAlchemyError: sqlalchemy_exception_handler,
    Exception: generic_exception_handler,
}


def register_error_handlers(app):
    """Register all error handlers with the FastAPI app."""

    for exception_class, handler in ERROR_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)

    logger.info("Error handlers registered successfully")
