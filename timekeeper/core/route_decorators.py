"""
Route decorators shared by the privileged endpoints
"""

import functools
import logging
from typing import Callable, Any
from fastapi import Request

logger = logging.getLogger(__name__)


def _find_request(args, kwargs) -> Request:
    for value in list(args) + list(kwargs.values()):
        if isinstance(value, Request):
            return value
    return None


def log_route_access(func: Callable) -> Callable:
    """Log who called a route, for auditing privileged operations."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> Any:
        request = _find_request(args, kwargs)
        current_user = kwargs.get("current_user")

        # "module" is reserved on LogRecord
        log_data = {
            "function": func.__name__,
            "handler_module": func.__module__
        }

        if request:
            log_data.update({
                "method": request.method,
                "path": request.url.path,
                "client_ip": request.client.host if request.client else None
            })

        if current_user:
            log_data.update({
                "user_id": str(current_user.id),
                "user_email": current_user.email,
                "user_role": current_user.role,
                "company_id": str(current_user.company_id) if current_user.company_id else None
            })

        logger.info(f"Route access: {func.__name__}", extra=log_data)

        return await func(*args, **kwargs)

    return wrapper
