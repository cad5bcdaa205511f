"""
HTTP middleware for the Timekeeper HR Service
"""

import time
import uuid
import logging
from typing import Callable, Dict
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from fastapi import status
from fastapi.responses import JSONResponse

from timekeeper.core.config import settings

logger = logging.getLogger(__name__)

UNTRACKED_PATHS = ("/health", "/")


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    """Tag every request with an id and log its duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.perf_counter()

        logger.debug(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "client_ip": request.client.host if request.client else None,
            }
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"Request failed: {request.method} {request.url.path} - {type(exc).__name__}",
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "exception": str(exc),
                    "process_time": time.perf_counter() - start_time,
                }
            )
            raise

        process_time = time.perf_counter() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(round(process_time, 4))

        if request.url.path not in UNTRACKED_PATHS:
            logger.info(
                f"{request.method} {request.url.path} - {response.status_code} ({process_time:.3f}s)",
                extra={
                    "request_id": request_id,
                    "status_code": response.status_code,
                    "process_time": process_time,
                }
            )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if not settings.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


class RateLimitingMiddleware(BaseHTTPMiddleware):
    """Fixed one-minute window per client IP.

    Counters live in process memory, so the limit applies per worker.
    """

    def __init__(self, app, requests_per_minute: int = 120):
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.windows: Dict[str, list] = {}
        self.last_prune = time.monotonic()

    def prune(self, now: float):
        """Forget clients whose window has expired."""
        expired = [ip for ip, window in self.windows.items() if now - window[0] >= 60]
        for ip in expired:
            del self.windows[ip]
        self.last_prune = now

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in UNTRACKED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.monotonic()
        if now - self.last_prune >= 60:
            self.prune(now)

        window = self.windows.get(client_ip)
        if window is None or now - window[0] >= 60:
            window = [now, 0]
            self.windows[client_ip] = window

        if window[1] >= self.requests_per_minute:
            logger.warning(
                f"Rate limit exceeded for IP: {client_ip}",
                extra={"client_ip": client_ip, "path": request.url.path, "method": request.method}
            )
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "error": True,
                    "status_code": 429,
                    "detail": "Rate limit exceeded. Please try again later.",
                    "error_code": "RATE_LIMIT_EXCEEDED"
                },
                headers={"Retry-After": str(max(1, int(60 - (now - window[0]))))}
            )

        window[1] += 1
        return await call_next(request)


class RequestSizeMiddleware(BaseHTTPMiddleware):
    """Reject bodies whose declared length exceeds the limit."""

    def __init__(self, app, max_request_size: int):
        super().__init__(app)
        self.max_request_size = max_request_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")

        if content_length and content_length.isdigit() and int(content_length) > self.max_request_size:
            logger.warning(
                f"Request body too large: {content_length} bytes (max: {self.max_request_size})",
                extra={"path": request.url.path, "method": request.method}
            )
            return JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={
                    "error": True,
                    "status_code": 413,
                    "detail": f"Request body too large. Maximum size: {self.max_request_size} bytes",
                    "error_code": "REQUEST_TOO_LARGE",
                    "error_data": {
                        "max_size": self.max_request_size,
                        "actual_size": int(content_length)
                    }
                }
            )

        return await call_next(request)


def add_middleware(app):
    """Register middleware; the last one added runs first."""
    app.add_middleware(RequestSizeMiddleware, max_request_size=settings.max_request_size)

    if settings.enable_rate_limiting:
        app.add_middleware(RateLimitingMiddleware, requests_per_minute=settings.rate_limit_per_minute)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestTrackingMiddleware)

    logger.info("Middleware registered successfully")
