"""HTTP middleware for the checkout API"""

import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from smartcart.config import settings
from smartcart.core.logging import get_logger

logger = get_logger(__name__)

MAX_REQUEST_ID_LENGTH = 64


def accept_request_id(value: str) -> bool:
    """Cart devices may send their own id; only short printable ids are reused"""
    return 0 < len(value) <= MAX_REQUEST_ID_LENGTH and value.isprintable()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Correlation id for a cart device or payment page request.

    A device that tags its order and its later status polls with the same
    X-Request-ID can find all of them in the logs. Anything unusable is
    replaced with a fresh UUID.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        inbound = request.headers.get("X-Request-ID", "")
        request_id = inbound if accept_request_id(inbound) else str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """
    Access log with duration.

    Devices poll ``/session/{id}`` and monitors hit ``/health`` constantly,
    so those successful reads are logged at DEBUG. Server errors go out at
    ERROR.
    """

    QUIET_PREFIXES = ("/health", f"{settings.API_PREFIX}/session/")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started
        response.headers["X-Process-Time"] = f"{elapsed:.6f}"

        path = request.url.path
        if response.status_code >= 500:
            log = logger.error
        elif request.method == "GET" and path.startswith(self.QUIET_PREFIXES):
            log = logger.debug
        else:
            log = logger.info
        log(
            f"{request.method} {path}",
            extra={
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "process_time": elapsed,
                "client": request.client.host if request.client else None,
                "correlation_id": getattr(request.state, "request_id", None),
            },
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Payment status and bills change underneath the client: never cache or frame them"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers.setdefault("Cache-Control", "no-store")
        return response
