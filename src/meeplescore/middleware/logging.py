# src/meeplescore/middleware/logging.py

"""Request/response logging middleware for the MeepleScore API."""

import logging
import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("meeplescore.api")

REQUEST_ID_HEADER = "X-Request-ID"

# Requests slower than this are logged at WARNING
SLOW_REQUEST_MS = 1000.0

# Paths polled by monitoring; not worth a log line per hit
QUIET_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request and its outcome, tagged with a request ID.

    A client-supplied X-Request-ID is reused so a score submission can be
    traced from the frontend through to the stats recalculation it queues.
    Otherwise a short random ID is generated. Either way it is echoed back
    on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        path = request.url.path
        quiet = path in QUIET_PATHS
        start = time.perf_counter()

        if not quiet:
            logger.info(
                "[%s] %s %s%s",
                request_id,
                request.method,
                path,
                f"?{request.query_params}" if request.query_params else "",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": path,
                    "client_ip": request.client.host if request.client else None,
                },
            )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.error(
                "[%s] %s %s -> ERROR (%.2fms): %s",
                request_id,
                request.method,
                path,
                duration_ms,
                e,
                extra={
                    "request_id": request_id,
                    "path": path,
                    "duration_ms": round(duration_ms, 2),
                },
                exc_info=True,
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        if not quiet:
            level = logging.WARNING if duration_ms > SLOW_REQUEST_MS else logging.INFO
            logger.log(
                level,
                "[%s] %s %s -> %d (%.2fms)",
                request_id,
                request.method,
                path,
                response.status_code,
                duration_ms,
                extra={
                    "request_id": request_id,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                },
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response  # type: ignore[no-any-return]
