"""
Request tracing for the quotation API.

A client may send its own ``X-Request-ID`` to follow one action across
retries; otherwise a uuid4 is issued. The id is published through
``logging_config.current_request_id`` for the duration of the request, so
every cascade log line written while serving it carries it.
"""
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from quotedesk.services.logging_config import current_request_id

logger = logging.getLogger("quotedesk-api.middleware")

SKIP_LOG_PATHS = {"/health", "/metrics"}


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Sets ``X-Request-ID`` / ``X-Process-Time`` and logs one line per request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = current_request_id.set(request_id)
        start_time = time.perf_counter()
        try:
            response: Response = await call_next(request)
        finally:
            current_request_id.reset(token)

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(duration_ms)

        if request.url.path not in SKIP_LOG_PATHS:
            # 5xx at ERROR, everything else at INFO
            level = logging.ERROR if response.status_code >= 500 else logging.INFO
            logger.log(
                level,
                "%s %s -> %s", request.method, request.url.path, response.status_code,
                extra={
                    "http_method": request.method,
                    "http_path": request.url.path,
                    "http_status": response.status_code,
                    "request_id": request_id,
                    "duration_ms": duration_ms,
                },
            )

        return response
