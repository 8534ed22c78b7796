"""Request context middleware — request id and access log.

Learn: Every request gets an id, either from the incoming X-Request-ID
header or a fresh UUID. It is bound to structlog's contextvars, so every
log line emitted while serving the request (service, cache, CubeCobra)
carries it without being passed around.

For the draft stream, "request.completed" fires when the response
starts, not when the client disconnects; the relay logs its own
"draft_stream.disconnected".
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id and log one line per request."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        response: Response = await call_next(request)
        logger.info(
            "request.completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        response.headers["X-Request-ID"] = request_id
        return response
