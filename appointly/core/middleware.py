"""Request tracing and access logging for the scheduling API"""
import logging
import time
import uuid

from starlette.requests import Request

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
RESPONSE_TIME_HEADER = "X-Response-Time-Ms"


def request_surface(path: str) -> str:
    """Which part of the API a path belongs to: public, dashboard, health or other."""
    if path.startswith("/api/v1/public"):
        return "public"
    if path.startswith("/api/v1/dashboard"):
        return "dashboard"
    if path.startswith("/health"):
        return "health"
    return "other"


async def correlation_id_middleware(request: Request, call_next):
    """Reuse the caller's correlation id or mint one, and echo it back"""
    correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
    request.state.correlation_id = correlation_id

    response = await call_next(request)
    response.headers[CORRELATION_HEADER] = correlation_id
    return response


async def request_logging_middleware(request: Request, call_next):
    """
    One access-log line per request.

    Public calls carry the staff id they target so availability lookups and
    booking conflicts for one calendar can be followed. Health checks log at
    debug level only.
    """
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
    response.headers[RESPONSE_TIME_HEADER] = str(elapsed_ms)

    surface = request_surface(request.url.path)
    staff_id = request.query_params.get("staffId") or request.query_params.get("userId")
    level = logging.DEBUG if surface == "health" else logging.INFO
    if response.status_code == 409:
        level = logging.WARNING

    logger.log(
        level,
        f"[{surface}] {request.method} {request.url.path} -> {response.status_code} in {elapsed_ms}ms",
        extra={
            "correlation_id": getattr(request.state, "correlation_id", None),
            "surface": surface,
            "staff_id": staff_id,
            "status_code": response.status_code,
            "duration_ms": elapsed_ms,
        }
    )
    return response
