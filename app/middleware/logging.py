import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.constants import XLSX_MEDIA_TYPE

logger = logging.getLogger(__name__)

QUIET_PATHS = {"/health"}


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags every request with an id (reusing the caller's ``X-Request-ID``) and logs its outcome."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        fields = {"request_id": request_id, "method": request.method, "path": request.url.path}
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"[{request_id}] {request.method} {request.url.path} failed after {_elapsed_ms(started)}ms",
                extra={**fields, "error": str(exc)},
            )
            raise

        duration_ms = _elapsed_ms(started)
        status_code = response.status_code
        summary = f"[{request_id}] {request.method} {request.url.path} - {status_code} ({duration_ms}ms)"

        # spreadsheet exports are the slow path worth spotting in the logs
        if response.headers.get("content-type", "").startswith(XLSX_MEDIA_TYPE):
            summary += " [xlsx]"

        if status_code >= 400:
            log_level = logging.WARNING
        elif request.url.path in QUIET_PATHS:
            log_level = logging.DEBUG
        else:
            log_level = logging.INFO
        logger.log(log_level, summary, extra={**fields, "status_code": status_code, "duration_ms": duration_ms})

        response.headers["X-Request-ID"] = request_id
        return response
