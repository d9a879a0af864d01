from __future__ import annotations

import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from shared.logging.fields import TRACE_ID, USER_ID
from shared.logging.logger import clear_correlation_context, get_logger, set_correlation_context
from shared.observability.propagation import current_trace_id

logger = get_logger("hubp2p.http")


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Binds trace and caller identifiers to every log line of a request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        context = {TRACE_ID: current_trace_id() or ""}
        user_id = request.headers.get("X-User-Id", "").strip()
        if user_id:
            context[USER_ID] = user_id
        set_correlation_context(context)

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            logger.info(
                "http_request_completed",
                extra={
                    "extra_fields": {
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": status_code,
                        "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                    }
                },
            )
            clear_correlation_context()
