from __future__ import annotations

import logging
import os
import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

APP_ENV = os.getenv("APP_ENV", "production")
REQUEST_ID_HEADER = "X-Request-ID"

access_logger = structlog.get_logger("pestops.access")


def setup_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(format="%(message)s", level=getattr(logging, level_name, logging.INFO))
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def expose_error_detail() -> bool:
    """Only development builds put exception text into 500 bodies."""
    return APP_ENV == "development"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tags every request with an id and writes one access line per response.

    The id comes from the caller's ``X-Request-ID`` header when present and is
    bound into structlog contextvars so lifecycle log lines carry it. The
    access line includes the authenticated actor once the route resolved one.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        started = time.perf_counter()
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        access_logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
            actor_id=getattr(request.state, "actor_id", None),
        )
        return response
