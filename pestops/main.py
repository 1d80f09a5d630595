from __future__ import annotations

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pestops.api.routers import clients, identity, notifications, reports
from pestops.infra.db import check_db_ready
from pestops.infra.events import event_bus
from pestops.infra.logging import RequestIdMiddleware, expose_error_detail, setup_logging
from pestops.services.notification_service import register_notification_handlers

setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="pestops",
    description="Pest-control service report lifecycle and equipment reconciliation.",
    version="0.1.0",
)

app.add_middleware(RequestIdMiddleware)

app.include_router(identity.router, prefix="/api/identity", tags=["identity"])
app.include_router(clients.router, prefix="/api/clients", tags=["clients"])
app.include_router(reports.router, prefix="/api/reports", tags=["reports"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])

register_notification_handlers(event_bus)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": str(error.get("msg", "")),
        }
        for error in exc.errors()
    ]
    logger.info("request_validation_failed", path=request.url.path, errors=len(errors))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "validation failed", "errors": errors},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, method=request.method)
    content: dict[str, str] = {"detail": "internal server error"}
    if expose_error_detail():
        content["error"] = str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/readyz")
def readyz() -> dict[str, object]:
    db_ok = check_db_ready()
    checks = {"db": "ok" if db_ok else "fail"}
    if not db_ok:
        raise HTTPException(
            status_code=503,
            detail={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}
