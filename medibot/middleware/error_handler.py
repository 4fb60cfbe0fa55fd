"""Global error handlers for the application."""
import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from medibot.services.report_service import ReportRenderError

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": "Request conflicts with existing data"})


async def report_error_handler(request: Request, exc: ReportRenderError):
    return JSONResponse(status_code=500, content={"detail": str(exc)})
