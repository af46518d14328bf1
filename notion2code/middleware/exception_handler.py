"""Render AppException subclasses as ``{error, message, details}`` JSON."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from ..exceptions import AppException

logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Log the failure and return its structured body with the mapped status.

    Upstream and server faults (5xx) log at ERROR; caller mistakes and
    Notion 4xx passthroughs log at WARNING.
    """
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        "%s %s failed: %s",
        request.method,
        request.url.path,
        exc.message,
        extra={
            "error_code": exc.error_code.value,
            "status_code": exc.status_code,
            "details": exc.details,
        },
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
