"""Exception handlers turning domain errors into structured JSON responses."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from ..exceptions import CollabException

logger = logging.getLogger(__name__)


async def collab_exception_handler(request: Request, exc: CollabException) -> JSONResponse:
    """
    Render a CollabException as ``{"error", "message", "details"}``.

    Client errors (4xx) are logged at warning level, anything else as an error.
    """
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        f"{exc.error_code.value}: {exc.message}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code,
        },
    )

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log the traceback, hide it from the client."""
    logger.error(
        "Unhandled exception",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": "Internal server error", "details": {}},
    )
