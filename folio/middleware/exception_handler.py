"""Exception handler for structured error responses."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from ..exceptions import FolioException

logger = logging.getLogger(__name__)


async def folio_exception_handler(request: Request, exc: FolioException) -> JSONResponse:
    """Log the error and render it as ``{"error", "message", "details"}``.

    Server-side failures (5xx) log at ERROR; caller mistakes and denials at
    INFO so they do not drown real incidents.
    """
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(
        level,
        f"FolioException: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
