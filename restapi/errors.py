"""Mapping of core errors to HTTP responses."""

import logging

import fastapi
from fastapi import Request, status
from fastapi.responses import JSONResponse

from components.core import errors
from components.core.schemas import ErrorResponse

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    errors.ValidationError: 422,  # Unprocessable Content
    errors.NotFoundError: status.HTTP_404_NOT_FOUND,
    errors.NoAvailabilityError: status.HTTP_409_CONFLICT,
    errors.InvalidTransitionError: status.HTTP_409_CONFLICT,
    errors.InvalidStateError: status.HTTP_409_CONFLICT,
    errors.StorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
}

# Documented on every business router
ERROR_RESPONSES = {
    code: {"model": ErrorResponse} for code in sorted(set(ERROR_STATUS_CODES.values()))
}


async def tool_rent_error_handler(request: Request, exc: errors.ToolRentError) -> JSONResponse:
    """Render a core error as {"detail", "error"} with the mapped status code."""
    status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error": exc.kind},
    )


def install_error_handlers(app: fastapi.FastAPI) -> None:
    """Register the core error handler on the application."""
    app.add_exception_handler(errors.ToolRentError, tool_rent_error_handler)
