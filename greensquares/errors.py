"""API error envelope.

Every failure response has the shape ``{"success": false, "error": "..."}``,
optionally with extra diagnostic keys.
"""

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from greensquares.utils.logging import get_logger

logger = get_logger(__name__)

NOT_FOUND_MESSAGE = "Endpoint not found"
INTERNAL_ERROR_MESSAGE = "Something went wrong!"
INVALID_PAYLOAD_MESSAGE = "Invalid request payload"


class APIError(Exception):
    """Error raised by routes and dependencies, rendered as a JSON failure."""

    def __init__(self, status_code: int, error: str, **extra: Any) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.extra = extra

    def to_response(self) -> JSONResponse:
        content = {"success": False, "error": self.error, **self.extra}
        return JSONResponse(status_code=self.status_code, content=content)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return exc.to_response()


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render framework-raised HTTP errors (unknown routes, wrong methods)."""
    # Wrong methods on known paths read as unknown routes too
    if exc.status_code in (404, 405):
        return APIError(404, NOT_FOUND_MESSAGE).to_response()
    if exc.status_code >= 500:
        return APIError(exc.status_code, INTERNAL_ERROR_MESSAGE).to_response()
    return APIError(exc.status_code, str(exc.detail)).to_response()


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return APIError(400, INVALID_PAYLOAD_MESSAGE).to_response()


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return APIError(500, INTERNAL_ERROR_MESSAGE).to_response()
