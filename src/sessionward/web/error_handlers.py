import structlog
from fastapi import Request
from fastapi.responses import JSONResponse, Response

from sessionward.errors import (
    AuthenticationError,
    NotFoundError,
    OriginNotAllowedError,
    ValidationError,
)

logger = structlog.get_logger(__name__)


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(request: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes.

    Authentication denials share one generic body; the specific reason only
    reaches the logs.
    """
    if isinstance(exc, AuthenticationError):
        logger.info("request_denied", path=request.url.path, reason=exc.reason or "missing_token")
        return create_json_error_response(401, "Not authenticated", "authentication_error")
    if isinstance(exc, OriginNotAllowedError):
        logger.warning("request_denied", path=request.url.path, reason=exc.reason)
        return create_json_error_response(403, "Access denied", "access_denied")
    if isinstance(exc, NotFoundError):
        return create_json_error_response(404, str(exc), "not_found")
    if isinstance(exc, ValidationError):
        return create_json_error_response(400, str(exc), "validation_error")
    return create_json_error_response(400, str(exc), "bad_request")


async def store_unavailable_handler(request: Request, exc: Exception) -> Response:
    """Transient storage failure after retries: service unavailable, never 'not authenticated'."""
    logger.error("store_unavailable", path=request.url.path, error=str(exc))
    response = create_json_error_response(503, "Service temporarily unavailable", "service_unavailable")
    response.headers["Retry-After"] = "1"
    return response


async def general_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("unexpected_error", path=request.url.path, error=type(exc).__name__)
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )

