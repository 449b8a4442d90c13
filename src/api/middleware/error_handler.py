"""Global error handling middleware for consistent error responses."""

import logging
import traceback
from typing import Any, Callable

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for API errors.

    Use this class to raise application-specific errors that should
    be returned to the client with a specific status code and message.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_type: str = "api_error",
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code to return.
            error_type: Error category/type for client handling.
            details: Optional additional error details.
        """
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        self.details = details
        super().__init__(message)


class NotFoundError(APIError):
    """Resource not found error."""

    def __init__(self, message: str = "Resource not found", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_type="not_found",
            details=details,
        )


class ValidationError(APIError):
    """Request validation error (missing or malformed field)."""

    def __init__(self, message: str = "Validation error", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_type="validation_error",
            details=details,
        )


class AuthorizationError(APIError):
    """Authorization failure error."""

    def __init__(self, message: str = "Access denied", details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_type="forbidden",
            details=details,
        )


class BadRequestError(APIError):
    """Business rule violation reported to the client as a 400."""

    error_type = "bad_request"

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_type=self.error_type,
            details=details,
        )


class ExpiredError(BadRequestError):
    """Invite is past its expiry."""

    error_type = "expired"

    def __init__(self, message: str = "Invite has expired") -> None:
        super().__init__(message)


class AlreadyProcessedError(BadRequestError):
    """Invite is no longer pending."""

    error_type = "already_processed"

    def __init__(self, message: str = "Invite already processed") -> None:
        super().__init__(message)


class DuplicateInviteError(BadRequestError):
    """A pending invite already exists for the same inviter, invitee and type."""

    error_type = "duplicate_invite"

    def __init__(self, message: str = "Invite already sent to this email") -> None:
        super().__init__(message)


class EmailMismatchError(BadRequestError):
    """Invite was addressed to a different e-mail."""

    error_type = "email_mismatch"

    def __init__(self, message: str = "Invite not intended for this email address") -> None:
        super().__init__(message)


class InvalidCodeError(BadRequestError):
    """No user holds the given referral code."""

    error_type = "invalid_code"

    def __init__(self, message: str = "Invalid referral code") -> None:
        super().__init__(message)


class AlreadyReferredError(BadRequestError):
    """User already has a referral record."""

    error_type = "already_referred"

    def __init__(self, message: str = "User already used a referral code") -> None:
        super().__init__(message)


class SelfReferralError(BadRequestError):
    """User tried to apply their own referral code."""

    error_type = "self_referral"

    def __init__(self, message: str = "You cannot use your own referral code") -> None:
        super().__init__(message)


def create_error_response(
    error_type: str,
    message: str,
    status_code: int,
    details: list[dict[str, Any]] | None = None,
    request_id: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Create a standardized JSON error response.

    Args:
        error_type: Error category for client handling.
        message: Human-readable error description.
        status_code: HTTP status code.
        details: Optional error details.
        request_id: Optional request ID for tracing.
        headers: Optional extra response headers.

    Returns:
        JSONResponse: Formatted error response.
    """
    error_response = ErrorResponse.from_exception(
        error_type=error_type,
        message=message,
        details=details,
        request_id=request_id,
    )
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


_HTTP_ERROR_TYPES = {
    status.HTTP_400_BAD_REQUEST: "validation_error",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
}


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Format FastAPI HTTP exceptions like every other error."""
    request_id = request.headers.get("X-Request-ID")
    logger.warning(
        "HTTP exception: %s - %s",
        exc.status_code,
        exc.detail,
        extra={"request_id": request_id},
    )
    return create_error_response(
        error_type=_HTTP_ERROR_TYPES.get(exc.status_code, "http_error"),
        message=str(exc.detail),
        status_code=exc.status_code,
        request_id=request_id,
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report body/query validation failures as 400 validation errors."""
    request_id = request.headers.get("X-Request-ID")
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid request"))

    logger.warning("Request validation failed: %s", message, extra={"request_id": request_id})
    return create_error_response(
        error_type="validation_error",
        message=message,
        status_code=status.HTTP_400_BAD_REQUEST,
        details=[
            {"loc": e.get("loc"), "msg": e.get("msg", ""), "type": e.get("type", "error")}
            for e in errors
        ],
        request_id=request_id,
    )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Format application errors raised inside route handlers."""
    request_id = request.headers.get("X-Request-ID")
    logger.warning(
        "API error: %s - %s",
        exc.error_type,
        exc.message,
        extra={"request_id": request_id, "status_code": exc.status_code},
    )
    return create_error_response(
        error_type=exc.error_type,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        request_id=request_id,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for application and framework exceptions."""
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)


async def error_handler_middleware(request: Request, call_next: Callable[[Request], Any]) -> Response:
    """Middleware to catch and format all exceptions.

    Ensures consistent error response format across the application.
    Logs full stack traces for debugging while returning safe messages to clients.

    Args:
        request: The incoming request.
        call_next: Next middleware or route handler.

    Returns:
        Response: Either the successful response or formatted error response.
    """
    # Extract request ID if present (can be set by upstream middleware/load balancer)
    request_id = request.headers.get("X-Request-ID")

    try:
        response = await call_next(request)
        return response

    except APIError as e:
        # Application-specific errors - log at warning level
        logger.warning(
            "API error: %s - %s",
            e.error_type,
            e.message,
            extra={"request_id": request_id, "status_code": e.status_code},
        )
        return create_error_response(
            error_type=e.error_type,
            message=e.message,
            status_code=e.status_code,
            details=e.details,
            request_id=request_id,
        )

    except Exception as e:
        # Unexpected exceptions - log full stack trace
        logger.error(
            "Unhandled exception: %s\n%s",
            str(e),
            traceback.format_exc(),
            extra={"request_id": request_id},
        )
        return create_error_response(
            error_type="internal_error",
            message="An unexpected error occurred",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            request_id=request_id,
        )
