"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. The global exception handler
converts AppError subclasses to consistent JSON responses.

Persistence failures (PyMongoError) are logged and surfaced as an opaque
StorageError. Any other exception becomes a generic 500 (with Sentry
reporting when it is configured).
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from shared.logging import get_logger

log = get_logger(__name__)


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {"error": self.message, "code": self.error_code}
        if self.field is not None:
            payload["field"] = self.field
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    status_code = 400
    error_code = "validation_error"


class AuthenticationError(AppError):
    status_code = 401
    error_code = "authentication_error"


class ForbiddenError(AppError):
    status_code = 403
    error_code = "forbidden"


class NotFoundError(AppError):
    status_code = 404
    error_code = "not_found"


class ConflictError(AppError):
    status_code = 409
    error_code = "conflict"


# ── Domain errors ─────────────────────────────────────────────────────────────


class DuplicateEmailError(ConflictError):
    error_code = "duplicate_email"

    def __init__(self, message: str = "Email already exists", **kwargs: Any) -> None:
        kwargs.setdefault("field", "email")
        super().__init__(message, **kwargs)


class CodeNotFoundOrExpiredError(AppError):
    """No live code for the key. Never says whether it expired or never existed."""

    status_code = 400
    error_code = "code_not_found_or_expired"

    def __init__(
        self,
        message: str = "OTP not found or expired. Please request a new OTP.",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)


class InvalidCodeError(AppError):
    status_code = 400
    error_code = "invalid_code"

    def __init__(
        self, message: str = "Invalid OTP. Please try again.", **kwargs: Any
    ) -> None:
        kwargs.setdefault("field", "otp")
        super().__init__(message, **kwargs)


class InvalidCredentialsError(AuthenticationError):
    error_code = "invalid_credentials"

    def __init__(self, message: str = "Invalid credentials", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class PendingApprovalError(ForbiddenError):
    error_code = "pending_approval"

    def __init__(
        self,
        message: str = (
            "Your account is pending approval. "
            "Please wait for admin approval before logging in."
        ),
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["pending_approval"] = True
        return payload


class NotVerifiedError(ForbiddenError):
    error_code = "not_verified"

    def __init__(
        self,
        message: str = "Please verify your email before logging in.",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)


class DeliveryFailedError(AppError):
    """Email transport failure.

    ``details`` carries the transport error kind, and the plaintext code when
    the development fallback is enabled.
    """

    status_code = 502
    error_code = "delivery_failed"


class StorageError(AppError):
    status_code = 500
    error_code = "storage_error"

    def __init__(
        self, message: str = "A storage error occurred.", **kwargs: Any
    ) -> None:
        super().__init__(message, **kwargs)


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            log.error(
                "app_error",
                path=request.url.path,
                code=exc.error_code,
                error=exc.message,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Malformed bodies share the 400 shape of service-level validation
        errors = exc.errors()
        loc = errors[0].get("loc", ()) if errors else ()
        field = str(loc[-1]) if len(loc) > 1 else None
        err = ValidationError(
            "Missing or invalid fields",
            field=field,
            details=[
                {"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg", "")}
                for e in errors
            ],
        )
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @app.exception_handler(PyMongoError)
    async def storage_error_handler(
        request: Request, exc: PyMongoError
    ) -> JSONResponse:
        log.error(
            "storage_failure",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        err = StorageError()
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        log.error(
            "unhandled_exception",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "An internal server error occurred.", "code": "internal_error"},
        )
