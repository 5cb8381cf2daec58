"""
Custom exception classes for the application.

Every error carries a stable code, an HTTP status and a details dict
so routes can render the standard error envelope.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "RECORD_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with the current state of a resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# RECORD STORE ERRORS
# ===================

class RecordNotFoundError(NotFoundError):
    """Account or subject record not found."""

    def __init__(self, record_kind: str, record_id: str):
        super().__init__(
            resource=record_kind,
            identifier=record_id,
            code=f"{record_kind.upper()}_NOT_FOUND"
        )


# ===================
# SUGGESTION SERVICE ERRORS
# ===================

class SuggestionServiceError(ExternalServiceError):
    """Suggestion service could not be reached or failed."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="suggestion_service",
            message=message,
            details=details
        )


class SuggestionResponseError(AppError):
    """Suggestion service answered with something that does not match the response schema."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="SUGGESTION_RESPONSE_INVALID",
            message=message,
            status_code=502,
            details=details
        )


# ===================
# CONVERSION ERRORS
# ===================

class ValueConversionError(ValidationError):
    """Value cannot be converted to the declared attribute type."""

    def __init__(self, value: Any, target_type: str, reason: Optional[str] = None):
        super().__init__(
            code="VALUE_CONVERSION_FAILED",
            message=f"Cannot convert {type(value).__name__} to {target_type}",
            details={
                "value": repr(value)[:100],
                "target_type": target_type,
                "reason": reason,
            }
        )


# ===================
# RUN ERRORS
# ===================

class RunCancelledError(ConflictError):
    """Suggestion run was cancelled before it finished."""

    def __init__(self, run_id: Optional[str] = None):
        super().__init__(
            code="RUN_CANCELLED",
            message="Mapping suggestion run was cancelled",
            details={"run_id": run_id}
        )


class RunAlreadyActiveError(ConflictError):
    """A run with this id is already in progress."""

    def __init__(self, run_id: str):
        super().__init__(
            code="RUN_ALREADY_ACTIVE",
            message=f"Mapping suggestion run '{run_id}' is already in progress",
            details={"run_id": run_id}
        )


class RunNotFoundError(NotFoundError):
    """Suggestion run not found."""

    def __init__(self, run_id: str):
        super().__init__(
            resource="Run",
            identifier=run_id,
            code="RUN_NOT_FOUND"
        )


class ProgressPersistenceError(AppError):
    """Run progress could not be persisted (500)."""

    def __init__(self, run_id: str, message: str):
        super().__init__(
            code="PROGRESS_PERSISTENCE_FAILED",
            message=f"Could not persist progress: {message}",
            status_code=500,
            details={"run_id": run_id}
        )
