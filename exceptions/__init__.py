"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,
    DatabaseError,

    # Record store
    RecordNotFoundError,

    # Suggestion service
    SuggestionServiceError,
    SuggestionResponseError,

    # Conversion
    ValueConversionError,

    # Runs
    RunCancelledError,
    RunAlreadyActiveError,
    RunNotFoundError,
    ProgressPersistenceError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",
    "DatabaseError",

    # Record store
    "RecordNotFoundError",

    # Suggestion service
    "SuggestionServiceError",
    "SuggestionResponseError",

    # Conversion
    "ValueConversionError",

    # Runs
    "RunCancelledError",
    "RunAlreadyActiveError",
    "RunNotFoundError",
    "ProgressPersistenceError",
]
