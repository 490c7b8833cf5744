"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep shapes consistent without forcing every
    error to carry every field.
    """

    hint: str
    errors: list[str]
    field: str
    product_id: str
    retry_after: int
    limit: int
    max_bytes: int
    allowed_types: list[str]
    count: int
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    status_code: ClassVar[int] = 400

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class NotFoundAppError(AppError):
    """Raised when a requested resource does not exist."""

    status_code = 404


class ConflictAppError(AppError):
    """Raised when an operation conflicts with existing state."""

    status_code = 409


@dataclass
class RateLimitedAppError(AppError):
    """Raised by admission control when a client exhausts its quota.

    Recoverable by waiting ``retry_after_seconds``; never retried internally.
    """

    retry_after_seconds: int = 0
    limit: int = 0
    reset_at: float = 0.0

    status_code = 429


class DatabaseAppError(AppError):
    """Raised when the product store fails."""

    status_code = 500


class StorageAppError(AppError):
    """Raised when writing uploaded files fails."""

    status_code = 500
