"""Error Hierarchy — typed, categorized exceptions for every entry-lifecycle failure.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) are recoverable and reported straight to the caller
    - Infrastructure errors (5xx) never leak driver details in the message
    - to_response() produces the REST envelope used by every handler

Design Decisions:
    - Single hierarchy with ArenaError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: identifiers for observability without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    RESOURCE_EXHAUSTED = "resource_exhausted"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Identifiers attached to an error for observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entry_id: str | None = None
    round_id: str | None = None
    sticker_id: str | None = None
    user_id: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class ArenaError(Exception):
    """Base exception for all entry-lifecycle errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "entry_id": self.context.entry_id,
                    "round_id": self.context.round_id,
                    "sticker_id": self.context.sticker_id,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors (4xx) ────────────────────────────────────────

class RoundLockedError(ArenaError):
    """Edit or delete attempted after the round started."""
    def __init__(self, round_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.round_id = ctx.round_id or round_id
        super().__init__(
            "Entries cannot be changed after the round has started",
            "ROUND_LOCKED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 409,
        )


class RoundEndedError(ArenaError):
    """Submission attempted after the round ended."""
    def __init__(self, round_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.round_id = ctx.round_id or round_id
        super().__init__(
            "This round has ended. You can no longer submit an entry.",
            "ROUND_ENDED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 409,
        )


class DuplicateSubmissionError(ArenaError):
    """A populated entry already exists for this round and user."""
    def __init__(self, entry_id: str | None = None, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.entry_id = ctx.entry_id or entry_id
        super().__init__(
            "An entry has already been submitted for this round; edit it instead",
            "DUPLICATE_SUBMISSION", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )


class ResourceExhaustedError(ArenaError):
    """Sticker usage ceiling reached."""
    def __init__(self, sticker_id: str, limit: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.sticker_id = ctx.sticker_id or sticker_id
        super().__init__(
            f"This sticker has reached its usage limit ({limit})",
            "STICKER_EXHAUSTED", ErrorCategory.RESOURCE_EXHAUSTED,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.limit = limit


class NotFoundError(ArenaError):
    """Requested round, entry, sticker or competition does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class MediaRejectedError(ArenaError):
    """Submitted media violates the competition's media rules."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "MEDIA_REJECTED", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


# ─── Infrastructure Errors (5xx / conflict) ─────────────────────

class ConcurrencyError(ArenaError):
    """Concurrent modification could not be resolved within the retry budget."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class DatabaseError(ArenaError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
