"""Error Hierarchy — typed, categorized exceptions for all roster failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Conflict and forbidden outcomes are INFO severity: callers branch on them, they are not faults
    - Store and timeout failures are CRITICAL and surface unmodified (no retry)
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with RosterBotError base: one global handler catches all
    - ErrorContext as dataclass: correlation ids travel with the error, not with the logger
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
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    FORBIDDEN = "forbidden"
    DATABASE = "database"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Correlation data attached to an error."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    channel_id: str | None = None
    message_id: str | None = None
    actor_id: str | None = None
    debug_info: dict[str, Any] | None = None


class RosterBotError(Exception):
    """Base exception for all roster bot errors."""

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

    @property
    def is_expected(self) -> bool:
        """True for named business outcomes the caller is meant to branch on."""
        return self.category in (ErrorCategory.CONFLICT, ErrorCategory.FORBIDDEN)

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
                    "channel_id": self.context.channel_id,
                    "message_id": self.context.message_id,
                    "actor_id": self.context.actor_id,
                },
            }
        }


# ─── Not Found (404) ────────────────────────────────────────────

class ResourceNotFoundError(RosterBotError):
    """Requested record does not exist (or an update/delete touched zero rows)."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class RosterNotFoundError(ResourceNotFoundError):
    """No roster is bound to the given (channel, message) location."""
    def __init__(
        self, channel_id: str, message_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.channel_id = channel_id
        ctx.message_id = message_id
        super().__init__("Roster", f"{channel_id}/{message_id}", ctx)
        self.code = "ROSTER_NOT_FOUND"


# ─── Conflict (409) ─────────────────────────────────────────────

class ParticipantConflictError(RosterBotError):
    """Requested status equals the participant's current status."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.INFO, context, 409,
        )


class AlreadyJoinedError(ParticipantConflictError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__("Already joined this roster.", "ALREADY_JOINED", context)


class AlreadyDeclinedError(ParticipantConflictError):
    def __init__(self, context: ErrorContext | None = None):
        super().__init__("Already declined this roster.", "ALREADY_DECLINED", context)


# ─── Forbidden (403) ────────────────────────────────────────────

class ForbiddenActionError(RosterBotError):
    """Actor is not allowed to perform this action on the roster."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.FORBIDDEN,
            ErrorSeverity.INFO, context, 403,
        )


class AuthorCannotActError(ForbiddenActionError):
    """The roster author cannot join, decline or cancel their own roster."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "The roster author cannot join, decline or cancel.",
            "AUTHOR_CANNOT_ACT", context,
        )


class NotAuthorError(ForbiddenActionError):
    """Only the roster author may close it."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Only the roster author can close this roster.",
            "NOT_AUTHOR", context,
        )


# ─── Validation (400) ───────────────────────────────────────────

class InvalidCapacityError(RosterBotError):
    def __init__(self, capacity: int, context: ErrorContext | None = None):
        super().__init__(
            f"Roster capacity must be at least 1, got {capacity}",
            "INVALID_CAPACITY", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.capacity = capacity


class MalformedTokenError(RosterBotError):
    """Correlation token could not be parsed."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Malformed token: {reason}",
            "MALFORMED_TOKEN", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.reason = reason


class SizeExceededError(RosterBotError):
    """Encoded token exceeds the opaque-handle size ceiling."""
    def __init__(self, size: int, limit: int, context: ErrorContext | None = None):
        super().__init__(
            f"Encoded token is {size} characters, limit is {limit}",
            "TOKEN_SIZE_EXCEEDED", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.size = size
        self.limit = limit


# ─── Infrastructure (5xx) ───────────────────────────────────────

class DatabaseError(RosterBotError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class OperationTimeoutError(RosterBotError):
    """Unit-of-work exceeded its deadline and was rolled back."""
    def __init__(
        self, operation: str, timeout_seconds: float, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Operation '{operation}' exceeded {timeout_seconds}s",
            "OPERATION_TIMEOUT", ErrorCategory.TIMEOUT,
            ErrorSeverity.CRITICAL, context, 504,
        )
        self.operation = operation
        self.timeout_seconds = timeout_seconds
