"""Error Hierarchy: typed, categorized exceptions for all tracker failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors are raised synchronously to the caller, never silently dropped
    - Persistence errors are WARNING severity: in-memory state stays authoritative
    - Expected absence ("no rating yet") is a None result, never an exception

Design Decisions:
    - Single hierarchy with TastingError base: callers catch one type for reporting
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    NAVIGATION = "navigation"
    PERSISTENCE = "persistence"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_id: str | None = None
    wine_id: str | None = None
    taster_name: str | None = None
    debug_info: dict[str, Any] | None = None


class TastingError(Exception):
    """Base exception for all tracker errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_dict(self) -> dict:
        """Flat, JSON-safe description for logs and UI error banners."""
        return {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "event_id": self.context.event_id,
                "wine_id": self.context.wine_id,
                "taster_name": self.context.taster_name,
            },
        }


# ─── Domain Errors ──────────────────────────────────────────────

class ValidationError(TastingError):
    """Missing/empty required field, out-of-range value or dangling reference."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.field = field


class NotFoundError(TastingError):
    """Requested entity does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class IllegalTransitionError(TastingError):
    """Navigator rejected an action whose guard failed."""
    def __init__(
        self,
        screen: str,
        action: str,
        reason: str,
        error_code: str = "ILLEGAL_TRANSITION",
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Cannot apply {action} on {screen}: {reason}",
            error_code, ErrorCategory.NAVIGATION,
            ErrorSeverity.ERROR, context,
        )
        self.screen = screen
        self.action = action
        self.reason = reason


class SnapshotFormatError(TastingError):
    """Stored snapshot is malformed or violates a store invariant."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid snapshot: {message}",
            "SNAPSHOT_INVALID", ErrorCategory.PERSISTENCE,
            ErrorSeverity.WARNING, context,
        )


# ─── Infrastructure Errors ──────────────────────────────────────

class PersistenceError(TastingError):
    """Key-value load/save failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Storage {operation} failed: {message}",
            "PERSISTENCE_ERROR", ErrorCategory.PERSISTENCE,
            ErrorSeverity.WARNING, context,
        )
        self.operation = operation
