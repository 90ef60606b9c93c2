"""errtrap error types."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error source categories."""

    REGISTRATION = "REGISTRATION"
    RAISE = "RAISE"
    DISPATCH = "DISPATCH"
    CONFIG = "CONFIG"
    SCRIPT = "SCRIPT"


@dataclass
class ErrtrapError(Exception):
    """Structured error with context. Base exception for all errtrap errors."""

    # Identity
    code: str  # e.g., "DUPLICATE_CONTEXT"
    category: ErrorCategory

    # Messages
    message: str
    detail: str | None = None
    suggestion: str | None = None

    # Context
    context: str | None = None  # Error context the operation was about
    handler: str | None = None  # Handler reference involved, if any

    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Set Exception message."""
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logs and JSON output.

        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "detail": self.detail,
            "suggestion": self.suggestion,
            "context": self.context,
            "handler": self.handler,
            "timestamp": self.timestamp.isoformat(),
        }


class RegistrationError(ErrtrapError):
    """Handler registration was rejected (EMPTY_KEY, DUPLICATE_CONTEXT, UNRESOLVABLE_HANDLER)."""


class RaiseError(ErrtrapError):
    """A raise was rejected before any state was touched (EMPTY_CONTEXT)."""


class DispatchError(ErrtrapError):
    """A registered handler could not be resolved at dispatch time."""


class ConfigError(ErrtrapError):
    """Configuration could not be loaded or validated."""


class ScriptError(ErrtrapError):
    """A script definition is malformed."""


@dataclass
class ErrorTemplate:
    """Template for creating errors."""

    code: str
    category: ErrorCategory
    message_template: str  # "Context '{context}' is already registered"
    detail_template: str | None = None
    suggestion_template: str | None = None
