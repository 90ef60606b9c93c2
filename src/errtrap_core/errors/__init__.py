"""errtrap error handling - Structured errors with context."""

from .errors import (
    ConfigError,
    DispatchError,
    ErrorCategory,
    ErrorTemplate,
    ErrtrapError,
    RaiseError,
    RegistrationError,
    ScriptError,
)
from .factory import ErrorFactory, create_error, get_error_factory
from .registry import ErrorRegistry

__all__ = [
    # Core error types
    "ErrtrapError",
    "ErrorCategory",
    "ErrorTemplate",
    "RegistrationError",
    "RaiseError",
    "DispatchError",
    "ConfigError",
    "ScriptError",
    # Registry and factory
    "ErrorRegistry",
    "ErrorFactory",
    # Convenience functions
    "get_error_factory",
    "create_error",
]
