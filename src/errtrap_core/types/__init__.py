"""Shared types for errtrap.

Import from here rather than submodules:
    from errtrap_core.types import LogLevel, DispatcherState
"""

from .enums import DispatcherState, LogFormat, LogLevel, StepKind
from .validation import ValidationIssue, ValidationResult

__all__ = [
    # Enums
    "LogLevel",
    "LogFormat",
    "DispatcherState",
    "StepKind",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
