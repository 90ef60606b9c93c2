"""Dispatch engine - raise, intercept, dispatch, resume or terminate."""

from .diagnostics import DefaultHandler, capture_stack, format_diagnostic, frames_from_traceback
from .dispatcher import Dispatcher, handler_status
from .engine import (
    TrapEngine,
    call,
    capture,
    get_engine,
    raise_,
    register,
    run,
    set_engine,
    split_exit_code,
)
from .state import DispatchState
from .types import CallFrame, FailureEvent, Outcome

__all__ = [
    # Engine
    "TrapEngine",
    "Dispatcher",
    "DispatchState",
    "DefaultHandler",
    # Types
    "FailureEvent",
    "CallFrame",
    "Outcome",
    # Helpers
    "handler_status",
    "split_exit_code",
    "capture_stack",
    "frames_from_traceback",
    "format_diagnostic",
    # Default engine
    "get_engine",
    "set_engine",
    "register",
    "raise_",
    "run",
    "capture",
    "call",
]
