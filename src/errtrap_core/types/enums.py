"""Shared enumerations for errtrap."""

from enum import Enum


class LogLevel(str, Enum):
    """Log verbosity level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Log output format."""

    COLORED = "colored"
    JSON = "json"


class DispatcherState(str, Enum):
    """Lifecycle of the dispatcher."""

    ARMED = "armed"
    DISPATCHING = "dispatching"
    TERMINATED = "terminated"


class StepKind(str, Enum):
    """Script step type."""

    ECHO = "echo"
    RUN = "run"
    CAPTURE = "capture"
    RAISE = "raise"
