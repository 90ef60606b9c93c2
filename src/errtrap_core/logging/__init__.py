"""errtrap logging - colored or JSON event logging to the error stream."""

from .colors import (
    CYAN,
    GREEN,
    LIGHT_BLUE,
    MAGENTA,
    ORANGE,
    RED,
    RESET,
    YELLOW,
)
from .logger import DispatchLogger, LogConfig, ScriptLogger, TrapLogger

__all__ = [
    # Logger classes
    "TrapLogger",
    "DispatchLogger",
    "ScriptLogger",
    "LogConfig",
    # Colors
    "RESET",
    "GREEN",
    "RED",
    "YELLOW",
    "ORANGE",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
]
