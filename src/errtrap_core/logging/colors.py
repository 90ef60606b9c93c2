"""ANSI color codes for terminal output.

All colors use the 256-color palette.

Usage:
    from errtrap_core.logging.colors import GREEN, RED, RESET

    print(f"{RED}Dispatch terminated{RESET}", file=sys.stderr)
"""

RESET = "\033[0m"

# Status colors
GREEN = "\033[38;5;82m"  # Resumed
RED = "\033[38;5;196m"  # Terminated
YELLOW = "\033[38;5;226m"  # Warnings
ORANGE = "\033[38;5;208m"  # Handler failures

# Informational
LIGHT_BLUE = "\033[38;5;153m"  # Event context
CYAN = "\033[38;5;51m"
MAGENTA = "\033[38;5;201m"

SUCCESS = GREEN
FAILURE = RED
WARNING = YELLOW
INFO = LIGHT_BLUE

__all__ = [
    "RESET",
    "GREEN",
    "RED",
    "YELLOW",
    "ORANGE",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
    "SUCCESS",
    "FAILURE",
    "WARNING",
    "INFO",
]
