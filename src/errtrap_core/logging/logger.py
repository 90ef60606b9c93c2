"""errtrap logger - colored or JSON event logging for dispatch cycles."""

import json
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TextIO

from errtrap_core.logging.colors import (
    CYAN,
    GREEN,
    LIGHT_BLUE,
    MAGENTA,
    ORANGE,
    RED,
    RESET,
    YELLOW,
)
from errtrap_core.types import LogFormat, LogLevel


@dataclass
class LogConfig:
    """Logger configuration."""

    enabled: bool = True
    level: LogLevel = LogLevel.WARN
    format: LogFormat = LogFormat.COLORED
    show_args: bool = True
    truncate_at: int = 200
    output: TextIO | None = None  # None = sys.stderr at write time

    def stream(self) -> TextIO:
        return self.output if self.output is not None else sys.stderr


class TrapLogger:
    """Main logger facade. Creates component-specific loggers."""

    def __init__(self, config: LogConfig | None = None):
        """Initialize logger with configuration.

        Args:
            config: Logger configuration (defaults to LogConfig())
        """
        self.config = config or LogConfig()
        self._level_order = {
            LogLevel.DEBUG: 0,
            LogLevel.INFO: 1,
            LogLevel.WARN: 2,
            LogLevel.ERROR: 3,
        }

    def dispatch(self) -> "DispatchLogger":
        """Get a logger for registry and dispatch events."""
        return DispatchLogger(self)

    def script(self, script_name: str) -> "ScriptLogger":
        """Get a logger scoped to a script run.

        Args:
            script_name: Script name from its definition
        """
        return ScriptLogger(self, script_name)

    def configure(self, config: LogConfig) -> None:
        """Replace the configuration."""
        self.config = config

    def _should_log(self, level: LogLevel) -> bool:
        if not self.config.enabled:
            return False
        return self._level_order.get(level, 0) >= self._level_order.get(self.config.level, 1)

    def _log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Internal logging method.

        Args:
            level: Log level
            component: Component name (registry, dispatch, script)
            message: Log message
            context: Additional context data
        """
        if not self._should_log(level):
            return

        if self.config.format == LogFormat.JSON:
            self._log_json(level, component, message, context)
        else:
            self._log_colored(level, component, message, context)

    def _log_json(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": level.value,
            "component": component,
            "message": message,
        }
        if context:
            log_entry.update(context)

        print(json.dumps(log_entry, default=str), file=self.config.stream())

    def _log_colored(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        level_colors = {
            LogLevel.DEBUG: LIGHT_BLUE,
            LogLevel.INFO: CYAN,
            LogLevel.WARN: YELLOW,
            LogLevel.ERROR: RED,
        }

        color = level_colors.get(level, RESET)
        component_color = {
            "registry": MAGENTA,
            "dispatch": ORANGE,
            "script": GREEN,
        }.get(component, RESET)

        # Format: [COMPONENT] message
        output = f"{component_color}[{component.upper()}]{RESET} {color}{message}{RESET}"

        if context and self.config.show_args:
            context_str = str(context)
            if len(context_str) > self.config.truncate_at:
                context_str = context_str[: self.config.truncate_at] + "..."
            output += f" {LIGHT_BLUE}{context_str}{RESET}"

        print(output, file=self.config.stream())


class DispatchLogger:
    """Logger for registry and dispatch-cycle events."""

    def __init__(self, parent: TrapLogger):
        self.parent = parent

    def registered(self, context: str, handler: str, replaced: bool = False) -> None:
        """Log a handler registration.

        Args:
            context: Registered context
            handler: Handler display name
            replaced: Whether an existing registration was overwritten
        """
        event = "handler_replaced" if replaced else "handler_registered"
        message = f"Handler '{handler}' registered for '{context}'"
        if replaced:
            message += " (forced)"
        self.parent._log(
            LogLevel.DEBUG,
            "registry",
            message,
            {"event": event, "context": context, "handler": handler},
        )

    def raised(self, context: str, exit_code: int, args: list[str]) -> None:
        """Log an explicit raise.

        Args:
            context: Raised context
            exit_code: Resolved exit code
            args: Pending arguments
        """
        context_data: dict[str, Any] = {
            "event": "raised",
            "context": context,
            "exit_code": exit_code,
        }
        if args:
            context_data["args"] = args
        self.parent._log(LogLevel.DEBUG, "dispatch", f"Raised '{context}'", context_data)

    def dispatching(self, context: str, exit_code: int, handler: str, depth: int) -> None:
        """Log the start of a dispatch cycle.

        Args:
            context: Active context
            exit_code: Captured exit code
            handler: Resolved handler display name
            depth: Nesting depth (1 for a top-level cycle)
        """
        message = f"Dispatching '{context}' (exit code {exit_code}) to '{handler}'"
        if depth > 1:
            message += f" [nested depth {depth}]"
        self.parent._log(
            LogLevel.INFO,
            "dispatch",
            message,
            {
                "event": "dispatching",
                "context": context,
                "exit_code": exit_code,
                "handler": handler,
                "depth": depth,
            },
        )

    def resumed(self, context: str) -> None:
        """Log a handler that asked to resume."""
        self.parent._log(
            LogLevel.INFO,
            "dispatch",
            f"Handler for '{context}' recovered, resuming ✓",
            {"event": "resumed", "context": context},
        )

    def terminated(self, context: str, status: int) -> None:
        """Log a cycle that ends the process.

        Args:
            context: Active context
            status: Handler status used as the exit code
        """
        self.parent._log(
            LogLevel.INFO,
            "dispatch",
            f"Handler for '{context}' returned {status}, terminating",
            {"event": "terminated", "context": context, "status": status},
        )

    def handler_failed(self, context: str, handler: str, error: Exception) -> None:
        """Log an exception escaping a handler.

        Args:
            context: Active context
            handler: Handler display name
            error: The exception raised by the handler
        """
        self.parent._log(
            LogLevel.ERROR,
            "dispatch",
            f"Handler '{handler}' for '{context}' raised: {error}",
            {
                "event": "handler_failed",
                "context": context,
                "handler": handler,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )

    def handler_unresolved(self, context: str, handler: str) -> None:
        """Log a registered handler that no longer resolves."""
        self.parent._log(
            LogLevel.WARN,
            "dispatch",
            f"Handler '{handler}' for '{context}' no longer resolves, using default handler",
            {"event": "handler_unresolved", "context": context, "handler": handler},
        )

    def capture_unmonitored(self, command: str, returncode: int) -> None:
        """Log a captured command failure left to the caller."""
        self.parent._log(
            LogLevel.WARN,
            "dispatch",
            f"Captured command failed with {returncode} and was not intercepted",
            {"event": "capture_unmonitored", "command": command, "returncode": returncode},
        )


class ScriptLogger:
    """Logger for script runs."""

    def __init__(self, parent: TrapLogger, script_name: str):
        self.parent = parent
        self.script_name = script_name

    def started(self, step_count: int) -> None:
        self.parent._log(
            LogLevel.INFO,
            "script",
            f"Script '{self.script_name}' started ({step_count} steps)",
            {"event": "script_started", "script": self.script_name, "step_count": step_count},
        )

    def step(self, index: int, kind: str) -> None:
        self.parent._log(
            LogLevel.DEBUG,
            "script",
            f"Step {index} ({kind})",
            {"event": "step_started", "script": self.script_name, "step": index, "kind": kind},
        )

    def completed(self, duration_ms: int, step_count: int) -> None:
        duration_s = duration_ms / 1000
        self.parent._log(
            LogLevel.INFO,
            "script",
            f"Script '{self.script_name}' completed ({step_count} steps, {duration_s:.2f}s) ✓",
            {
                "event": "script_completed",
                "script": self.script_name,
                "duration_ms": duration_ms,
                "step_count": step_count,
            },
        )
