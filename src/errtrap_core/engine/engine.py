"""TrapEngine - the public face of the dispatch engine."""

import functools
import linecache
import shlex
import subprocess
import sys
from collections.abc import Callable, Mapping
from typing import Any, TextIO, TypeVar

from errtrap_core.config import ErrtrapConfig, load_config
from errtrap_core.errors import create_error
from errtrap_core.logging import LogConfig, TrapLogger
from errtrap_core.registry import HandlerRef, HandlerRegistry
from errtrap_core.registry.types import Handler

from .diagnostics import DefaultHandler, frames_from_traceback, is_engine_frame
from .dispatcher import Dispatcher
from .state import DispatchState
from .types import Outcome

F = TypeVar("F", bound=Callable[..., Any])

# Exit status a shell reports for a command it cannot find.
COMMAND_NOT_FOUND = 127
# Exit status a shell reports for a command it cannot execute.
COMMAND_NOT_EXECUTABLE = 126


def split_exit_code(values: tuple[Any, ...], default: int) -> tuple[int, tuple[Any, ...]]:
    """Split an optional leading exit code off raise_() values.

    A leading non-negative int, or a string of ASCII digits, is the exit code.
    Anything else is the first argument and the exit code is ``default``.
    """
    if values:
        first = values[0]
        if isinstance(first, int) and not isinstance(first, bool) and first >= 0:
            return first, values[1:]
        if isinstance(first, str) and first.isascii() and first.isdigit():
            return int(first), values[1:]
    return default, values


def _caller_source(fallback: str) -> str:
    """Source line of the first frame outside the engine, or ``fallback``."""
    frame = sys._getframe(1)
    while frame is not None and is_engine_frame(frame):
        frame = frame.f_back
    if frame is None:
        return fallback
    line = linecache.getline(frame.f_code.co_filename, frame.f_lineno).strip()
    return line or fallback


def _render_call(func: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
    name = getattr(func, "__qualname__", None) or getattr(func, "__name__", repr(func))
    parts = [repr(a) for a in args] + [f"{k}={v!r}" for k, v in kwargs.items()]
    return f"{name}({', '.join(parts)})"


class TrapEngine:
    """Context-keyed error interception for sequential scripts.

    Failures are reported with raise_() or detected by the monitored
    operations run(), capture() and call(). Each failure is routed to the
    handler registered for the active context. A handler that returns a
    success status lets execution continue right after the failing
    operation. Any other status terminates the process with that status.

    Example:
        engine = TrapEngine()

        def fix_json(context, exit_code, command, key):
            repair(key)
            return 0

        engine.register("JSON_FIX", fix_json)
        engine.raise_("JSON_FIX", "some_key")   # fix_json runs, then we continue
        engine.raise_("unknown", 5, "a0")       # diagnostic on stderr, SystemExit(5)
    """

    def __init__(
        self,
        config: ErrtrapConfig | None = None,
        namespace: Mapping[str, Any] | Callable[[], Mapping[str, Any]] | None = None,
        logger: TrapLogger | None = None,
        stream: TextIO | None = None,
    ):
        """Initialize the engine.

        Args:
            config: Engine configuration (defaults to ErrtrapConfig())
            namespace: Mapping used to resolve bare handler names
                (defaults to the ``__main__`` module globals)
            logger: Event logger (defaults to one built from config.logging)
            stream: Stream for diagnostics (defaults to sys.stderr)
        """
        self.config = config or ErrtrapConfig()
        self.logger = logger or TrapLogger(
            LogConfig(
                enabled=self.config.logging.enabled,
                level=self.config.logging.level,
                format=self.config.logging.format,
                show_args=self.config.logging.show_args,
                truncate_at=self.config.logging.truncate_at,
                output=stream,
            )
        )
        self._events = self.logger.dispatch()

        self.state = DispatchState(sentinel=self.config.engine.sentinel_context)
        self.default_handler = DefaultHandler(self.state, stream=stream)
        self.registry = HandlerRegistry(
            self.default_handler,
            namespace=namespace,
            on_register=lambda ref, replaced: self._events.registered(
                ref.context, ref.name, replaced
            ),
        )
        self.default_handler.registry = self.registry
        self.dispatcher = Dispatcher(self.state, self.registry, self.logger)

        self.registry.register(self.state.sentinel, self.default_handler)

    @property
    def sentinel(self) -> str:
        return self.state.sentinel

    def register(self, context: str, handler: Handler | str, force: bool = False) -> HandlerRef:
        """Register a repair handler for a context.

        Args:
            context: Context name
            handler: Callable, bare name, or ``package.module:function`` path
            force: Overwrite an existing registration

        Returns:
            The stored registration

        Raises:
            RegistrationError: EMPTY_KEY, DUPLICATE_CONTEXT or UNRESOLVABLE_HANDLER
        """
        return self.registry.register(context, handler, force=force)

    def handler(self, context: str, force: bool = False) -> Callable[[F], F]:
        """Decorator form of register().

        Example:
            @engine.handler("JSON_FIX")
            def fix_json(context, exit_code, command, *args):
                return 0
        """

        def decorator(func: F) -> F:
            self.register(context, func, force=force)
            return func

        return decorator

    def raise_(self, context: str, *values: Any, command: str | None = None) -> None:
        """Raise a failure in ``context`` and dispatch it.

        ``values`` is ``[exit_code] [args...]``. A leading non-negative
        integer (or all-digit string) is the exit code, otherwise the exit
        code is the configured default and every value is an argument.

        Returns normally when the handler repaired the failure. An exit code
        of 0 is not a failure and dispatches nothing.

        Args:
            context: Context name
            *values: Optional exit code followed by handler arguments
            command: Failed-command text (defaults to the caller's source line)

        Raises:
            RaiseError: EMPTY_CONTEXT, before any state is touched
            SystemExit: When the handler did not repair the failure
        """
        if not context:
            raise create_error("EMPTY_CONTEXT")

        exit_code, args = split_exit_code(values, self.config.engine.default_exit_code)
        if exit_code == 0:
            return

        str_args = [str(a) for a in args]
        self.state.arm(context, str_args)
        self._events.raised(context, exit_code, str_args)

        if command is None:
            rendered = " ".join(shlex.quote(v) for v in [context, str(exit_code), *str_args])
            command = _caller_source(f"raise {rendered}")
        self._fail(exit_code, command)

    def run(self, command: str | list[str], **kwargs: Any) -> int:
        """Run a monitored command.

        stdin, stdout and stderr are inherited. A non-zero exit status is
        dispatched in the active context.

        Args:
            command: Shell command line, or argv list
            **kwargs: Extra keyword arguments for subprocess.run

        Returns:
            The command's exit status (after a resumed dispatch)
        """
        returncode = self._execute(command, capture=False, **kwargs).returncode
        if returncode != 0:
            self._fail(returncode, self._command_text(command))
        return returncode

    def capture(self, command: str | list[str], **kwargs: Any) -> str:
        """Run a command and return its stdout, like a command substitution.

        Trailing newlines are stripped. When ``propagate_capture_failures``
        is disabled, a failure is only logged and the caller must call
        raise_() itself.

        Args:
            command: Shell command line, or argv list
            **kwargs: Extra keyword arguments for subprocess.run

        Returns:
            Captured stdout
        """
        completed = self._execute(command, capture=True, **kwargs)
        output = (completed.stdout or "").rstrip("\n")
        if completed.returncode != 0:
            text = self._command_text(command)
            if self.config.engine.propagate_capture_failures:
                self._fail(completed.returncode, text)
            else:
                self._events.capture_unmonitored(text, completed.returncode)
        return output

    def call(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Call a function under interception.

        An exception escaping ``func`` is dispatched with the default exit
        code. KeyboardInterrupt and SystemExit are not intercepted.

        Returns:
            The function's result, or None after a resumed dispatch
        """
        try:
            return func(*args, **kwargs)
        except Exception as e:
            self.state.failure_frames = frames_from_traceback(e.__traceback__)
            text = f"{_render_call(func, args, kwargs)} -> {type(e).__name__}: {e}"
            self._fail(self.config.engine.default_exit_code, text)
            return None

    def monitored(self, func: F) -> F:
        """Decorator that routes every call of ``func`` through call()."""

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return self.call(func, *args, **kwargs)

        return wrapper  # type: ignore[return-value]

    def _fail(self, exit_code: int, command: str) -> None:
        outcome = self.dispatcher.dispatch(exit_code, command)
        self._apply(outcome)

    def _apply(self, outcome: Outcome) -> None:
        if outcome.terminated:
            raise SystemExit(outcome.exit_code)

    def _execute(
        self, command: str | list[str], capture: bool, **kwargs: Any
    ) -> subprocess.CompletedProcess[str]:
        shell = isinstance(command, str) and self.config.engine.shell
        argv: str | list[str] = command
        if isinstance(command, str) and not shell:
            argv = shlex.split(command)
        if capture:
            kwargs.setdefault("stdout", subprocess.PIPE)
            kwargs.setdefault("text", True)
        try:
            return subprocess.run(argv, shell=shell, check=False, **kwargs)  # noqa: S602
        except FileNotFoundError:
            return subprocess.CompletedProcess(argv, COMMAND_NOT_FOUND, stdout="" if capture else None)
        except PermissionError:
            return subprocess.CompletedProcess(
                argv, COMMAND_NOT_EXECUTABLE, stdout="" if capture else None
            )

    def _command_text(self, command: str | list[str]) -> str:
        if isinstance(command, str):
            return command
        return shlex.join(command)


# Convenience singleton
_default_engine: TrapEngine | None = None


def get_engine() -> TrapEngine:
    """Get the default engine singleton, configured from the config file."""
    global _default_engine  # noqa: PLW0603
    if _default_engine is None:
        _default_engine = TrapEngine(load_config())
    return _default_engine


def set_engine(engine: TrapEngine | None) -> None:
    """Replace the default engine (None resets it)."""
    global _default_engine  # noqa: PLW0603
    _default_engine = engine


def register(context: str, handler: Handler | str, force: bool = False) -> HandlerRef:
    """Register a handler on the default engine."""
    return get_engine().register(context, handler, force=force)


def raise_(context: str, *values: Any, command: str | None = None) -> None:
    """Raise a failure on the default engine."""
    get_engine().raise_(context, *values, command=command)


def run(command: str | list[str], **kwargs: Any) -> int:
    """Run a monitored command on the default engine."""
    return get_engine().run(command, **kwargs)


def capture(command: str | list[str], **kwargs: Any) -> str:
    """Capture a monitored command's output on the default engine."""
    return get_engine().capture(command, **kwargs)


def call(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call a function under interception on the default engine."""
    return get_engine().call(func, *args, **kwargs)
