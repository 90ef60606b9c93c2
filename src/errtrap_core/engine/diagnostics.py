"""Default handler and call-stack diagnostics."""

import sys
from types import FrameType, TracebackType
from typing import TYPE_CHECKING, TextIO

from errtrap_core.errors import create_error

from .state import DispatchState
from .types import CallFrame

if TYPE_CHECKING:
    from errtrap_core.registry import HandlerRegistry

SEPARATOR = "-" * 56
BANNER = "🚨 EXCEPTION TRIGGERED"

# Frames from these modules are engine plumbing, not part of the failing chain.
_INTERNAL_PREFIX = "errtrap_core.engine"


def is_engine_frame(frame: FrameType) -> bool:
    module = frame.f_globals.get("__name__", "")
    return module == _INTERNAL_PREFIX or module.startswith(_INTERNAL_PREFIX + ".")


def _to_call_frame(frame: FrameType, line: int | None = None) -> CallFrame:
    return CallFrame(
        function=frame.f_code.co_name,
        location=frame.f_code.co_filename,
        line=line if line is not None else frame.f_lineno,
    )


def capture_stack(start: FrameType | None = None) -> list[CallFrame]:
    """Capture the active call chain, newest frame first.

    Engine frames are skipped, so the first entry is the failure site and the
    last one is the top-level entry point.
    """
    frame = start if start is not None else sys._getframe(1)
    frames: list[CallFrame] = []
    while frame is not None:
        if not is_engine_frame(frame):
            frames.append(_to_call_frame(frame))
        frame = frame.f_back
    return frames


def frames_from_traceback(tb: TracebackType | None) -> list[CallFrame]:
    """Frames an exception unwound through, newest first, engine frames skipped."""
    frames: list[CallFrame] = []
    while tb is not None:
        if not is_engine_frame(tb.tb_frame):
            frames.append(_to_call_frame(tb.tb_frame, tb.tb_lineno))
        tb = tb.tb_next
    frames.reverse()
    return frames


def format_diagnostic(
    context: str,
    exit_code: int,
    failed_command: str,
    args: tuple[str, ...] | list[str],
    frames: list[CallFrame],
    notice: str | None = None,
) -> str:
    """Render the diagnostic block written for an unrecovered failure."""
    lines = ["", SEPARATOR]
    if notice:
        lines.append(notice)
    lines.extend(
        [
            SEPARATOR,
            BANNER,
            f"Context:    {context}",
            f"Exit Code:  {exit_code}",
            f"Command:    {failed_command}",
            f"Arguments: {' '.join(args)}",
            SEPARATOR,
            "TRACEBACK (most recent call first):",
        ]
    )
    lines.extend(frame.format() for frame in frames)
    lines.append(SEPARATOR)
    lines.append(f"exiting with code: {exit_code}")
    return "\n".join(lines) + "\n"


class DefaultHandler:
    """Builtin fallback handler.

    Prints the diagnostic block to the error stream, resets the dispatch
    state and returns ``exit_code`` so the dispatch cycle terminates. It never
    asks to resume.
    """

    def __init__(
        self,
        state: DispatchState,
        registry: "HandlerRegistry | None" = None,
        stream: TextIO | None = None,
    ):
        """Initialize the default handler.

        Args:
            state: Dispatch state to reset after printing
            registry: Registry used to decide which notice to print
            stream: Output stream (defaults to sys.stderr at call time)
        """
        self.state = state
        self.registry = registry
        self.stream = stream
        self.__name__ = "default_handler"

    def __call__(self, context: str, exit_code: int, failed_command: str, *args: str) -> int:
        exit_code = exit_code or 1
        frames = list(self.state.failure_frames) + capture_stack(sys._getframe(1))
        block = format_diagnostic(
            context,
            exit_code,
            failed_command,
            args,
            frames,
            notice=self.notice_for(context),
        )
        stream = self.stream if self.stream is not None else sys.stderr
        stream.write(block)
        stream.flush()

        self.state.reset()
        return exit_code

    def notice_for(self, context: str) -> str | None:
        """Notice explaining why the default handler was reached, if by fallback."""
        if context == self.state.sentinel or self.registry is None:
            return None
        ref = self.registry.get(context)
        if ref is None:
            return f"handler not found for {context}, Default handler Entered"
        if ref.late_bound and self.registry.lookup(ref.target) is None:
            error = create_error("HANDLER_UNRESOLVED", context=context, handler=ref.name)
            return f"{error.message}, Default handler Entered"
        return None
