"""Process-wide rendezvous between a raise site and its handler."""

from dataclasses import dataclass, field

from errtrap_core.config.models import SENTINEL_CONTEXT
from errtrap_core.types import DispatcherState

from .types import CallFrame


@dataclass
class DispatchState:
    """Active context and pending arguments, owned by one engine.

    The raiser arms it, the dispatcher reads it and resets it when each cycle
    exits. Nested cycles follow last-writer-wins: the inner cycle's reset is
    what the outer cycle observes after the inner one returns.
    """

    sentinel: str = SENTINEL_CONTEXT
    context: str = ""
    pending_args: list[str] = field(default_factory=list)
    status: DispatcherState = DispatcherState.ARMED
    depth: int = 0
    # Frames an intercepted exception already unwound through, newest first.
    failure_frames: list[CallFrame] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.context:
            self.context = self.sentinel

    def arm(self, context: str, args: list[str]) -> None:
        """Record the context and payload of a raise."""
        self.context = context
        self.pending_args = list(args)
        self.failure_frames = []

    def active_context(self) -> str:
        return self.context or self.sentinel

    def snapshot_args(self) -> tuple[str, ...]:
        return tuple(self.pending_args)

    def reset(self) -> None:
        """Clear pending arguments and restore the sentinel context."""
        self.pending_args = []
        self.failure_frames = []
        self.context = self.sentinel

    def enter(self) -> int:
        """Mark a dispatch cycle as started and return the nesting depth."""
        self.depth += 1
        self.status = DispatcherState.DISPATCHING
        return self.depth

    def leave(self, terminated: bool) -> None:
        """Mark the innermost dispatch cycle as finished."""
        self.depth = max(self.depth - 1, 0)
        if terminated:
            self.status = DispatcherState.TERMINATED
        elif self.depth == 0:
            self.status = DispatcherState.ARMED

    @property
    def is_sentinel(self) -> bool:
        return self.context == self.sentinel
