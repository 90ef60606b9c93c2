"""Handler registry types."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

# handler(context, exit_code, failed_command, *args) -> status
Handler = Callable[..., Any]


@dataclass(frozen=True)
class HandlerRef:
    """A context-to-handler registration.

    ``target`` is what the caller registered: either the callable itself or
    the string reference that was resolved. String references are resolved
    again when dispatched.
    """

    context: str
    name: str
    target: Handler | str
    builtin: bool = False

    @property
    def late_bound(self) -> bool:
        return isinstance(self.target, str)
