"""Script definition types."""

from dataclasses import dataclass, field
from pathlib import Path

from errtrap_core.types import StepKind


@dataclass
class StepDefinition:
    """One script step. Which fields are set depends on ``kind``."""

    kind: StepKind
    text: str | None = None  # echo
    command: str | None = None  # run / capture
    var: str | None = None  # capture: variable receiving stdout
    context: str | None = None  # raise
    exit_code: int | None = None  # raise
    args: list[str] = field(default_factory=list)  # raise

    def describe(self) -> str:
        """Short rendering used as failed-command text and in logs."""
        if self.kind == StepKind.ECHO:
            return f"echo {self.text}"
        if self.kind in (StepKind.RUN, StepKind.CAPTURE):
            return self.command or ""
        parts = [f"raise {self.context}"]
        if self.exit_code is not None:
            parts.append(str(self.exit_code))
        parts.extend(self.args)
        return " ".join(parts)


@dataclass
class ScriptDefinition:
    """A sequential script run under interception."""

    name: str
    steps: list[StepDefinition] = field(default_factory=list)
    handlers: dict[str, str] = field(default_factory=dict)  # context -> handler reference
    force_handlers: bool = False
    description: str | None = None
    source_path: Path | None = None


@dataclass
class ScriptResult:
    """What a script run did before it finished."""

    name: str
    executed: list[int] = field(default_factory=list)  # step indexes, in order
    variables: dict[str, str] = field(default_factory=dict)
    duration_ms: int = 0
