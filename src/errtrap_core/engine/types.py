"""Dispatch engine types."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FailureEvent:
    """One intercepted failure, built by the dispatcher and never stored."""

    context: str
    exit_code: int
    failed_command: str
    arguments: tuple[str, ...] = ()


@dataclass(frozen=True)
class CallFrame:
    """A frame of the call chain active at the moment of failure."""

    function: str
    location: str
    line: int

    def format(self) -> str:
        return f'  File "{self.location}", line {self.line}, in {self.function}'


@dataclass(frozen=True)
class Outcome:
    """Result of a dispatch cycle: resume at the failure site, or terminate."""

    exit_code: int = 0

    @classmethod
    def resume(cls) -> "Outcome":
        return cls(0)

    @classmethod
    def terminate(cls, exit_code: int) -> "Outcome":
        if exit_code == 0:
            msg = "terminate() needs a non-zero exit code"
            raise ValueError(msg)
        return cls(exit_code)

    @property
    def resumed(self) -> bool:
        return self.exit_code == 0

    @property
    def terminated(self) -> bool:
        return self.exit_code != 0
