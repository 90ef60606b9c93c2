"""Shared validation types for errtrap."""

from dataclasses import dataclass, field


@dataclass
class ValidationIssue:
    """Single validation issue (error or warning).

    Used by:
    - ConfigLoader (config validation)
    - validate_script_data (script validation)
    """

    path: str  # e.g., "steps[2].raise.context" or "engine.default_exit_code"
    message: str
    severity: str = "error"  # "error" | "warning"


@dataclass
class ValidationResult:
    """Result of validating a config or script document."""

    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Ensure valid is False if there are errors."""
        if self.errors:
            self.valid = False

    def messages(self) -> list[str]:
        """Render errors as ``path: message`` lines."""
        return [f"{issue.path}: {issue.message}" for issue in self.errors]
