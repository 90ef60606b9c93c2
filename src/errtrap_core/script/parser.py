"""YAML script parsing."""

from pathlib import Path
from typing import Any

import yaml

from errtrap_core.errors import create_error
from errtrap_core.types import StepKind, ValidationIssue, ValidationResult

from .types import ScriptDefinition, StepDefinition

_STEP_KINDS = {kind.value for kind in StepKind}


def _is_exit_code(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def validate_script_data(data: Any) -> ValidationResult:
    """Validate parsed script YAML.

    Args:
        data: Result of yaml.safe_load

    Returns:
        ValidationResult with one issue per problem found
    """
    errors: list[ValidationIssue] = []

    if not isinstance(data, dict):
        return ValidationResult(
            valid=False,
            errors=[ValidationIssue(path="", message="Script must be a dictionary")],
        )

    if not data.get("name"):
        errors.append(ValidationIssue(path="name", message="Script name is required"))

    handlers = data.get("handlers", {})
    if not isinstance(handlers, dict):
        errors.append(ValidationIssue(path="handlers", message="handlers must be a dictionary"))
    else:
        for context, ref in handlers.items():
            if not isinstance(ref, str) or not ref:
                errors.append(
                    ValidationIssue(
                        path=f"handlers.{context}",
                        message="Handler reference must be a non-empty string",
                    )
                )

    steps = data.get("steps", [])
    if not isinstance(steps, list):
        errors.append(ValidationIssue(path="steps", message="steps must be a list"))
        steps = []

    for i, step in enumerate(steps):
        path = f"steps[{i}]"
        if not isinstance(step, dict):
            errors.append(ValidationIssue(path=path, message="Step must be a dictionary"))
            continue
        kinds = [key for key in step if key in _STEP_KINDS]
        if len(kinds) != 1:
            errors.append(
                ValidationIssue(
                    path=path,
                    message=f"Step must have exactly one of: {', '.join(sorted(_STEP_KINDS))}",
                )
            )
            continue
        kind = kinds[0]
        body = step[kind]
        if kind == StepKind.RAISE.value:
            errors.extend(_validate_raise(path, body))
        elif not isinstance(body, str):
            errors.append(ValidationIssue(path=f"{path}.{kind}", message=f"{kind} must be a string"))
        if kind == StepKind.CAPTURE.value and "var" in step and not isinstance(step["var"], str):
            errors.append(ValidationIssue(path=f"{path}.var", message="var must be a string"))

    return ValidationResult(valid=True, errors=errors)


def _validate_raise(path: str, body: Any) -> list[ValidationIssue]:
    errors: list[ValidationIssue] = []
    if isinstance(body, str):
        body = {"context": body}
    if not isinstance(body, dict):
        return [ValidationIssue(path=f"{path}.raise", message="raise must be a string or dictionary")]
    if not body.get("context") or not isinstance(body["context"], str):
        errors.append(ValidationIssue(path=f"{path}.raise.context", message="context is required"))
    if "exit_code" in body and not _is_exit_code(body["exit_code"]):
        errors.append(
            ValidationIssue(
                path=f"{path}.raise.exit_code",
                message="exit_code must be a non-negative integer",
            )
        )
    if "args" in body and not isinstance(body["args"], list):
        errors.append(ValidationIssue(path=f"{path}.raise.args", message="args must be a list"))
    return errors


def _parse_step(step: dict[str, Any]) -> StepDefinition:
    kind_name = next(key for key in step if key in _STEP_KINDS)
    kind = StepKind(kind_name)
    body = step[kind_name]

    if kind == StepKind.ECHO:
        return StepDefinition(kind=kind, text=body)
    if kind == StepKind.RUN:
        return StepDefinition(kind=kind, command=body)
    if kind == StepKind.CAPTURE:
        return StepDefinition(kind=kind, command=body, var=step.get("var"))

    if isinstance(body, str):
        body = {"context": body}
    return StepDefinition(
        kind=kind,
        context=body["context"],
        exit_code=body.get("exit_code"),
        args=[str(a) for a in body.get("args", [])],
    )


def parse_script_yaml(yaml_content: str, source_path: Path | None = None) -> ScriptDefinition:
    """Parse YAML content into a ScriptDefinition.

    Args:
        yaml_content: YAML content to parse
        source_path: Optional source file path

    Returns:
        Parsed script definition

    Raises:
        ScriptError(SCRIPT_INVALID) if YAML is invalid
    """
    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        raise create_error("SCRIPT_INVALID", detail=f"Invalid YAML: {e}") from e

    validation = validate_script_data(data)
    if not validation.valid:
        raise create_error("SCRIPT_INVALID", detail="; ".join(validation.messages()))

    return ScriptDefinition(
        name=data["name"],
        description=data.get("description"),
        handlers=dict(data.get("handlers", {})),
        force_handlers=bool(data.get("force_handlers", False)),
        steps=[_parse_step(step) for step in data.get("steps", [])],
        source_path=source_path,
    )


def load_script(path: str | Path) -> ScriptDefinition:
    """Load a script definition from a YAML file.

    Raises:
        ScriptError(SCRIPT_INVALID) if the file is missing or invalid
    """
    script_path = Path(path)
    if not script_path.exists():
        raise create_error("SCRIPT_INVALID", detail=f"Script file not found: {script_path}")
    return parse_script_yaml(script_path.read_text(), source_path=script_path)
