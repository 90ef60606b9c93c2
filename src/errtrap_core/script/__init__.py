"""Sequential scripts defined in YAML and run under interception."""

from .parser import load_script, parse_script_yaml, validate_script_data
from .runner import ScriptRunner
from .types import ScriptDefinition, ScriptResult, StepDefinition

__all__ = [
    "ScriptDefinition",
    "StepDefinition",
    "ScriptResult",
    "ScriptRunner",
    "parse_script_yaml",
    "load_script",
    "validate_script_data",
]
