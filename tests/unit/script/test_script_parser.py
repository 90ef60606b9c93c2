"""Unit tests for script YAML parsing."""

import pytest

from errtrap_core.errors import ScriptError
from errtrap_core.script import load_script, parse_script_yaml, validate_script_data
from errtrap_core.types import StepKind

DEMO = """
name: recovery-demo
description: Repairs one failure and dies on another
handlers:
  JSON_FIX: fixes:my_fix_handler
steps:
  - echo: "Step 1: Starting task..."
  - raise:
      context: JSON_FIX
      args: ["some_key.join(' ')"]
  - raise: {context: JSON_FIX, exit_code: 4, args: ["some_key.join(' ')"]}
  - echo: "Step 3: I survived! The repair tool worked."
  - capture: "echo hi"
    var: greeting
  - run: "true"
  - raise: unknown_context
"""


class TestParseScript:
    def test_parse_demo(self):
        script = parse_script_yaml(DEMO)

        assert script.name == "recovery-demo"
        assert script.handlers == {"JSON_FIX": "fixes:my_fix_handler"}
        assert [s.kind for s in script.steps] == [
            StepKind.ECHO,
            StepKind.RAISE,
            StepKind.RAISE,
            StepKind.ECHO,
            StepKind.CAPTURE,
            StepKind.RUN,
            StepKind.RAISE,
        ]

    def test_raise_fields(self):
        script = parse_script_yaml(DEMO)

        first, second = script.steps[1], script.steps[2]
        assert first.context == "JSON_FIX"
        assert first.exit_code is None
        assert first.args == ["some_key.join(' ')"]
        assert second.exit_code == 4

    def test_raise_shorthand(self):
        step = parse_script_yaml(DEMO).steps[-1]

        assert step.context == "unknown_context"
        assert step.args == []

    def test_capture_var(self):
        step = parse_script_yaml(DEMO).steps[4]

        assert step.command == "echo hi"
        assert step.var == "greeting"

    def test_describe(self):
        steps = parse_script_yaml(DEMO).steps

        assert steps[2].describe() == "raise JSON_FIX 4 some_key.join(' ')"
        assert steps[5].describe() == "true"

    def test_args_are_strings(self):
        script = parse_script_yaml("name: s\nsteps:\n  - raise: {context: K, args: [1, true]}\n")

        assert script.steps[0].args == ["1", "True"]

    def test_invalid_yaml(self):
        with pytest.raises(ScriptError, match="Invalid YAML"):
            parse_script_yaml("name: [broken\n")

    @pytest.mark.parametrize(
        ("content", "fragment"),
        [
            ("- just a list\n", "Script must be a dictionary"),
            ("steps: []\n", "Script name is required"),
            ("name: s\nsteps:\n  - {echo: a, run: b}\n", "exactly one of"),
            ("name: s\nsteps:\n  - {}\n", "exactly one of"),
            ("name: s\nsteps:\n  - run: [a, b]\n", "run must be a string"),
            ("name: s\nsteps:\n  - raise: {exit_code: 2}\n", "context is required"),
            ("name: s\nsteps:\n  - raise: {context: K, exit_code: -1}\n", "non-negative"),
            ("name: s\nsteps:\n  - raise: {context: K, args: x}\n", "args must be a list"),
            ("name: s\nhandlers: [a]\n", "handlers must be a dictionary"),
            ("name: s\nhandlers: {K: ''}\n", "non-empty string"),
        ],
    )
    def test_invalid_scripts(self, content, fragment):
        with pytest.raises(ScriptError) as exc_info:
            parse_script_yaml(content)

        assert fragment in str(exc_info.value)

    def test_validate_reports_paths(self):
        result = validate_script_data({"name": "s", "steps": [{"echo": "a"}, {"raise": {}}]})

        assert not result.valid
        assert result.errors[0].path == "steps[1].raise.context"


class TestLoadScript:
    def test_load(self, tmp_path):
        path = tmp_path / "demo.yaml"
        path.write_text(DEMO)

        script = load_script(path)

        assert script.source_path == path

    def test_missing(self, tmp_path):
        with pytest.raises(ScriptError, match="not found"):
            load_script(tmp_path / "absent.yaml")
