"""Unit tests for implicit interception: run, capture and call."""

import sys

import pytest

from errtrap_core.config import EngineConfig, ErrtrapConfig, LoggingConfig
from errtrap_core.engine import TrapEngine

PY = sys.executable


def exit_with(code: int) -> list[str]:
    return [PY, "-c", f"import sys; sys.exit({code})"]


class TestRun:
    def test_success_does_not_dispatch(self, engine, make_spy):
        spy = make_spy()
        engine.register(engine.sentinel, spy, force=True)

        assert engine.run(exit_with(0)) == 0
        assert spy.calls == []

    def test_failure_dispatches_in_sentinel_context(self, engine, make_spy):
        spy = make_spy()
        engine.register(engine.sentinel, spy, force=True)

        returncode = engine.run(exit_with(3))

        assert returncode == 3
        context, exit_code, command, *args = spy.last
        assert context == engine.sentinel
        assert exit_code == 3
        assert command.endswith("sys.exit(3)'")
        assert args == []

    def test_shell_command_text(self, engine, make_spy):
        spy = make_spy()
        engine.register(engine.sentinel, spy, force=True)

        engine.run("exit 4")

        assert spy.last[1:3] == (4, "exit 4")

    def test_unhandled_failure_terminates(self, engine, capsys):
        with pytest.raises(SystemExit) as exc_info:
            engine.run("exit 2")

        assert exc_info.value.code == 2
        err = capsys.readouterr().err
        assert "Command:    exit 2" in err
        assert "handler not found" not in err

    def test_missing_program_without_shell(self, quiet_config, make_spy):
        quiet_config.engine.shell = False
        engine = TrapEngine(quiet_config, namespace={})
        spy = make_spy()
        engine.register(engine.sentinel, spy, force=True)

        engine.run("definitely-not-a-real-program-xyz --flag")

        assert spy.last[1] == 127

    def test_non_executable_program(self, engine, make_spy, tmp_path):
        script = tmp_path / "not_executable.sh"
        script.write_text("#!/bin/sh\nexit 0\n")
        script.chmod(0o644)
        spy = make_spy()
        engine.register(engine.sentinel, spy, force=True)

        engine.run([str(script)])

        assert spy.last[1] == 126


class TestCapture:
    def test_returns_stdout_without_trailing_newlines(self, engine):
        assert engine.capture("printf 'hello\\n\\n'") == "hello"

    def test_failure_dispatches_when_propagating(self, engine, make_spy):
        spy = make_spy()
        engine.register(engine.sentinel, spy, force=True)

        output = engine.capture("echo partial; exit 5")

        assert output == "partial"
        assert spy.last[1:3] == (5, "echo partial; exit 5")

    def test_failure_not_dispatched_when_disabled(self, make_spy, capsys):
        config = ErrtrapConfig(
            engine=EngineConfig(propagate_capture_failures=False),
            logging=LoggingConfig(enabled=True),
        )
        engine = TrapEngine(config, namespace={})
        spy = make_spy()
        engine.register(engine.sentinel, spy, force=True)

        output = engine.capture("echo partial; exit 5")

        assert output == "partial"
        assert spy.calls == []
        assert "not intercepted" in capsys.readouterr().err

    def test_manual_raise_after_unmonitored_capture(self, make_spy):
        config = ErrtrapConfig(
            engine=EngineConfig(propagate_capture_failures=False),
            logging=LoggingConfig(enabled=False),
        )
        engine = TrapEngine(config, namespace={})
        spy = make_spy()
        engine.register("ERR", spy)

        data = engine.capture("exit 1")
        if not data:
            engine.raise_("ERR", "msg")

        assert spy.last[0] == "ERR"
        assert spy.last[3:] == ("msg",)


class TestCall:
    def test_returns_result(self, engine):
        assert engine.call(lambda x, y: x + y, 2, y=3) == 5

    def test_exception_dispatches(self, engine, make_spy):
        spy = make_spy()
        engine.register(engine.sentinel, spy, force=True)

        def parse(text):
            return int(text)

        result = engine.call(parse, "nope")

        assert result is None
        context, exit_code, command, *args = spy.last
        assert context == engine.sentinel
        assert exit_code == 1
        assert command.startswith("TestCall.test_exception_dispatches.<locals>.parse('nope') -> ValueError")

    def test_traceback_includes_unwound_frames(self, engine, capsys):
        def deep():
            raise KeyError("missing")

        def shallow():
            deep()

        with pytest.raises(SystemExit) as exc_info:
            engine.call(shallow)

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        frame_lines = [line for line in err.splitlines() if line.startswith("  File")]
        functions = [line.rsplit(" in ", 1)[1] for line in frame_lines]
        assert functions[:3] == ["deep", "shallow", "test_traceback_includes_unwound_frames"]

    def test_keyboard_interrupt_not_intercepted(self, engine, make_spy):
        spy = make_spy()
        engine.register(engine.sentinel, spy, force=True)

        def interrupted():
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            engine.call(interrupted)

        assert spy.calls == []

    def test_monitored_decorator(self, engine, make_spy):
        spy = make_spy()
        engine.register(engine.sentinel, spy, force=True)

        @engine.monitored
        def flaky(value):
            if value < 0:
                raise ValueError("negative")
            return value * 2

        assert flaky(2) == 4
        assert flaky(-1) is None
        assert len(spy.calls) == 1
        assert flaky.__name__ == "flaky"


class TestHandlerDecorator:
    def test_registers_and_returns_function(self, engine):
        @engine.handler("JSON_FIX")
        def fix(context, exit_code, command, *args):
            return 0

        assert engine.registry.get("JSON_FIX").target is fix
        engine.raise_("JSON_FIX", "k")
