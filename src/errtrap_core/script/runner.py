"""Run script definitions through a TrapEngine."""

import logging
import string
import sys
import time
from typing import TextIO

from errtrap_core.engine import TrapEngine
from errtrap_core.types import StepKind

from .types import ScriptDefinition, ScriptResult, StepDefinition

logger = logging.getLogger(__name__)


class ScriptRunner:
    """Executes script steps in order, with every failure intercepted.

    ``echo`` text may reference captured variables as ``$name`` or ``${name}``.
    A dispatch that terminates propagates SystemExit out of run().
    """

    def __init__(self, engine: TrapEngine, output: TextIO | None = None):
        """Initialize runner.

        Args:
            engine: Engine the steps run on
            output: Stream for echo steps (defaults to sys.stdout)
        """
        self.engine = engine
        self.output = output

    def run(self, definition: ScriptDefinition) -> ScriptResult:
        """Register the script's handlers, then execute its steps.

        Raises:
            RegistrationError: If a handler cannot be registered
            SystemExit: If a failure was not repaired
        """
        for context, ref in definition.handlers.items():
            self.engine.register(context, ref, force=definition.force_handlers)

        log = self.engine.logger.script(definition.name)
        log.started(len(definition.steps))
        start = time.monotonic()

        result = ScriptResult(name=definition.name)
        for index, step in enumerate(definition.steps):
            log.step(index, step.kind.value)
            self._run_step(step, result)
            result.executed.append(index)

        result.duration_ms = int((time.monotonic() - start) * 1000)
        log.completed(result.duration_ms, len(result.executed))
        return result

    def _run_step(self, step: StepDefinition, result: ScriptResult) -> None:
        if step.kind == StepKind.ECHO:
            text = string.Template(step.text or "").safe_substitute(result.variables)
            print(text, file=self.output if self.output is not None else sys.stdout)
        elif step.kind == StepKind.RUN:
            self.engine.run(step.command or "")
        elif step.kind == StepKind.CAPTURE:
            output = self.engine.capture(step.command or "")
            if step.var:
                result.variables[step.var] = output
        elif step.kind == StepKind.RAISE:
            # A digit-only first arg stays an arg.
            exit_code = step.exit_code
            if exit_code is None:
                exit_code = self.engine.config.engine.default_exit_code
            self.engine.raise_(step.context or "", exit_code, *step.args, command=step.describe())
        else:
            logger.warning("Skipping unknown step kind %s", step.kind)
