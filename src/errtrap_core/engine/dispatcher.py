"""Dispatcher - routes an intercepted failure to its repair handler."""

import logging
from typing import Any

from errtrap_core.logging import DispatchLogger, TrapLogger
from errtrap_core.registry import HandlerRef, HandlerRegistry
from errtrap_core.registry.types import Handler
from errtrap_core.telemetry import instrument_dispatch

from .state import DispatchState
from .types import FailureEvent, Outcome

logger = logging.getLogger(__name__)


def handler_status(result: Any) -> int:
    """Normalize a handler's return value to a status code.

    ``None``, ``0``, ``True`` and ``Outcome.resume()`` mean the failure was
    repaired. A non-zero int, ``False`` or ``Outcome.terminate(n)`` mean it
    was not. Any other value counts as repaired.
    """
    if result is None:
        return 0
    if isinstance(result, Outcome):
        return result.exit_code
    if isinstance(result, bool):
        return 0 if result else 1
    if isinstance(result, int):
        return result
    return 0


class Dispatcher:
    """Runs one dispatch cycle per intercepted failure.

    The dispatcher never exits the process itself. It returns an Outcome and
    leaves the decision to terminate to the engine.
    """

    def __init__(
        self,
        state: DispatchState,
        registry: HandlerRegistry,
        logger: TrapLogger | None = None,
    ):
        """Initialize dispatcher.

        Args:
            state: Shared dispatch state
            registry: Handler registry
            logger: Optional event logger
        """
        self.state = state
        self.registry = registry
        self._log: DispatchLogger | None = logger.dispatch() if logger else None

    def dispatch(self, exit_code: int, failed_command: str) -> Outcome:
        """Route the current failure to its handler.

        Args:
            exit_code: Status of the failed operation
            failed_command: Literal text of the failed operation

        Returns:
            Outcome.resume() when the handler repaired the failure,
            otherwise an Outcome carrying the handler's status
        """
        event = FailureEvent(
            context=self.state.active_context(),
            exit_code=exit_code,
            failed_command=failed_command,
            arguments=self.state.snapshot_args(),
        )
        ref = self.registry.resolve(event.context)

        depth = self.state.enter()
        status = 1
        try:
            handler = self._callable_for(ref, event.context)
            if self._log:
                self._log.dispatching(event.context, exit_code, ref.name, depth)

            with instrument_dispatch(event.context, exit_code, ref.name) as span_result:
                status = self._invoke(handler, ref, event)
                span_result["status"] = status
        finally:
            self.state.reset()
            self.state.leave(terminated=status != 0)

        if status == 0:
            if self._log:
                self._log.resumed(event.context)
            return Outcome.resume()

        if self._log:
            self._log.terminated(event.context, status)
        return Outcome(status)

    def _callable_for(self, ref: HandlerRef, context: str) -> Handler:
        """Resolve a registration to a callable, re-resolving string references."""
        if not ref.late_bound:
            return ref.target  # type: ignore[return-value]

        target = self.registry.lookup(ref.target)
        if target is not None:
            return target

        if self._log:
            self._log.handler_unresolved(context, ref.name)
        return self.registry.default.target  # type: ignore[return-value]

    def _invoke(self, handler: Handler, ref: HandlerRef, event: FailureEvent) -> int:
        try:
            result = handler(
                event.context,
                event.exit_code,
                event.failed_command,
                *event.arguments,
            )
        except Exception as e:
            if self._log:
                self._log.handler_failed(event.context, ref.name, e)
            else:
                logger.error("Handler %s for %s raised", ref.name, event.context, exc_info=True)
            return 1
        return handler_status(result)
