"""errtrap telemetry - OpenTelemetry spans around dispatch cycles.

Spans are no-ops unless the host application configures an OpenTelemetry SDK.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

TRACER_NAME = "errtrap_core"

OUTCOME_RESUMED = "resumed"
OUTCOME_TERMINATED = "terminated"


def get_tracer() -> trace.Tracer:
    """Tracer for engine spans."""
    return trace.get_tracer(TRACER_NAME)


@contextmanager
def instrument_dispatch(context: str, exit_code: int, handler: str) -> Iterator[dict[str, Any]]:
    """Context manager for instrumenting one dispatch cycle.

    Records a ``dispatch:<context>`` span. The caller stores the handler
    status in the yielded dictionary under ``"status"``.

    Args:
        context: Active context
        exit_code: Exit code of the intercepted failure
        handler: Resolved handler name

    Yields:
        Dictionary to store the handler status
    """
    result: dict[str, Any] = {"status": None}
    span = get_tracer().start_span(f"dispatch:{context}")
    span.set_attribute("errtrap.context", context)
    span.set_attribute("errtrap.exit_code", exit_code)
    span.set_attribute("errtrap.handler", handler)

    try:
        yield result
    except BaseException as e:
        span.set_attribute("errtrap.outcome", OUTCOME_TERMINATED)
        span.set_status(Status(StatusCode.ERROR, str(e)))
        raise
    else:
        status = result["status"] or 0
        span.set_attribute("errtrap.handler_status", status)
        if status == 0:
            span.set_attribute("errtrap.outcome", OUTCOME_RESUMED)
            span.set_status(Status(StatusCode.OK))
        else:
            span.set_attribute("errtrap.outcome", OUTCOME_TERMINATED)
            span.set_status(Status(StatusCode.ERROR, f"handler returned {status}"))
    finally:
        span.end()
