"""errtrap telemetry - OpenTelemetry-based tracing of dispatch cycles."""

from .instrumentation import (
    OUTCOME_RESUMED,
    OUTCOME_TERMINATED,
    TRACER_NAME,
    get_tracer,
    instrument_dispatch,
)

__all__ = [
    "instrument_dispatch",
    "get_tracer",
    "TRACER_NAME",
    "OUTCOME_RESUMED",
    "OUTCOME_TERMINATED",
]
