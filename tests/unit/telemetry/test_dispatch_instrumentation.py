"""Unit tests for dispatch-cycle tracing."""

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode

from errtrap_core.telemetry import instrumentation


@pytest.fixture
def exporter(monkeypatch):
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    monkeypatch.setattr(instrumentation, "get_tracer", lambda: provider.get_tracer("test"))
    return exporter


class TestInstrumentDispatch:
    def test_resumed_span(self, exporter):
        with instrumentation.instrument_dispatch("K", 4, "fix") as result:
            result["status"] = 0

        (span,) = exporter.get_finished_spans()
        assert span.name == "dispatch:K"
        assert span.attributes["errtrap.context"] == "K"
        assert span.attributes["errtrap.exit_code"] == 4
        assert span.attributes["errtrap.handler"] == "fix"
        assert span.attributes["errtrap.outcome"] == "resumed"
        assert span.status.status_code == StatusCode.OK

    def test_terminated_span(self, exporter):
        with instrumentation.instrument_dispatch("K", 4, "fix") as result:
            result["status"] = 7

        (span,) = exporter.get_finished_spans()
        assert span.attributes["errtrap.outcome"] == "terminated"
        assert span.attributes["errtrap.handler_status"] == 7
        assert span.status.status_code == StatusCode.ERROR

    def test_exit_inside_span(self, exporter):
        with pytest.raises(SystemExit):
            with instrumentation.instrument_dispatch("K", 2, "fix"):
                raise SystemExit(2)

        (span,) = exporter.get_finished_spans()
        assert span.attributes["errtrap.outcome"] == "terminated"

    def test_engine_dispatch_is_traced(self, exporter, engine):
        engine.register("JSON_FIX", lambda *a: 0)

        engine.raise_("JSON_FIX", 3, "k")

        (span,) = exporter.get_finished_spans()
        assert span.name == "dispatch:JSON_FIX"
        assert span.attributes["errtrap.outcome"] == "resumed"
