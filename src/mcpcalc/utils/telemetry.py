"""OpenTelemetry tracing helpers for mcpcalc.

Provides a thin wrapper around the OpenTelemetry API so the rest of the
codebase can call ``get_tracer()`` without caring whether the SDK is
installed.  When the SDK is *not* configured the API returns no-op
implementations.

Usage::

    from mcpcalc.utils.telemetry import get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("mcp.dispatch") as span:
        span.set_attribute(ATTR_RPC_METHOD, "tools/list")

To activate real tracing, call :func:`configure_telemetry` once at startup
(requires the ``otel`` extra: ``pip install mcpcalc[otel]``).
"""

from __future__ import annotations

from opentelemetry import trace

# ---------------------------------------------------------------------------
# Semantic attribute keys used throughout mcpcalc instrumentation
# ---------------------------------------------------------------------------

ATTR_RPC_METHOD = "mcpcalc.rpc.method"
ATTR_RPC_ID = "mcpcalc.rpc.id"
ATTR_RPC_ERROR_CODE = "mcpcalc.rpc.error_code"
ATTR_TOOL_NAME = "mcpcalc.tool.name"
ATTR_CONNECTION_ID = "mcpcalc.connection.id"
ATTR_TRANSPORT = "mcpcalc.transport"

_INSTRUMENTATION_NAME = "mcpcalc"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name*.

    If the OpenTelemetry SDK has not been configured the returned tracer
    is a no-op.
    """
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "mcpcalc",
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider (requires ``mcpcalc[otel]``).

    Spans go to the OTLP/gRPC collector at *otlp_endpoint* when one is given,
    otherwise they are printed to stdout.

    Raises:
        ImportError: ``opentelemetry-sdk``, or ``opentelemetry-exporter-otlp``
            when *otlp_endpoint* is set, is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
        from opentelemetry.sdk.trace.export import (
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install mcpcalc[otel]"
        )
        raise ImportError(msg) from exc

    processor: SpanProcessor
    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        except ImportError as exc:
            msg = (
                "opentelemetry-exporter-otlp is required for OTLP export. "
                "Install it with: pip install mcpcalc[otel]"
            )
            raise ImportError(msg) from exc
        processor = BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint))
    else:
        processor = SimpleSpanProcessor(ConsoleSpanExporter())

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)
