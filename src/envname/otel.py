"""envname OpenTelemetry integration.

Emits a span for every evaluate() and explain() call.
Gracefully degrades to no-op if OpenTelemetry is not installed.

Install: pip install envname[otel]
"""

from __future__ import annotations

import contextlib
import os
from typing import Any

try:
    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    _HAS_OTEL = True
except ImportError:
    _HAS_OTEL = False

_DEFAULT_GRPC_ENDPOINT = "http://localhost:4317"
_DEFAULT_HTTP_ENDPOINT = "http://localhost:4318/v1/traces"


def has_otel() -> bool:
    """Check if OpenTelemetry is available."""
    return _HAS_OTEL


def _is_provider_configured() -> bool:
    """Check whether an SDK TracerProvider is already set."""
    if not _HAS_OTEL:
        return False
    return isinstance(trace.get_tracer_provider(), TracerProvider)


def _parse_resource_attributes(raw: str) -> dict[str, str]:
    attrs: dict[str, str] = {}
    for pair in raw.split(","):
        if "=" in pair:
            k, v = pair.split("=", 1)
            attrs[k.strip()] = v.strip()
    return attrs


def _resource_attributes(service: str, version: str, extra: dict[str, str] | None) -> dict[str, str]:
    """Resource attributes, lowest to highest: defaults, *extra*, OTEL_RESOURCE_ATTRIBUTES."""
    attrs = {"service.name": service, "envname.version": version}
    attrs.update(extra or {})
    attrs.update(_parse_resource_attributes(os.environ.get("OTEL_RESOURCE_ATTRIBUTES", "")))
    return attrs


def _build_exporter(protocol: str, endpoint: str) -> Any:
    """OTLP exporter for *protocol*; anything but "grpc" selects HTTP.

    The gRPC default endpoint is swapped for the HTTP one when HTTP is chosen.
    """
    if protocol == "grpc":
        return OTLPSpanExporter(endpoint=endpoint, insecure=True)

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter as HTTPExporter

    if endpoint == _DEFAULT_GRPC_ENDPOINT:
        endpoint = _DEFAULT_HTTP_ENDPOINT
    return HTTPExporter(endpoint=endpoint)


def configure_otel(
    *,
    service_name: str = "envname",
    endpoint: str = _DEFAULT_GRPC_ENDPOINT,
    protocol: str = "grpc",
    resource_attributes: dict[str, str] | None = None,
    envname_version: str | None = None,
    force: bool = False,
) -> None:
    """Configure OpenTelemetry span export for envname.

    No-op if OTel is not installed, or if the host application already
    configured a TracerProvider (unless *force=True*).

    Standard OTel env vars take precedence over arguments:
    - OTEL_SERVICE_NAME overrides *service_name*
    - OTEL_EXPORTER_OTLP_ENDPOINT overrides *endpoint*
    - OTEL_EXPORTER_OTLP_PROTOCOL overrides *protocol*
    - OTEL_RESOURCE_ATTRIBUTES merged with *resource_attributes*

    Spans carry ``envname.version``, defaulting to the installed version.
    """
    if not _HAS_OTEL:
        return

    if _is_provider_configured() and not force:
        return

    service = os.environ.get("OTEL_SERVICE_NAME", service_name)
    protocol = os.environ.get("OTEL_EXPORTER_OTLP_PROTOCOL", protocol)
    endpoint = os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT", endpoint)

    if envname_version is None:
        from envname import __version__ as envname_version

    attrs = _resource_attributes(service, envname_version, resource_attributes)
    provider = TracerProvider(resource=Resource.create(attrs))
    provider.add_span_processor(BatchSpanProcessor(_build_exporter(protocol, endpoint)))
    trace.set_tracer_provider(provider)


def get_tracer(name: str = "envname") -> Any:
    """Get an OTel tracer. Returns no-op if OTel not installed."""
    if not _HAS_OTEL:
        return _NoOpTracer()
    return trace.get_tracer(name)


class _NoOpSpan:
    """Dummy span when OTel is not available."""

    def __enter__(self):
        return self

    def __exit__(self, *args):
        pass

    def set_attribute(self, key: str, value: Any) -> None:
        pass

    def add_event(self, name: str, attributes: dict | None = None) -> None:
        pass

    def end(self) -> None:
        pass


class _NoOpTracer:
    """Dummy tracer when OTel is not available."""

    def start_span(self, name: str, **kwargs: Any) -> _NoOpSpan:
        return _NoOpSpan()

    def start_as_current_span(self, name: str, **kwargs: Any) -> contextlib._GeneratorContextManager:
        @contextlib.contextmanager
        def _noop_ctx():
            yield _NoOpSpan()

        return _noop_ctx()
