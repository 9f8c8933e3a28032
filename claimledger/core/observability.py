import os
import time
from contextlib import contextmanager

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

evaluations_total = Counter("claimledger_evaluations_total", "Evaluations by outcome", ["status"])
refutations_total = Counter("claimledger_refutations_total", "Refutations by outcome", ["outcome"])
evidence_fetch_total = Counter(
    "claimledger_evidence_fetch_total",
    "Evidence provider calls by provider, stance and status",
    ["provider", "stance", "status"],
)
ledger_submissions_total = Counter("claimledger_ledger_submissions_total", "Ledger submissions by status", ["status"])
ledger_retries_total = Counter("claimledger_ledger_retries_total", "Ledger operations retried after transient errors")
stage_duration_seconds = Histogram(
    "claimledger_stage_duration_seconds",
    "Pipeline stage duration seconds",
    ["stage"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30, 60, 120),
)

_TRACING_INITIALIZED = False


def setup_tracing(app) -> None:
    """Instrument the FastAPI app with an OTLP span exporter (only when ENABLE_TRACING is set)."""
    global _TRACING_INITIALIZED
    if _TRACING_INITIALIZED:
        return

    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://otel-collector:4317")
    service_name = os.getenv("OTEL_SERVICE_NAME", "claimledger")
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True)))
    trace.set_tracer_provider(provider)
    FastAPIInstrumentor.instrument_app(app, tracer_provider=provider)
    _TRACING_INITIALIZED = True


@contextmanager
def stage_timer(stage: str):
    start = time.perf_counter()
    try:
        yield
    finally:
        stage_duration_seconds.labels(stage=stage).observe(time.perf_counter() - start)


def metrics_payload() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST
