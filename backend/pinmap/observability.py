import logging
import os
from typing import Optional, Mapping

# Logging correlation
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry import metrics

_metrics_initialized = False
_geocode_hist = None
_pins_counter = None

def setup_logging(level: Optional[str] = None) -> None:
    """Configure Python logging and OpenTelemetry log correlation.

    This is safe to call multiple times.
    """
    lvl = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    try:
        logging.getLogger().setLevel(lvl)
    except ValueError:
        logging.getLogger().setLevel(logging.INFO)
        lvl = "INFO"

    instrumentor = LoggingInstrumentor()
    if not instrumentor.is_instrumented_by_opentelemetry:
        instrumentor.instrument(set_logging_format=True)

    logging.basicConfig(
        level=lvl,
        format=(
            "%(asctime)s %(levelname)s "
            "[trace_id=%(otelTraceID)s span_id=%(otelSpanID)s "
            "resource.service.name=%(otelServiceName)s trace_sampled=%(otelTraceSampled)s] "
            "- %(name)s: %(message)s"
        ),
    )

def _init_metrics() -> None:
    global _metrics_initialized, _geocode_hist, _pins_counter
    if _metrics_initialized:
        return
    try:
        meter = metrics.get_meter("pinmap.observability")
        _geocode_hist = meter.create_histogram(
            name="pinmap.geocode.duration",
            description="Reverse geocoding round-trip time",
            unit="ms",
        )
        _pins_counter = meter.create_counter(
            name="pinmap.pins.committed",
            description="Pins appended to the pin store",
            unit="{pins}",
        )
    except Exception:
        _geocode_hist = None
        _pins_counter = None
    _metrics_initialized = True

def record_geocode_duration(duration_ms: float, attributes: Optional[Mapping[str, str]] = None) -> None:
    """Record one reverse geocoding latency sample.

    `attributes` usually carries the outcome (ok / not_found / error).
    """
    if not _metrics_initialized:
        _init_metrics()
    if _geocode_hist is None:
        return
    try:
        _geocode_hist.record(float(duration_ms), attributes or {})
    except Exception:
        # Don't break app flow on metrics errors
        pass

def record_pin_committed(persisted: bool = True) -> None:
    if not _metrics_initialized:
        _init_metrics()
    if _pins_counter is None:
        return
    try:
        _pins_counter.add(1, {"persisted": str(persisted).lower()})
    except Exception:
        pass
