"""
YApi MCP — Observability Monitoring

In-process metrics collection and structured JSON logging.
Metrics live for the process lifetime and are exposed by the get_metrics tool.
"""

import contextvars
import json
import logging
import threading
import time
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

# Trace ID context variable for per-call tracing
_trace_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar("trace_id", default=None)

PACKAGE_LOGGER = "yapi_mcp"


def _metric_key(metric: str, tags: dict[str, str] | None) -> str:
    if not tags:
        return metric
    rendered = ",".join(f"{k}={v}" for k, v in sorted(tags.items()))
    return f"{metric}{{{rendered}}}"


class ObservabilityAdapter:
    """
    Simple in-process observability adapter.

    Provides:
    - Metrics (counters, gauges, histogram summaries)
    - Trace IDs via context variables
    - Structured JSON logging on the package logger
    """

    def __init__(
        self,
        enable_metrics: bool = True,
        enable_tracing: bool = True,
        log_level: str = "INFO",
        configure_logging: bool = True,
    ):
        """
        Initialize observability adapter.

        Args:
            enable_metrics: Enable metrics collection
            enable_tracing: Enable span tracing
            log_level: Level for the package logger
            configure_logging: Install the JSON handler on the package logger
        """
        self.enable_metrics = enable_metrics
        self.enable_tracing = enable_tracing

        self._lock = threading.Lock()
        self._counters: dict[str, float] = {}
        self._gauges: dict[str, float] = {}
        self._histograms: dict[str, dict[str, float]] = {}
        self._started_at = time.time()

        self.logger = self._setup_logger(log_level) if configure_logging else logging.getLogger(PACKAGE_LOGGER)

    def _setup_logger(self, log_level: str) -> logging.Logger:
        """Setup structured JSON logger (stderr; stdout carries the MCP protocol)."""
        logger = logging.getLogger(PACKAGE_LOGGER)

        # Remove existing handlers
        logger.handlers.clear()

        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.setLevel(log_level)
        logger.propagate = False

        return logger

    def increment(
        self,
        metric: str,
        value: float = 1.0,
        tags: dict[str, str] | None = None,
    ) -> None:
        """
        Increment a counter metric.

        Args:
            metric: Metric name (e.g., "cache.hits")
            value: Value to increment by
            tags: Optional metric tags/labels
        """
        if not self.enable_metrics:
            return

        key = _metric_key(metric, tags)
        with self._lock:
            self._counters[key] = self._counters.get(key, 0.0) + value

    def gauge(
        self,
        metric: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric."""
        if not self.enable_metrics:
            return

        key = _metric_key(metric, tags)
        with self._lock:
            self._gauges[key] = value

    def histogram(
        self,
        metric: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """
        Record a histogram metric (for latencies, sizes, etc.).

        Only count/sum/min/max are kept.
        """
        if not self.enable_metrics:
            return

        key = _metric_key(metric, tags)
        with self._lock:
            summary = self._histograms.get(key)
            if summary is None:
                self._histograms[key] = {"count": 1, "sum": value, "min": value, "max": value}
            else:
                summary["count"] += 1
                summary["sum"] += value
                summary["min"] = min(summary["min"], value)
                summary["max"] = max(summary["max"], value)

    def event(self, name: str, payload: dict[str, Any]) -> None:
        """
        Record an event.

        Args:
            name: Event name
            payload: Event data
        """
        self.logger.info(
            f"Event: {name}",
            extra={
                "event_name": name,
                "event_payload": payload,
                "trace_id": self.get_trace_id(),
            },
        )

    @contextmanager
    def trace(self, span_name: str, tags: dict[str, str] | None = None) -> Generator[None, None, None]:
        """
        Context manager for tracing a span.

        Example:
            with observability.trace("yapi.get_interface_detail"):
                detail = await client.get_interface_detail(42)
        """
        if not self.enable_tracing:
            yield
            return

        start_time = time.perf_counter()
        trace_id = self.get_trace_id()
        tags = tags or {}

        self.logger.debug(
            f"Span started: {span_name}",
            extra={"span_name": span_name, "trace_id": trace_id, "tags": tags},
        )

        try:
            yield
        except Exception as e:
            self.logger.warning(
                f"Span error: {span_name}",
                extra={"span_name": span_name, "trace_id": trace_id, "error": str(e), "tags": tags},
            )
            raise
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self.histogram("span.duration_ms", duration_ms, tags={"span_name": span_name})

            self.logger.debug(
                f"Span completed: {span_name}",
                extra={
                    "span_name": span_name,
                    "trace_id": trace_id,
                    "duration_ms": round(duration_ms, 2),
                    "tags": tags,
                },
            )

    def get_trace_id(self) -> str | None:
        """Get current trace ID from context."""
        return _trace_id_ctx.get()

    def set_trace_id(self, trace_id: str) -> None:
        """Set trace ID in context."""
        _trace_id_ctx.set(trace_id)

    def generate_trace_id(self) -> str:
        """Generate a new trace ID and set it in context."""
        trace_id = str(uuid4())
        self.set_trace_id(trace_id)
        return trace_id

    def get_metrics(self) -> dict[str, Any]:
        """Snapshot of all metrics collected so far."""
        with self._lock:
            return {
                "uptime_seconds": round(time.time() - self._started_at, 3),
                "counters": dict(self._counters),
                "gauges": dict(self._gauges),
                "histograms": {
                    key: {**summary, "avg": summary["sum"] / summary["count"]}
                    for key, summary in self._histograms.items()
                },
            }

    def clear_metrics(self) -> None:
        """Clear all metrics (testing/reset)."""
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._histograms.clear()


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    _RESERVED = frozenset(
        (
            "args",
            "msg",
            "levelname",
            "levelno",
            "pathname",
            "filename",
            "module",
            "exc_info",
            "exc_text",
            "stack_info",
            "lineno",
            "funcName",
            "created",
            "msecs",
            "relativeCreated",
            "thread",
            "threadName",
            "processName",
            "process",
            "taskName",
            "name",
            "message",
        )
    )

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        trace_id = _trace_id_ctx.get()
        if trace_id:
            log_data["trace_id"] = trace_id

        # Extra fields passed via logger.xxx(..., extra={...})
        for key, value in record.__dict__.items():
            if key not in log_data and not key.startswith("_") and key not in self._RESERVED:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


# Global observability adapter instance (singleton)
_observability_adapter: ObservabilityAdapter | None = None


def get_observability() -> ObservabilityAdapter:
    """
    Get the global observability adapter instance.

    All modules use this function rather than creating their own adapters.
    """
    global _observability_adapter

    if _observability_adapter is None:
        _observability_adapter = ObservabilityAdapter(configure_logging=False)

    return _observability_adapter


def initialize_observability(
    enable_metrics: bool = True,
    enable_tracing: bool = True,
    log_level: str = "INFO",
) -> ObservabilityAdapter:
    """
    Initialize the global observability adapter.

    Args:
        enable_metrics: Enable metrics collection
        enable_tracing: Enable span tracing
        log_level: Level for the package logger

    Returns:
        Initialized ObservabilityAdapter instance
    """
    global _observability_adapter

    _observability_adapter = ObservabilityAdapter(
        enable_metrics=enable_metrics,
        enable_tracing=enable_tracing,
        log_level=log_level,
    )

    return _observability_adapter


def reset_observability() -> None:
    """Drop the global adapter. Used by tests."""
    global _observability_adapter
    _observability_adapter = None
