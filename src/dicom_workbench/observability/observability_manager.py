"""
Observability Manager - Structured Logging and Run Metrics.

Provides:
    - Structured logging via structlog (JSON or console rendering)
    - Correlation ID per pipeline run, bound through structlog contextvars
    - In-memory metrics (timings, counts, gauges) and stored events

Design Notes:
    - Thread-safe event/metric storage; progress handlers may record from
      the backend's thread
    - Implements the AuditLogger protocol used by the orchestrator
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

import structlog

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    """Get current correlation ID from context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: Optional[str]) -> None:
    """Set correlation ID in context."""
    _correlation_id.set(correlation_id)


class ObservabilityManager:
    """
    Structured logging, metrics and correlation for pipeline runs.

    Example:
        >>> obs = ObservabilityManager(use_json=False)
        >>> with obs.run_scope(run.run_id):
        ...     obs.log_stage_start("anonymize", {"input_folder": "/data"})
    """

    def __init__(
        self,
        service_name: str = "dicom_workbench",
        use_json: bool = True,
        log_level: int = logging.INFO,
    ) -> None:
        """
        Initialize observability manager.

        Args:
            service_name: Service name for log entries
            use_json: Render JSON lines instead of console output
            log_level: Minimum level passed to the renderer
        """
        self.service_name = service_name
        self.use_json = use_json
        self.log_level = log_level
        self._metrics: Dict[str, List[Dict[str, Any]]] = {}
        self._events: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

        self._configure_structlog()
        self._logger = structlog.get_logger(service_name)

    def _configure_structlog(self) -> None:
        processors: List[Any] = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
        ]

        if self.use_json:
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.dev.ConsoleRenderer())

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(self.log_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(),
            cache_logger_on_first_use=False,
        )

    # =========================================================================
    # Correlation
    # =========================================================================

    def set_correlation_id(self, correlation_id: str) -> None:
        """Bind a correlation ID to the current context."""
        set_correlation_id(correlation_id)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id, service=self.service_name
        )

    def generate_correlation_id(self) -> str:
        """Generate and bind a new correlation ID."""
        correlation_id = str(uuid.uuid4())
        self.set_correlation_id(correlation_id)
        return correlation_id

    @contextmanager
    def run_scope(self, correlation_id: Optional[str] = None) -> Iterator[str]:
        """Bind a correlation ID for the duration of a block, then unbind it."""
        previous = get_correlation_id()
        cid = correlation_id or str(uuid.uuid4())
        self.set_correlation_id(cid)
        try:
            yield cid
        finally:
            structlog.contextvars.clear_contextvars()
            set_correlation_id(previous)
            if previous:
                structlog.contextvars.bind_contextvars(correlation_id=previous)

    # =========================================================================
    # Events and metrics
    # =========================================================================

    def log_event(
        self,
        event_type: str,
        data: Optional[Dict[str, Any]] = None,
        level: str = "info",
    ) -> None:
        """
        Log a structured event and keep it for inspection.

        Args:
            event_type: Event name (e.g. "stage_start", "anomaly")
            data: Additional event fields
            level: Log level (debug, info, warning, error)
        """
        event_data = {
            "event_type": event_type,
            "timestamp": datetime.now().isoformat(),
            "correlation_id": get_correlation_id(),
            **(data or {}),
        }

        with self._lock:
            self._events.append(event_data)

        log_method = getattr(self._logger, level.lower(), self._logger.info)
        fields = {k: v for k, v in event_data.items() if k != "correlation_id"}
        log_method(event_type, **fields)

    def record_metric(
        self,
        name: str,
        value: float,
        tags: Optional[Dict[str, str]] = None,
        metric_type: str = "gauge",
    ) -> None:
        metric_entry = {
            "timestamp": datetime.now().isoformat(),
            "value": value,
            "tags": tags or {},
            "type": metric_type,
            "correlation_id": get_correlation_id(),
        }

        with self._lock:
            self._metrics.setdefault(name, []).append(metric_entry)

    def record_timing(
        self,
        name: str,
        duration_seconds: float,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        self.record_metric(name, duration_seconds, tags, metric_type="histogram")

    def record_count(
        self,
        name: str,
        value: int,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        self.record_metric(name, float(value), tags, metric_type="counter")

    def record_gauge(
        self,
        name: str,
        value: float,
        tags: Optional[Dict[str, str]] = None,
    ) -> None:
        self.record_metric(name, value, tags, metric_type="gauge")

    def get_metrics(self) -> Dict[str, List[Dict[str, Any]]]:
        with self._lock:
            return {name: list(entries) for name, entries in self._metrics.items()}

    def get_events(self, event_type: Optional[str] = None) -> List[Dict[str, Any]]:
        with self._lock:
            events = list(self._events)
        if event_type is None:
            return events
        return [e for e in events if e["event_type"] == event_type]

    def clear(self) -> None:
        """Clear all recorded metrics and events."""
        with self._lock:
            self._metrics.clear()
            self._events.clear()

    # =========================================================================
    # AuditLogger Protocol
    # =========================================================================

    def log_stage_start(self, stage_name: str, context: Dict[str, Any]) -> None:
        self.log_event("stage_start", {"stage_name": stage_name, **context})

    def log_stage_end(self, stage_name: str, result: Dict[str, Any]) -> None:
        self.log_event("stage_end", {"stage_name": stage_name, **result})
        duration = result.get("duration_seconds")
        if duration is not None:
            self.record_timing(
                "stage_duration_seconds", float(duration), tags={"stage": stage_name}
            )
        for key in ("total", "successful", "failed", "skipped"):
            if key in result:
                self.record_count(f"stage_files_{key}", int(result[key]), tags={"stage": stage_name})

    def log_anomaly(
        self,
        message: str,
        severity: str = "WARNING",
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        level = "warning" if severity.upper() == "WARNING" else "error"
        self.log_event(
            "anomaly",
            {"message": message, "severity": severity, **(context or {})},
            level=level,
        )
