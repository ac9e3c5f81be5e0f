"""
Audit Logger Protocol.

Defines the hooks the pipeline orchestrator calls while a run progresses.
The audit logger tracks stage boundaries and anomalies for debugging and
support.

The audit logger is responsible for:
    - Logging stage start/end events
    - Logging anomalies and warnings
    - Maintaining correlation across a pipeline run

Design Notes:
    - Structured logging (JSON format recommended)
    - Correlation ID propagation for tracing
    - No side effects on pipeline logic
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class AuditLogger(Protocol):
    """Abstract interface for audit logging."""

    def set_correlation_id(self, correlation_id: str) -> None:
        """Bind the correlation ID of the current run to subsequent entries."""
        ...

    def log_stage_start(self, stage_name: str, context: Dict[str, Any]) -> None:
        """
        Log the start of a pipeline stage.

        Args:
            stage_name: Name of the stage
            context: Stage parameters (folders, tag count, ...)
        """
        ...

    def log_stage_end(self, stage_name: str, result: Dict[str, Any]) -> None:
        """
        Log the end of a pipeline stage.

        Args:
            stage_name: Name of the stage
            result: Report counts and duration
        """
        ...

    def log_anomaly(
        self,
        message: str,
        severity: str = "WARNING",
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log an anomaly or unexpected condition."""
        ...
