"""
Health Monitor Protocol.

Defines the abstract interface for the checks run around a pipeline run.

The health monitor is responsible for:
    - Pre-run checks (RAM headroom for the growing log sequence)
    - Post-run checks (empty input, stage-level total failure)

Design Notes:
    - Configurable thresholds
    - Never raises; findings are reported through the returned status
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from dicom_workbench.domain.entities import PipelineRun
    from dicom_workbench.observability.health_monitor import HealthStatus


@runtime_checkable
class HealthMonitor(Protocol):
    """Abstract interface for health monitoring."""

    def check_pre_run(self) -> HealthStatus:
        """
        Perform pre-run health checks.

        Returns:
            HealthStatus with status and details
        """
        ...

    def check_post_run(self, run: PipelineRun) -> HealthStatus:
        """
        Perform post-run health checks.

        Args:
            run: Completed (or failed) pipeline run

        Returns:
            HealthStatus with status and details
        """
        ...
