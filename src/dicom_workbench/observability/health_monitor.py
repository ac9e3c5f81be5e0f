"""
Health Monitor - Checks Around a Pipeline Run.

Provides health checks at the run boundaries:
    - Pre-run: system RAM headroom (the log sequence grows with the
      number of records and is held in memory for the whole run)
    - Post-run: input folder not empty, no stage failed on every file

Design Notes:
    - Configurable thresholds from HealthMonitorConfig
    - Returns HealthStatus with pass/warn/fail checks
    - Logs anomalies via ObservabilityManager if provided
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import psutil

from dicom_workbench.config.models import HealthMonitorConfig
from dicom_workbench.domain.entities import Stage

if TYPE_CHECKING:
    from dicom_workbench.domain.entities import PipelineRun
    from dicom_workbench.interfaces.audit_logger import AuditLogger

logger = logging.getLogger(__name__)


class HealthCheckResult(Enum):
    """Result of a health check."""
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


@dataclass
class HealthCheck:
    """Individual health check result."""
    name: str
    result: HealthCheckResult
    message: str
    value: Optional[float] = None
    threshold: Optional[float] = None


@dataclass
class HealthStatus:
    """Overall health status."""
    is_healthy: bool = True
    checks: List[HealthCheck] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def add_check(self, check: HealthCheck) -> None:
        self.checks.append(check)
        if check.result == HealthCheckResult.FAIL:
            self.is_healthy = False

    @property
    def warnings(self) -> List[str]:
        return [c.message for c in self.checks if c.result != HealthCheckResult.PASS]

    @property
    def summary(self) -> Dict[str, Any]:
        return {
            "is_healthy": self.is_healthy,
            "timestamp": self.timestamp,
            "checks": {
                c.name: {
                    "result": c.result.value,
                    "message": c.message,
                    "value": c.value,
                    "threshold": c.threshold,
                }
                for c in self.checks
            },
        }


class HealthMonitor:
    """
    Monitor system health around pipeline runs.

    Performs checks:
        - Pre-run: RAM usage
        - Post-run: empty input, total stage failure
    """

    def __init__(
        self,
        config: Optional[HealthMonitorConfig] = None,
        observability: Optional["AuditLogger"] = None,
    ) -> None:
        """
        Initialize health monitor.

        Args:
            config: Health monitoring configuration
            observability: Audit logger for anomalies (optional)
        """
        self.config = config or HealthMonitorConfig()
        self.observability = observability

    def check_pre_run(self) -> HealthStatus:
        """Check RAM usage before a run starts."""
        status = HealthStatus()
        if not self.config.enabled:
            return status

        ram_check = self._check_ram_usage()
        status.add_check(ram_check)
        if ram_check.result != HealthCheckResult.PASS:
            self._log_anomaly(ram_check)
        return status

    def check_post_run(self, run: "PipelineRun") -> HealthStatus:
        """
        Check a finished run's reports.

        Args:
            run: Run after the orchestrator returned

        Returns:
            HealthStatus; a total stage failure is a WARN, not a FAIL,
            because the run itself completed
        """
        status = HealthStatus()
        if not self.config.enabled:
            return status

        for stage in Stage:
            report = run.report_for(stage)
            if report is None:
                continue
            check = self._check_report(stage, report.total, report.failed)
            status.add_check(check)
            if check.result != HealthCheckResult.PASS:
                self._log_anomaly(check)
        return status

    def _check_ram_usage(self) -> HealthCheck:
        ram_pct = psutil.virtual_memory().percent

        if ram_pct >= self.config.max_ram_usage_pct:
            return HealthCheck(
                name="ram_usage",
                result=HealthCheckResult.FAIL,
                message=f"RAM usage {ram_pct:.1f}% exceeds max {self.config.max_ram_usage_pct}%",
                value=ram_pct,
                threshold=self.config.max_ram_usage_pct,
            )
        elif ram_pct >= self.config.warn_ram_usage_pct:
            return HealthCheck(
                name="ram_usage",
                result=HealthCheckResult.WARN,
                message=f"RAM usage {ram_pct:.1f}% approaching limit",
                value=ram_pct,
                threshold=self.config.warn_ram_usage_pct,
            )
        return HealthCheck(
            name="ram_usage",
            result=HealthCheckResult.PASS,
            message=f"RAM usage {ram_pct:.1f}% OK",
            value=ram_pct,
            threshold=self.config.max_ram_usage_pct,
        )

    def _check_report(self, stage: Stage, total: int, failed: int) -> HealthCheck:
        name = f"{stage.value}_report"
        if total == 0:
            return HealthCheck(
                name=name,
                result=HealthCheckResult.WARN,
                message=f"{stage.value} processed no files",
                value=0.0,
            )
        if failed == total:
            return HealthCheck(
                name=name,
                result=HealthCheckResult.WARN,
                message=f"{stage.value} failed on all {total} files",
                value=1.0,
                threshold=1.0,
            )
        return HealthCheck(
            name=name,
            result=HealthCheckResult.PASS,
            message=f"{stage.value} failure ratio {failed / total:.1%}",
            value=failed / total,
            threshold=1.0,
        )

    def _log_anomaly(self, check: HealthCheck) -> None:
        severity = "ERROR" if check.result == HealthCheckResult.FAIL else "WARNING"

        if self.observability:
            self.observability.log_anomaly(
                check.message,
                severity,
                context={
                    "check_name": check.name,
                    "value": check.value,
                    "threshold": check.threshold,
                },
            )
        else:
            log_fn = logger.error if severity == "ERROR" else logger.warning
            log_fn(f"Health check {check.name}: {check.message}")
