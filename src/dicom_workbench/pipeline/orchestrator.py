"""
Pipeline Orchestrator - Two-Stage Batch Run.

The PipelineOrchestrator drives the backend's anonymize and convert
stages for one PipelineRequest and returns the populated PipelineRun.

Run sequencing:
    - anonymize only / convert only: the stage receives the caller's spec
    - both: anonymize runs first; convert then reads
      ``<anonymization output>/<anonymized_subfolder>``, writes into the
      anonymization output folder and always flattens its output, keeping
      the caller's skip_excel
    - each stage is one blocking ``run_pipeline`` call carrying only that
      stage's branch; stage 2 is issued only after stage 1's report

State machine:
    IDLE -> STAGE_ONE_RUNNING -> [STAGE_TWO_RUNNING] -> COMPLETE
    FAILED is reachable from either running state on a rejected call.
    Failures counted inside a report are data, not a run failure.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Dict, Optional

from dicom_workbench.config.models import WorkbenchConfig
from dicom_workbench.domain.entities import (
    AnonymizationReport,
    ConvertSpec,
    PipelineRequest,
    PipelineRun,
    RunState,
    Stage,
    StageReport,
)
from dicom_workbench.domain.value_objects import StageProgressView
from dicom_workbench.interfaces.audit_logger import AuditLogger
from dicom_workbench.interfaces.health_monitor import HealthMonitor
from dicom_workbench.interfaces.remote_gateway import RemoteCallError, RemoteGateway
from dicom_workbench.pipeline.progress_aggregator import ProgressAggregator
from dicom_workbench.resilience.error_handler import (
    ErrorHandler,
    InvocationError,
    describe_partial_failure,
    empty_folder_warning,
)
from dicom_workbench.validation.request_validator import PipelineRequestValidator

logger = logging.getLogger(__name__)


class RunInProgressError(RuntimeError):
    """Raised when run() is called while another run is still running."""


def chained_convert_spec(
    anonymization: AnonymizationReport,
    convert: ConvertSpec,
    anonymized_subfolder: str = "dicom_file",
) -> ConvertSpec:
    """
    Convert spec for the second stage of a two-stage run.

    Args:
        anonymization: Report of the finished anonymize stage
        convert: Caller's convert spec (only skip_excel is kept)
        anonymized_subfolder: Subfolder holding the anonymized records

    Returns:
        Spec reading the anonymized records and flattening output
    """
    root = anonymization.output_folder.rstrip("/")
    return ConvertSpec(
        input_folder=f"{root}/{anonymized_subfolder}",
        output_folder=anonymization.output_folder,
        skip_excel=convert.skip_excel,
        flatten_output=True,
    )


class PipelineOrchestrator:
    """Main orchestrator for anonymize/convert runs."""

    def __init__(
        self,
        gateway: RemoteGateway,
        config: Optional[WorkbenchConfig] = None,
        error_handler: Optional[ErrorHandler] = None,
        request_validator: Optional[PipelineRequestValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        health_monitor: Optional[HealthMonitor] = None,
    ) -> None:
        """
        Initialize orchestrator with all dependencies.

        Args:
            gateway: Backend gateway
            config: Workbench configuration
            error_handler: Wraps rejected remote calls
            request_validator: Validates requests before any remote call
            audit_logger: Stage start/end and anomaly hooks (optional)
            health_monitor: Pre/post-run checks (optional)
        """
        self.gateway = gateway
        self.config = config or WorkbenchConfig()
        self.error_handler = error_handler or ErrorHandler()
        self.request_validator = request_validator or PipelineRequestValidator()
        self.audit_logger = audit_logger
        self.health_monitor = health_monitor
        self.aggregator = ProgressAggregator(
            gateway,
            log_row_extent=self.config.explorer.log_row_extent,
            overscan=self.config.explorer.overscan,
        )
        self.current_run: Optional[PipelineRun] = None

    @property
    def state(self) -> RunState:
        if self.current_run is None:
            return RunState.IDLE
        return self.current_run.state

    @property
    def is_running(self) -> bool:
        return self.state.is_running

    def run(self, request: PipelineRequest) -> PipelineRun:
        """
        Execute a pipeline run.

        Args:
            request: Stages to run and their parameters

        Returns:
            PipelineRun in state COMPLETE

        Raises:
            RunInProgressError: If a run is already running
            ValidationError: If the request is empty or invalid
            InvocationError: If the backend rejects a stage; ``error.run``
                holds the FAILED run
        """
        if self.is_running:
            raise RunInProgressError("A pipeline run is already in progress")

        self.request_validator.validate(request)

        run = PipelineRun(request=request)
        self.current_run = run
        start_time = time.perf_counter()
        if self.audit_logger is not None:
            self.audit_logger.set_correlation_id(run.run_id)
        logger.info(
            f"Run {run.run_id} started: "
            f"stages={[s.value for s in request.requested_stages]}"
        )

        if self.health_monitor is not None:
            run.warnings.extend(self.health_monitor.check_pre_run().warnings)

        self.aggregator.attach(run)
        try:
            self._execute(run, request)
            run.state = RunState.COMPLETE
        except InvocationError as e:
            run.state = RunState.FAILED
            run.error = e.message
            e.run = run
            logger.error(f"Run {run.run_id} failed: {e.message}")
            if self.audit_logger is not None:
                self.audit_logger.log_anomaly(
                    e.message, "ERROR", context={"operation": e.operation, "path": e.path}
                )
            raise
        finally:
            self.aggregator.detach()
            if run.state.is_running:
                run.state = RunState.FAILED
            run.finished_at = datetime.now()
            if self.health_monitor is not None:
                run.warnings.extend(self.health_monitor.check_post_run(run).warnings)

        logger.info(
            f"Run {run.run_id} complete in {time.perf_counter() - start_time:.2f}s "
            f"({len(run.logs)} log entries, {len(run.warnings)} warnings)"
        )
        return run

    def stage_view(self, stage: Stage) -> StageProgressView:
        return self.aggregator.stage_view(stage)

    def close(self) -> None:
        """Release event subscriptions (consumer teardown)."""
        self.aggregator.close()

    def _execute(self, run: PipelineRun, request: PipelineRequest) -> None:
        pipeline_config = self.config.pipeline

        if request.anonymize is None:
            run.state = RunState.STAGE_ONE_RUNNING
            self._run_stage(run, Stage.CONVERT, PipelineRequest(convert=request.convert))
            return

        run.state = RunState.STAGE_ONE_RUNNING
        anonymization = self._run_stage(
            run, Stage.ANONYMIZE, PipelineRequest(anonymize=request.anonymize)
        )
        if request.convert is None:
            return

        if anonymization.is_total_failure and pipeline_config.stop_on_total_failure:
            warning = (
                f"Conversion skipped: anonymization failed on all "
                f"{anonymization.total} files"
            )
            logger.warning(warning)
            run.warnings.append(warning)
            return

        run.state = RunState.STAGE_TWO_RUNNING
        convert = chained_convert_spec(
            anonymization, request.convert, pipeline_config.anonymized_subfolder
        )
        self._run_stage(run, Stage.CONVERT, PipelineRequest(convert=convert))

    def _run_stage(
        self,
        run: PipelineRun,
        stage: Stage,
        stage_request: PipelineRequest,
    ) -> Any:
        spec = stage_request.anonymize if stage is Stage.ANONYMIZE else stage_request.convert
        input_folder = spec.input_folder
        stage_context: Dict[str, Any] = {
            "input_folder": input_folder,
            "output_folder": spec.output_folder,
        }
        if self.audit_logger is not None:
            self.audit_logger.log_stage_start(stage.value, stage_context)

        stage_start = time.perf_counter()
        response = self.error_handler.invoke(
            lambda: self.gateway.run_pipeline(stage_request), stage.value, input_folder
        )
        duration = time.perf_counter() - stage_start

        report: Optional[StageReport]
        if stage is Stage.ANONYMIZE:
            report = response.anonymization
            if response.conversion is not None:
                logger.debug("Ignoring conversion report returned by the anonymize stage")
        else:
            report = response.conversion
        if report is None:
            raise InvocationError(
                stage.value, input_folder, cause=RemoteCallError("no report returned")
            )

        self.aggregator.record_report(report)
        logger.info(f"{stage.value} finished in {duration:.2f}s: {report.summary_line()}")

        if report.is_empty:
            warning = empty_folder_warning(input_folder)
            logger.warning(warning)
            run.warnings.append(warning)
        partial = describe_partial_failure(report)
        if partial:
            logger.warning(partial)

        if self.audit_logger is not None:
            self.audit_logger.log_stage_end(
                stage.value,
                {
                    "total": report.total,
                    "successful": report.successful,
                    "failed": report.failed,
                    "skipped": report.skipped,
                    "output_folder": report.output_folder,
                    "duration_seconds": duration,
                },
            )
        return report
