"""
Pipeline Package - Anonymize/Convert Run Coordination.

Components:
    - PipelineOrchestrator: Sequences the two stages and owns the run state
    - ProgressAggregator: Folds progress and log streams into the run
    - build_request / ExportFormatSelection: Export form to PipelineRequest

Design Principles:
    - One blocking gateway call per stage
    - Subscriptions live exactly as long as the run
    - Failures inside a report are data; rejected calls abort the run
"""

from dicom_workbench.pipeline.orchestrator import (
    PipelineOrchestrator,
    RunInProgressError,
    chained_convert_spec,
)
from dicom_workbench.pipeline.progress_aggregator import (
    ProgressAggregator,
    render_stage_progress,
)
from dicom_workbench.pipeline.request_builder import (
    ExportFormat,
    ExportFormatSelection,
    build_request,
)

__all__ = [
    "ExportFormat",
    "ExportFormatSelection",
    "PipelineOrchestrator",
    "ProgressAggregator",
    "RunInProgressError",
    "build_request",
    "chained_convert_spec",
    "render_stage_progress",
]
