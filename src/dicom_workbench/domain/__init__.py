"""
Domain Layer - Core Entities and Value Objects.

This package contains the core domain model for DICOM Workbench.
All entities here are pure Python with no infrastructure dependencies
(except Pydantic for validation).

Entities:
    - TagIdentifier: (group, element) key of one DICOM metadata field
    - TagRow: One tag occurrence in one record
    - ProgressEvent / LogEntry: Payloads of the backend event streams
    - AnonymizationReport / ConversionReport: Outcome of one stage
    - PipelineRequest / PipelineRun: Input and aggregate of a batch run
    - TagStat / TagDetails: Value histograms across a folder

Value Objects:
    - ValueShare / TagStatSummary: Presentation form of a histogram
    - StageProgressView: Renderable progress bar state

Design Principles:
    - Immutable where possible (frozen models)
    - Behavior with data (summary lines, CLI arguments, labels)
    - No infrastructure dependencies
"""

from dicom_workbench.domain.entities import (
    AnonymizationReport,
    AnonymizeSpec,
    ConversionReport,
    ConversionType,
    ConvertSpec,
    FileDescriptor,
    LogEntry,
    PipelineRequest,
    PipelineResponse,
    PipelineRun,
    ProgressEvent,
    ProgressStatus,
    RunState,
    Stage,
    StageReport,
    TagDetails,
    TagIdentifier,
    TagRow,
    TagStat,
    TagValueDetail,
)
from dicom_workbench.domain.value_objects import (
    ScanProgress,
    StageProgressView,
    TagStatSummary,
    ValueShare,
)

__all__ = [
    "AnonymizationReport",
    "AnonymizeSpec",
    "ConversionReport",
    "ConversionType",
    "ConvertSpec",
    "FileDescriptor",
    "LogEntry",
    "PipelineRequest",
    "PipelineResponse",
    "PipelineRun",
    "ProgressEvent",
    "ProgressStatus",
    "RunState",
    "ScanProgress",
    "Stage",
    "StageProgressView",
    "StageReport",
    "TagDetails",
    "TagIdentifier",
    "TagRow",
    "TagStat",
    "TagStatSummary",
    "TagValueDetail",
    "ValueShare",
]
