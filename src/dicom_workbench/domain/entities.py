"""
Core Domain Entities.

This module defines the fundamental entities of the DICOM Workbench domain:
tag identifiers and rows, the backend's event payloads, stage reports and
the aggregate of one pipeline run.

Backend payloads arrive flat (``{"group": 16, "element": 16, ...}``) and
use the engine's field names; the models accept that shape directly so
adapters never need a translation layer.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator


class _IdentifiedPayload(BaseModel):
    """Base for payloads keyed by a tag, accepting the flat wire shape."""

    @model_validator(mode="before")
    @classmethod
    def nest_identifier(cls, data: Any) -> Any:
        """Move flat ``group``/``element`` keys under ``identifier``."""
        return _nest_identifier(data)


def _nest_identifier(data: Any) -> Any:
    if isinstance(data, dict) and "identifier" not in data and "group" in data:
        data = dict(data)
        data["identifier"] = {
            "group": data.pop("group"),
            "element": data.pop("element", None),
        }
    return data


class TagIdentifier(BaseModel):
    """(group, element) pair identifying one metadata field in a record."""

    group: int = Field(..., ge=0, le=0xFFFF, description="Tag group number")
    element: int = Field(..., ge=0, le=0xFFFF, description="Tag element number")

    model_config = {"frozen": True}

    @classmethod
    def of(cls, group: int, element: int) -> "TagIdentifier":
        return cls(group=group, element=element)

    @property
    def key(self) -> str:
        """Stable string encoding used for set membership."""
        return f"{self.group}-{self.element}"

    @property
    def label(self) -> str:
        """Display form, e.g. ``(0010,0020)``."""
        return f"({self.group:04X},{self.element:04X})"

    @property
    def group_hex(self) -> str:
        return format(self.group, "x")

    @property
    def element_hex(self) -> str:
        return format(self.element, "x")

    @property
    def sort_key(self) -> Tuple[int, int]:
        return (self.group, self.element)

    def to_cli_value(self) -> str:
        """Backend CLI form, e.g. ``0010,0020``."""
        return f"{self.group:04X},{self.element:04X}"

    def __str__(self) -> str:
        return self.to_cli_value()


class TagRow(_IdentifiedPayload):
    """One tag occurrence in one record."""

    identifier: TagIdentifier
    name: str = Field(default="Unknown", description="Dictionary alias of the tag")
    vr: str = Field(default="", description="Value representation")
    value: str = Field(default="", description="Value rendered as text")

    model_config = {"frozen": True}

    @property
    def group(self) -> int:
        return self.identifier.group

    @property
    def element(self) -> int:
        return self.identifier.element


class FileDescriptor(BaseModel):
    """Name and path of one record file."""

    file_name: str = Field(validation_alias=AliasChoices("file_name", "fileName"))
    file_path: str = Field(validation_alias=AliasChoices("file_path", "filePath"))

    model_config = {"frozen": True, "populate_by_name": True}


class Stage(str, Enum):
    """Backend batch operation composing a pipeline run."""

    ANONYMIZE = "anonymize"
    CONVERT = "convert"

    @property
    def conversion_type(self) -> "ConversionType":
        if self is Stage.ANONYMIZE:
            return ConversionType.DICOM
        return ConversionType.PNG


class ConversionType(str, Enum):
    """Output format produced by a stage."""

    DICOM = "DICOM"
    PNG = "PNG"


class ProgressStatus(str, Enum):
    """Per-file status carried by a progress event."""

    PROCESSING = "processing"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


# Engine wording -> normalized status
_STATUS_ALIASES: Dict[str, ProgressStatus] = {
    "processing": ProgressStatus.PROCESSING,
    "anonymizing": ProgressStatus.PROCESSING,
    "converting": ProgressStatus.PROCESSING,
    "success": ProgressStatus.SUCCESS,
    "ok": ProgressStatus.SUCCESS,
    "failed": ProgressStatus.FAILED,
    "error": ProgressStatus.FAILED,
    "skipped": ProgressStatus.SKIPPED,
}


class ProgressEvent(BaseModel):
    """Latest progress of one stage."""

    current: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    file_name: str = Field(
        default="", validation_alias=AliasChoices("file_name", "filename", "fileName")
    )
    status: ProgressStatus = ProgressStatus.PROCESSING

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _STATUS_ALIASES.get(value.strip().lower(), ProgressStatus.PROCESSING)
        return value

    def caption(self) -> str:
        return f"[{self.status.value}] {self.current}/{self.total}: {self.file_name}"


class LogEntry(BaseModel):
    """Per-file outcome emitted on the log stream."""

    file_name: str
    file_path: str
    success: bool
    status: str
    message: str = ""
    conversion_type: ConversionType

    model_config = {"frozen": True}

    @property
    def is_skipped(self) -> bool:
        return self.status.strip().lower() == "skipped"

    @property
    def badge_label(self) -> str:
        if self.is_skipped:
            return "Already exists"
        return "Success" if self.success else "Failed"


class StageReport(BaseModel):
    """Outcome of one backend stage."""

    stage: ClassVar[Stage]

    total: int = Field(default=0, ge=0)
    successful: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    skipped: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("skipped", "skipped_non_image")
    )
    failed_files: List[str] = Field(default_factory=list)
    skipped_files: List[str] = Field(default_factory=list)
    output_folder: str = ""

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def has_partial_failure(self) -> bool:
        """Failures or skips inside an otherwise delivered report."""
        return self.failed > 0 or self.skipped > 0

    @property
    def is_total_failure(self) -> bool:
        return self.total > 0 and self.failed == self.total

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    @property
    def offending_files(self) -> List[str]:
        return [*self.failed_files, *self.skipped_files]

    def summary_line(self) -> str:
        return (
            f"Success: {self.successful} | Failed: {self.failed} | "
            f"Already exists: {self.skipped} | Total: {self.total}"
        )


class AnonymizationReport(StageReport):
    """Report of the anonymize stage."""

    stage: ClassVar[Stage] = Stage.ANONYMIZE


class ConversionReport(StageReport):
    """Report of the convert stage."""

    stage: ClassVar[Stage] = Stage.CONVERT


class AnonymizeSpec(BaseModel):
    """Parameters of the anonymize stage."""

    input_folder: str = Field(..., min_length=1)
    output_folder: str = Field(..., min_length=1)
    tags: List[TagIdentifier] = Field(..., min_length=1)
    replacement: str = "ANONYMIZED"

    model_config = {"frozen": True}

    def to_cli_args(self) -> List[str]:
        args = ["anonymize", "--input", self.input_folder, "--output", self.output_folder]
        for tag in self.tags:
            args.extend(["--tags", tag.to_cli_value()])
        args.extend(["--replacement", self.replacement])
        return args


class ConvertSpec(BaseModel):
    """Parameters of the convert stage."""

    input_folder: str = Field(..., min_length=1)
    output_folder: str = Field(..., min_length=1)
    skip_excel: bool = False
    flatten_output: bool = False

    model_config = {"frozen": True}

    def to_cli_args(self) -> List[str]:
        args = ["convert", "--input", self.input_folder, "--output", self.output_folder]
        if self.skip_excel:
            args.append("--skip-excel")
        if self.flatten_output:
            args.append("--flatten-output")
        return args


class PipelineRequest(BaseModel):
    """Which stages to run, and with what parameters."""

    anonymize: Optional[AnonymizeSpec] = None
    convert: Optional[ConvertSpec] = None

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return self.anonymize is None and self.convert is None

    @property
    def requested_stages(self) -> List[Stage]:
        stages = []
        if self.anonymize is not None:
            stages.append(Stage.ANONYMIZE)
        if self.convert is not None:
            stages.append(Stage.CONVERT)
        return stages

    def requests(self, stage: Stage) -> bool:
        return stage in self.requested_stages


class PipelineResponse(BaseModel):
    """Reply of one ``run_pipeline`` remote call."""

    anonymization: Optional[AnonymizationReport] = None
    conversion: Optional[ConversionReport] = None

    model_config = {"frozen": True}


class RunState(str, Enum):
    """Lifecycle of a pipeline run."""

    IDLE = "idle"
    STAGE_ONE_RUNNING = "stage_one_running"
    STAGE_TWO_RUNNING = "stage_two_running"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_running(self) -> bool:
        return self in (RunState.STAGE_ONE_RUNNING, RunState.STAGE_TWO_RUNNING)

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.COMPLETE, RunState.FAILED)


class PipelineRun(BaseModel):
    """Aggregate of one batch run, populated as stage results arrive."""

    request: PipelineRequest
    run_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    state: RunState = RunState.IDLE
    anonymization: Optional[AnonymizationReport] = None
    conversion: Optional[ConversionReport] = None
    logs: List[LogEntry] = Field(default_factory=list)
    anonymization_progress: Optional[ProgressEvent] = None
    conversion_progress: Optional[ProgressEvent] = None
    warnings: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    def report_for(self, stage: Stage) -> Optional[StageReport]:
        if stage is Stage.ANONYMIZE:
            return self.anonymization
        return self.conversion

    def progress_for(self, stage: Stage) -> Optional[ProgressEvent]:
        if stage is Stage.ANONYMIZE:
            return self.anonymization_progress
        return self.conversion_progress

    def set_progress(self, stage: Stage, event: Optional[ProgressEvent]) -> None:
        if stage is Stage.ANONYMIZE:
            self.anonymization_progress = event
        else:
            self.conversion_progress = event

    def record_report(self, report: StageReport) -> None:
        """Store a stage report; the stage must have been requested."""
        if not self.request.requests(report.stage):
            raise ValueError(
                f"{report.stage.value} report received but the stage was not requested"
            )
        if report.stage is Stage.ANONYMIZE:
            self.anonymization = report  # type: ignore[assignment]
        else:
            self.conversion = report  # type: ignore[assignment]

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()


class TagStat(_IdentifiedPayload):
    """Value histogram of one tag across every record of a folder."""

    identifier: TagIdentifier
    name: str = "Unknown"
    value_counts: Dict[str, int] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @property
    def total(self) -> int:
        return sum(self.value_counts.values())


class TagValueDetail(BaseModel):
    """One observed value of a tag, with (a sample of) the files holding it."""

    value: str
    count: int = Field(..., ge=0)
    files: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class TagDetails(_IdentifiedPayload):
    """Per-value breakdown of one tag across a folder."""

    identifier: TagIdentifier
    name: str = "Unknown"
    values: List[TagValueDetail] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def record_count(self) -> int:
        return sum(v.count for v in self.values)
