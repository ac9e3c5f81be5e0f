"""
Configuration Models - Pydantic Models for Type-Safe Config.

All configuration is validated at load time using Pydantic.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from dicom_workbench.domain.entities import TagIdentifier

# Patient name, patient ID, birth date, institution name, referring physician
DEFAULT_TAGS = "0010,0010; 0010,0020; 0010,0030; 0008,0080; 0008,0090"


def _default_pins() -> List[TagIdentifier]:
    return [
        TagIdentifier.of(0x0010, 0x0010),
        TagIdentifier.of(0x0010, 0x0020),
        TagIdentifier.of(0x0010, 0x0030),
        TagIdentifier.of(0x0008, 0x0080),
        TagIdentifier.of(0x0008, 0x0090),
    ]


class PipelineConfig(BaseModel):
    """Configuration for the anonymize/convert pipeline."""

    default_tags: str = Field(default=DEFAULT_TAGS)
    replacement_value: str = Field(default="ANONYMIZED", min_length=1)
    skip_excel: bool = False
    anonymized_subfolder: str = Field(default="dicom_file", min_length=1)
    stop_on_total_failure: bool = False


class ExplorerConfig(BaseModel):
    """Configuration for the tag explorer and list rendering."""

    overscan: int = Field(default=5, ge=0)
    tag_row_extent: int = Field(default=40, ge=1)
    log_row_extent: int = Field(default=50, ge=1)
    files_per_page: int = Field(default=20, ge=1)
    default_pins: List[TagIdentifier] = Field(default_factory=_default_pins)


class StatsConfig(BaseModel):
    """Configuration for value statistics."""

    top_n: int = Field(default=10, ge=1)
    cache_enabled: bool = True
    cache_ttl_seconds: int = Field(default=300, ge=0)
    cache_max_entries: int = Field(default=64, ge=1)


class HealthMonitorConfig(BaseModel):
    """Configuration for health monitoring."""

    enabled: bool = True
    max_ram_usage_pct: float = Field(default=90.0, ge=0, le=100)
    warn_ram_usage_pct: float = Field(default=80.0, ge=0, le=100)


class WorkbenchConfig(BaseModel):
    """Root configuration object."""

    version: str = "1.0"
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    explorer: ExplorerConfig = Field(default_factory=ExplorerConfig)
    stats: StatsConfig = Field(default_factory=StatsConfig)
    health_monitoring: HealthMonitorConfig = Field(
        default_factory=HealthMonitorConfig,
    )
    settings_path: Optional[str] = Field(
        default=None,
        description="YAML file backing persisted settings; in-memory if unset",
    )

    model_config = {"populate_by_name": True}
