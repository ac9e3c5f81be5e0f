"""
Configuration Package - Models and Loaders.

This package handles all configuration aspects of DICOM Workbench:
    - Pydantic models for type-safe configuration
    - YAML loader with validation
    - Support for configuration profiles

Configuration Structure:
    - WorkbenchConfig: Root configuration object
    - PipelineConfig: Default tags, replacement value, stage chaining
    - ExplorerConfig: Row extents, overscan, paging, default pins
    - StatsConfig: Top-N and stats result cache
    - HealthMonitorConfig: RAM thresholds

Design Principles:
    - Type-safe via Pydantic
    - Validation on load (fail fast)
    - Support for profiles (config/profiles/<name>.yaml)
"""

from dicom_workbench.config.loader import ConfigLoader, load_config
from dicom_workbench.config.models import (
    DEFAULT_TAGS,
    ExplorerConfig,
    HealthMonitorConfig,
    PipelineConfig,
    StatsConfig,
    WorkbenchConfig,
)

__all__ = [
    "DEFAULT_TAGS",
    "ConfigLoader",
    "ExplorerConfig",
    "HealthMonitorConfig",
    "PipelineConfig",
    "StatsConfig",
    "WorkbenchConfig",
    "load_config",
]
