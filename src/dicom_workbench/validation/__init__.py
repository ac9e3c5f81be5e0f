"""
Validation Package - Input Validation.

This package provides validation for:
    - parse_tag / parse_tag_list: Parse "GGGG,EEEE; ..." hex tag strings
    - PipelineRequestValidator: Validate pipeline requests before any
      remote call

Design Principles:
    - Fail fast on invalid input
    - Clear, actionable error messages naming the offending field
"""

from dicom_workbench.validation.request_validator import (
    PipelineRequestValidator,
    ValidationError,
    parse_tag,
    parse_tag_list,
)

__all__ = [
    "PipelineRequestValidator",
    "ValidationError",
    "parse_tag",
    "parse_tag_list",
]
