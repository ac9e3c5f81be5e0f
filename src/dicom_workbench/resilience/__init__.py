"""
Resilience Package - Remote Call Failure Handling.

Components:
    - ErrorHandler: Runs one remote call, wrapping rejections
    - InvocationError: Raised when the backend rejects a call
    - describe_partial_failure: User-facing text for reports with failures
    - empty_folder_warning: User-facing text for a folder without records

Design Principles:
    - No retries: a rejected stage aborts the run
    - Partial failure is data, never an exception
"""

from dicom_workbench.resilience.error_handler import (
    ErrorHandler,
    InvocationError,
    describe_partial_failure,
    empty_folder_warning,
)

__all__ = [
    "ErrorHandler",
    "InvocationError",
    "describe_partial_failure",
    "empty_folder_warning",
]
