"""
Error Handler - Remote Call Failure Handling.

Provides:
    - Invocation wrapping (backend rejection -> InvocationError)
    - Per-operation failure counters
    - Partial failure descriptions for stage reports

Design Notes:
    - Remote calls are not retried; a stage may have written output
      before it was rejected and re-running it is the user's decision
    - The wrapped error names the operation and the folder or file it
      was invoked on
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, TypeVar

if TYPE_CHECKING:
    from dicom_workbench.domain.entities import PipelineRun, StageReport

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Offending files listed before the message is truncated
MAX_LISTED_FILES = 10


class InvocationError(Exception):
    """Raised when a remote call is rejected by the backend."""

    def __init__(
        self,
        operation: str,
        path: Optional[str],
        cause: Optional[BaseException] = None,
    ) -> None:
        self.operation = operation
        self.path = path
        self.cause = cause
        self.run: Optional["PipelineRun"] = None
        detail = f": {cause}" if cause is not None else ""
        location = f" on {path}" if path else ""
        self.message = f"{operation} failed{location}{detail}"
        super().__init__(self.message)


class ErrorHandler:
    """
    Runs remote calls and normalizes their failures.

    Example:
        >>> handler = ErrorHandler()
        >>> rows = handler.invoke(lambda: gateway.get_tags(path), "get_tags", path)
    """

    def __init__(self) -> None:
        self._failures: Dict[str, int] = {}

    def invoke(
        self,
        func: Callable[[], T],
        operation: str,
        path: Optional[str] = None,
    ) -> T:
        """
        Execute one remote call.

        Args:
            func: Zero-argument callable performing the call
            operation: Operation name for logging and the error message
            path: Folder or file the call operates on

        Returns:
            Result of the call

        Raises:
            InvocationError: When the call raises
        """
        try:
            return func()
        except InvocationError:
            raise
        except Exception as e:
            self._failures[operation] = self._failures.get(operation, 0) + 1
            logger.error(f"{operation} rejected (path={path}): {e}")
            raise InvocationError(operation, path, cause=e) from e

    def failure_count(self, operation: str) -> int:
        """Number of rejected calls recorded for an operation."""
        return self._failures.get(operation, 0)

    @property
    def failures(self) -> Dict[str, Any]:
        return dict(self._failures)


def empty_folder_warning(folder: str) -> str:
    """User-facing warning for a folder with no eligible records."""
    return f"No eligible records found in {folder}"


def describe_partial_failure(
    report: "StageReport",
    max_files: int = MAX_LISTED_FILES,
) -> Optional[str]:
    """
    Build the user-facing message for a report with failures or skips.

    Args:
        report: Stage report
        max_files: Offending files listed before truncating

    Returns:
        Message naming the offending files, or None for a clean report
    """
    if not report.has_partial_failure:
        return None

    parts = []
    if report.failed:
        parts.append(f"{report.failed} of {report.total} files failed")
    if report.skipped:
        parts.append(f"{report.skipped} files already existed or were skipped")
    message = f"{report.stage.value.capitalize()}: " + ", ".join(parts)

    offending = report.offending_files
    if offending:
        listed = ", ".join(offending[:max_files])
        extra = len(offending) - max_files
        if extra > 0:
            listed += f" (+{extra} more)"
        message += f" ({listed})"
    return message
