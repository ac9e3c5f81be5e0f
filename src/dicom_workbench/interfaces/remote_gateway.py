"""
Remote Gateway Protocol.

Defines the abstract interface to the backend engine that parses DICOM
files, replaces tags, encodes PNG and writes reports. Everything the
workbench knows about the engine goes through this surface.

The gateway is responsible for:
    - Listing records and file descriptors in a folder
    - Reading the tags of one record
    - Aggregating tag values across a folder
    - Running a pipeline stage (blocking until its report arrives)
    - Delivering progress and log events to subscribers

Design Notes:
    - Uses typing.Protocol for structural subtyping
    - Calls are synchronous; they block until the response or rejection
    - A rejected call raises RemoteCallError (or any exception the bridge
      produces); the caller wraps it via ErrorHandler
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from typing import List

    from dicom_workbench.domain.entities import (
        FileDescriptor,
        PipelineRequest,
        PipelineResponse,
        TagDetails,
        TagIdentifier,
        TagRow,
        TagStat,
    )
    from dicom_workbench.events.event_bus import EventHandler, EventStream, Subscription


class RemoteCallError(Exception):
    """Rejection of a remote call by the backend."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)


@runtime_checkable
class RemoteGateway(Protocol):
    """Abstract interface for the backend engine."""

    def list_records(self, folder: str) -> List[str]:
        """
        List the paths of every record file in a folder.

        Args:
            folder: Folder to scan (recursively)

        Returns:
            Record paths, possibly empty
        """
        ...

    def list_file_descriptors(self, folder: str) -> List[FileDescriptor]:
        """List name and path of every record file in a folder."""
        ...

    def get_tags(self, file_path: str) -> List[TagRow]:
        """
        Read every tag of one record.

        Args:
            file_path: Record to read

        Returns:
            One TagRow per tag occurrence
        """
        ...

    def get_tag_details(self, folder: str, identifier: TagIdentifier) -> TagDetails:
        """
        Break down the values of one tag across a folder.

        Emits ``tag_details_progress`` events while scanning.
        """
        ...

    def get_pinned_tag_stats(
        self,
        folder: str,
        identifiers: List[TagIdentifier],
    ) -> List[TagStat]:
        """
        Count values of several tags across a folder in one pass.

        Args:
            folder: Folder to scan
            identifiers: Tags to aggregate

        Returns:
            One TagStat per requested tag
        """
        ...

    def run_pipeline(self, request: PipelineRequest) -> PipelineResponse:
        """
        Run the stage(s) present in the request.

        Emits progress events on the stage's progress stream and one log
        event per processed file, then returns the stage report(s).
        """
        ...

    def subscribe(self, stream: EventStream, handler: EventHandler) -> Subscription:
        """Register a handler for a backend event stream."""
        ...
