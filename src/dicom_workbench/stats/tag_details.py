"""
Tag Details - Per-Value Breakdown of One Tag Across a Folder.

Listens to ``tag_details_progress`` for exactly the duration of the
remote call; the subscription is released even when the call fails.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from dicom_workbench.domain.entities import TagDetails, TagIdentifier
from dicom_workbench.domain.value_objects import ScanProgress
from dicom_workbench.events.event_bus import EventStream
from dicom_workbench.interfaces.remote_gateway import RemoteGateway
from dicom_workbench.resilience.error_handler import ErrorHandler

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ScanProgress], None]


class TagDetailsLoader:
    """Loads value breakdowns and tracks scan progress while loading."""

    def __init__(
        self,
        gateway: RemoteGateway,
        error_handler: Optional[ErrorHandler] = None,
    ) -> None:
        self.gateway = gateway
        self.error_handler = error_handler or ErrorHandler()
        self.progress: Optional[ScanProgress] = None
        self.history: List[ScanProgress] = []

    def load(
        self,
        folder: str,
        identifier: TagIdentifier,
        on_progress: Optional[ProgressCallback] = None,
    ) -> TagDetails:
        """
        Fetch the breakdown of one tag, values ordered by count.

        Args:
            folder: Folder whose records are scanned
            identifier: Tag to break down
            on_progress: Optional callback for each scan progress event

        Raises:
            InvocationError: If the backend rejects the call
        """
        self.progress = None
        self.history = []

        def handle(payload: object) -> None:
            progress = (
                payload if isinstance(payload, ScanProgress) else ScanProgress.model_validate(payload)
            )
            self.progress = progress
            self.history.append(progress)
            if on_progress is not None:
                on_progress(progress)

        with self.gateway.subscribe(EventStream.TAG_DETAILS_PROGRESS, handle):
            details = self.error_handler.invoke(
                lambda: self.gateway.get_tag_details(folder, identifier),
                "get_tag_details",
                folder,
            )

        ordered = sorted(details.values, key=lambda v: v.count, reverse=True)
        logger.info(
            f"Loaded {len(ordered)} distinct values of {identifier.label} in {folder}"
        )
        return details.model_copy(update={"values": ordered})
