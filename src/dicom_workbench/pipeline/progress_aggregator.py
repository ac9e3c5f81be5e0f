"""
Progress Aggregator - Merges Backend Streams into Run State.

Subscribes to the two stage progress streams and the log stream for the
lifetime of one run and folds every payload into the PipelineRun:

    - progress: latest event per stage wins (a regressing ``current`` is
      simply the new latest value)
    - log: every entry is appended in arrival order
    - once a stage's report is recorded, further progress events for that
      stage are dropped so a late event cannot reopen a finished bar

Design Notes:
    - Handlers may run on the backend's thread; run mutation is guarded
      by a lock shared with record_report()
    - detach() (alias close()) is idempotent and always leaves zero
      subscriptions behind
"""

from __future__ import annotations

import logging
import threading
from typing import Any, List, Optional, Set, Tuple

from dicom_workbench.domain.entities import (
    LogEntry,
    PipelineRun,
    ProgressEvent,
    Stage,
    StageReport,
)
from dicom_workbench.domain.value_objects import StageProgressView
from dicom_workbench.events.event_bus import EventStream, Subscription, progress_stream_for
from dicom_workbench.explorer.windowing import RowLayout, ViewWindow, compute_window
from dicom_workbench.interfaces.remote_gateway import RemoteGateway

logger = logging.getLogger(__name__)

DEFAULT_LOG_ROW_EXTENT = 50


def render_stage_progress(
    stage: Stage,
    progress: Optional[ProgressEvent],
    report: Optional[StageReport],
) -> StageProgressView:
    """
    Progress bar state for one stage.

    A live event wins; a stage with a report and no live event renders
    full; a stage with neither is waiting.
    """
    if progress is not None:
        return StageProgressView(
            stage=stage,
            value=progress.current,
            maximum=progress.total,
            caption=progress.caption(),
            completed=False,
        )
    if report is not None:
        return StageProgressView(
            stage=stage, value=100, maximum=100, caption="Completed", completed=True
        )
    return StageProgressView(
        stage=stage, value=0, maximum=100, caption="Waiting...", completed=False
    )


class ProgressAggregator:
    """Folds progress and log events of one run into its PipelineRun."""

    def __init__(
        self,
        gateway: RemoteGateway,
        log_row_extent: int = DEFAULT_LOG_ROW_EXTENT,
        overscan: int = 5,
    ) -> None:
        self.gateway = gateway
        self.log_row_extent = log_row_extent
        self.overscan = overscan
        self.run: Optional[PipelineRun] = None
        self._lock = threading.Lock()
        self._subscriptions: List[Subscription] = []
        self._completed: Set[Stage] = set()

    @property
    def attached(self) -> bool:
        return bool(self._subscriptions)

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    def attach(self, run: PipelineRun) -> None:
        """
        Start folding events into ``run``.

        Clears the run's logs and live progress, then subscribes to the
        anonymization, conversion and log streams.
        """
        self.detach()
        with self._lock:
            self.run = run
            self._completed = set()
            run.logs.clear()
            run.anonymization_progress = None
            run.conversion_progress = None

        self._subscriptions = [
            self.gateway.subscribe(
                EventStream.ANONYMIZATION_PROGRESS,
                lambda payload: self._on_progress(Stage.ANONYMIZE, payload),
            ),
            self.gateway.subscribe(
                EventStream.CONVERSION_PROGRESS,
                lambda payload: self._on_progress(Stage.CONVERT, payload),
            ),
            self.gateway.subscribe(EventStream.LOG_EVENT, self._on_log),
        ]
        logger.debug(f"Aggregator attached to run {run.run_id}")

    def detach(self) -> None:
        """Release every subscription. Safe to call repeatedly."""
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.unsubscribe()
        if subscriptions:
            logger.debug(f"Aggregator detached ({len(subscriptions)} subscriptions)")

    close = detach

    def record_report(self, report: StageReport) -> None:
        """Store a stage report and freeze that stage's progress."""
        with self._lock:
            if self.run is None:
                raise RuntimeError("Aggregator is not attached to a run")
            self.run.record_report(report)
            self._completed.add(report.stage)
            self.run.set_progress(report.stage, None)

    def stage_view(self, stage: Stage) -> StageProgressView:
        with self._lock:
            if self.run is None:
                return render_stage_progress(stage, None, None)
            return render_stage_progress(
                stage, self.run.progress_for(stage), self.run.report_for(stage)
            )

    def logs(self) -> List[LogEntry]:
        with self._lock:
            return list(self.run.logs) if self.run is not None else []

    def log_window(
        self,
        offset: float,
        viewport_extent: float,
    ) -> Tuple[ViewWindow, List[LogEntry]]:
        """Visible slice of the log list."""
        entries = self.logs()
        window = compute_window(
            RowLayout.uniform(len(entries), self.log_row_extent),
            offset,
            viewport_extent,
            overscan=self.overscan,
        )
        return window, window.materialize(entries)

    def _on_progress(self, stage: Stage, payload: Any) -> None:
        event = payload if isinstance(payload, ProgressEvent) else ProgressEvent.model_validate(payload)
        with self._lock:
            if self.run is None:
                return
            if stage in self._completed:
                logger.debug(f"Dropping late {progress_stream_for(stage).value} event")
                return
            self.run.set_progress(stage, event)

    def _on_log(self, payload: Any) -> None:
        entry = payload if isinstance(payload, LogEntry) else LogEntry.model_validate(payload)
        with self._lock:
            if self.run is not None:
                self.run.logs.append(entry)
