"""
DICOM Workbench - Batch Pipeline Orchestration and Tag Exploration.

Front-end core for a DICOM anonymization/conversion tool. The heavy lifting
(parsing files, replacing tags, encoding PNG, writing reports) is done by an
external engine reached through a narrow remote gateway; this package
sequences the engine's batch stages, merges its progress streams into
renderable state, and provides a pinnable, filterable, windowed view over
per-record tag data.

Architecture:
    - Hexagonal Architecture (Ports & Adapters)
    - Dependency Injection for testability
    - Pure derivation functions re-run on input change
    - Configuration-driven behavior via YAML

Main Components:
    - domain: Core entities (TagIdentifier, StageReport, PipelineRun, ...)
    - interfaces: Protocols for the remote gateway and the settings store
    - events: Typed event bus for progress and log streams
    - pipeline: Orchestrator, progress aggregator, request builder
    - explorer: Tag dataset, filter/sort engine, windowing, file browser
    - stats: Value-frequency statistics and per-tag details
    - adapters: Mock gateway, cached gateway, settings stores
    - config: Configuration models and loaders

Example:
    >>> from dicom_workbench.adapters import MockRemoteGateway
    >>> from dicom_workbench.pipeline import PipelineOrchestrator
    >>> orchestrator = PipelineOrchestrator(gateway=MockRemoteGateway())
    >>> run = orchestrator.run(request)
    >>> print(run.anonymization.summary_line())

"""

import logging

__version__ = "2.0.0"


def configure_logging(
    level: int = logging.INFO,
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
) -> None:
    """
    Configure logging for DICOM Workbench.

    Call this at application startup to see log messages.
    By default, only WARNING and above are visible.

    Args:
        level: Logging level (default: INFO)
        format: Log message format

    Example:
        >>> import dicom_workbench
        >>> dicom_workbench.configure_logging(logging.DEBUG)
    """
    logging.basicConfig(
        level=level,
        format=format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("dicom_workbench").setLevel(level)
