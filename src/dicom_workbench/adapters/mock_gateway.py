"""
Mock Remote Gateway.

A fake backend engine for development and testing. Holds an in-memory
record store (file path -> tag rows), runs the anonymize and convert
stages against it, and publishes progress and log events the way the
real engine does: status wording ``anonymizing``/``converting``, output
roots named ``<input name>_output``, ``Missing`` for absent tags.
"""

from __future__ import annotations

import posixpath
import random
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from dicom_workbench.domain.entities import (
    AnonymizationReport,
    AnonymizeSpec,
    ConversionReport,
    ConversionType,
    ConvertSpec,
    FileDescriptor,
    LogEntry,
    PipelineRequest,
    PipelineResponse,
    ProgressEvent,
    TagDetails,
    TagIdentifier,
    TagRow,
    TagStat,
    TagValueDetail,
)
from dicom_workbench.domain.value_objects import ScanProgress
from dicom_workbench.events.event_bus import EventBus, EventHandler, EventStream, Subscription
from dicom_workbench.interfaces.remote_gateway import RemoteCallError

# (group, element) -> (alias, VR)
TAG_DICTIONARY: Dict[Tuple[int, int], Tuple[str, str]] = {
    (0x0008, 0x0020): ("StudyDate", "DA"),
    (0x0008, 0x0060): ("Modality", "CS"),
    (0x0008, 0x0080): ("InstitutionName", "LO"),
    (0x0008, 0x0090): ("ReferringPhysicianName", "PN"),
    (0x0010, 0x0010): ("PatientName", "PN"),
    (0x0010, 0x0020): ("PatientID", "LO"),
    (0x0010, 0x0030): ("PatientBirthDate", "DA"),
    (0x0010, 0x0040): ("PatientSex", "CS"),
    (0x0028, 0x0010): ("Rows", "US"),
    (0x0028, 0x0011): ("Columns", "US"),
}

MISSING_VALUE = "Missing"
# Files listed per value in tag details
MAX_DETAIL_FILES = 100
# Scan progress is published every N files (and on the last one)
SCAN_PROGRESS_INTERVAL = 10


def tag_name(group: int, element: int) -> str:
    """Dictionary alias of a tag, ``Unknown`` if not in the dictionary."""
    return TAG_DICTIONARY.get((group, element), ("Unknown", ""))[0]


class MockRemoteGateway:
    """Fake backend engine for development and testing."""

    DEFAULT_FOLDER = "/data/study"

    MOCK_PATIENTS = [
        ("DOE^JOHN", "PID-0001", "19700101", "M"),
        ("DOE^JANE", "PID-0002", "19820315", "F"),
        ("SMITH^ALAN", "PID-0003", "19651120", "M"),
        ("NGUYEN^LINH", "PID-0004", "19900707", "F"),
        ("GARCIA^MARIA", "PID-0005", "19781230", "F"),
        ("MULLER^HANS", "PID-0006", "19590402", "M"),
    ]

    MOCK_INSTITUTIONS = ["CITY HOSPITAL", "NORTH CLINIC", "UNIVERSITY MEDICAL CENTER"]
    MOCK_PHYSICIANS = ["HOUSE^GREGORY", "GREY^MEREDITH", ""]
    MOCK_MODALITIES = ["CT", "MR", "CR", "US"]

    def __init__(
        self,
        seed: int = 42,
        records: Optional[Dict[str, List[TagRow]]] = None,
        record_count: int = 24,
        failing_files: Optional[Iterable[str]] = None,
        non_image_files: Optional[Iterable[str]] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        """
        Initialize mock gateway.

        Args:
            seed: Random seed for the generated sample dataset
            records: Explicit record store (file path -> rows); generated
                under DEFAULT_FOLDER when omitted
            record_count: Number of generated records
            failing_files: File names that fail in either stage
            non_image_files: File names the convert stage skips
            event_bus: Bus used to publish events (created if omitted)
        """
        self._rng = random.Random(seed)
        self.events = event_bus or EventBus()
        self._records: Dict[str, List[TagRow]] = (
            dict(records) if records is not None else self._generate_records(record_count)
        )
        self._images: Set[str] = set()
        self.failing_files: Set[str] = set(failing_files or ())
        self.non_image_files: Set[str] = set(non_image_files or ())
        self.rejections: Dict[str, Exception] = {}
        self.calls: List[Tuple[str, Any]] = []

    # =========================================================================
    # Test controls
    # =========================================================================

    def reject(self, operation: str, error: Optional[Exception] = None) -> None:
        """Make every future call of ``operation`` raise."""
        self.rejections[operation] = error or RemoteCallError(f"{operation} rejected")

    def add_record(self, file_path: str, rows: List[TagRow]) -> None:
        self._records[file_path] = list(rows)

    def call_count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)

    @property
    def images(self) -> Set[str]:
        """Paths of PNG files produced by the convert stage."""
        return set(self._images)

    # =========================================================================
    # RemoteGateway protocol
    # =========================================================================

    def list_records(self, folder: str) -> List[str]:
        self._enter("list_records", folder)
        return self._files_in(folder)

    def list_file_descriptors(self, folder: str) -> List[FileDescriptor]:
        self._enter("list_file_descriptors", folder)
        return [
            FileDescriptor(file_name=posixpath.basename(path), file_path=path)
            for path in self._files_in(folder)
        ]

    def get_tags(self, file_path: str) -> List[TagRow]:
        self._enter("get_tags", file_path)
        if file_path not in self._records:
            raise RemoteCallError(f"Failed to open DICOM file: {file_path}", path=file_path)
        return list(self._records[file_path])

    def get_tag_details(self, folder: str, identifier: TagIdentifier) -> TagDetails:
        self._enter("get_tag_details", (folder, identifier))
        files = self._files_in(folder)
        by_value: Dict[str, List[str]] = defaultdict(list)
        for current, path in enumerate(files, start=1):
            self._publish_scan_progress(current, len(files))
            by_value[self._value_of(path, identifier)].append(path)

        values = [
            TagValueDetail(value=value, count=len(paths), files=paths[:MAX_DETAIL_FILES])
            for value, paths in by_value.items()
        ]
        values.sort(key=lambda v: v.count, reverse=True)
        return TagDetails(
            identifier=identifier,
            name=tag_name(identifier.group, identifier.element),
            values=values,
        )

    def get_pinned_tag_stats(
        self,
        folder: str,
        identifiers: List[TagIdentifier],
    ) -> List[TagStat]:
        self._enter("get_pinned_tag_stats", (folder, tuple(identifiers)))
        files = self._files_in(folder)
        counts: Dict[TagIdentifier, Dict[str, int]] = {i: defaultdict(int) for i in identifiers}
        for current, path in enumerate(files, start=1):
            self._publish_scan_progress(current, len(files))
            for identifier in identifiers:
                counts[identifier][self._value_of(path, identifier)] += 1

        return [
            TagStat(
                identifier=identifier,
                name=tag_name(identifier.group, identifier.element),
                value_counts=dict(counts[identifier]),
            )
            for identifier in identifiers
            if files
        ]

    def run_pipeline(self, request: PipelineRequest) -> PipelineResponse:
        self._enter("run_pipeline", request)
        anonymization = None
        conversion = None
        if request.anonymize is not None:
            anonymization = self._anonymize(request.anonymize)
        if request.convert is not None:
            conversion = self._convert(request.convert)
        return PipelineResponse(anonymization=anonymization, conversion=conversion)

    def subscribe(self, stream: EventStream, handler: EventHandler) -> Subscription:
        return self.events.subscribe(stream, handler)

    # =========================================================================
    # Stage simulation
    # =========================================================================

    def _anonymize(self, spec: AnonymizeSpec) -> AnonymizationReport:
        files = self._files_in(spec.input_folder)
        root = posixpath.join(spec.output_folder, f"{self._folder_name(spec.input_folder)}_output")
        target = posixpath.join(root, "dicom_file")
        replaced = set(spec.tags)

        successful = 0
        failed_files: List[str] = []
        for current, path in enumerate(files, start=1):
            name = posixpath.basename(path)
            self.events.publish(
                EventStream.ANONYMIZATION_PROGRESS,
                ProgressEvent(current=current, total=len(files), file_name=name, status="anonymizing"),
            )
            out_path = posixpath.join(target, posixpath.relpath(path, spec.input_folder))
            if name in self.failing_files:
                failed_files.append(name)
                self._publish_log(name, out_path, False, "Failed", "Unable to write anonymized file", ConversionType.DICOM)
                continue

            self._records[out_path] = [
                row.model_copy(update={"value": spec.replacement})
                if row.identifier in replaced
                else row
                for row in self._records[path]
            ]
            successful += 1
            self._publish_log(name, out_path, True, "Success", "Anonymized", ConversionType.DICOM)

        return AnonymizationReport(
            total=len(files),
            successful=successful,
            failed=len(failed_files),
            failed_files=failed_files,
            output_folder=root,
        )

    def _convert(self, spec: ConvertSpec) -> ConversionReport:
        if spec.flatten_output:
            root = spec.output_folder
        else:
            root = posixpath.join(spec.output_folder, f"{self._folder_name(spec.input_folder)}_output")
        target = posixpath.join(root, "png_file")

        tasks = []
        for path in self._files_in(spec.input_folder):
            png_path = posixpath.splitext(
                posixpath.join(target, posixpath.relpath(path, spec.input_folder))
            )[0] + ".png"
            if png_path not in self._images:
                tasks.append((path, png_path))

        successful = 0
        failed_files: List[str] = []
        skipped_files: List[str] = []
        for current, (path, png_path) in enumerate(tasks, start=1):
            name = posixpath.basename(path)
            self.events.publish(
                EventStream.CONVERSION_PROGRESS,
                ProgressEvent(current=current, total=len(tasks), file_name=name, status="converting"),
            )
            if name in self.non_image_files:
                skipped_files.append(name)
                self._publish_log(name, path, True, "Skipped", "No pixel data", ConversionType.PNG)
            elif name in self.failing_files:
                failed_files.append(name)
                self._publish_log(name, path, False, "Failed", "Unsupported transfer syntax", ConversionType.PNG)
            else:
                self._images.add(png_path)
                successful += 1
                self._publish_log(name, png_path, True, "Success", "Converted", ConversionType.PNG)

        return ConversionReport(
            total=len(tasks),
            successful=successful,
            failed=len(failed_files),
            skipped_non_image=len(skipped_files),
            failed_files=failed_files,
            skipped_files=skipped_files,
            output_folder=root,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _enter(self, operation: str, argument: Any) -> None:
        self.calls.append((operation, argument))
        error = self.rejections.get(operation)
        if error is not None:
            raise error

    def _files_in(self, folder: str) -> List[str]:
        prefix = folder.rstrip("/") + "/"
        return sorted(path for path in self._records if path.startswith(prefix))

    def _folder_name(self, folder: str) -> str:
        return posixpath.basename(folder.rstrip("/")) or "root"

    def _value_of(self, path: str, identifier: TagIdentifier) -> str:
        for row in self._records[path]:
            if row.identifier == identifier:
                return row.value
        return MISSING_VALUE

    def _publish_scan_progress(self, current: int, total: int) -> None:
        if current % SCAN_PROGRESS_INTERVAL == 0 or current == total:
            self.events.publish(
                EventStream.TAG_DETAILS_PROGRESS, ScanProgress(current=current, total=total)
            )

    def _publish_log(
        self,
        file_name: str,
        file_path: str,
        success: bool,
        status: str,
        message: str,
        conversion_type: ConversionType,
    ) -> None:
        self.events.publish(
            EventStream.LOG_EVENT,
            LogEntry(
                file_name=file_name,
                file_path=file_path,
                success=success,
                status=status,
                message=message,
                conversion_type=conversion_type,
            ),
        )

    def _generate_records(self, count: int) -> Dict[str, List[TagRow]]:
        records = {}
        for i in range(count):
            patient_name, patient_id, birth_date, sex = self.MOCK_PATIENTS[i % len(self.MOCK_PATIENTS)]
            values = {
                (0x0008, 0x0020): f"2024{self._rng.randint(1, 12):02d}{self._rng.randint(1, 28):02d}",
                (0x0008, 0x0060): self._rng.choice(self.MOCK_MODALITIES),
                (0x0008, 0x0080): self._rng.choice(self.MOCK_INSTITUTIONS),
                (0x0008, 0x0090): self._rng.choice(self.MOCK_PHYSICIANS),
                (0x0010, 0x0010): patient_name,
                (0x0010, 0x0020): patient_id,
                (0x0010, 0x0030): birth_date,
                (0x0010, 0x0040): sex,
                (0x0028, 0x0010): str(self._rng.choice([256, 512, 1024])),
                (0x0028, 0x0011): str(self._rng.choice([256, 512, 1024])),
            }
            series = f"series{i // 10 + 1}"
            path = posixpath.join(self.DEFAULT_FOLDER, series, f"IM{i + 1:04d}.dcm")
            records[path] = [
                TagRow(
                    group=group,
                    element=element,
                    name=TAG_DICTIONARY[(group, element)][0],
                    vr=TAG_DICTIONARY[(group, element)][1],
                    value=value,
                )
                for (group, element), value in values.items()
            ]
        return records
