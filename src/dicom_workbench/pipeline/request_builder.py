"""
Request Builder - Home Screen Inputs to PipelineRequest.

Turns the raw values of the export form (folders, selected formats, tag
string, replacement, skip-excel) into a PipelineRequest:

    - DICOM selected -> anonymize branch (tag string parsed here)
    - PNG selected   -> convert branch
    - both           -> both branches; the orchestrator chains them

The tag string is only parsed when DICOM is selected, so a malformed tag
list never blocks a PNG-only export.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, Iterator, Optional, Set

from dicom_workbench.config.models import PipelineConfig
from dicom_workbench.domain.entities import AnonymizeSpec, ConvertSpec, PipelineRequest
from dicom_workbench.validation.request_validator import ValidationError, parse_tag_list

logger = logging.getLogger(__name__)


class ExportFormat(str, Enum):
    """Output formats offered by the export form."""

    DICOM = "DICOM"
    PNG = "PNG"


class ExportFormatSelection:
    """
    Selected export formats; never empty.

    Starts with DICOM selected. Toggling the last selected format off is
    refused.
    """

    def __init__(self, formats: Optional[Iterable[ExportFormat]] = None) -> None:
        selected = set(formats) if formats is not None else {ExportFormat.DICOM}
        if not selected:
            raise ValueError("At least one export format must be selected")
        self._selected: Set[ExportFormat] = selected

    def toggle(self, export_format: ExportFormat) -> bool:
        """
        Flip one format.

        Returns:
            True if the selection changed
        """
        if export_format in self._selected:
            if len(self._selected) == 1:
                logger.debug(f"Refusing to deselect the only format {export_format.value}")
                return False
            self._selected.remove(export_format)
        else:
            self._selected.add(export_format)
        return True

    def is_selected(self, export_format: ExportFormat) -> bool:
        return export_format in self._selected

    def __contains__(self, export_format: object) -> bool:
        return export_format in self._selected

    def __iter__(self) -> Iterator[ExportFormat]:
        return iter(sorted(self._selected, key=lambda f: f.value))

    def __len__(self) -> int:
        return len(self._selected)


def build_request(
    input_folder: Optional[str],
    output_folder: Optional[str],
    formats: Iterable[ExportFormat],
    tags_text: Optional[str] = None,
    replacement: Optional[str] = None,
    skip_excel: bool = False,
    config: Optional[PipelineConfig] = None,
) -> PipelineRequest:
    """
    Build a pipeline request from the export form.

    Args:
        input_folder: Folder holding the source records
        output_folder: Destination folder
        formats: Selected export formats
        tags_text: Semicolon-separated ``GGGG,EEEE`` list (DICOM only);
            the configured default tags when None or blank
        replacement: Replacement value; config default when None
        skip_excel: Skip the spreadsheet report on conversion
        config: Pipeline defaults

    Returns:
        PipelineRequest with one branch per selected format

    Raises:
        ValidationError: Missing folder, no format or malformed tags
    """
    config = config or PipelineConfig()
    selected = set(formats)

    if not input_folder or not input_folder.strip():
        raise ValidationError("Please select an input folder", field="input_folder")
    if not output_folder or not output_folder.strip():
        raise ValidationError("Please select an output folder", field="output_folder")
    if not selected:
        raise ValidationError("Select at least one export format", field="export_formats")

    anonymize = None
    if ExportFormat.DICOM in selected:
        if not tags_text or not tags_text.strip():
            tags_text = config.default_tags
        anonymize = AnonymizeSpec(
            input_folder=input_folder,
            output_folder=output_folder,
            tags=parse_tag_list(tags_text),
            replacement=replacement if replacement is not None else config.replacement_value,
        )

    convert = None
    if ExportFormat.PNG in selected:
        convert = ConvertSpec(
            input_folder=input_folder,
            output_folder=output_folder,
            skip_excel=skip_excel,
        )

    request = PipelineRequest(anonymize=anonymize, convert=convert)
    logger.debug(f"Built request: stages={[s.value for s in request.requested_stages]}")
    return request
