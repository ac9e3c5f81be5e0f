"""
Request Validator - Validate Pipeline Requests.

Validates user input before any remote call is issued:
    - Tag strings parse as semicolon-separated ``GGGG,EEEE`` hex pairs
    - A pipeline request names at least one stage
    - Stage folders are non-blank
    - The anonymize stage has at least one tag

Design Notes:
    - Fail-fast principle
    - Clear error messages naming the offending segment or field
"""

from __future__ import annotations

import logging
from typing import List, Optional

from dicom_workbench.domain.entities import PipelineRequest, TagIdentifier

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Raised when user input or a request fails validation."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


def parse_tag(text: str) -> TagIdentifier:
    """
    Parse one ``GGGG,EEEE`` hex pair.

    Args:
        text: Tag text, surrounding whitespace allowed

    Returns:
        Parsed TagIdentifier

    Raises:
        ValidationError: Wrong arity, non-hex digits or out of range
    """
    raw = text.strip()
    parts = raw.split(",")
    if len(parts) != 2:
        raise ValidationError(f"Invalid tag format: {raw!r}", field="tags")

    try:
        group = int(parts[0].strip(), 16)
        element = int(parts[1].strip(), 16)
    except ValueError:
        raise ValidationError(f"Invalid hex values: {raw!r}", field="tags") from None

    if not (0 <= group <= 0xFFFF and 0 <= element <= 0xFFFF):
        raise ValidationError(f"Tag out of range: {raw!r}", field="tags")

    return TagIdentifier(group=group, element=element)


def parse_tag_list(text: str) -> List[TagIdentifier]:
    """
    Parse a semicolon-separated list of hex tag pairs.

    Blank segments (e.g. a trailing ``;``) are ignored, but the list as a
    whole must name at least one tag.

    Example:
        >>> parse_tag_list("0010,0010; 0010,0020")
        [TagIdentifier(group=16, element=16), TagIdentifier(group=16, element=32)]
    """
    tags = [parse_tag(segment) for segment in text.split(";") if segment.strip()]
    if not tags:
        raise ValidationError("No tags given", field="tags")
    return tags


class PipelineRequestValidator:
    """
    Validates pipeline requests before processing.

    Validates:
        - At least one stage requested
        - Input/output folders of each requested stage are non-blank
        - Anonymize stage has a tag list and a replacement value
    """

    def validate(self, request: PipelineRequest) -> None:
        """
        Validate a pipeline request.

        Args:
            request: The request to validate

        Raises:
            ValidationError: If validation fails
        """
        if request.is_empty:
            logger.error("Request validation failed: no stage requested")
            raise ValidationError(
                "Select at least one export format", field="export_formats"
            )

        errors: List[str] = []

        if request.anonymize is not None:
            spec = request.anonymize
            errors.extend(self._validate_folders("anonymize", spec.input_folder, spec.output_folder))
            if not spec.tags:
                errors.append("anonymize.tags is empty")
            if not spec.replacement:
                errors.append("anonymize.replacement is empty")

        if request.convert is not None:
            spec = request.convert
            errors.extend(self._validate_folders("convert", spec.input_folder, spec.output_folder))

        if errors:
            error_message = "; ".join(errors)
            logger.error(f"Request validation failed: {error_message}")
            raise ValidationError(error_message)

        logger.debug(
            f"Request validated: stages={[s.value for s in request.requested_stages]}"
        )

    def _validate_folders(self, stage: str, input_folder: str, output_folder: str) -> List[str]:
        errors: List[str] = []
        if not input_folder.strip():
            errors.append(f"{stage}.input_folder is blank")
        if not output_folder.strip():
            errors.append(f"{stage}.output_folder is blank")
        return errors
