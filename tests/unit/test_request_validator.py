"""
Unit Tests for Request Validation and Tag Parsing.

Test Aspects Covered:
    ✅ Business Logic: Hex pair parsing, semicolon-separated lists
    ✅ Edge Cases: Whitespace, trailing separators, boundary values
    ✅ Error Handling: Wrong arity, non-hex digits, empty requests
"""

from __future__ import annotations

import pytest

from dicom_workbench.domain.entities import (
    AnonymizeSpec,
    ConvertSpec,
    PipelineRequest,
    TagIdentifier,
)
from dicom_workbench.validation.request_validator import (
    PipelineRequestValidator,
    ValidationError,
    parse_tag,
    parse_tag_list,
)


class TestParseTag:
    """Test cases for parse_tag."""

    def test_parses_hex_pair(self) -> None:
        assert parse_tag("0010,0020") == TagIdentifier.of(0x0010, 0x0020)

    def test_tolerates_surrounding_whitespace(self) -> None:
        assert parse_tag("  0008 , 0080 ") == TagIdentifier.of(0x0008, 0x0080)

    def test_accepts_upper_and_lower_case(self) -> None:
        assert parse_tag("7FE0,0010") == parse_tag("7fe0,0010")

    def test_accepts_boundary_values(self) -> None:
        assert parse_tag("FFFF,0000") == TagIdentifier.of(0xFFFF, 0)

    @pytest.mark.parametrize("text", ["0010", "0010,0020,0030", ""])
    def test_rejects_wrong_arity(self, text: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_tag(text)

        assert exc_info.value.field == "tags"

    def test_rejects_non_hex(self) -> None:
        with pytest.raises(ValidationError, match="Invalid hex"):
            parse_tag("00G0,0010")

    def test_rejects_out_of_range(self) -> None:
        with pytest.raises(ValidationError, match="out of range"):
            parse_tag("10000,0010")


class TestParseTagList:
    """Test cases for parse_tag_list."""

    def test_parses_two_tags(self) -> None:
        """
        SCENARIO: "0010,0010; 0010,0020"
        EXPECTED: [(0x0010,0x0010), (0x0010,0x0020)]
        """
        # Act
        tags = parse_tag_list("0010,0010; 0010,0020")

        # Assert
        assert tags == [TagIdentifier.of(0x0010, 0x0010), TagIdentifier.of(0x0010, 0x0020)]

    def test_keeps_input_order(self) -> None:
        tags = parse_tag_list("0010,0020;0008,0080")

        assert [t.key for t in tags] == ["16-32", "8-128"]

    def test_ignores_trailing_separator(self) -> None:
        assert len(parse_tag_list("0010,0010;")) == 1

    def test_rejects_malformed_segment(self) -> None:
        """
        SCENARIO: "0010"
        EXPECTED: ValidationError
        """
        with pytest.raises(ValidationError):
            parse_tag_list("0010")

    def test_one_bad_segment_fails_whole_list(self) -> None:
        with pytest.raises(ValidationError):
            parse_tag_list("0010,0010; zz,0010")

    def test_rejects_blank_list(self) -> None:
        with pytest.raises(ValidationError, match="No tags"):
            parse_tag_list(" ; ")


class TestPipelineRequestValidator:
    """Test cases for PipelineRequestValidator."""

    @pytest.fixture
    def validator(self) -> PipelineRequestValidator:
        return PipelineRequestValidator()

    def test_empty_request_rejected(self, validator: PipelineRequestValidator) -> None:
        """
        SCENARIO: Neither anonymize nor convert requested
        EXPECTED: ValidationError on export_formats
        """
        with pytest.raises(ValidationError) as exc_info:
            validator.validate(PipelineRequest())

        assert exc_info.value.field == "export_formats"

    def test_valid_two_stage_request(self, validator: PipelineRequestValidator) -> None:
        request = PipelineRequest(
            anonymize=AnonymizeSpec(
                input_folder="/in", output_folder="/out", tags=[TagIdentifier.of(16, 16)]
            ),
            convert=ConvertSpec(input_folder="/in", output_folder="/out"),
        )

        validator.validate(request)

    def test_blank_folders_rejected(self, validator: PipelineRequestValidator) -> None:
        request = PipelineRequest(convert=ConvertSpec(input_folder="   ", output_folder=" "))

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(request)

        assert "convert.input_folder is blank" in exc_info.value.message
        assert "convert.output_folder is blank" in exc_info.value.message

    def test_empty_replacement_rejected(self, validator: PipelineRequestValidator) -> None:
        request = PipelineRequest(
            anonymize=AnonymizeSpec(
                input_folder="/in",
                output_folder="/out",
                tags=[TagIdentifier.of(16, 16)],
                replacement="",
            )
        )

        with pytest.raises(ValidationError, match="replacement"):
            validator.validate(request)
