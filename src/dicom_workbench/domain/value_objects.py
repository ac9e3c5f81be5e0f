"""
Value Objects for Domain Layer.

Value objects are immutable, derived descriptions of entity state that the
presentation layer renders directly. They have no conceptual identity.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field

from dicom_workbench.domain.entities import Stage, TagIdentifier


# =============================================================================
# Type Aliases for improved readability
# =============================================================================

# Value string -> number of records holding it
ValueCountsDict = Dict[str, int]

# Stat summaries indexed by TagIdentifier.key
SummaryByKeyDict = Dict[str, "TagStatSummary"]

EMPTY_VALUE_LABEL = "<empty>"


class ValueShare(BaseModel):
    """One row of a value-frequency table."""

    value: str
    count: int = Field(ge=0)
    percentage: float = Field(ge=0.0, le=100.0)

    model_config = {"frozen": True}

    @computed_field
    @property
    def display_value(self) -> str:
        """Value as rendered; empty strings get a visible placeholder."""
        return self.value if self.value else EMPTY_VALUE_LABEL

    @property
    def percentage_label(self) -> str:
        return f"{self.percentage:.1f}%"


class TagStatSummary(BaseModel):
    """Top-N rendition of one tag's value histogram."""

    identifier: TagIdentifier
    name: str
    total: int = Field(ge=0, description="Records holding the tag")
    shares: List[ValueShare] = Field(default_factory=list)
    remaining_values: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @property
    def distinct_values(self) -> int:
        return len(self.shares) + self.remaining_values

    @property
    def more_label(self) -> Optional[str]:
        """Footer line for values cut off by top-N, if any."""
        if self.remaining_values <= 0:
            return None
        return f"...and {self.remaining_values} more values"


class StageProgressView(BaseModel):
    """Renderable state of one stage's progress bar."""

    stage: Stage
    value: int = Field(ge=0)
    maximum: int = Field(ge=0)
    caption: str
    completed: bool = False

    model_config = {"frozen": True}

    @property
    def fraction(self) -> float:
        if self.maximum <= 0:
            return 0.0
        return min(1.0, self.value / self.maximum)


class ScanProgress(BaseModel):
    """Progress of a folder scan (``tag_details_progress`` stream)."""

    current: int = Field(ge=0)
    total: int = Field(ge=0)

    model_config = {"frozen": True}

    @property
    def percentage(self) -> float:
        if self.total <= 0:
            return 0.0
        return round(self.current / self.total * 100, 1)
