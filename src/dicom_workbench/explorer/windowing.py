"""
Windowing - Visible Slice of a Long Row List.

Given the extent of every row, a scroll offset and the viewport extent,
computes the contiguous index range that has to be materialized: the
rows overlapping ``[offset, offset + viewport)`` plus ``overscan`` rows
on each side, clamped to the list bounds.

Design Notes:
    - Uniform layouts are pure arithmetic; variable layouts binary-search
      a prefix-sum table, so a window costs O(log n) for any list length
    - An empty layout yields an empty window (end_index == start_index - 1)
    - Windows are immutable; re-compute on scroll, resize or data change
"""

from __future__ import annotations

import bisect
import itertools
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

DEFAULT_OVERSCAN = 5


@dataclass(frozen=True)
class RowLayout:
    """Extents of every row in a list, uniform or variable."""

    count: int
    _uniform_extent: Optional[float] = None
    _starts: Tuple[float, ...] = field(default=(), repr=False)
    _extents: Tuple[float, ...] = field(default=(), repr=False)

    @classmethod
    def uniform(cls, count: int, extent: float) -> "RowLayout":
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        if extent <= 0:
            raise ValueError(f"extent must be > 0, got {extent}")
        return cls(count=count, _uniform_extent=extent)

    @classmethod
    def variable(cls, extents: Sequence[float]) -> "RowLayout":
        if any(e <= 0 for e in extents):
            raise ValueError("every row extent must be > 0")
        starts = tuple(itertools.accumulate(extents, initial=0))[:-1] if extents else ()
        return cls(count=len(extents), _starts=starts, _extents=tuple(extents))

    @property
    def total_extent(self) -> float:
        if self._uniform_extent is not None:
            return self.count * self._uniform_extent
        if not self._extents:
            return 0
        return self._starts[-1] + self._extents[-1]

    def offset_of(self, index: int) -> float:
        """Start position of a row."""
        self._check_index(index)
        if self._uniform_extent is not None:
            return index * self._uniform_extent
        return self._starts[index]

    def extent_of(self, index: int) -> float:
        self._check_index(index)
        if self._uniform_extent is not None:
            return self._uniform_extent
        return self._extents[index]

    def rows_starting_at_or_before(self, position: float) -> int:
        if position < 0:
            return 0
        if self._uniform_extent is not None:
            return min(self.count, math.floor(position / self._uniform_extent) + 1)
        return bisect.bisect_right(self._starts, position)

    def rows_starting_before(self, position: float) -> int:
        if position <= 0:
            return 0
        if self._uniform_extent is not None:
            return min(self.count, math.ceil(position / self._uniform_extent))
        return bisect.bisect_left(self._starts, position)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.count:
            raise IndexError(f"row {index} out of range for {self.count} rows")


@dataclass(frozen=True)
class ViewWindow:
    """Contiguous inclusive index range to render."""

    start_index: int
    end_index: int
    layout: RowLayout = field(repr=False)

    @property
    def is_empty(self) -> bool:
        return self.end_index < self.start_index

    @property
    def size(self) -> int:
        return max(0, self.end_index - self.start_index + 1)

    @property
    def total_extent(self) -> float:
        return self.layout.total_extent

    @property
    def indices(self) -> range:
        return range(self.start_index, self.end_index + 1)

    @property
    def padding_before(self) -> float:
        """Space above the first materialized row."""
        if self.is_empty:
            return 0
        return self.layout.offset_of(self.start_index)

    @property
    def padding_after(self) -> float:
        """Space below the last materialized row."""
        if self.is_empty:
            return 0
        end = self.layout.offset_of(self.end_index) + self.layout.extent_of(self.end_index)
        return self.total_extent - end

    def offset_of(self, index: int) -> float:
        return self.layout.offset_of(index)

    def contains(self, index: int) -> bool:
        return self.start_index <= index <= self.end_index

    def materialize(self, rows: Sequence[T]) -> List[T]:
        """Return only the rows inside the window."""
        if self.is_empty:
            return []
        return list(rows[self.start_index : self.end_index + 1])


def compute_window(
    layout: RowLayout,
    offset: float,
    viewport_extent: float,
    overscan: int = DEFAULT_OVERSCAN,
) -> ViewWindow:
    """
    Compute the rows to render for a scroll position.

    Args:
        layout: Row extents
        offset: Scroll offset (clamped to >= 0)
        viewport_extent: Visible extent
        overscan: Extra rows rendered on each side

    Returns:
        ViewWindow covering every row that overlaps the viewport, widened
        by ``overscan`` and clamped to ``[0, count - 1]``
    """
    if layout.count == 0:
        return ViewWindow(start_index=0, end_index=-1, layout=layout)

    offset = max(0.0, offset)
    viewport_extent = max(0.0, viewport_extent)
    overscan = max(0, overscan)
    last_index = layout.count - 1

    first = min(last_index, max(0, layout.rows_starting_at_or_before(offset) - 1))
    last = layout.rows_starting_before(offset + viewport_extent) - 1
    last = min(last_index, max(first, last))

    return ViewWindow(
        start_index=max(0, first - overscan),
        end_index=min(last_index, last + overscan),
        layout=layout,
    )
