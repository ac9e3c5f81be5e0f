"""
View Engine - Filter and Sort for Tag Rows.

``derive_view`` is a pure function of (rows, pins, filter text). It is
re-run whenever any of its inputs changes and never mutates its input.

Filter rule:
    A row passes if the lower-cased filter text is a substring of the
    lower-cased name, the lower-cased value, or the lower-case unpadded
    hex of the group or element (e.g. group 0x0010 matches "10").
    An empty filter passes every row.

Sort rule:
    Pinned rows first, then ascending group, then ascending element.
    The sort is stable so duplicate (group, element) rows keep their
    input order.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, Sequence, Union

from dicom_workbench.domain.entities import TagIdentifier, TagRow
from dicom_workbench.explorer.pin_set import PinSet

PinLookup = Union[PinSet, Iterable[TagIdentifier]]


def row_matches(row: TagRow, needle: str) -> bool:
    """Check one row against an already lower-cased filter."""
    if not needle:
        return True
    return (
        needle in row.name.lower()
        or needle in row.value.lower()
        or needle in row.identifier.group_hex
        or needle in row.identifier.element_hex
    )


def filter_rows(rows: Sequence[TagRow], filter_text: str) -> List[TagRow]:
    needle = filter_text.lower()
    return [row for row in rows if row_matches(row, needle)]


def sort_rows(rows: Sequence[TagRow], is_pinned: Callable[[TagIdentifier], bool]) -> List[TagRow]:
    return sorted(
        rows,
        key=lambda row: (not is_pinned(row.identifier), row.group, row.element),
    )


def derive_view(
    rows: Sequence[TagRow],
    pins: PinLookup,
    filter_text: str = "",
) -> List[TagRow]:
    """
    Filter then sort tag rows for display.

    Args:
        rows: Rows of the selected record (not modified)
        pins: Pinned tags
        filter_text: Case-insensitive filter

    Returns:
        A new list, pinned rows first
    """
    if isinstance(pins, PinSet):
        pinned_keys = pins.keys()
    else:
        pinned_keys = frozenset(identifier.key for identifier in pins)

    return sort_rows(
        filter_rows(rows, filter_text),
        lambda identifier: identifier.key in pinned_keys,
    )
