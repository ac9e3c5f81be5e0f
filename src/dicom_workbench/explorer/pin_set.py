"""
Pin Set.

Set of pinned tag identifiers, keyed by ``TagIdentifier.key``. The only
mutation is ``toggle``, so applying it twice with the same identifier
restores the original set.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from dicom_workbench.domain.entities import TagIdentifier


class PinSet:
    """Duplicate-free set of pinned tags."""

    def __init__(self, identifiers: Optional[Iterable[TagIdentifier]] = None) -> None:
        self._pins: Dict[str, TagIdentifier] = {}
        for identifier in identifiers or ():
            self._pins[identifier.key] = identifier

    def toggle(self, identifier: TagIdentifier) -> bool:
        """
        Flip membership of one tag.

        Returns:
            True if the tag is pinned after the call
        """
        if identifier.key in self._pins:
            del self._pins[identifier.key]
            return False
        self._pins[identifier.key] = identifier
        return True

    def is_pinned(self, identifier: TagIdentifier) -> bool:
        return identifier.key in self._pins

    def keys(self) -> frozenset:
        return frozenset(self._pins)

    def to_list(self) -> List[TagIdentifier]:
        """Pinned tags in (group, element) order."""
        return sorted(self._pins.values(), key=lambda t: t.sort_key)

    def copy(self) -> "PinSet":
        return PinSet(self._pins.values())

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, TagIdentifier) and identifier.key in self._pins

    def __iter__(self) -> Iterator[TagIdentifier]:
        return iter(self.to_list())

    def __len__(self) -> int:
        return len(self._pins)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PinSet):
            return NotImplemented
        return self.keys() == other.keys()

    def __repr__(self) -> str:
        labels = ", ".join(t.label for t in self.to_list())
        return f"PinSet([{labels}])"
