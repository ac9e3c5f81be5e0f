"""
File Browser - Filtered, Paginated Record List.

Holds the record paths of the open folder. The filter is a
case-insensitive substring match on the path; changing the filter or
the file list returns to page 1.
"""

from __future__ import annotations

import math
from typing import List, Sequence

DEFAULT_FILES_PER_PAGE = 20


class FileBrowser:
    """Record list state for the tag explorer sidebar."""

    def __init__(self, files_per_page: int = DEFAULT_FILES_PER_PAGE) -> None:
        if files_per_page < 1:
            raise ValueError(f"files_per_page must be >= 1, got {files_per_page}")
        self.files_per_page = files_per_page
        self._files: List[str] = []
        self._filter_text = ""
        self._page = 1

    @property
    def files(self) -> List[str]:
        return list(self._files)

    @property
    def filter_text(self) -> str:
        return self._filter_text

    @property
    def page(self) -> int:
        return self._page

    def set_files(self, files: Sequence[str]) -> None:
        self._files = list(files)
        self._page = 1

    def set_filter(self, text: str) -> None:
        self._filter_text = text
        self._page = 1

    @property
    def filtered(self) -> List[str]:
        needle = self._filter_text.lower()
        if not needle:
            return list(self._files)
        return [path for path in self._files if needle in path.lower()]

    @property
    def page_count(self) -> int:
        return math.ceil(len(self.filtered) / self.files_per_page)

    @property
    def page_items(self) -> List[str]:
        start = (self._page - 1) * self.files_per_page
        return self.filtered[start : start + self.files_per_page]

    @property
    def page_label(self) -> str:
        return f"{self._page} / {self.page_count}"

    def next_page(self) -> int:
        self._page = max(1, min(self.page_count, self._page + 1))
        return self._page

    def previous_page(self) -> int:
        self._page = max(1, self._page - 1)
        return self._page

    def go_to(self, page: int) -> int:
        self._page = max(1, min(max(1, self.page_count), page))
        return self._page
