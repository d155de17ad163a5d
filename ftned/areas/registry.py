"""
FTNed Area Registry

Ordered, searchable list of message areas.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from .base import AreaStore

logger = logging.getLogger(__name__)

SORT_DEFAULT = "default"
SORT_UNREAD = "unread"
SORT_MODES = (SORT_DEFAULT, SORT_UNREAD)


@dataclass
class FilteredArea:
    """Filter match together with its index in the registry."""
    area: AreaStore
    original_index: int


class AreaRegistry:
    """
    Areas in display order.

    The registry is owned by the session; nothing here is process-wide.
    """

    def __init__(self, areas: Optional[Iterable[AreaStore]] = None, sort_mode: str = SORT_DEFAULT):
        self._areas: list[AreaStore] = list(areas or [])
        self.sort_mode = sort_mode

    def __len__(self) -> int:
        return len(self._areas)

    def __iter__(self) -> Iterator[AreaStore]:
        return iter(self._areas)

    def __getitem__(self, index: int) -> AreaStore:
        return self._areas[index]

    def add(self, area: AreaStore):
        """Append an area; call sort() afterwards to reorder."""
        self._areas.append(area)

    def clear(self):
        self._areas.clear()

    def sort(self):
        """
        Sort areas in place.

        Order: unread count descending (unread mode only), then area
        type, then name.
        """
        mode = self.sort_mode
        if mode not in SORT_MODES:
            logger.warning(f"Unknown area sort mode {mode!r}, using {SORT_DEFAULT!r}")
            mode = SORT_DEFAULT

        if mode == SORT_UNREAD:
            self._areas.sort(key=lambda a: (-a.unread_count(), a.get_type(), a.get_name()))
        else:
            self._areas.sort(key=lambda a: (a.get_type(), a.get_name()))

    def filter(self, query: str) -> list[FilteredArea]:
        """
        Areas whose name contains query, case-insensitively.

        An empty query matches every area. Matches keep registry order.
        """
        needle = query.lower()
        return [
            FilteredArea(area, index)
            for index, area in enumerate(self._areas)
            if needle in area.get_name().lower()
        ]

    def lookup(self, name: str) -> Optional[int]:
        """Index of the area with exactly this name."""
        for index, area in enumerate(self._areas):
            if area.get_name() == name:
                return index
        return None

    def get(self, name: str) -> Optional[AreaStore]:
        """Area with exactly this name."""
        index = self.lookup(name)
        return self._areas[index] if index is not None else None

    def search(self, text: str) -> Optional[int]:
        """Index of the first area matching filter(text)."""
        matches = self.filter(text)
        return matches[0].original_index if matches else None
