from __future__ import annotations

import random
import threading
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .records import ArtifactType, Record, build_records, parse_table
from .resolver import AssetResolver
from .utils import get_logger


class CatalogStore:
    """In-memory archive catalog with derived views and filter state.

    ``fetch_table`` is any zero-argument callable returning the raw CSV text
    (see :mod:`archivestore.source`). Every derived view is recomputed from
    the current items on read.
    """

    def __init__(self, fetch_table: Callable[[], str], resolver: AssetResolver, rng: Optional[random.Random] = None):
        self.fetch_table = fetch_table
        self.resolver = resolver
        self.rng = rng or random.Random()

        self._items: Tuple[Record, ...] = ()
        self._selected_tags: List[str] = []
        self._load_lock = threading.Lock()
        self.loading = False
        self.error: Optional[str] = None
        self.current_year: Optional[int] = None

    # -- state ---------------------------------------------------------------

    @property
    def items(self) -> Tuple[Record, ...]:
        return self._items

    @property
    def selected_tags(self) -> Tuple[str, ...]:
        return tuple(self._selected_tags)

    @property
    def state(self) -> Dict:
        return {
            "items_count": self.items_count,
            "loading": self.loading,
            "error": self.error,
            "selected_tags": list(self._selected_tags),
            "current_year": self.current_year,
        }

    # -- loading -------------------------------------------------------------

    def load_archive_data(self) -> bool:
        """Fetch, parse and replace the catalog.

        Returns True on success. On failure the previous items are kept and
        ``error`` holds the message. A call made while another load is in
        flight is rejected and returns False.
        """
        log = get_logger()
        if not self._load_lock.acquire(blocking=False):
            log.warning("Archive load already in progress; ignoring request")
            return False

        try:
            self.loading = True
            self.error = None
            try:
                rows = parse_table(self.fetch_table())
                records = build_records(rows, self.resolver)
            except Exception as e:
                log.error(f"Error loading archive data: {e}")
                self.error = str(e) or "Failed to load archive data"
                return False

            self._items = tuple(records)
            if self.current_year is None or self.current_year not in self.years:
                years = self.years
                self.current_year = years[0] if years else None
            log.info(f"Loaded {len(records)} archive items")
            return True
        finally:
            self.loading = False
            self._load_lock.release()

    # -- derived views -------------------------------------------------------

    def items_by_type(self, type: str) -> List[Record]:
        return [item for item in self._items if item.type == type]

    @property
    def dove_items(self) -> List[Record]:
        return self.items_by_type(ArtifactType.DOVE)

    @property
    def hawk_items(self) -> List[Record]:
        return self.items_by_type(ArtifactType.HAWK)

    def items_by_year(self, year: int) -> List[Record]:
        return [item for item in self._items if item.year == year]

    def items_by_tag(self, tag: str) -> List[Record]:
        return [item for item in self._items if tag in item.tags]

    @property
    def years(self) -> List[int]:
        """Distinct parsable years, ascending."""
        return sorted({item.year for item in self._items if item.has_year})

    @property
    def all_tags(self) -> List[str]:
        return _distinct_tags(self._items)

    @property
    def sorted_items(self) -> List[Record]:
        # Unparsable years go last
        return sorted(self._items, key=lambda item: (not item.has_year, item.year if item.has_year else 0, item.visual_name))

    @property
    def items_count(self) -> int:
        return len(self._items)

    @property
    def dove_count(self) -> int:
        return len(self.dove_items)

    @property
    def hawk_count(self) -> int:
        return len(self.hawk_items)

    @property
    def current_year_items(self) -> List[Record]:
        if self.current_year is None:
            return []
        return self.items_by_year(self.current_year)

    @property
    def tag_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for item in self._items:
            for tag in item.tags:
                counts[tag] = counts.get(tag, 0) + 1
        return counts

    @property
    def filtered_by_tags(self) -> List[Record]:
        if not self._selected_tags:
            return list(self._items)
        return self.get_items_with_all_tags(self._selected_tags)

    def tags_by_type(self, type: str) -> List[str]:
        return _distinct_tags(self.items_by_type(type))

    def related_tags(self, tag: str) -> List[str]:
        """Tags that appear alongside ``tag`` on any item."""
        related = {t for item in self.items_by_tag(tag) for t in item.tags if t != tag}
        return sorted(related)

    # -- year navigation -----------------------------------------------------

    def _year_index(self) -> Tuple[List[int], int]:
        years = self.years
        if self.current_year is None or self.current_year not in years:
            return years, -1
        return years, years.index(self.current_year)

    @property
    def has_next_year(self) -> bool:
        years, index = self._year_index()
        return index != -1 and index < len(years) - 1

    @property
    def has_prev_year(self) -> bool:
        _, index = self._year_index()
        return index > 0

    @property
    def next_year(self) -> Optional[int]:
        years, index = self._year_index()
        if index == -1 or index >= len(years) - 1:
            return None
        return years[index + 1]

    @property
    def prev_year(self) -> Optional[int]:
        years, index = self._year_index()
        if index <= 0:
            return None
        return years[index - 1]

    def set_year(self, year: int) -> bool:
        if year in self.years:
            self.current_year = year
            return True
        return False

    def go_to_next_year(self) -> bool:
        target = self.next_year
        if target is None:
            return False
        self.current_year = target
        return True

    def go_to_prev_year(self) -> bool:
        target = self.prev_year
        if target is None:
            return False
        self.current_year = target
        return True

    # -- queries and sampling ------------------------------------------------

    def _draw(self, pool: List[Record], count: int) -> List[Record]:
        pool = list(pool)
        result = []
        while len(result) < count and pool:
            result.append(pool.pop(self.rng.randrange(len(pool))))
        return result

    def get_random_items(self, count: int = 1) -> List[Record]:
        return self._draw(list(self._items), count)

    def get_random_by_type(self, type: str, count: int = 1) -> List[Record]:
        return self._draw(self.items_by_type(type), count)

    def filter_by_year_range(self, start_year: int, end_year: int) -> List[Record]:
        return [item for item in self._items if item.has_year and start_year <= item.year <= end_year]

    def search_items(self, query: str) -> List[Record]:
        """Case-insensitive substring search over headline, text and tags."""
        needle = (query or "").lower()
        return [
            item for item in self._items
            if needle in item.headline.lower()
            or needle in item.text.lower()
            or any(needle in tag.lower() for tag in item.tags)
        ]

    # -- tag selection -------------------------------------------------------

    def toggle_tag(self, tag: str) -> None:
        if tag in self._selected_tags:
            self._selected_tags.remove(tag)
        else:
            self._selected_tags.append(tag)

    def clear_selected_tags(self) -> None:
        self._selected_tags = []

    def get_items_with_all_tags(self, tags: Iterable[str]) -> List[Record]:
        wanted = list(tags)
        return [item for item in self._items if all(tag in item.tags for tag in wanted)]

    def get_items_with_any_tags(self, tags: Iterable[str]) -> List[Record]:
        wanted = list(tags)
        return [item for item in self._items if any(tag in item.tags for tag in wanted)]


def _distinct_tags(items: Iterable[Record]) -> List[str]:
    return sorted({tag for item in items for tag in item.tags})
