"""In-memory counter storage for tracked interactions.

A single CounterStore is created when the server starts and shared by the
event handler, the chat commands and the exporters. All access goes through
one lock, so increments are never lost and readers never see a mapping
mid-update.

Usage:
    store = CounterStore()
    store.increment(Category.BLOCK_RIGHT_CLICK, "create")

    snapshot = store.snapshot_all()
    snapshot[Category.BLOCK_RIGHT_CLICK]   # {"create": 1}
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType

from vortex.tracking.categories import Category

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Immutable point-in-time copy of every category's counts.

    Attributes:
        counts: Read-only per-category mappings of mod ID to count.
        taken_at: When the snapshot was taken.
    """

    counts: Mapping[Category, Mapping[str, int]]
    taken_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __getitem__(self, category: Category) -> Mapping[str, int]:
        return self.counts.get(category, MappingProxyType({}))

    def __iter__(self) -> Iterator[Category]:
        return iter(self.counts)

    def items(self) -> Iterator[tuple[Category, Mapping[str, int]]]:
        """Iterate (category, mapping) pairs in category declaration order."""
        for category in self.counts:
            yield category, self.counts[category]

    def tracked_owners(self) -> set[str]:
        """Get every mod ID with a non-zero count in any category."""
        owners: set[str] = set()
        for mapping in self.counts.values():
            owners.update(owner for owner, count in mapping.items() if count > 0)
        return owners

    def is_empty(self) -> bool:
        """Check whether no category holds any entry."""
        return not any(self.counts.values())


class CounterStore:
    """Thread-safe per-category usage counters.

    Every category is present from construction, with an empty mapping.
    Counts only grow until reset() clears them.
    """

    def __init__(self, categories: tuple[Category, ...] | None = None):
        """Initialize an empty store.

        Args:
            categories: Categories to track. Defaults to every Category member.
        """
        self._lock = threading.Lock()
        self._categories = tuple(categories) if categories else tuple(Category)
        self._counts: dict[Category, dict[str, int]] = {
            category: {} for category in self._categories
        }

    @property
    def categories(self) -> tuple[Category, ...]:
        """The categories this store tracks."""
        return self._categories

    def increment(self, category: Category, owner_id: str | None) -> None:
        """Add one to the count for a mod in a category.

        A blank or whitespace-only owner is ignored; attribution is expected
        to have dropped it.

        Args:
            category: The interaction category.
            owner_id: The attributed mod ID.

        Raises:
            KeyError: If the category is not tracked by this store.
        """
        if not owner_id or not owner_id.strip():
            return

        with self._lock:
            mapping = self._counts[category]
            mapping[owner_id] = mapping.get(owner_id, 0) + 1

    def snapshot_all(self) -> Snapshot:
        """Copy every category's counts at a single instant.

        Returns:
            A Snapshot independent of later increments and resets.
        """
        with self._lock:
            copied = {
                category: MappingProxyType(dict(mapping))
                for category, mapping in self._counts.items()
            }
        return Snapshot(counts=MappingProxyType(copied))

    def counts(self, category: Category) -> dict[str, int]:
        """Copy the counts of a single category."""
        with self._lock:
            return dict(self._counts[category])

    def reset(self) -> None:
        """Clear every category's counts."""
        with self._lock:
            for mapping in self._counts.values():
                mapping.clear()
        logger.info("All collected usage data has been cleared")

    def union_of_tracked_owners(self) -> set[str]:
        """Get every mod ID with a non-zero count in any category."""
        with self._lock:
            owners: set[str] = set()
            for mapping in self._counts.values():
                owners.update(owner for owner, count in mapping.items() if count > 0)
        return owners

    def total(self) -> int:
        """Sum of all counts across categories."""
        with self._lock:
            return sum(sum(mapping.values()) for mapping in self._counts.values())

    def is_empty(self) -> bool:
        """Check whether nothing has been recorded since the last reset."""
        with self._lock:
            return not any(self._counts.values())
