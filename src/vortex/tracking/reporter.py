"""Derived views over counter snapshots.

Usage:
    from vortex.tracking import reporter

    snapshot = store.snapshot_all()
    reporter.top_n(snapshot[Category.BLOCK_RIGHT_CLICK], 10)
    reporter.bottom_positive_n(snapshot[Category.BLOCK_RIGHT_CLICK], 10)
    reporter.unused_owners(installed_mods, snapshot.tracked_owners())

Equal counts are ordered by mod ID so repeated reports list ties the same way.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from vortex.tracking.categories import Category
from vortex.tracking.store import CounterStore, Snapshot

logger = logging.getLogger(__name__)


def top_n(mapping: Mapping[str, int], n: int) -> list[tuple[str, int]]:
    """Get the most used mods of a category.

    Args:
        mapping: Mod ID to count.
        n: Maximum number of entries to return.

    Returns:
        (mod ID, count) pairs sorted by count descending, then mod ID.
    """
    if n <= 0:
        return []
    entries = sorted(mapping.items(), key=lambda e: (-e[1], e[0]))
    return entries[:n]


def bottom_positive_n(mapping: Mapping[str, int], n: int) -> list[tuple[str, int]]:
    """Get the least used mods that were used at least once.

    Args:
        mapping: Mod ID to count.
        n: Maximum number of entries to return.

    Returns:
        (mod ID, count) pairs with count > 0, sorted by count ascending,
        then mod ID.
    """
    if n <= 0:
        return []
    entries = sorted(
        ((owner, count) for owner, count in mapping.items() if count > 0),
        key=lambda e: (e[1], e[0]),
    )
    return entries[:n]


def unused_owners(
    universe: Iterable[str] | None,
    tracked: CounterStore | Snapshot | Iterable[str],
) -> set[str]:
    """Get the known mods that have no tracked interactions.

    Args:
        universe: Every known mod ID, already stripped of host IDs.
        tracked: A store, a snapshot, or the set of tracked mod IDs.

    Returns:
        The subset of universe with no recorded usage. Empty if universe
        is None.
    """
    if universe is None:
        logger.warning("Installed mod list is missing; reporting no unused mods")
        return set()

    if isinstance(tracked, CounterStore):
        used = tracked.union_of_tracked_owners()
    elif isinstance(tracked, Snapshot):
        used = tracked.tracked_owners()
    else:
        used = set(tracked)

    return set(universe) - used


class SummaryStatus(Enum):
    """Outcome of summarizing one category."""

    OK = "ok"
    NO_DATA = "no_data"  # nothing recorded at all
    NO_POSITIVE = "no_positive"  # entries exist but none above zero


@dataclass
class CategorySummary:
    """Most and least used mods for a single category.

    Attributes:
        category: The summarized category.
        most_used: Top entries by count.
        least_used: Bottom entries with count > 0.
        total: Sum of all counts in the category.
    """

    category: Category
    most_used: list[tuple[str, int]] = field(default_factory=list)
    least_used: list[tuple[str, int]] = field(default_factory=list)
    total: int = 0
    entry_count: int = 0

    @property
    def status(self) -> SummaryStatus:
        if self.entry_count == 0:
            return SummaryStatus.NO_DATA
        if not self.least_used:
            return SummaryStatus.NO_POSITIVE
        return SummaryStatus.OK

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "category": self.category.value,
            "status": self.status.value,
            "total": self.total,
            "most_used": [list(e) for e in self.most_used],
            "least_used": [list(e) for e in self.least_used],
        }


def summarize_category(
    category: Category, mapping: Mapping[str, int], limit: int = 10
) -> CategorySummary:
    """Build the most/least used summary of one category mapping."""
    return CategorySummary(
        category=category,
        most_used=top_n(mapping, limit),
        least_used=bottom_positive_n(mapping, limit),
        total=sum(mapping.values()),
        entry_count=len(mapping),
    )


def summarize(snapshot: Snapshot, limit: int = 10) -> list[CategorySummary]:
    """Summarize every category of a snapshot.

    Args:
        snapshot: The snapshot to report on.
        limit: Maximum entries per most/least used list.

    Returns:
        One CategorySummary per category, in category declaration order.
    """
    return [
        summarize_category(category, mapping, limit)
        for category, mapping in snapshot.items()
    ]
