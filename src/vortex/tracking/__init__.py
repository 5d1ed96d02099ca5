"""Usage counting and reporting for vortex.

Architecture:
    Host event (block/item/craft/damage/chunk/command)
            |
            v
    attribution (mod ID from registry key or command root)
            |
            v
    CounterStore (per-category counts, one lock)
            |
            v (on demand)
    Snapshot -> reporter (top/bottom/unused) -> chat commands
            |
            v
    export (CSV, web report) -> upload
"""

from vortex.tracking.categories import Category
from vortex.tracking.store import CounterStore, Snapshot
from vortex.tracking.attribution import attribute, attribute_command, attribute_event
from vortex.tracking.reporter import (
    CategorySummary,
    SummaryStatus,
    bottom_positive_n,
    summarize,
    top_n,
    unused_owners,
)

__all__ = [
    "Category",
    # Counting
    "CounterStore",
    "Snapshot",
    # Attribution
    "attribute",
    "attribute_command",
    "attribute_event",
    # Reporting
    "CategorySummary",
    "SummaryStatus",
    "bottom_positive_n",
    "summarize",
    "top_n",
    "unused_owners",
]
