"""Host event records and the handler that counts them.

The host fires interaction events on its own threads. Each event is
filtered, attributed to a mod, and counted in the shared CounterStore.
"""

from __future__ import annotations

import threading
from collections.abc import Hashable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from vortex.config import DEFAULT_RESERVED_NAMESPACES
from vortex.tracking.attribution import attribute_event
from vortex.tracking.categories import Category
from vortex.tracking.store import CounterStore

# Right clicks are fired once per hand; only the main hand is counted
HAND_SENSITIVE = frozenset({Category.BLOCK_RIGHT_CLICK, Category.ITEM_RIGHT_CLICK})

EVENT_FLAGS = (("client_side", False), ("main_hand", True), ("by_player", True))


@dataclass
class UsageEvent:
    """An interaction reported by the host.

    Attributes:
        category: The kind of interaction.
        raw_id: Registry key of the block, item, entity or biome involved,
            or the command line for command usage.
        position: Chunk coordinates for chunk generation events.
        client_side: True if the event fired on the client.
        main_hand: False for off-hand right clicks.
        by_player: False for entity damage not dealt by a player.
        timestamp: When the event occurred.
    """

    category: Category
    raw_id: str | None
    position: Hashable | None = None
    client_side: bool = False
    main_hand: bool = True
    by_player: bool = True
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_dict(cls, data: dict) -> UsageEvent:
        """Create a UsageEvent from a decoded event log record.

        Raises:
            ValueError: If the category is missing or unknown, or the id,
                position or a flag has the wrong type.
        """
        category_name = data.get("category")
        try:
            category = Category(category_name)
        except ValueError:
            valid = ", ".join(c.value for c in Category)
            raise ValueError(
                f"Unknown category '{category_name}'. Valid categories are: {valid}"
            ) from None

        raw_id = data.get("id")
        if raw_id is not None and not isinstance(raw_id, str):
            raise ValueError(f"Invalid event id {raw_id!r}: expected string")

        flags = {}
        for key, default in EVENT_FLAGS:
            value = data.get(key, default)
            if not isinstance(value, bool):
                raise ValueError(f"Invalid event flag '{key}' {value!r}: expected boolean")
            flags[key] = value

        return cls(
            category=category,
            raw_id=raw_id,
            position=_parse_position(data.get("position")),
            **flags,
        )


def _parse_position(value: Any) -> tuple[int | str, ...] | None:
    """Convert a decoded position to a hashable tuple.

    Raises:
        ValueError: If the position is not a flat list of ints or strings.
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple)) and all(
        isinstance(v, (int, str)) and not isinstance(v, bool) for v in value
    ):
        return tuple(value)
    raise ValueError(f"Invalid chunk position {value!r}: expected list of coordinates")


class UsageEventHandler:
    """Filters, attributes and counts host events."""

    def __init__(
        self,
        store: CounterStore,
        reserved: Iterable[str] = DEFAULT_RESERVED_NAMESPACES,
    ):
        """Initialize the handler.

        Args:
            store: The shared counter store.
            reserved: Namespaces that are never attributed.
        """
        self.store = store
        self.reserved = tuple(reserved)
        self._processed_chunks: set[Hashable] = set()
        self._chunk_lock = threading.Lock()

    def handle(self, event: UsageEvent) -> str | None:
        """Count an event if it is attributable.

        Args:
            event: The event to count.

        Returns:
            The mod ID the event was counted for, or None if it was dropped.
        """
        if event.client_side:
            return None
        if event.category in HAND_SENSITIVE and not event.main_hand:
            return None
        if event.category is Category.ENTITY_DAMAGE and not event.by_player:
            return None
        if event.category is Category.CHUNK_GENERATION and not self._first_load(event):
            return None

        owner = attribute_event(event.category, event.raw_id, self.reserved)
        if owner is None:
            return None

        self.store.increment(event.category, owner)
        return owner

    def _first_load(self, event: UsageEvent) -> bool:
        """Mark a chunk as processed, reporting whether it was new.

        Chunks without a position cannot be de-duplicated and always count.
        """
        if event.position is None:
            return True

        with self._chunk_lock:
            if event.position in self._processed_chunks:
                return False
            self._processed_chunks.add(event.position)
            return True

    @property
    def processed_chunk_count(self) -> int:
        with self._chunk_lock:
            return len(self._processed_chunks)

    def on_block_right_click(self, block_id: str, main_hand: bool = True) -> str | None:
        """Count a right click on a block."""
        return self.handle(
            UsageEvent(Category.BLOCK_RIGHT_CLICK, block_id, main_hand=main_hand)
        )

    def on_item_right_click(self, item_id: str, main_hand: bool = True) -> str | None:
        """Count a right click with an item."""
        return self.handle(
            UsageEvent(Category.ITEM_RIGHT_CLICK, item_id, main_hand=main_hand)
        )

    def on_item_crafted(self, item_id: str) -> str | None:
        """Count a crafted item, attributed to the output's mod."""
        return self.handle(UsageEvent(Category.CRAFTING_OUTPUT, item_id))

    def on_entity_damage(self, entity_type_id: str, by_player: bool = True) -> str | None:
        """Count damage dealt to a living entity."""
        return self.handle(
            UsageEvent(Category.ENTITY_DAMAGE, entity_type_id, by_player=by_player)
        )

    def on_chunk_load(self, position: Hashable, biome_id: str | None) -> str | None:
        """Count a newly loaded chunk, attributed to its biome's mod."""
        return self.handle(
            UsageEvent(Category.CHUNK_GENERATION, biome_id, position=position)
        )

    def on_command(self, command_line: str) -> str | None:
        """Count a command invocation, attributed to its root."""
        return self.handle(UsageEvent(Category.COMMAND_USAGE, command_line))
