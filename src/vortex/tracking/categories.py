"""Tracked interaction categories."""

from __future__ import annotations

from enum import Enum


class Category(Enum):
    """Kinds of interaction vortex counts, keyed by their export name."""

    BLOCK_RIGHT_CLICK = "BlockRightClick"
    ITEM_RIGHT_CLICK = "ItemRightClick"
    CRAFTING_OUTPUT = "CraftingOutput"
    ENTITY_DAMAGE = "EntityDamage"
    CHUNK_GENERATION = "ChunkGeneration"
    COMMAND_USAGE = "CommandUsage"

    @property
    def display_name(self) -> str:
        """Label used in chat summaries."""
        return _DISPLAY_NAMES[self]

    @property
    def report_name(self) -> str:
        """Label used as the breakdown key in the web report."""
        return _REPORT_NAMES[self]


_DISPLAY_NAMES = {
    Category.BLOCK_RIGHT_CLICK: "Block Right-Click",
    Category.ITEM_RIGHT_CLICK: "Item Right-Click",
    Category.CRAFTING_OUTPUT: "Crafting Output",
    Category.ENTITY_DAMAGE: "Entity Damage",
    Category.CHUNK_GENERATION: "Chunk Generation",
    Category.COMMAND_USAGE: "Command Usage",
}

_REPORT_NAMES = {
    Category.BLOCK_RIGHT_CLICK: "Block Right Clicks",
    Category.ITEM_RIGHT_CLICK: "Item Right Clicks",
    Category.CRAFTING_OUTPUT: "Recipe Crafts",
    Category.ENTITY_DAMAGE: "Entity Damage",
    Category.CHUNK_GENERATION: "Chunks Generated",
    Category.COMMAND_USAGE: "Command Interactions",
}
