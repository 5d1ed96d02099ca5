"""Vortex - Mod usage telemetry for modded game servers.

Vortex counts how players interact with each installed mod (blocks, items,
crafting, combat, world generation, commands) so server administrators can
see which mods are used and which are not.
"""

__version__ = "0.1.0"
__author__ = "Atmo Team"

from vortex.config import Config
from vortex.tracking import Category, CounterStore, Snapshot

__all__ = [
    "Category",
    "Config",
    "CounterStore",
    "Snapshot",
]
