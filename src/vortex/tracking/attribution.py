"""Owner attribution for tracked interactions.

Each tracked event carries a raw identifier from the host: a namespaced
registry key (``create:cogwheel``) or, for commands, the typed command line.
This module extracts the owning mod ID from those identifiers and filters
out the host's own built-in namespace.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from vortex.config import DEFAULT_RESERVED_NAMESPACES
from vortex.tracking.categories import Category

COMMAND_PREFIX = "/"
NAMESPACE_SEPARATOR = ":"


def _filter_reserved(owner: str | None, reserved: Iterable[str]) -> str | None:
    if not owner or owner in reserved:
        return None
    return owner


def attribute(
    raw_id: str | None,
    reserved: Iterable[str] = DEFAULT_RESERVED_NAMESPACES,
) -> str | None:
    """Extract the owning mod ID from a namespaced identifier.

    An identifier without a separator lives in the host's default namespace,
    the same way the host resolves bare registry keys.

    Args:
        raw_id: Identifier of the form ``<owner>:<local-name>``.
        reserved: Namespaces that are never attributable.

    Returns:
        The owner token, or None if the identifier is not attributable.
    """
    if not raw_id:
        return None

    owner, separator, _ = raw_id.partition(NAMESPACE_SEPARATOR)
    if not separator:
        return None

    return _filter_reserved(owner.strip(), tuple(reserved))


def attribute_command(
    command_line: str | None,
    reserved: Iterable[str] = DEFAULT_RESERVED_NAMESPACES,
) -> str | None:
    """Extract the owning mod ID from a command line.

    ``/vortex summary`` is attributed to ``vortex``. The command root is
    taken verbatim; a root that merely shares a mod's name is counted for it.

    Args:
        command_line: The command as typed, with or without the prefix.
        reserved: Namespaces that are never attributable.

    Returns:
        The command root, or None if the command is not attributable.
    """
    if not command_line:
        return None

    tokens = command_line.strip().split()
    if not tokens:
        return None

    root = tokens[0].lstrip(COMMAND_PREFIX)
    return _filter_reserved(root, tuple(reserved))


# Extractor registry: maps category to its attribution function.
# Categories not listed use the namespaced-identifier rule.
CATEGORY_EXTRACTORS: dict[Category, Callable[..., str | None]] = {
    Category.COMMAND_USAGE: attribute_command,
}


def attribute_event(
    category: Category,
    raw: str | None,
    reserved: Iterable[str] = DEFAULT_RESERVED_NAMESPACES,
) -> str | None:
    """Attribute a raw identifier using the extractor for its category.

    Args:
        category: The tracked interaction category.
        raw: The raw identifier delivered with the event.
        reserved: Namespaces that are never attributable.

    Returns:
        The owner token, or None if the event is not attributable.
    """
    extractor = CATEGORY_EXTRACTORS.get(category, attribute)
    return extractor(raw, reserved)
