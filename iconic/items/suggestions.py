"""
Iconic Items: Suggestion Classification.

Suggestion popovers hand the host arbitrary payloads. This module classifies
a payload once, at the boundary, into a closed SuggestionTarget variant so
that nothing downstream has to inspect payload shapes again.

Recognized payloads:
    {"type": "file" | "alias", "file": "<path>" | {"path": "<path>"}}  -> FILE
    {"tag": "#project"}                                                 -> TAG
    {"widget": ..., "type": "text", "text": "<key>"}                    -> PROPERTY
    {"widget": ..., "type": "note", "name": "<key>"}                    -> PROPERTY
Everything else is UNKNOWN.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from iconic.core.constants import Category
from iconic.items.models import ItemKind
from iconic.items.resolver import normalize_tag

_KIND_CATEGORIES = {
    ItemKind.FILE: Category.FILE,
    ItemKind.TAG: Category.TAG,
    ItemKind.PROPERTY: Category.PROPERTY,
}

# Property suggestion types and the payload key holding the property name
_PROPERTY_NAME_KEYS = {"text": "text", "note": "name"}


@dataclass(frozen=True)
class SuggestionTarget:
    """Classified suggestion: what kind of item it names, and which one."""

    kind: ItemKind
    item_id: Optional[str] = None

    @property
    def category(self) -> Optional[Category]:
        """Category to resolve the item in, or None for unknown payloads."""
        return _KIND_CATEGORIES.get(self.kind)


UNKNOWN_TARGET = SuggestionTarget(ItemKind.UNKNOWN)


def _file_path(file: Any) -> Optional[str]:
    if isinstance(file, str):
        return file or None
    if isinstance(file, Mapping):
        path = file.get("path")
        return path if isinstance(path, str) and path else None
    return None


def classify_suggestion(payload: Any) -> SuggestionTarget:
    """Classify a suggestion payload.

    Args:
        payload: Raw suggestion value from a popover

    Returns:
        SuggestionTarget; UNKNOWN_TARGET when the payload names no item
    """
    if not isinstance(payload, Mapping):
        return UNKNOWN_TARGET

    suggestion_type = payload.get("type")

    if suggestion_type in ("file", "alias"):
        path = _file_path(payload.get("file"))
        if path:
            return SuggestionTarget(ItemKind.FILE, path)

    tag = payload.get("tag")
    if isinstance(tag, str) and normalize_tag(tag):
        return SuggestionTarget(ItemKind.TAG, normalize_tag(tag))

    if payload.get("widget"):
        key = _PROPERTY_NAME_KEYS.get(suggestion_type)
        name = payload.get(key) if key else None
        if isinstance(name, str) and name:
            return SuggestionTarget(ItemKind.PROPERTY, name)

    return UNKNOWN_TARGET
