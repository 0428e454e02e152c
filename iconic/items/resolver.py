#!/usr/bin/env python3
"""Attribute resolution for vault items.

This module turns an Item into the AttributeSet the rule engine evaluates:
- Per-category extraction (file, folder, tag, property)
- Derived attributes (basename, parent, depth)
- Normalization (tag sets without '#', timestamps as epoch milliseconds)
- Explicit ABSENT for unknown or malformed values

Resolution is pure and never raises; a field the collaborator supplied in
an unusable form resolves to ABSENT, which no condition accepts.

Example:
    >>> resolver = AttributeResolver()
    >>> attrs = resolver.resolve(Item("file", "notes/draft-intro.md", "draft-intro.md"))
    >>> attrs.value(Source.EXTENSION), attrs.value(Source.PARENT)
    ('md', 'notes')
"""

import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional

from iconic.core.constants import Category
from iconic.items.models import ABSENT, AttributeSet, Item, Source


def split_path(path: str) -> List[str]:
    """Split a vault path into its non-empty segments."""
    return [part for part in path.replace("\\", "/").split("/") if part]


def parent_path(path: str) -> str:
    """Vault path of the folder containing ``path`` ("" at the vault root)."""
    return "/".join(split_path(path)[:-1])


def normalize_tag(tag: str) -> str:
    """Strip surrounding whitespace and a leading '#' from a tag."""
    tag = tag.strip()
    return tag[1:] if tag.startswith("#") else tag


def to_millis(value: Any) -> Any:
    """Convert a timestamp to integer milliseconds since epoch.

    Accepts datetimes (naive values are read as UTC) and numbers already
    expressed in milliseconds. Anything else yields ABSENT.
    """
    if value is None or isinstance(value, bool):
        return ABSENT
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp() * 1000)
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else ABSENT
    return ABSENT


def parse_bool(text: str) -> Optional[bool]:
    """Parse "true"/"false" (any case, surrounding whitespace ignored)."""
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def to_bool(value: Any, default: bool = False) -> bool:
    """Read a flag that may arrive as a bool or as "true"/"false" text."""
    if isinstance(value, (bool, int)):
        return bool(value)
    if isinstance(value, str):
        parsed = parse_bool(value)
        return default if parsed is None else parsed
    return default


def _to_int(value: Any) -> Any:
    if value is None or isinstance(value, bool):
        return ABSENT
    if isinstance(value, float) and not math.isfinite(value):
        return ABSENT
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return ABSENT


def _to_tag_set(value: Any) -> Any:
    if value is None:
        return ABSENT
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, Iterable):
        return ABSENT
    tags: FrozenSet[str] = frozenset(
        normalize_tag(tag) for tag in value if isinstance(tag, str) and normalize_tag(tag)
    )
    return tags


def _extension(name: str) -> str:
    stem, dot, ext = name.rpartition(".")
    return ext if dot and stem else ""


class AttributeResolver:
    """Resolves items of every category into AttributeSets.

    Stateless; one instance can be shared by any number of callers.
    """

    def __init__(self) -> None:
        self._resolvers: Dict[str, Callable[[Item], Dict[Source, Any]]] = {
            Category.FILE.value: self._resolve_file,
            Category.FOLDER.value: self._resolve_folder,
            Category.TAG.value: self._resolve_tag,
            Category.PROPERTY.value: self._resolve_property,
        }

    def resolve(self, item: Item) -> AttributeSet:
        """Resolve an item's attributes.

        Args:
            item: Item to resolve

        Returns:
            AttributeSet for the item's category; empty for an unknown
            category
        """
        resolver = self._resolvers.get(item.category)
        if resolver is None:
            return AttributeSet(item.category)
        return AttributeSet(item.category, resolver(item))

    def _resolve_file(self, item: Item) -> Dict[Source, Any]:
        attrs = item.attributes
        parts = split_path(item.id)
        name = item.name or (parts[-1] if parts else "")
        extension = attrs.get("extension")
        if not isinstance(extension, str):
            extension = _extension(name)

        basename = name
        if extension and name.endswith("." + extension):
            basename = name[: -(len(extension) + 1)]

        return {
            Source.NAME: name,
            Source.BASENAME: basename,
            Source.EXTENSION: extension,
            Source.PATH: item.id,
            Source.PARENT: parts[-2] if len(parts) > 1 else "",
            Source.DEPTH: len(parts),
            Source.TAGS: _to_tag_set(attrs.get("tags", ())),
            Source.CREATED: to_millis(attrs.get("created")),
            Source.MODIFIED: to_millis(attrs.get("modified")),
            Source.SIZE: _to_int(attrs.get("size")),
            Source.STARRED: to_bool(attrs.get("starred")),
        }

    def _resolve_folder(self, item: Item) -> Dict[Source, Any]:
        attrs = item.attributes
        parts = split_path(item.id)
        return {
            Source.NAME: item.name or (parts[-1] if parts else ""),
            Source.PATH: item.id,
            Source.PARENT: parts[-2] if len(parts) > 1 else "",
            Source.DEPTH: len(parts),
            Source.CHILDREN: _to_int(attrs.get("children")),
            Source.STARRED: to_bool(attrs.get("starred")),
        }

    def _resolve_tag(self, item: Item) -> Dict[Source, Any]:
        tag = normalize_tag(item.id)
        parent, _, _ = tag.rpartition("/")
        return {
            Source.NAME: tag,
            Source.PARENT: parent,
            Source.DEPTH: len(split_path(tag)),
            Source.COUNT: _to_int(item.attributes.get("count")),
        }

    def _resolve_property(self, item: Item) -> Dict[Source, Any]:
        prop_type = item.attributes.get("type")
        return {
            Source.NAME: item.id,
            Source.TYPE: prop_type if isinstance(prop_type, str) else ABSENT,
            Source.COUNT: _to_int(item.attributes.get("count")),
        }
