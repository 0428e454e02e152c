#!/usr/bin/env python3
"""Vault item index and scanner.

This module supplies items to the rule engine:
- ItemIndex: in-memory ItemProvider keyed by (category, id)
- VaultScanner: builds an ItemIndex from a Markdown vault directory

The scanner collects:
- Files, with size, timestamps and tags (front matter and inline #tags)
- Folders, with their number of direct children
- Tags, including every ancestor of a nested tag, with file counts
- Properties (front matter keys), with inferred types and file counts

Paths matching the ignore globs (e.g. ".obsidian/**") are skipped.

Example:
    >>> index = VaultScanner("~/vault", ignore=[".obsidian/**"]).scan()
    >>> index.get_item("tag", "project/alpha").attributes["count"]
    3
"""

import json
import os
import re
from collections import Counter
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Set, Tuple

import yaml

from iconic.core.constants import DEFAULT_ICONS, PROPERTY_TYPE_ICONS, Category, ConfigKey
from iconic.infrastructure.config_manager import ConfigManager
from iconic.infrastructure.logger import Logger, get_logger
from iconic.items.models import Item, ItemProvider, raw_value
from iconic.items.resolver import normalize_tag, split_path
from iconic.rules.patterns import PathFilter

MARKDOWN_EXTENSIONS = {"md"}
TYPES_FILE = ".obsidian/types.json"

_FRONT_MATTER = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)", re.DOTALL)
_FENCED_CODE = re.compile(r"^(```|~~~).*?^\1", re.DOTALL | re.MULTILINE)
_INLINE_CODE = re.compile(r"`[^`\n]*`")
# A tag needs at least one non-digit character
_INLINE_TAG = re.compile(r"(?<![\w/#&])#([\w/-]*[^\W\d][\w/-]*|[\w/-]*[/-][\w/-]*)")


class ItemIndex(ItemProvider):
    """In-memory item provider.

    Items keep insertion order within each category.
    """

    def __init__(self, items: Iterable[Item] = ()):
        self._items: Dict[str, Dict[str, Item]] = {}
        self.add_all(items)

    def add(self, item: Item) -> None:
        """Add or replace an item."""
        self._items.setdefault(item.category, {})[item.id] = item

    def add_all(self, items: Iterable[Item]) -> None:
        """Add or replace several items."""
        for item in items:
            self.add(item)

    def remove(self, category: Any, item_id: str) -> bool:
        """Remove an item; returns True if it existed."""
        return self._items.get(raw_value(category), {}).pop(item_id, None) is not None

    def get_item(self, category: Any, item_id: str) -> Optional[Item]:
        return self._items.get(raw_value(category), {}).get(item_id)

    def iter_items(self, category: Any) -> Iterator[Item]:
        return iter(tuple(self._items.get(raw_value(category), {}).values()))

    def categories(self) -> List[str]:
        """Categories holding at least one item."""
        return [category for category, items in self._items.items() if items]

    def __len__(self) -> int:
        return sum(len(items) for items in self._items.values())


def split_front_matter(text: str) -> Tuple[Optional[str], str]:
    """Split a note into its YAML front matter source and body."""
    match = _FRONT_MATTER.match(text)
    if not match:
        return None, text
    return match.group(1), text[match.end() :]


def extract_inline_tags(body: str) -> Set[str]:
    """Find #tags in a note body, ignoring code."""
    body = _FENCED_CODE.sub("", body)
    body = _INLINE_CODE.sub("", body)
    return {m.strip("/") for m in _INLINE_TAG.findall(body) if m.strip("/")}


def front_matter_tags(value: Any) -> Set[str]:
    """Read tags from a front matter ``tags`` value (list or delimited string)."""
    if value is None:
        return set()
    if isinstance(value, str):
        value = re.split(r"[,\s]+", value)
    if not isinstance(value, list):
        return set()
    return {normalize_tag(str(tag)) for tag in value if tag is not None and normalize_tag(str(tag))}


def tag_ancestors(tag: str) -> List[str]:
    """A nested tag and all its ancestors ("a/b" -> ["a", "a/b"])."""
    parts = split_path(tag)
    return ["/".join(parts[: i + 1]) for i in range(len(parts))]


def infer_property_type(key: str, value: Any) -> Optional[str]:
    """Infer a property type from a front matter value.

    Returns:
        Property type, or None if the value carries no type information
    """
    if value is None:
        return None
    if key in ("tags", "aliases") and isinstance(value, (list, str)):
        return key
    if isinstance(value, bool):
        return "checkbox"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, datetime):
        return "datetime"
    if isinstance(value, date):
        return "date"
    if isinstance(value, list):
        return "multitext"
    return "text"


def _millis(seconds: float) -> int:
    return int(seconds * 1000)


class VaultScanner:
    """Builds an item index from a vault directory."""

    def __init__(
        self,
        root: str,
        ignore: Iterable[str] = (),
        starred: Iterable[str] = (),
        overrides: Optional[Mapping[str, Mapping[str, Mapping[str, Any]]]] = None,
        logger: Optional[Logger] = None,
    ):
        """Initialize vault scanner.

        Args:
            root: Vault directory
            ignore: Glob patterns of vault paths to skip
            starred: Vault paths of starred files and folders
            overrides: Per-item icon/color, as {category: {id: {icon, color}}}
            logger: Logger instance
        """
        self.root = Path(root).expanduser()
        self.ignore = PathFilter(ignore)
        self.starred = set(starred)
        self.overrides = overrides or {}
        self._logger = logger or get_logger()

    @classmethod
    def from_config(cls, config: ConfigManager, logger: Optional[Logger] = None) -> "VaultScanner":
        """Create a scanner from the ``iconic.vault`` and ``iconic.overrides`` settings.

        Raises:
            ValueError: If no vault root is configured
        """
        vault = f"{ConfigKey.ROOT}.{ConfigKey.VAULT}"
        root = config.get(f"{vault}.{ConfigKey.VAULT_ROOT}")
        if not root:
            raise ValueError(f"{vault}.{ConfigKey.VAULT_ROOT} is not configured")
        return cls(
            root,
            ignore=config.get(f"{vault}.{ConfigKey.VAULT_IGNORE}") or (),
            starred=config.get(f"{vault}.{ConfigKey.VAULT_STARRED}") or (),
            overrides=config.get(f"{ConfigKey.ROOT}.{ConfigKey.OVERRIDES}") or {},
            logger=logger,
        )

    def scan(self) -> ItemIndex:
        """Scan the vault.

        Returns:
            Index of all files, folders, tags and properties

        Raises:
            FileNotFoundError: If the vault root does not exist
        """
        if not self.root.is_dir():
            raise FileNotFoundError(f"Vault root not found: {self.root}")

        index = ItemIndex()
        tag_counts: Counter = Counter()
        property_counts: Counter = Counter()
        property_types: Dict[str, str] = {}

        for dirpath, dirnames, filenames in os.walk(self.root):
            rel_dir = Path(dirpath).relative_to(self.root).as_posix()
            rel_dir = "" if rel_dir == "." else rel_dir

            dirnames[:] = sorted(d for d in dirnames if not self.ignore.matches(self._join(rel_dir, d)))
            filenames = sorted(f for f in filenames if not self.ignore.matches(self._join(rel_dir, f)))

            if rel_dir:
                index.add(self._folder_item(rel_dir, len(dirnames) + len(filenames)))

            for filename in filenames:
                rel_path = self._join(rel_dir, filename)
                file_item, front_matter = self._file_item(Path(dirpath) / filename, rel_path)
                if file_item is None:
                    continue
                index.add(file_item)

                ancestors = {a for tag in file_item.attributes["tags"] for a in tag_ancestors(tag)}
                tag_counts.update(ancestors)

                for key, value in front_matter.items():
                    property_counts[key] += 1
                    inferred = infer_property_type(key, value)
                    if inferred and key not in property_types:
                        property_types[key] = inferred

        property_types.update(self._declared_property_types())

        for tag in sorted(tag_counts):
            index.add(self._item(Category.TAG, tag, tag.rpartition("/")[2], {"count": tag_counts[tag]}))

        for key in sorted(property_counts):
            prop_type = property_types.get(key, "text")
            index.add(
                self._item(
                    Category.PROPERTY,
                    key,
                    key,
                    {"type": prop_type, "count": property_counts[key]},
                    icon_default=PROPERTY_TYPE_ICONS.get(prop_type),
                )
            )

        self._logger.info(
            "Vault scanned",
            root=str(self.root),
            files=sum(1 for _ in index.iter_items(Category.FILE)),
            tags=len(tag_counts),
            properties=len(property_counts),
        )
        return index

    @staticmethod
    def _join(rel_dir: str, name: str) -> str:
        return f"{rel_dir}/{name}" if rel_dir else name

    def _item(
        self,
        category: Category,
        item_id: str,
        name: str,
        attributes: Dict[str, Any],
        icon_default: Optional[str] = None,
    ) -> Item:
        override = self.overrides.get(category.value, {}).get(item_id) or {}
        return Item(
            category=category,
            id=item_id,
            name=name,
            icon=override.get("icon"),
            color=override.get("color"),
            icon_default=icon_default or DEFAULT_ICONS[category],
            attributes=attributes,
        )

    def _folder_item(self, rel_dir: str, children: int) -> Item:
        return self._item(
            Category.FOLDER,
            rel_dir,
            rel_dir.rpartition("/")[2],
            {"children": children, "starred": rel_dir in self.starred},
        )

    def _file_item(self, path: Path, rel_path: str) -> Tuple[Optional[Item], Dict[str, Any]]:
        try:
            stat = path.stat()
        except OSError as e:
            self._logger.warning("Cannot stat file", path=rel_path, error=str(e))
            return None, {}

        extension = path.suffix[1:] if path.stem and path.suffix else ""
        front_matter: Dict[str, Any] = {}
        tags: Set[str] = set()
        if extension.lower() in MARKDOWN_EXTENSIONS:
            front_matter, tags = self._read_note(path, rel_path)

        attributes = {
            "extension": extension,
            "size": stat.st_size,
            "created": _millis(getattr(stat, "st_birthtime", stat.st_ctime)),
            "modified": _millis(stat.st_mtime),
            "starred": rel_path in self.starred,
            "tags": frozenset(tags),
        }
        return self._item(Category.FILE, rel_path, path.name, attributes), front_matter

    def _read_note(self, path: Path, rel_path: str) -> Tuple[Dict[str, Any], Set[str]]:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self._logger.warning("Cannot read note", path=rel_path, error=str(e))
            return {}, set()

        source, body = split_front_matter(text)
        front_matter: Dict[str, Any] = {}
        if source is not None:
            try:
                loaded = yaml.safe_load(source)
            except yaml.YAMLError as e:
                self._logger.warning("Invalid front matter", path=rel_path, error=str(e))
                loaded = None
            if isinstance(loaded, dict):
                front_matter = {str(k): v for k, v in loaded.items()}

        tags = front_matter_tags(front_matter.get("tags", front_matter.get("tag")))
        tags |= extract_inline_tags(body)
        return front_matter, tags

    def _declared_property_types(self) -> Dict[str, str]:
        path = self.root / TYPES_FILE
        if not path.is_file():
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            self._logger.warning("Cannot read property types", path=TYPES_FILE, error=str(e))
            return {}

        types = data.get("types") if isinstance(data, dict) else None
        if not isinstance(types, dict):
            return {}
        return {str(k): v for k, v in types.items() if isinstance(v, str)}
