"""
Iconic Items: Item and Attribute Models.

Items are the vault entities (files, folders, tags, properties) that carry
icons. They are produced by per-category collaborators and only read by the
rule engine, which sees them through an AttributeSet: a typed snapshot of
the attributes its conditions can test.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from iconic.core.constants import Category


class _Absent:
    """Marker for an attribute that is unknown or inapplicable."""

    _instance: Optional["_Absent"] = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


class ComparisonClass(Enum):
    """Comparison semantics of an attribute."""

    STRING = "string"
    SET = "set"  # Set of strings (tag membership)
    NUMBER = "number"
    DATE = "date"  # Milliseconds since epoch
    BOOLEAN = "boolean"


class Source(str, Enum):
    """Item attributes a condition can test."""

    NAME = "name"
    BASENAME = "basename"
    EXTENSION = "extension"
    PATH = "path"
    PARENT = "parent"
    TAGS = "tags"
    CREATED = "created"
    MODIFIED = "modified"
    STARRED = "starred"
    SIZE = "size"
    DEPTH = "depth"
    CHILDREN = "children"
    COUNT = "count"
    TYPE = "type"

    @classmethod
    def parse(cls, value: Any) -> Optional["Source"]:
        """Return the source named by ``value``, or None if unknown."""
        try:
            return cls(value)
        except ValueError:
            return None


_STRING = ComparisonClass.STRING
_NUMBER = ComparisonClass.NUMBER

# Attributes available per category, with their comparison class
SOURCE_CLASSES: Dict[Category, Dict[Source, ComparisonClass]] = {
    Category.FILE: {
        Source.NAME: _STRING,
        Source.BASENAME: _STRING,
        Source.EXTENSION: _STRING,
        Source.PATH: _STRING,
        Source.PARENT: _STRING,
        Source.TAGS: ComparisonClass.SET,
        Source.CREATED: ComparisonClass.DATE,
        Source.MODIFIED: ComparisonClass.DATE,
        Source.SIZE: _NUMBER,
        Source.DEPTH: _NUMBER,
        Source.STARRED: ComparisonClass.BOOLEAN,
    },
    Category.FOLDER: {
        Source.NAME: _STRING,
        Source.PATH: _STRING,
        Source.PARENT: _STRING,
        Source.DEPTH: _NUMBER,
        Source.CHILDREN: _NUMBER,
        Source.STARRED: ComparisonClass.BOOLEAN,
    },
    Category.TAG: {
        Source.NAME: _STRING,
        Source.PARENT: _STRING,
        Source.DEPTH: _NUMBER,
        Source.COUNT: _NUMBER,
    },
    Category.PROPERTY: {
        Source.NAME: _STRING,
        Source.TYPE: _STRING,
        Source.COUNT: _NUMBER,
    },
}


def raw_value(value: Any) -> Any:
    """Unwrap enum members to their stored string value."""
    if isinstance(value, Enum):
        return value.value
    return value


def comparison_class(category: Any, source: Any) -> Optional[ComparisonClass]:
    """Get the comparison class of a source within a category.

    Args:
        category: Category (enum member or raw string)
        source: Source (enum member or raw string)

    Returns:
        Comparison class, or None if the source is unknown or does not
        apply to the category
    """
    parsed_category = Category.parse(raw_value(category))
    parsed_source = Source.parse(raw_value(source))
    if parsed_category is None or parsed_source is None:
        return None
    return SOURCE_CLASSES[parsed_category].get(parsed_source)


def sources_for(category: Any) -> Tuple[Source, ...]:
    """List the sources available to a category."""
    parsed = Category.parse(raw_value(category))
    if parsed is None:
        return ()
    return tuple(SOURCE_CLASSES[parsed])


class ItemKind(Enum):
    """Closed set of item kinds recognized at the resolution boundary."""

    FILE = "file"
    TAG = "tag"
    PROPERTY = "property"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Item:
    """A vault entity that can carry an icon and color.

    Attributes:
        category: Item category (file, folder, tag, property)
        id: Identifier unique within the category (path, tag name, key)
        name: Display name
        icon: Explicit per-item icon, if the user set one
        color: Explicit per-item color, if the user set one
        icon_default: Contextual default icon for this item
        attributes: Category-specific raw fields (extension, tags, created,
            modified, starred, size, children, count, type)
    """

    category: str
    id: str
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    icon_default: Optional[str] = None
    attributes: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", raw_value(self.category))

    @property
    def has_override(self) -> bool:
        """True if the item has its own icon or color."""
        return bool(self.icon or self.color)


class AttributeSet(Mapping):
    """Typed attribute values of one item, keyed by source name.

    Lookups through ``value()`` never fail: sources that were not resolved
    for the item yield ``ABSENT``.
    """

    def __init__(self, category: Any, values: Optional[Mapping[Any, Any]] = None):
        self.category = raw_value(category)
        self._values: Dict[str, Any] = {}
        for key, value in (values or {}).items():
            if value is ABSENT:
                continue
            self._values[raw_value(key)] = value

    def value(self, source: Any) -> Any:
        """Get the value for a source, or ABSENT."""
        key = raw_value(source)
        return self._values.get(key, ABSENT)

    def __getitem__(self, source: Any) -> Any:
        key = raw_value(source)
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"AttributeSet({self.category!r}, {self._values!r})"


class ItemProvider(ABC):
    """Supplies items on demand; implemented by per-category managers."""

    @abstractmethod
    def get_item(self, category: Any, item_id: str) -> Optional[Item]:
        """Look up one item, or None if the provider does not know it."""

    @abstractmethod
    def iter_items(self, category: Any) -> Iterator[Item]:
        """Iterate all currently known items of a category."""
