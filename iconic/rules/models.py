#!/usr/bin/env python3
"""Rule and condition data models.

This module defines the vocabulary of the rule engine:
- Source: attributes a condition can read (defined with the items)
- Operator: comparisons a condition can apply
- Combinator: how a rule joins its conditions (ALL / ANY)
- Condition / Rule: immutable value objects persisted per category

Sources, operators and combinators are stored on conditions and rules as
their raw strings. A rule loaded from corrupted settings therefore keeps its
unknown values intact; the predicate evaluator maps them onto the closed
enumerations and treats anything unknown as non-matching.

Example:
    >>> rule = Rule.create(
    ...     name="Drafts",
    ...     category=Category.FILE,
    ...     icon="lucide-pencil",
    ...     conditions=[Condition(Source.NAME, Operator.MATCHES_REGEX, "^draft-")],
    ... )
    >>> rule.combinator
    'all'
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from iconic.core.constants import Category
from iconic.items.models import ComparisonClass, Source, comparison_class, raw_value
from iconic.items.resolver import to_bool

__all__ = [
    "Category",
    "Source",
    "ComparisonClass",
    "Operator",
    "Combinator",
    "CLASS_OPERATORS",
    "operators_for",
    "is_valid_pairing",
    "Condition",
    "Rule",
    "new_rule_id",
]


class Operator(str, Enum):
    """Comparison operators."""

    IS = "is"
    IS_NOT = "isNot"
    CONTAINS = "contains"
    DOES_NOT_CONTAIN = "doesNotContain"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    MATCHES_REGEX = "matchesRegex"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    GREATER_OR_EQUAL = "greaterOrEqual"
    LESS_OR_EQUAL = "lessOrEqual"

    @classmethod
    def parse(cls, value: Any) -> Optional["Operator"]:
        """Return the operator named by ``value``, or None if unknown."""
        try:
            return cls(value)
        except ValueError:
            return None


class Combinator(str, Enum):
    """Logical combination of a rule's conditions."""

    ALL = "all"  # Every condition must match
    ANY = "any"  # At least one condition must match

    @classmethod
    def parse(cls, value: Any) -> Optional["Combinator"]:
        """Return the combinator named by ``value``, or None if unknown."""
        try:
            return cls(value)
        except ValueError:
            return None


_ORDERING = (
    Operator.IS,
    Operator.IS_NOT,
    Operator.GREATER_THAN,
    Operator.LESS_THAN,
    Operator.GREATER_OR_EQUAL,
    Operator.LESS_OR_EQUAL,
)

# Legal operators per comparison class, in editor display order
CLASS_OPERATORS: Dict[ComparisonClass, Tuple[Operator, ...]] = {
    ComparisonClass.STRING: (
        Operator.IS,
        Operator.IS_NOT,
        Operator.CONTAINS,
        Operator.DOES_NOT_CONTAIN,
        Operator.STARTS_WITH,
        Operator.ENDS_WITH,
        Operator.MATCHES_REGEX,
    ),
    ComparisonClass.SET: (Operator.CONTAINS, Operator.DOES_NOT_CONTAIN),
    ComparisonClass.NUMBER: _ORDERING,
    ComparisonClass.DATE: _ORDERING,
    ComparisonClass.BOOLEAN: (Operator.IS,),
}


def operators_for(category: Any, source: Any) -> Tuple[Operator, ...]:
    """List the operators legal for a source within a category."""
    cls = comparison_class(category, source)
    if cls is None:
        return ()
    return CLASS_OPERATORS[cls]


def is_valid_pairing(category: Any, source: Any, operator: Any) -> bool:
    """Check that an operator belongs to the comparison class of its source."""
    parsed = Operator.parse(raw_value(operator))
    return parsed is not None and parsed in operators_for(category, source)


@dataclass(frozen=True)
class Condition:
    """A single (source, operator, value) predicate."""

    source: str  # Attribute to read (see Source)
    operator: str  # Comparison to apply (see Operator)
    value: str = ""  # Literal operand, always stored as text

    def __post_init__(self) -> None:
        object.__setattr__(self, "source", raw_value(self.source))
        object.__setattr__(self, "operator", raw_value(self.operator))
        value = raw_value(self.value)
        if value is None:
            value = ""
        elif isinstance(value, bool):
            value = "true" if value else "false"
        object.__setattr__(self, "value", str(value))

    def to_dict(self) -> Dict[str, str]:
        """Serialize to a plain mapping."""
        return {"source": self.source, "operator": self.operator, "value": self.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Condition":
        """Build a condition from a persisted mapping.

        Unknown sources or operators are kept verbatim.

        Args:
            data: Mapping with source, operator and value keys

        Returns:
            Condition instance

        Raises:
            ValueError: If data is not a mapping
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Condition must be a mapping, got {type(data).__name__}")
        return cls(
            source=str(data.get("source", "")),
            operator=str(data.get("operator", "")),
            value=data.get("value", ""),
        )


def new_rule_id() -> str:
    """Mint a fresh rule id."""
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class Rule:
    """A named, ordered set of conditions that assigns an icon and color.

    Rules are immutable. Editing a rule means building a new value with the
    same id (``dataclasses.replace``) and saving it through the rule store.
    """

    id: str
    name: str
    category: str
    icon: Optional[str] = None
    color: Optional[str] = None
    combinator: str = Combinator.ALL.value
    conditions: Tuple[Condition, ...] = field(default_factory=tuple)
    enabled: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", raw_value(self.category))
        object.__setattr__(self, "combinator", raw_value(self.combinator))
        object.__setattr__(self, "conditions", tuple(self.conditions))

    @classmethod
    def create(
        cls,
        name: str,
        category: Any,
        icon: Optional[str] = None,
        color: Optional[str] = None,
        combinator: Any = Combinator.ALL,
        conditions: Iterable[Condition] = (),
        enabled: bool = True,
    ) -> "Rule":
        """Create a new rule with a freshly minted id."""
        return cls(
            id=new_rule_id(),
            name=name,
            category=category,
            icon=icon,
            color=color,
            combinator=combinator,
            conditions=tuple(conditions),
            enabled=enabled,
        )

    @property
    def regex_patterns(self) -> List[str]:
        """Patterns of this rule's matchesRegex conditions."""
        return [c.value for c in self.conditions if c.operator == Operator.MATCHES_REGEX.value]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a plain, YAML-friendly mapping."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "icon": self.icon,
            "color": self.color,
            "combinator": self.combinator,
            "conditions": [c.to_dict() for c in self.conditions],
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], category: Optional[Any] = None) -> "Rule":
        """Build a rule from a persisted mapping.

        Args:
            data: Persisted rule record
            category: Category the record was stored under; takes precedence
                over a category recorded inside the record

        Returns:
            Rule instance

        Raises:
            ValueError: If the record is not a mapping or has no id
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Rule must be a mapping, got {type(data).__name__}")

        rule_id = data.get("id")
        if rule_id is None or str(rule_id) == "":
            raise ValueError("Rule record has no id")

        raw_conditions = data.get("conditions") or []
        if not isinstance(raw_conditions, list):
            raise ValueError(f"Rule {rule_id} conditions must be a list")

        return cls(
            id=str(rule_id),
            name=str(data.get("name", "")),
            category=raw_value(category) if category is not None else str(data.get("category", "")),
            icon=data.get("icon"),
            color=data.get("color"),
            combinator=str(data.get("combinator", Combinator.ALL.value)),
            # A non-mapping entry becomes an empty condition that never matches
            conditions=tuple(
                Condition.from_dict(c) if isinstance(c, Mapping) else Condition("", "")
                for c in raw_conditions
            ),
            enabled=to_bool(data.get("enabled"), default=True),
        )
