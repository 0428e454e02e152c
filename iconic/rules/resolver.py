#!/usr/bin/env python3
"""Ruling resolution: which rule governs an item, and what it looks like.

This module is the public entry point of the rule engine:
- check_ruling(category, item_id): first stored rule that matches
- effective_appearance(): icon and color after override precedence
- explain(): whether a selection's look comes from per-item overrides or
  from a rule (the picker's override/overrule reminder)

An item's own icon or color always wins over a matching rule. The rule is
still reported so collaborators can tell the user it is being overridden.

Example:
    >>> resolver = RulingResolver(store, provider)
    >>> resolver.check_ruling("file", "note.md").name
    'Starred notes'
    >>> resolver.effective_appearance("file", "note.md").icon
    'star'
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from iconic.core.constants import DEFAULT_ICONS, Category
from iconic.infrastructure.logger import Logger, get_logger
from iconic.items.models import Item, ItemProvider, raw_value
from iconic.items.resolver import AttributeResolver
from iconic.rules.matcher import RuleMatcher
from iconic.rules.models import Rule
from iconic.rules.store import RuleStore


class RulingKind(Enum):
    """How a matching rule relates to the items it matches."""

    OVERRIDE = "override"  # Items' own icon/color hide the rule
    OVERRULE = "overrule"  # The rule decides the look


@dataclass(frozen=True)
class Appearance:
    """Resolved look of one item."""

    icon: Optional[str]
    color: Optional[str]
    rule: Optional[Rule] = None  # Matching rule, even when overridden
    overridden: bool = False  # True if the item's own values beat the rule


@dataclass(frozen=True)
class RulingExplanation:
    """Summary of the rule governing a selection."""

    rule: Rule
    kind: RulingKind
    item_count: int  # Number of selected items the rule matches


def _default_icon(item: Item) -> Optional[str]:
    if item.icon_default:
        return item.icon_default
    category = Category.parse(item.category)
    return DEFAULT_ICONS.get(category) if category is not None else None


class RulingResolver:
    """Finds the governing rule for items and applies override precedence."""

    def __init__(
        self,
        store: RuleStore,
        provider: ItemProvider,
        attribute_resolver: Optional[AttributeResolver] = None,
        matcher: Optional[RuleMatcher] = None,
        logger: Optional[Logger] = None,
    ):
        """Initialize ruling resolver.

        Args:
            store: Rule store to scan
            provider: Source of items by (category, id)
            attribute_resolver: Attribute resolver
            matcher: Rule matcher
            logger: Logger instance
        """
        self._logger = logger or get_logger()
        self.store = store
        self.provider = provider
        self.attribute_resolver = attribute_resolver or AttributeResolver()
        self.matcher = matcher or RuleMatcher(logger=self._logger)

    def check_ruling(self, category: Any, item_id: str) -> Optional[Rule]:
        """Get the first rule that matches an item.

        Args:
            category: Item category
            item_id: Item id within the category

        Returns:
            Winning rule, or None for an unknown item or when nothing matches
        """
        if Category.parse(raw_value(category)) is None:
            return None
        item = self.provider.get_item(category, item_id)
        if item is None:
            self._logger.debug("Unknown item", category=category, item=item_id)
            return None
        return self.check_item(item)

    def check_item(self, item: Item) -> Optional[Rule]:
        """Get the first rule that matches an item already in hand."""
        rules = self.store.get_rules(item.category)
        if not rules:
            return None

        attributes = self.attribute_resolver.resolve(item)
        for rule in rules:
            if self.matcher.matches(rule, attributes):
                return rule
        return None

    def effective_appearance(self, category: Any, item_id: str) -> Appearance:
        """Resolve the icon and color an item should be shown with.

        Args:
            category: Item category
            item_id: Item id within the category

        Returns:
            Appearance; an unknown item gets the category default icon
        """
        item = self.provider.get_item(category, item_id)
        if item is None:
            parsed = Category.parse(raw_value(category))
            return Appearance(DEFAULT_ICONS.get(parsed) if parsed is not None else None, None)
        return self.appearance_of(item)

    def appearance_of(self, item: Item) -> Appearance:
        """Resolve the appearance of an item already in hand."""
        rule = self.check_item(item)

        if item.has_override:
            return Appearance(
                icon=item.icon or _default_icon(item),
                color=item.color,
                rule=rule,
                overridden=rule is not None,
            )

        if rule is not None:
            return Appearance(icon=rule.icon or _default_icon(item), color=rule.color, rule=rule)

        return Appearance(icon=_default_icon(item), color=None)

    def explain(self, items: Iterable[Item]) -> Optional[RulingExplanation]:
        """Explain which rule governs a selection and how.

        The first matching rule in selection order is reported. The kind is
        OVERRIDE only if every matched item has its own icon or color; a
        single matched item without one makes it OVERRULE.

        Args:
            items: Selected items, in selection order

        Returns:
            Explanation, or None if no rule matches any item
        """
        first_rule: Optional[Rule] = None
        matched = 0
        overruled = False

        for item in items:
            rule = self.check_item(item)
            if rule is None:
                continue
            matched += 1
            if first_rule is None:
                first_rule = rule
            if not item.has_override:
                overruled = True

        if first_rule is None:
            return None

        kind = RulingKind.OVERRULE if overruled else RulingKind.OVERRIDE
        return RulingExplanation(rule=first_rule, kind=kind, item_count=matched)
