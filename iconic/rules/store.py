#!/usr/bin/env python3
"""Ordered per-category rule storage.

This module provides the RuleStore:
- One ordered rule list per category; order is the priority chain
- Upsert by id (new rules append, edited rules keep their position)
- Delete and reorder without touching other rules' ids or order
- Immutable tuple snapshots; mutations build and swap a new tuple
- Eviction of stale compiled regexes when a rule changes or disappears

The store never sorts. Evaluation order is exactly the stored order.

Example:
    >>> store = RuleStore()
    >>> store.save_rule("file", Rule.create("Drafts", "file", conditions=[...]))
    True
    >>> [r.name for r in store.get_rules("file")]
    ['Drafts']
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from iconic.core.constants import ErrorCode
from iconic.infrastructure.logger import Logger, get_logger
from iconic.items.models import raw_value
from iconic.rules.models import Rule
from iconic.rules.patterns import RegexCache


class RuleStoreError(Exception):
    """Raised when the store is used incorrectly."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize RuleStoreError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.error_code = error_code


class RuleStore:
    """Ordered rule lists keyed by category."""

    def __init__(self, regex_cache: Optional[RegexCache] = None, logger: Optional[Logger] = None):
        """Initialize rule store.

        Args:
            regex_cache: Regex cache to evict stale patterns from
            logger: Logger instance
        """
        self._rules: Dict[str, Tuple[Rule, ...]] = {}
        self._regex_cache = regex_cache
        self._logger = logger or get_logger()

    def get_rules(self, category: Any) -> Tuple[Rule, ...]:
        """Get a category's rules in evaluation order.

        Args:
            category: Category (enum member or raw string)

        Returns:
            Immutable snapshot; empty for a category without rules
        """
        return self._rules.get(raw_value(category), ())

    def get_rule(self, category: Any, rule_id: str) -> Optional[Rule]:
        """Look up a rule by id."""
        for rule in self.get_rules(category):
            if rule.id == rule_id:
                return rule
        return None

    def categories(self) -> List[str]:
        """Categories that currently hold rules."""
        return [category for category, rules in self._rules.items() if rules]

    def save_rule(self, category: Any, rule: Rule, position: Optional[int] = None) -> bool:
        """Insert or replace a rule.

        A rule whose id is new is appended, or inserted at ``position``. A
        rule whose id already exists replaces the stored one in place and
        ``position`` is ignored.

        Args:
            category: Category to store the rule under
            rule: Rule to save
            position: Insertion index for new rules (clamped to the list)

        Returns:
            True if the stored content changed

        Raises:
            RuleStoreError: If the rule belongs to another category
        """
        category = raw_value(category)
        if rule.category != category:
            raise RuleStoreError(
                f"Rule {rule.id} has category {rule.category!r}, cannot store under {category!r}",
                ErrorCode.CONFLICT,
            )

        rules = list(self.get_rules(category))
        for index, existing in enumerate(rules):
            if existing.id == rule.id:
                if existing == rule:
                    return False
                rules[index] = rule
                self._swap(category, rules)
                self._evict_patterns(existing, keep=rule)
                self._logger.debug("Rule updated", category=category, rule=rule.id)
                return True

        if position is None:
            rules.append(rule)
        else:
            rules.insert(max(0, min(position, len(rules))), rule)
        self._swap(category, rules)
        self._logger.debug("Rule added", category=category, rule=rule.id)
        return True

    def delete_rule(self, category: Any, rule_id: str) -> bool:
        """Remove a rule by id.

        Returns:
            True if a rule was removed
        """
        category = raw_value(category)
        rules = list(self.get_rules(category))
        for index, existing in enumerate(rules):
            if existing.id == rule_id:
                del rules[index]
                self._swap(category, rules)
                self._evict_patterns(existing)
                self._logger.debug("Rule deleted", category=category, rule=rule_id)
                return True
        return False

    def reorder(self, category: Any, from_index: int, to_index: int) -> bool:
        """Move the rule at ``from_index`` so it ends up at ``to_index``.

        Returns:
            True if the order changed

        Raises:
            RuleStoreError: If either index is out of range
        """
        category = raw_value(category)
        rules = list(self.get_rules(category))
        for index in (from_index, to_index):
            if not 0 <= index < len(rules):
                raise RuleStoreError(
                    f"Index {index} out of range for {len(rules)} {category} rules",
                    ErrorCode.NOT_FOUND,
                )

        if from_index == to_index:
            return False

        rules.insert(to_index, rules.pop(from_index))
        self._swap(category, rules)
        self._logger.debug("Rule moved", category=category, source=from_index, target=to_index)
        return True

    def load(self, rules_by_category: Mapping[Any, Iterable[Rule]]) -> None:
        """Replace all stored rules.

        Args:
            rules_by_category: Ordered rules per category
        """
        previous = self._rules
        self._rules = {
            raw_value(category): tuple(rules) for category, rules in rules_by_category.items()
        }
        if self._regex_cache is not None:
            for rules in previous.values():
                for rule in rules:
                    self._evict_patterns(rule)

    def dump(self) -> Dict[str, List[Dict[str, Any]]]:
        """Serialize all rules, preserving order."""
        return {
            category: [rule.to_dict() for rule in rules] for category, rules in self._rules.items()
        }

    def _swap(self, category: str, rules: List[Rule]) -> None:
        self._rules[category] = tuple(rules)

    def _evict_patterns(self, old: Rule, keep: Optional[Rule] = None) -> None:
        if self._regex_cache is None:
            return
        kept = set(keep.regex_patterns) if keep is not None else set()
        for pattern in old.regex_patterns:
            if pattern not in kept:
                self._regex_cache.invalidate(pattern)

    def __len__(self) -> int:
        return sum(len(rules) for rules in self._rules.values())
