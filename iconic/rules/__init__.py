"""Iconic Rules System.

This module provides the rule evaluation engine:
- PredicateEvaluator: single condition against an item's attributes
- RuleMatcher: ALL / ANY combination of a rule's conditions
- RuleStore: ordered per-category rule lists
- RulingResolver: first matching rule and override precedence
- RuleRepository: YAML persistence
- RuleChecker, ReminderRenderer, suggest_rule_names: editor support

Rules assign an icon and color to every item they match. The first matching
rule in stored order wins; an item's own icon or color wins over any rule.
"""

from .checker import PreviewMatch, RuleChecker
from .matcher import RuleMatcher
from .models import Combinator, Condition, Operator, Rule, is_valid_pairing, operators_for
from .patterns import PathFilter, RegexCache
from .persistence import PersistenceError, RuleRepository
from .predicates import PredicateEvaluator
from .reminder import Reminder, ReminderError, ReminderRenderer
from .resolver import Appearance, RulingExplanation, RulingKind, RulingResolver
from .store import RuleStore, RuleStoreError
from .suggest import NameSuggestion, suggest_rule_names

__all__ = [
    # Models
    "Operator",
    "Combinator",
    "Condition",
    "Rule",
    "operators_for",
    "is_valid_pairing",
    # Evaluation
    "RegexCache",
    "PathFilter",
    "PredicateEvaluator",
    "RuleMatcher",
    # Storage
    "RuleStore",
    "RuleStoreError",
    "RuleRepository",
    "PersistenceError",
    # Resolution
    "RulingResolver",
    "RulingKind",
    "RulingExplanation",
    "Appearance",
    # Editor support
    "RuleChecker",
    "PreviewMatch",
    "ReminderRenderer",
    "Reminder",
    "ReminderError",
    "NameSuggestion",
    "suggest_rule_names",
]
