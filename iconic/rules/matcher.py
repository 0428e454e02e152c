#!/usr/bin/env python3
"""Rule matching.

Combines a rule's condition verdicts into a single verdict:
- ALL short-circuits on the first unsatisfied condition
- ANY short-circuits on the first satisfied condition
- Rules without conditions, disabled rules and rules with an unknown
  combinator never match
"""

from typing import Optional

from iconic.infrastructure.logger import Logger, get_logger
from iconic.items.models import AttributeSet
from iconic.rules.models import Combinator, Rule
from iconic.rules.predicates import PredicateEvaluator


class RuleMatcher:
    """Decides whether a rule accepts an item's attributes."""

    def __init__(self, evaluator: Optional[PredicateEvaluator] = None, logger: Optional[Logger] = None):
        """Initialize rule matcher.

        Args:
            evaluator: Predicate evaluator for single conditions
            logger: Logger instance
        """
        self._logger = logger or get_logger()
        self.evaluator = evaluator or PredicateEvaluator(logger=self._logger)

    def matches(self, rule: Rule, attributes: AttributeSet) -> bool:
        """Check if an enabled rule matches.

        Args:
            rule: Rule to test
            attributes: Resolved attributes of the item under test

        Returns:
            True if the rule is enabled and its conditions are satisfied
        """
        if not rule.enabled:
            return False
        return self.conditions_match(rule, attributes)

    def conditions_match(self, rule: Rule, attributes: AttributeSet) -> bool:
        """Check a rule's conditions, regardless of whether it is enabled."""
        if not rule.conditions:
            return False

        combinator = Combinator.parse(rule.combinator)
        if combinator is None:
            self._logger.debug("Unknown combinator", rule=rule.id, combinator=rule.combinator)
            return False

        verdicts = (self.evaluator.evaluate(c, attributes) for c in rule.conditions)
        if combinator == Combinator.ALL:
            return all(verdicts)
        return any(verdicts)
