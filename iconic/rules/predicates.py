#!/usr/bin/env python3
"""Predicate evaluation for rule conditions.

This module evaluates one Condition against a resolved AttributeSet:
- String comparisons (exact, substring, prefix, suffix, regex)
- Set membership for tags ('#' prefix ignored on both sides)
- Ordered comparisons for numbers and dates (ms since epoch)
- Boolean equality

Evaluation never raises. Unknown sources or operators, operators outside
their source's comparison class, ABSENT attributes and unparsable operands
all evaluate to False and are logged at debug level.

Example:
    >>> evaluator = PredicateEvaluator()
    >>> attrs = AttributeResolver().resolve(Item("file", "draft-intro.md", "draft-intro.md"))
    >>> evaluator.evaluate(Condition("name", "matchesRegex", "^draft-"), attrs)
    True
"""

import math
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from iconic.infrastructure.logger import Logger, get_logger
from iconic.items.models import ABSENT, AttributeSet
from iconic.items.resolver import normalize_tag, parse_bool
from iconic.rules.models import ComparisonClass, Condition, Operator, comparison_class, operators_for
from iconic.rules.patterns import RegexCache

DAY_MS = 86_400_000

_INTEGER = re.compile(r"^[+-]?\d+$")
_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Inclusive [start, end] millisecond interval denoted by a date operand
Interval = Tuple[int, int]


def parse_number(text: str) -> Optional[float]:
    """Parse a finite number, or None."""
    try:
        number = float(text.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_date(text: str) -> Optional[Interval]:
    """Parse a date operand into an inclusive millisecond interval.

    Accepts an integer millisecond timestamp, an ISO-8601 date (the whole UTC
    day) or an ISO-8601 datetime (naive values read as UTC).

    Returns:
        (start, end) in ms since epoch, or None if unparsable
    """
    text = text.strip()
    if not text:
        return None

    if _INTEGER.match(text):
        stamp = int(text)
        return stamp, stamp

    try:
        if _DATE_ONLY.match(text):
            day = datetime.combine(date.fromisoformat(text), datetime.min.time(), timezone.utc)
            start = int(day.timestamp() * 1000)
            return start, start + DAY_MS - 1

        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        moment = datetime.fromisoformat(text)
    except ValueError:
        return None

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    stamp = int((moment - datetime(1970, 1, 1, tzinfo=timezone.utc)) / timedelta(milliseconds=1))
    return stamp, stamp


def _compare_string(operator: Operator, actual: str, expected: str, regex: RegexCache) -> bool:
    if operator == Operator.IS:
        return actual == expected
    if operator == Operator.IS_NOT:
        return actual != expected
    if operator == Operator.MATCHES_REGEX:
        return regex.search(expected, actual)

    actual_folded = actual.casefold()
    expected_folded = expected.casefold()
    if operator == Operator.CONTAINS:
        return expected_folded in actual_folded
    if operator == Operator.DOES_NOT_CONTAIN:
        return expected_folded not in actual_folded
    if operator == Operator.STARTS_WITH:
        return actual_folded.startswith(expected_folded)
    if operator == Operator.ENDS_WITH:
        return actual_folded.endswith(expected_folded)
    return False


def _compare_interval(operator: Operator, actual: float, start: float, end: float) -> bool:
    if operator == Operator.IS:
        return start <= actual <= end
    if operator == Operator.IS_NOT:
        return not start <= actual <= end
    if operator == Operator.LESS_THAN:
        return actual < start
    if operator == Operator.GREATER_THAN:
        return actual > end
    if operator == Operator.GREATER_OR_EQUAL:
        return actual >= start
    if operator == Operator.LESS_OR_EQUAL:
        return actual <= end
    return False


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class PredicateEvaluator:
    """Evaluates single conditions against attribute sets.

    Holds no state besides the shared regex cache; safe to reuse for any
    number of evaluations.
    """

    def __init__(self, regex_cache: Optional[RegexCache] = None, logger: Optional[Logger] = None):
        """Initialize predicate evaluator.

        Args:
            regex_cache: Cache for matchesRegex patterns (a private one is
                created when omitted)
            logger: Logger instance
        """
        self._logger = logger or get_logger()
        self.regex_cache = regex_cache or RegexCache(logger=self._logger)
        self._comparators: Dict[ComparisonClass, Callable[[Operator, Any, str], bool]] = {
            ComparisonClass.STRING: self._evaluate_string,
            ComparisonClass.SET: self._evaluate_set,
            ComparisonClass.NUMBER: self._evaluate_number,
            ComparisonClass.DATE: self._evaluate_date,
            ComparisonClass.BOOLEAN: self._evaluate_boolean,
        }

    def evaluate(self, condition: Condition, attributes: AttributeSet) -> bool:
        """Evaluate a condition.

        Args:
            condition: Condition to test
            attributes: Resolved attributes of the item under test

        Returns:
            True only if the condition is well-formed, applicable to the
            item's category, and satisfied
        """
        operator = Operator.parse(condition.operator)
        cls = comparison_class(attributes.category, condition.source)
        if operator is None or cls is None:
            self._logger.debug(
                "Condition not applicable",
                category=attributes.category,
                source=condition.source,
                operator=condition.operator,
            )
            return False

        if operator not in operators_for(attributes.category, condition.source):
            self._logger.debug(
                "Operator not valid for source",
                source=condition.source,
                operator=condition.operator,
            )
            return False

        actual = attributes.value(condition.source)
        if actual is ABSENT:
            return False

        return self._comparators[cls](operator, actual, condition.value)

    def _evaluate_string(self, operator: Operator, actual: Any, expected: str) -> bool:
        if not isinstance(actual, str):
            self._logger.debug("String attribute has unexpected type", type=type(actual).__name__)
            return False
        return _compare_string(operator, actual, expected, self.regex_cache)

    def _evaluate_set(self, operator: Operator, actual: Any, expected: str) -> bool:
        if not isinstance(actual, (set, frozenset)):
            self._logger.debug("Set attribute has unexpected type", type=type(actual).__name__)
            return False

        wanted = normalize_tag(expected)
        found = any(isinstance(m, str) and normalize_tag(m) == wanted for m in actual)
        if operator == Operator.CONTAINS:
            return found
        if operator == Operator.DOES_NOT_CONTAIN:
            return not found
        return False

    def _evaluate_number(self, operator: Operator, actual: Any, expected: str) -> bool:
        number = parse_number(expected)
        if number is None or not _is_number(actual):
            self._logger.debug("Unparsable number operand", value=expected)
            return False
        return _compare_interval(operator, actual, number, number)

    def _evaluate_date(self, operator: Operator, actual: Any, expected: str) -> bool:
        interval = parse_date(expected)
        if interval is None or not _is_number(actual):
            self._logger.debug("Unparsable date operand", value=expected)
            return False
        start, end = interval
        return _compare_interval(operator, actual, start, end)

    def _evaluate_boolean(self, operator: Operator, actual: Any, expected: str) -> bool:
        wanted = parse_bool(expected)
        if wanted is None or not isinstance(actual, bool):
            self._logger.debug("Unparsable boolean operand", value=expected)
            return False
        return operator == Operator.IS and actual is wanted
