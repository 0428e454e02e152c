"""
Iconic Core: Input Validators.

Editor-side validation of rules, conditions, icons and colors. The rule
engine itself never rejects input (a malformed condition simply does not
match); these checks let an editor refuse input before it is saved.

All validators return a truthy value on success and raise ValidationError
otherwise.
"""
import re
from typing import Any, Pattern

from iconic.core.constants import NAMED_COLORS, Category, ErrorCode, Limits
from iconic.items.models import ComparisonClass, comparison_class
from iconic.items.resolver import parse_bool
from iconic.rules.models import Combinator, Condition, Operator, Rule, is_valid_pairing
from iconic.rules.predicates import parse_date, parse_number

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")

MAX_ICON_LENGTH = 200


class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.error_code = error_code


def validate_regex(pattern: str) -> Pattern[str]:
    """Validate and compile a regular expression.

    Args:
        pattern: Regex pattern

    Returns:
        Compiled regex pattern

    Raises:
        ValidationError: If pattern is invalid
    """
    if len(pattern) > Limits.MAX_REGEX_LENGTH:
        raise ValidationError(f"Regex exceeds maximum length ({Limits.MAX_REGEX_LENGTH})")
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValidationError(f"Invalid regex pattern: {e}")


def validate_color(color: Any) -> bool:
    """Validate a color: a hex value (#rgb, #rgba, #rrggbb, #rrggbbaa) or a named color.

    Raises:
        ValidationError: If color is not recognized
    """
    if not isinstance(color, str):
        raise ValidationError(f"Color must be string, got {type(color).__name__}")
    if color in NAMED_COLORS or _HEX_COLOR.match(color):
        return True
    raise ValidationError(f"Invalid color: {color!r}")


def validate_icon(icon: Any) -> bool:
    """Validate an icon id (e.g. "lucide-star") or emoji.

    Raises:
        ValidationError: If icon is empty, too long or contains whitespace
    """
    if not isinstance(icon, str):
        raise ValidationError(f"Icon must be string, got {type(icon).__name__}")
    if not icon:
        raise ValidationError("Icon cannot be empty")
    if len(icon) > MAX_ICON_LENGTH:
        raise ValidationError(f"Icon exceeds maximum length ({MAX_ICON_LENGTH})")
    if any(c.isspace() or ord(c) < 32 for c in icon):
        raise ValidationError(f"Invalid icon: {icon!r}")
    return True


def validate_condition(condition: Condition, category: Any) -> bool:
    """Validate a condition for a category.

    Args:
        condition: Condition to validate
        category: Category of the rule holding the condition

    Returns:
        True if valid

    Raises:
        ValidationError: If the source, operator or value is invalid
    """
    cls = comparison_class(category, condition.source)
    if cls is None:
        raise ValidationError(f"Source {condition.source!r} not available for {category}")

    if Operator.parse(condition.operator) is None:
        raise ValidationError(f"Unknown operator: {condition.operator!r}")

    if not is_valid_pairing(category, condition.source, condition.operator):
        raise ValidationError(
            f"Operator {condition.operator!r} cannot be used with {condition.source!r}"
        )

    value = condition.value
    if len(value) > Limits.MAX_CONDITION_VALUE_LENGTH:
        raise ValidationError(
            f"Condition value exceeds maximum length ({Limits.MAX_CONDITION_VALUE_LENGTH})"
        )

    if condition.operator == Operator.MATCHES_REGEX.value:
        validate_regex(value)
    elif cls == ComparisonClass.NUMBER and parse_number(value) is None:
        raise ValidationError(f"Not a number: {value!r}")
    elif cls == ComparisonClass.DATE and parse_date(value) is None:
        raise ValidationError(f"Not a date: {value!r}")
    elif cls == ComparisonClass.BOOLEAN and parse_bool(value) is None:
        raise ValidationError(f"Expected true or false, got {value!r}")

    return True


def validate_rule(rule: Rule) -> bool:
    """Validate a rule before saving it.

    Args:
        rule: Rule to validate

    Returns:
        True if valid

    Raises:
        ValidationError: If any part of the rule is invalid
    """
    if not rule.id:
        raise ValidationError("Rule must have an id")

    if not rule.name.strip():
        raise ValidationError("Rule name cannot be empty")
    if len(rule.name) > Limits.MAX_RULE_NAME_LENGTH:
        raise ValidationError(f"Rule name exceeds maximum length ({Limits.MAX_RULE_NAME_LENGTH})")

    if Category.parse(rule.category) is None:
        raise ValidationError(f"Unknown category: {rule.category!r}")

    if Combinator.parse(rule.combinator) is None:
        raise ValidationError(f"Unknown combinator: {rule.combinator!r}")

    if rule.icon is not None:
        validate_icon(rule.icon)
    if rule.color is not None:
        validate_color(rule.color)

    if len(rule.conditions) > Limits.MAX_CONDITIONS_PER_RULE:
        raise ValidationError(
            f"Rule has too many conditions (max {Limits.MAX_CONDITIONS_PER_RULE})"
        )

    for i, condition in enumerate(rule.conditions):
        try:
            validate_condition(condition, rule.category)
        except ValidationError as e:
            raise ValidationError(f"Condition {i}: {e}")

    return True
