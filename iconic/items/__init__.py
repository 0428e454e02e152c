"""Iconic Items.

Vault entities and what the rule engine can see of them:
- Item / AttributeSet: item values and their resolved attributes
- AttributeResolver: per-category attribute extraction
- classify_suggestion: popover payload classification
- ItemIndex / VaultScanner: item providers
"""

from .models import (
    ABSENT,
    SOURCE_CLASSES,
    AttributeSet,
    ComparisonClass,
    Item,
    ItemKind,
    ItemProvider,
    Source,
    comparison_class,
    sources_for,
)
from .resolver import AttributeResolver
from .suggestions import UNKNOWN_TARGET, SuggestionTarget, classify_suggestion
from .vault import ItemIndex, VaultScanner

__all__ = [
    # Models
    "ABSENT",
    "SOURCE_CLASSES",
    "AttributeSet",
    "ComparisonClass",
    "Item",
    "ItemKind",
    "ItemProvider",
    "Source",
    "comparison_class",
    "sources_for",
    # Resolution
    "AttributeResolver",
    # Suggestions
    "SuggestionTarget",
    "UNKNOWN_TARGET",
    "classify_suggestion",
    # Providers
    "ItemIndex",
    "VaultScanner",
]
