"""
Iconic Rules: Rule Name Suggestions.

Suggests names of existing rules while a rule is being named in the editor,
so rules that belong together can share a name. Matching is fuzzy: the
query's characters must appear in the name in order (case-insensitive).
Results are ranked by similarity, then alphabetically.
"""

from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Any, List, Optional

from iconic.core.constants import Limits
from iconic.rules.store import RuleStore


@dataclass(frozen=True)
class NameSuggestion:
    """A suggested rule name and its relevance."""

    text: str
    score: float


def fuzzy_match(query: str, candidate: str) -> bool:
    """Check that every query character occurs in ``candidate``, in order."""
    remaining = iter(candidate.casefold())
    return all(char in remaining for char in query.casefold() if not char.isspace())


def suggest_rule_names(
    store: RuleStore,
    category: Any,
    query: str,
    current_name: Optional[str] = None,
    limit: int = Limits.MAX_NAME_SUGGESTIONS,
) -> List[NameSuggestion]:
    """Suggest existing rule names for a category.

    Args:
        store: Rule store to draw names from
        category: Category of the rule being edited
        query: Text typed so far
        current_name: Name already in the input (never suggested)
        limit: Maximum number of suggestions

    Returns:
        Distinct names, best match first
    """
    names = {rule.name for rule in store.get_rules(category) if rule.name}
    folded_query = query.casefold()

    suggestions = [
        NameSuggestion(name, SequenceMatcher(None, folded_query, name.casefold()).ratio())
        for name in names
        if name != current_name and fuzzy_match(query, name)
    ]
    suggestions.sort(key=lambda s: (-s.score, s.text.casefold(), s.text))
    return suggestions[:limit]
