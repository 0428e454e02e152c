#!/usr/bin/env python3
"""Rule preview for the rule editor.

Lists the items a rule's conditions match, so a user can check a rule while
editing it. Each match also reports whether an earlier rule in the store
already claims the item (first match wins, so the previewed rule would not
apply there).
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from iconic.infrastructure.logger import Logger, get_logger
from iconic.items.models import Item, ItemProvider
from iconic.items.resolver import AttributeResolver
from iconic.rules.matcher import RuleMatcher
from iconic.rules.models import Rule
from iconic.rules.store import RuleStore


@dataclass(frozen=True)
class PreviewMatch:
    """One item matched by a previewed rule."""

    item: Item
    winner: Optional[Rule] = None  # Earlier rule that takes precedence

    @property
    def shadowed(self) -> bool:
        """True if an earlier rule wins for this item."""
        return self.winner is not None


class RuleChecker:
    """Previews which items a rule would affect."""

    def __init__(
        self,
        store: RuleStore,
        provider: ItemProvider,
        attribute_resolver: Optional[AttributeResolver] = None,
        matcher: Optional[RuleMatcher] = None,
        logger: Optional[Logger] = None,
    ):
        self._logger = logger or get_logger()
        self.store = store
        self.provider = provider
        self.attribute_resolver = attribute_resolver or AttributeResolver()
        self.matcher = matcher or RuleMatcher(logger=self._logger)

    def _earlier_rules(self, rule: Rule) -> Tuple[Rule, ...]:
        # An unsaved rule would be appended, so every stored rule precedes it
        rules = self.store.get_rules(rule.category)
        for index, stored in enumerate(rules):
            if stored.id == rule.id:
                return rules[:index]
        return rules

    def preview(self, rule: Rule) -> List[PreviewMatch]:
        """List the items a rule's conditions match.

        The rule's ``enabled`` flag is ignored so a disabled rule can be
        checked before turning it on.

        Args:
            rule: Rule to preview (saved or not)

        Returns:
            Matches in provider order
        """
        earlier = self._earlier_rules(rule)
        matches: List[PreviewMatch] = []

        for item in self.provider.iter_items(rule.category):
            attributes = self.attribute_resolver.resolve(item)
            if not self.matcher.conditions_match(rule, attributes):
                continue
            winner = next((r for r in earlier if self.matcher.matches(r, attributes)), None)
            matches.append(PreviewMatch(item=item, winner=winner))

        self._logger.debug(
            "Rule preview",
            rule=rule.id,
            matches=len(matches),
            shadowed=sum(1 for m in matches if m.shadowed),
        )
        return matches
