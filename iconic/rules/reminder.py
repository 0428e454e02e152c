#!/usr/bin/env python3
"""Override and overrule reminders using Jinja2.

When the icon picker opens for items governed by a rule, it shows a short
callout: either the rule decides the look (overrule) or the items' own
icon/color hide the rule (override). This module renders that callout from
a RulingExplanation:
- Separate wording for one item and for a selection
- HTML output with autoescaping (rule names are user input)
- Templates replaceable per message

Example:
    >>> renderer = ReminderRenderer()
    >>> reminder = renderer.render(explanation, selection_size=1)
    >>> reminder.html
    'This icon is overruled by the rule <a class="iconic-rule-link" ...>Drafts</a>.'
"""

from dataclasses import dataclass
from typing import Dict, Optional

import jinja2

from iconic.core.constants import ErrorCode
from iconic.rules.resolver import RulingExplanation, RulingKind

# Callout color and icon for multi-item selections
SELECTION_COLOR = "gray"
SELECTION_ICON = "lucide-book-image"

_RULE_LINK = '<a class="iconic-rule-link" data-rule-id="{{ rule.id }}">{{ rule.name }}</a>'

DEFAULT_TEMPLATES: Dict[str, str] = {
    "overrule": "This icon is overruled by the rule " + _RULE_LINK + ".",
    "override": "This icon overrides the rule " + _RULE_LINK + ".",
    "overrule_selection": (
        "Some of these icons are overruled by rules"
        "{% if count > 1 %} ({{ count }} of {{ selected }} items){% endif %}."
    ),
    "override_selection": (
        "These icons override rules"
        "{% if count > 1 %} ({{ count }} of {{ selected }} items){% endif %}."
    ),
}


class ReminderError(Exception):
    """Raised when a reminder template cannot be compiled or rendered."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        super().__init__(message)
        self.error_code = error_code


@dataclass(frozen=True)
class Reminder:
    """Rendered callout."""

    html: str
    color: Optional[str]  # Callout color
    icon: Optional[str]  # Callout icon


class ReminderRenderer:
    """Renders override/overrule callouts."""

    def __init__(self, templates: Optional[Dict[str, str]] = None):
        """Initialize reminder renderer.

        Args:
            templates: Replacement templates keyed by message name
                (overrule, override, overrule_selection, override_selection)

        Raises:
            ReminderError: If a template has invalid syntax or an unknown name
        """
        self._env = jinja2.Environment(autoescape=True, undefined=jinja2.StrictUndefined)
        sources = dict(DEFAULT_TEMPLATES)
        for name, source in (templates or {}).items():
            if name not in DEFAULT_TEMPLATES:
                raise ReminderError(f"Unknown reminder template: {name}")
            sources[name] = source

        self._templates: Dict[str, jinja2.Template] = {}
        for name, source in sources.items():
            try:
                self._templates[name] = self._env.from_string(source)
            except jinja2.TemplateSyntaxError as e:
                raise ReminderError(f"Invalid reminder template {name}: {e}")

    def render(self, explanation: RulingExplanation, selection_size: int = 1) -> Reminder:
        """Render the callout for an explanation.

        Args:
            explanation: Result of RulingResolver.explain()
            selection_size: Number of selected items

        Returns:
            Rendered reminder

        Raises:
            ReminderError: If rendering fails
        """
        name = "override" if explanation.kind == RulingKind.OVERRIDE else "overrule"
        single = selection_size <= 1
        if not single:
            name += "_selection"

        try:
            html = self._templates[name].render(
                rule=explanation.rule,
                kind=explanation.kind.value,
                count=explanation.item_count,
                selected=selection_size,
            )
        except jinja2.TemplateError as e:
            raise ReminderError(f"Error rendering reminder {name}: {e}", ErrorCode.INTERNAL_ERROR)

        if single:
            return Reminder(html=html, color=explanation.rule.color, icon=explanation.rule.icon)
        return Reminder(html=html, color=SELECTION_COLOR, icon=SELECTION_ICON)
