#!/usr/bin/env python3
"""Iconic engine: wires the rule engine together from configuration.

Creates and connects:
- Logger (``iconic.logging``)
- RegexCache (``iconic.rules.regex_cache_size``)
- RuleStore and RuleRepository (``iconic.rules.file``)
- Item provider (``iconic.vault``, or any ItemProvider passed in)
- RulingResolver and RuleChecker

Rule edits go through the engine so that changes are persisted as soon as
the store reports them.

Example:
    >>> engine = IconicEngine.from_config(get_config_manager("~/.config/iconic/config.yaml"))
    >>> engine.save_rule("file", Rule.create("Drafts", "file", icon="lucide-pencil", conditions=[...]))
    True
    >>> engine.effective_appearance("file", "notes/draft-intro.md").icon
    'lucide-pencil'
"""

from typing import Any, Dict, Iterable, List, Optional

from iconic.core.constants import ConfigKey, Limits
from iconic.infrastructure.config_manager import CONFIG_SCHEMA, ConfigManager
from iconic.infrastructure.logger import Logger, get_logger
from iconic.items.models import Item, ItemProvider
from iconic.items.vault import ItemIndex, VaultScanner
from iconic.rules.checker import PreviewMatch, RuleChecker
from iconic.rules.matcher import RuleMatcher
from iconic.rules.models import Rule
from iconic.rules.patterns import RegexCache
from iconic.rules.persistence import RuleRepository
from iconic.rules.predicates import PredicateEvaluator
from iconic.rules.resolver import Appearance, RulingExplanation, RulingResolver
from iconic.rules.store import RuleStore

_RULES = f"{ConfigKey.ROOT}.{ConfigKey.RULES}"
_LOGGING = f"{ConfigKey.ROOT}.{ConfigKey.LOGGING}"
_VAULT_ROOT = f"{ConfigKey.ROOT}.{ConfigKey.VAULT}.{ConfigKey.VAULT_ROOT}"


class IconicEngine:
    """Rule engine components with their configuration applied."""

    def __init__(
        self,
        provider: ItemProvider,
        repository: Optional[RuleRepository] = None,
        regex_cache_size: int = Limits.DEFAULT_REGEX_CACHE_SIZE,
        logger: Optional[Logger] = None,
    ):
        """Initialize engine.

        Args:
            provider: Source of items
            repository: Rule file; rules stay in memory when omitted
            regex_cache_size: Maximum number of compiled patterns kept
            logger: Logger instance
        """
        self.logger = logger or get_logger()
        self.provider = provider
        self.repository = repository

        self.regex_cache = RegexCache(max_entries=regex_cache_size, logger=self.logger)
        self.store = RuleStore(regex_cache=self.regex_cache, logger=self.logger)
        evaluator = PredicateEvaluator(regex_cache=self.regex_cache, logger=self.logger)
        self.matcher = RuleMatcher(evaluator=evaluator, logger=self.logger)
        self.resolver = RulingResolver(self.store, provider, matcher=self.matcher, logger=self.logger)
        self.checker = RuleChecker(
            self.store,
            provider,
            attribute_resolver=self.resolver.attribute_resolver,
            matcher=self.matcher,
            logger=self.logger,
        )

        if self.repository is not None:
            self.repository.load_into(self.store)

    @classmethod
    def from_config(
        cls,
        config: ConfigManager,
        provider: Optional[ItemProvider] = None,
        logger: Optional[Logger] = None,
    ) -> "IconicEngine":
        """Create an engine from configuration.

        Without an explicit provider the configured vault is scanned; with
        neither, the engine starts with an empty item index.

        Args:
            config: Configuration manager
            provider: Item provider to use instead of scanning the vault
            logger: Logger instance

        Raises:
            ConfigError: If a setting has the wrong type
            PersistenceError: If the configured rule file cannot be read
            FileNotFoundError: If the configured vault root does not exist
        """
        config.validate_schema(CONFIG_SCHEMA)
        logger = logger or get_logger()
        logger.configure(config.get_section(_LOGGING))

        if provider is None:
            if config.get(_VAULT_ROOT):
                provider = VaultScanner.from_config(config, logger=logger).scan()
            else:
                logger.info("No vault configured, starting with an empty item index")
                provider = ItemIndex()

        rules_file = config.get(f"{_RULES}.{ConfigKey.RULES_FILE}")
        repository = RuleRepository(rules_file, logger=logger) if rules_file else None

        engine = cls(
            provider,
            repository=repository,
            regex_cache_size=config.get(
                f"{_RULES}.{ConfigKey.REGEX_CACHE_SIZE}", Limits.DEFAULT_REGEX_CACHE_SIZE
            ),
            logger=logger,
        )
        config.add_watcher(engine._on_config_change)
        return engine

    def _on_config_change(self, merged: Dict[str, Any]) -> None:
        logging_section = merged.get(ConfigKey.ROOT, {}).get(ConfigKey.LOGGING) or {}
        level = logging_section.get(ConfigKey.LOG_LEVEL)
        if level:
            self.logger.set_level(level)

    def _persist(self, changed: bool) -> bool:
        if changed and self.repository is not None:
            self.repository.save(self.store)
        return changed

    def save_rule(self, category: Any, rule: Rule, position: Optional[int] = None) -> bool:
        """Save a rule and persist the store if it changed."""
        return self._persist(self.store.save_rule(category, rule, position))

    def delete_rule(self, category: Any, rule_id: str) -> bool:
        """Delete a rule and persist the store if it changed."""
        return self._persist(self.store.delete_rule(category, rule_id))

    def reorder(self, category: Any, from_index: int, to_index: int) -> bool:
        """Move a rule and persist the store if the order changed."""
        return self._persist(self.store.reorder(category, from_index, to_index))

    def check_ruling(self, category: Any, item_id: str) -> Optional[Rule]:
        return self.resolver.check_ruling(category, item_id)

    def effective_appearance(self, category: Any, item_id: str) -> Appearance:
        return self.resolver.effective_appearance(category, item_id)

    def explain(self, items: Iterable[Item]) -> Optional[RulingExplanation]:
        return self.resolver.explain(items)

    def preview(self, rule: Rule) -> List[PreviewMatch]:
        return self.checker.preview(rule)
