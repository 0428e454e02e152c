"""Shared pytest fixtures for Iconic tests."""
import logging
import tempfile
from pathlib import Path
from typing import Generator, List, Optional

import pytest

from iconic.infrastructure.logger import Logger
from iconic.items.models import Item
from iconic.items.vault import ItemIndex
from iconic.rules.models import Condition, Rule
from iconic.rules.patterns import RegexCache
from iconic.rules.store import RuleStore


class RecordingHandler(logging.Handler):
    """Keeps emitted records in memory."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def messages(self, level: int = logging.DEBUG) -> List[str]:
        return [r.getMessage() for r in self.records if r.levelno >= level]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def log_handler() -> RecordingHandler:
    """In-memory log handler."""
    return RecordingHandler()


@pytest.fixture
def logger(log_handler: RecordingHandler) -> Logger:
    """Debug-level logger writing to the in-memory handler."""
    return Logger(name="iconic.test", level="DEBUG", handlers=[log_handler])


@pytest.fixture
def regex_cache(logger: Logger) -> RegexCache:
    """Small regex cache."""
    return RegexCache(max_entries=16, logger=logger)


@pytest.fixture
def store(regex_cache: RegexCache, logger: Logger) -> RuleStore:
    """Empty rule store sharing the regex cache."""
    return RuleStore(regex_cache=regex_cache, logger=logger)


def _make_rule(
    rule_id: str,
    category: str = "file",
    conditions=(),
    combinator: str = "all",
    enabled: bool = True,
    icon: Optional[str] = None,
    color: Optional[str] = None,
    name: Optional[str] = None,
) -> Rule:
    """Build a rule with a fixed id."""
    return Rule(
        id=rule_id,
        name=name or rule_id,
        category=category,
        icon=icon,
        color=color,
        combinator=combinator,
        conditions=tuple(conditions),
        enabled=enabled,
    )


def _file_item(path: str, **attributes) -> Item:
    """Build a file item; ``icon`` and ``color`` keywords set overrides."""
    icon = attributes.pop("icon", None)
    color = attributes.pop("color", None)
    name = path.rsplit("/", 1)[-1]
    return Item(
        category="file",
        id=path,
        name=name,
        icon=icon,
        color=color,
        icon_default="lucide-file",
        attributes=attributes,
    )


@pytest.fixture
def index() -> ItemIndex:
    """Small set of vault items."""
    return ItemIndex(
        [
            _file_item("note.md", icon="star", tags=frozenset({"project"})),
            _file_item("notes/draft-intro.md", tags=frozenset({"draft", "project/alpha"})),
            _file_item("notes/readme.md", size=120),
            _file_item("images/cover.png", size=204800),
            Item("folder", "notes", "notes", attributes={"children": 2}),
            Item("tag", "project/alpha", "alpha", attributes={"count": 1}),
            Item("property", "status", "status", attributes={"type": "text", "count": 4}),
        ]
    )


@pytest.fixture
def md_rule() -> Rule:
    """Rule matching Markdown files."""
    return _make_rule("R", conditions=[Condition("extension", "is", "md")], icon="lucide-book")


@pytest.fixture
def make_rule():
    """Factory for rules with fixed ids."""
    return _make_rule


@pytest.fixture
def file_item():
    """Factory for file items."""
    return _file_item
