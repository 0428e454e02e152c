#!/usr/bin/env python3
"""YAML persistence of rule lists.

Rules are stored per category, in priority order:

    rules:
      file:
        - id: 3f9c1a2b7d04
          name: Drafts
          category: file
          icon: lucide-pencil
          color: orange
          combinator: all
          enabled: true
          conditions:
            - {source: name, operator: matchesRegex, value: "^draft-"}

Records that cannot be turned into a Rule (not a mapping, no id) are skipped
with a warning; everything else round-trips unchanged, including unknown
sources and operators.
"""

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from iconic.core.constants import ErrorCode
from iconic.infrastructure.logger import Logger, get_logger
from iconic.rules.models import Rule
from iconic.rules.store import RuleStore

RULES_KEY = "rules"


class PersistenceError(Exception):
    """Raised when a rule file cannot be read or written."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize PersistenceError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.error_code = error_code


class RuleRepository:
    """Reads and writes the rule file."""

    def __init__(self, file_path: str, logger: Optional[Logger] = None):
        """Initialize rule repository.

        Args:
            file_path: Path of the YAML rule file
            logger: Logger instance
        """
        self.path = Path(file_path).expanduser()
        self._logger = logger or get_logger()

    def parse(self, document: Any) -> Dict[str, List[Rule]]:
        """Turn a loaded YAML document into ordered rules per category.

        Raises:
            PersistenceError: If the document structure is not recognized
        """
        if document is None:
            return {}
        if not isinstance(document, Mapping):
            raise PersistenceError(f"Rule file {self.path} must contain a mapping")

        categories = document.get(RULES_KEY) or {}
        if not isinstance(categories, Mapping):
            raise PersistenceError(f"'{RULES_KEY}' in {self.path} must be a mapping")

        parsed: Dict[str, List[Rule]] = {}
        for category, records in categories.items():
            category = str(category)
            if not isinstance(records, list):
                self._logger.warning("Skipping non-list rule category", category=category)
                continue

            rules: List[Rule] = []
            for index, record in enumerate(records):
                try:
                    rules.append(Rule.from_dict(record, category=category))
                except ValueError as e:
                    self._logger.warning(
                        "Skipping malformed rule", category=category, index=index, error=str(e)
                    )
            parsed[category] = rules
        return parsed

    def load(self) -> Dict[str, List[Rule]]:
        """Load rules from disk.

        Returns:
            Ordered rules per category; empty if the file does not exist

        Raises:
            PersistenceError: If the file cannot be read or parsed
        """
        if not self.path.exists():
            self._logger.info("No rule file, starting empty", path=str(self.path))
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise PersistenceError(f"YAML parse error in {self.path}: {e}")
        except OSError as e:
            raise PersistenceError(f"Error reading {self.path}: {e}", ErrorCode.PERMISSION_DENIED)

        rules = self.parse(document)
        self._logger.info(
            "Rules loaded", path=str(self.path), count=sum(len(r) for r in rules.values())
        )
        return rules

    def load_into(self, store: RuleStore) -> None:
        """Replace the contents of a store with the rules on disk."""
        store.load(self.load())

    def save(self, store: RuleStore) -> None:
        """Write a store's rules to disk.

        The file is written to a temporary sibling and renamed into place.

        Raises:
            PersistenceError: If the file cannot be written
        """
        document = {RULES_KEY: store.dump()}
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".rules-", suffix=".yaml", dir=str(directory))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    yaml.safe_dump(document, f, sort_keys=False, allow_unicode=True)
                os.replace(tmp_path, self.path)
            except BaseException:
                os.unlink(tmp_path)
                raise
        except OSError as e:
            raise PersistenceError(f"Error writing {self.path}: {e}", ErrorCode.PERMISSION_DENIED)

        self._logger.debug("Rules saved", path=str(self.path), count=len(store))
