#!/usr/bin/env python3
"""Tests for YAML rule persistence."""

import logging

import pytest
import yaml

from iconic.core.constants import ErrorCode
from iconic.rules.models import Condition
from iconic.rules.persistence import PersistenceError, RuleRepository
from iconic.rules.store import RuleStore


@pytest.fixture
def rules_file(temp_dir):
    """Path of a rule file inside the temp directory."""
    return temp_dir / "rules.yaml"


class TestRuleRepository:
    """Tests for RuleRepository."""

    def test_missing_file_is_empty(self, rules_file, logger):
        """Test a fresh installation."""
        assert RuleRepository(str(rules_file), logger=logger).load() == {}

    def test_save_and_load(self, rules_file, store, make_rule, logger):
        """Test rules survive a save/load cycle in order."""
        store.save_rule("file", make_rule("b", conditions=[Condition("name", "matchesRegex", "^draft-")]))
        store.save_rule("file", make_rule("a", icon="lucide-star", color="yellow"))
        store.save_rule("tag", make_rule("t", category="tag"))

        repository = RuleRepository(str(rules_file), logger=logger)
        repository.save(store)

        loaded = RuleStore()
        repository.load_into(loaded)
        assert loaded.get_rules("file") == store.get_rules("file")
        assert loaded.get_rules("tag") == store.get_rules("tag")

    def test_file_format(self, rules_file, store, make_rule, logger):
        """Test the on-disk layout."""
        store.save_rule("file", make_rule("a", conditions=[Condition("extension", "is", "md")]))
        RuleRepository(str(rules_file), logger=logger).save(store)

        document = yaml.safe_load(rules_file.read_text())
        record = document["rules"]["file"][0]
        assert record["id"] == "a"
        assert record["conditions"] == [{"source": "extension", "operator": "is", "value": "md"}]

    def test_save_creates_directory(self, temp_dir, store, make_rule, logger):
        """Test saving into a new directory."""
        path = temp_dir / "nested" / "dir" / "rules.yaml"
        store.save_rule("file", make_rule("a"))
        RuleRepository(str(path), logger=logger).save(store)
        assert path.exists()
        assert not [p for p in path.parent.iterdir() if p.name.startswith(".rules-")]

    def test_malformed_records_are_skipped(self, rules_file, logger, log_handler):
        """Test records without ids or of the wrong type."""
        rules_file.write_text(
            yaml.safe_dump(
                {
                    "rules": {
                        "file": [
                            {"id": "good", "name": "Good", "conditions": [{"source": "name", "operator": "is", "value": "a"}]},
                            {"name": "no id"},
                            "not a rule",
                            {"id": "weird", "combinator": "xor", "conditions": [{"source": "colour", "operator": "like"}]},
                        ],
                        "folder": "not a list",
                    }
                }
            )
        )
        loaded = RuleRepository(str(rules_file), logger=logger).load()

        assert [r.id for r in loaded["file"]] == ["good", "weird"]
        assert loaded["file"][1].combinator == "xor"
        assert loaded["file"][1].conditions[0].source == "colour"
        assert "folder" not in loaded
        warnings = log_handler.messages(logging.WARNING)
        assert len([m for m in warnings if "Skipping" in m]) == 3

    def test_empty_file(self, rules_file, logger):
        """Test an empty document."""
        rules_file.write_text("")
        assert RuleRepository(str(rules_file), logger=logger).load() == {}

    def test_invalid_yaml(self, rules_file, logger):
        """Test unparsable files."""
        rules_file.write_text("rules: [unclosed")
        with pytest.raises(PersistenceError) as exc_info:
            RuleRepository(str(rules_file), logger=logger).load()
        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT

    @pytest.mark.parametrize("content", ["- a\n- b\n", "rules: [a, b]\n"])
    def test_unexpected_structure(self, rules_file, logger, content):
        """Test documents of the wrong shape."""
        rules_file.write_text(content)
        with pytest.raises(PersistenceError):
            RuleRepository(str(rules_file), logger=logger).load()
