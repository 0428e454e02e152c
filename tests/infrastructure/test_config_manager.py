#!/usr/bin/env python3
"""Tests for the ConfigManager module."""

import logging

import pytest
import yaml

from iconic.core.constants import ErrorCode, Limits
from iconic.infrastructure.config_manager import (
    CONFIG_SCHEMA,
    ConfigError,
    ConfigManager,
    ConfigSource,
    get_config_manager,
    set_global_config,
)


@pytest.fixture
def config(logger):
    """Config manager isolated from the process environment."""
    return ConfigManager(environ={}, logger=logger)


@pytest.fixture
def user_config(temp_dir):
    """User config file with a rule file and vault root."""
    path = temp_dir / "config.yaml"
    path.write_text(
        yaml.safe_dump({"iconic": {"rules": {"file": "/data/rules.yaml"}, "vault": {"root": "/vault"}}})
    )
    return path


class TestConfigSource:
    """Tests for ConfigSource enum."""

    def test_precedence_order(self):
        """Test config source precedence ordering."""
        sources = list(ConfigSource)
        assert [s.value for s in sources] == sorted(s.value for s in sources)
        assert sources[0] == ConfigSource.COMPILED_DEFAULTS
        assert sources[-1] == ConfigSource.RUNTIME


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_defaults(self, config):
        """Test compiled defaults are available."""
        assert config.get("iconic.rules.regex_cache_size") == Limits.DEFAULT_REGEX_CACHE_SIZE
        assert config.get("iconic.logging.level") == "INFO"
        assert config.get("iconic.rules.file") is None
        assert config.get("iconic.missing.key", "fallback") == "fallback"

    def test_environment_overrides(self, logger):
        """Test ICONIC_* variables with double-underscore sections."""
        config = ConfigManager(
            environ={
                "ICONIC_RULES__REGEX_CACHE_SIZE": "128",
                "ICONIC_VAULT__IGNORE": "[.git/**, .trash/**]",
                "ICONIC_LOGGING__LEVEL": "debug",
                "HOME": "/root",
            },
            logger=logger,
        )
        assert config.get("iconic.rules.regex_cache_size") == 128
        assert config.get("iconic.vault.ignore") == [".git/**", ".trash/**"]
        assert config.get("iconic.logging.level") == "debug"
        assert "home" not in config.get_all()

    def test_precedence(self, user_config, logger):
        """Test runtime > environment > user file > defaults."""
        config = ConfigManager(
            str(user_config), environ={"ICONIC_VAULT__ROOT": "/env-vault"}, logger=logger
        )
        assert config.get("iconic.rules.file") == "/data/rules.yaml"
        assert config.get("iconic.vault.root") == "/env-vault"

        config.set("iconic.vault.root", "/runtime-vault")
        assert config.get("iconic.vault.root") == "/runtime-vault"

    def test_sections_are_deep_merged(self, config):
        """Test partial sections keep lower-precedence keys."""
        config.load_dict({"iconic": {"vault": {"root": "/vault"}}})
        vault = config.get_section("iconic.vault")
        assert vault["root"] == "/vault"
        assert vault["ignore"] == [".obsidian/**", ".trash/**", "**/.*"]
        assert config.get_section("iconic.nothing") == {}

    def test_load_file_errors(self, config, temp_dir):
        """Test missing, unparsable and non-mapping files."""
        with pytest.raises(ConfigError) as exc_info:
            config.load_file(str(temp_dir / "missing.yaml"))
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

        broken = temp_dir / "broken.yaml"
        broken.write_text("iconic: [unclosed")
        with pytest.raises(ConfigError) as exc_info:
            config.load_file(str(broken))
        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT

        listing = temp_dir / "list.yaml"
        listing.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            config.load_file(str(listing))

    def test_empty_file(self, config, temp_dir):
        """Test an empty file contributes nothing."""
        empty = temp_dir / "empty.yaml"
        empty.write_text("")
        config.load_file(str(empty))
        assert config.get("iconic.logging.level") == "INFO"

    def test_reload(self, config, user_config):
        """Test reloading picks up file changes."""
        config.load_file(str(user_config))
        user_config.write_text(yaml.safe_dump({"iconic": {"rules": {"file": "/other.yaml"}}}))
        config.reload()
        assert config.get("iconic.rules.file") == "/other.yaml"

    def test_watchers(self, config):
        """Test watchers receive the merged configuration."""
        received = []
        config.add_watcher(received.append)

        config.set("iconic.logging.level", "WARNING")
        assert received[-1]["iconic"]["logging"]["level"] == "WARNING"
        assert received[-1]["iconic"]["rules"]["regex_cache_size"] == Limits.DEFAULT_REGEX_CACHE_SIZE

        config.remove_watcher(received.append)
        config.set("iconic.logging.level", "ERROR")
        assert len(received) == 1

    def test_failing_watcher_is_logged(self, config, log_handler):
        """Test one failing watcher does not stop the others."""
        received = []

        def broken(merged):
            raise RuntimeError("boom")

        config.add_watcher(broken)
        config.add_watcher(received.append)
        config.set("iconic.rules.file", "/rules.yaml")

        assert len(received) == 1
        assert any("Config watcher failed" in m for m in log_handler.messages(logging.ERROR))

    def test_validate_schema(self, config):
        """Test type validation of known settings."""
        assert config.validate_schema(CONFIG_SCHEMA)

        config.set("iconic.rules.regex_cache_size", "large")
        with pytest.raises(ConfigError, match="iconic.rules.regex_cache_size"):
            config.validate_schema(CONFIG_SCHEMA)

    def test_validate_schema_nested_mapping(self, config):
        """Test a scalar where a section is expected."""
        config.load_dict({"iconic": {"vault": "nowhere"}})
        with pytest.raises(ConfigError, match="mapping"):
            config.validate_schema(CONFIG_SCHEMA)

    def test_clear(self, config):
        """Test clearing keeps compiled defaults."""
        config.set("iconic.logging.level", "ERROR")
        config.clear(ConfigSource.RUNTIME)
        assert config.get("iconic.logging.level") == "INFO"

        config.set("iconic.logging.level", "ERROR")
        config.clear()
        config.clear(ConfigSource.COMPILED_DEFAULTS)
        assert config.get("iconic.logging.level") == "INFO"


class TestGlobalConfig:
    """Tests for the shared configuration manager."""

    def test_set_and_get(self, config):
        """Test replacing the shared instance."""
        set_global_config(config)
        try:
            assert get_config_manager() is config
        finally:
            set_global_config(None)
