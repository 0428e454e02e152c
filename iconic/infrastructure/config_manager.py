#!/usr/bin/env python3
"""Layered configuration manager for Iconic.

This module provides configuration management with:
- Precedence hierarchy (defaults < system < user < environment < runtime)
- YAML configuration files
- Environment variable overrides (ICONIC_*)
- Dot-path access and deep merging of nested sections
- Change watchers
- Simple type-schema validation

Example:
    >>> config = ConfigManager()
    >>> config.load_file("~/.config/iconic/config.yaml")
    >>> config.get("iconic.rules.regex_cache_size", default=256)
    >>> config.add_watcher(lambda merged: print("config changed"))
"""

import copy
import os
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml

from iconic.core.constants import DEFAULT_CONFIG, ErrorCode
from iconic.infrastructure.logger import Logger, get_logger

ENV_PREFIX = "ICONIC_"
ENV_SEPARATOR = "__"

Watcher = Callable[[Dict[str, Any]], None]


class ConfigSource(Enum):
    """Configuration source precedence levels."""

    COMPILED_DEFAULTS = 1  # Lowest precedence
    SYSTEM_CONFIG = 2
    USER_CONFIG = 3
    ENVIRONMENT = 4
    RUNTIME = 5  # Highest precedence


class ConfigError(Exception):
    """Configuration error."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ConfigManager:
    """Thread-safe layered configuration manager.

    Values are looked up from the highest-precedence source that defines
    them:
    1. Compiled defaults (lowest)
    2. System config (/etc/iconic/config.yaml)
    3. User config (~/.config/iconic/config.yaml)
    4. Environment variables (ICONIC_SECTION__KEY=value)
    5. Runtime updates (highest)
    """

    SYSTEM_CONFIG_DIR = "/etc/iconic"

    def __init__(
        self,
        config_file: Optional[str] = None,
        environ: Optional[Dict[str, str]] = None,
        logger: Optional[Logger] = None,
    ):
        """Initialize configuration manager.

        Args:
            config_file: Optional user config file to load
            environ: Environment mapping (defaults to os.environ)
            logger: Logger for watcher failures
        """
        self._config: Dict[ConfigSource, Dict[str, Any]] = {}
        self._files: Dict[str, ConfigSource] = {}
        self._lock = threading.RLock()
        self._watchers: List[Watcher] = []
        self._logger = logger or get_logger()

        self._config[ConfigSource.COMPILED_DEFAULTS] = copy.deepcopy(DEFAULT_CONFIG)

        if config_file:
            self.load_file(config_file)

        self._load_environment(os.environ if environ is None else environ)

    def load_file(self, file_path: str, source: Optional[ConfigSource] = None) -> None:
        """Load configuration from a YAML file.

        Args:
            file_path: Path to YAML config file
            source: Configuration source level; inferred from the path when
                omitted (system directory or user config)

        Raises:
            ConfigError: If file cannot be read or parsed
        """
        path = Path(file_path).expanduser().resolve()

        if not path.exists():
            raise ConfigError(f"Config file not found: {file_path}", ErrorCode.NOT_FOUND)

        if source is None:
            source = self._source_for(str(path))

        try:
            with open(path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parse error in {file_path}: {e}", ErrorCode.INVALID_INPUT)
        except OSError as e:
            raise ConfigError(f"Error loading config {file_path}: {e}", ErrorCode.PERMISSION_DENIED)

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigError(f"Invalid config format in {file_path}", ErrorCode.INVALID_INPUT)

        with self._lock:
            self._config[source] = config_data
            self._files[str(path)] = source

    def _source_for(self, file_path: str) -> ConfigSource:
        if file_path.startswith(self.SYSTEM_CONFIG_DIR):
            return ConfigSource.SYSTEM_CONFIG
        return ConfigSource.USER_CONFIG

    def load_dict(
        self, config_data: Dict[str, Any], source: ConfigSource = ConfigSource.RUNTIME
    ) -> None:
        """Load configuration from a dictionary.

        Args:
            config_data: Configuration dictionary
            source: Configuration source level
        """
        with self._lock:
            self._config[source] = copy.deepcopy(config_data)
        self._notify_watchers()

    def _load_environment(self, environ: Dict[str, str]) -> None:
        """Load overrides from environment variables.

        Sections are separated by a double underscore, so
        ``ICONIC_RULES__REGEX_CACHE_SIZE=128`` sets
        ``iconic.rules.regex_cache_size``.
        """
        env_config: Dict[str, Any] = {}

        for key, value in environ.items():
            if not key.startswith(ENV_PREFIX):
                continue

            parts = [p for p in key[len(ENV_PREFIX):].lower().split(ENV_SEPARATOR) if p]
            if not parts:
                continue

            current = env_config
            for part in parts[:-1]:
                current = current.setdefault(part, {})
                if not isinstance(current, dict):
                    break
            else:
                current[parts[-1]] = self._parse_env_value(value)

        if env_config:
            with self._lock:
                self._config[ConfigSource.ENVIRONMENT] = {"iconic": env_config}

    @staticmethod
    def _parse_env_value(value: str) -> Any:
        """Parse an environment value as YAML scalar or flow collection.

        ``"true"`` becomes True, ``"128"`` becomes 128 and
        ``"[a, b]"`` becomes a list; anything unparsable stays a string.
        """
        try:
            return yaml.safe_load(value)
        except yaml.YAMLError:
            return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot-separated key.

        Args:
            key: Key path (e.g., "iconic.rules.regex_cache_size")
            default: Value returned when no source defines the key

        Returns:
            Configuration value or default
        """
        with self._lock:
            for source in sorted(self._config, key=lambda s: s.value, reverse=True):
                value = self._get_nested(self._config[source], key)
                if value is not None:
                    return value
            return default

    @staticmethod
    def _get_nested(config: Dict[str, Any], key: str) -> Optional[Any]:
        current: Any = config
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return None
            current = current[part]
        return current

    def set(self, key: str, value: Any, source: ConfigSource = ConfigSource.RUNTIME) -> None:
        """Set configuration value at a dot-separated key.

        Args:
            key: Key path
            value: Value to set
            source: Configuration source level
        """
        with self._lock:
            current = self._config.setdefault(source, {})
            parts = key.split(".")
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value

        self._notify_watchers()

    def get_all(self) -> Dict[str, Any]:
        """Get the merged configuration from all sources."""
        with self._lock:
            merged: Dict[str, Any] = {}
            for source in sorted(self._config, key=lambda s: s.value):
                merged = self._deep_merge(merged, self._config[source])
            return merged

    def get_section(self, key: str) -> Dict[str, Any]:
        """Get a merged nested section as a dictionary (empty if missing)."""
        section = self._get_nested(self.get_all(), key)
        return section if isinstance(section, dict) else {}

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        result = copy.deepcopy(base)
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)
        return result

    def reload(self) -> None:
        """Reload all file-based configurations.

        Raises:
            ConfigError: If a previously loaded file can no longer be read
        """
        with self._lock:
            files = list(self._files.items())

        for file_path, source in files:
            self.load_file(file_path, source)

        self._notify_watchers()

    def add_watcher(self, callback: Watcher) -> None:
        """Register a callback invoked with the merged config on changes."""
        with self._lock:
            self._watchers.append(callback)

    def remove_watcher(self, callback: Watcher) -> None:
        """Unregister a change callback."""
        with self._lock:
            if callback in self._watchers:
                self._watchers.remove(callback)

    def _notify_watchers(self) -> None:
        merged = self.get_all()
        with self._lock:
            watchers = list(self._watchers)

        for watcher in watchers:
            try:
                watcher(merged)
            except Exception as e:
                # One failing watcher must not starve the others
                self._logger.exception("Config watcher failed", e, watcher=repr(watcher))

    def validate_schema(self, schema: Dict[str, Any]) -> bool:
        """Validate the merged configuration against a type schema.

        Schema values are either Python types or nested schema dicts; keys
        missing from the configuration are treated as optional. ``None``
        values are accepted for any type.

        Args:
            schema: Schema dictionary

        Returns:
            True if valid

        Raises:
            ConfigError: If a value has the wrong type
        """
        return self._validate_dict(self.get_all(), schema, prefix="")

    def _validate_dict(self, config: Dict[str, Any], schema: Dict[str, Any], prefix: str) -> bool:
        for key, expected in schema.items():
            if key not in config or config[key] is None:
                continue

            value = config[key]
            path = f"{prefix}{key}"

            if isinstance(expected, dict):
                if not isinstance(value, dict):
                    raise ConfigError(f"Expected mapping for {path}, got {type(value).__name__}")
                self._validate_dict(value, expected, prefix=f"{path}.")
            elif not isinstance(value, expected):
                names = (
                    "/".join(t.__name__ for t in expected)
                    if isinstance(expected, tuple)
                    else expected.__name__
                )
                raise ConfigError(f"Expected {names} for {path}, got {type(value).__name__}")

        return True

    def clear(self, source: Optional[ConfigSource] = None) -> None:
        """Clear configuration.

        Args:
            source: Specific source to clear, or None for all except defaults
        """
        with self._lock:
            if source is not None:
                if source != ConfigSource.COMPILED_DEFAULTS:
                    self._config.pop(source, None)
            else:
                for s in [s for s in self._config if s != ConfigSource.COMPILED_DEFAULTS]:
                    del self._config[s]


# Schema of the settings Iconic reads itself
CONFIG_SCHEMA: Dict[str, Any] = {
    "iconic": {
        "rules": {"file": str, "regex_cache_size": int},
        "vault": {"root": str, "ignore": list, "starred": list},
        "logging": {"level": str, "file": str},
        "overrides": dict,
    }
}


# Global config manager instance
_global_config: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[str] = None) -> ConfigManager:
    """Get or create the shared configuration manager.

    Args:
        config_file: Optional config file to load on first creation

    Returns:
        Shared configuration manager
    """
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager(config_file)
    return _global_config


def set_global_config(config: ConfigManager) -> None:
    """Set the shared configuration manager."""
    global _global_config
    _global_config = config
