"""
Iconic Core: Constants and Type Definitions

This module provides package-wide constants, error codes, item categories and
the default configuration shared by the rule engine and its collaborators.
"""
from enum import Enum, IntEnum
from typing import Optional

# Version information
ICONIC_VERSION = "1.0.0"


class ErrorCode(IntEnum):
    """Standardized error codes for Iconic operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad rule, condition or configuration
    NOT_FOUND = 2  # Rule, item or file doesn't exist
    PERMISSION_DENIED = 3  # Insufficient permissions
    CONFLICT = 4  # Duplicate id, category mismatch
    INTERNAL_ERROR = 6  # Bug in Iconic


class Category(str, Enum):
    """Vault entity categories that can carry icons and rules."""

    FILE = "file"
    FOLDER = "folder"
    TAG = "tag"
    PROPERTY = "property"

    @classmethod
    def parse(cls, value: object) -> Optional["Category"]:
        """Return the category named by ``value``, or None if unknown."""
        try:
            return cls(value)
        except ValueError:
            return None


# Contextual default icons shown when neither item nor rule supplies one
DEFAULT_ICONS = {
    Category.FILE: "lucide-file",
    Category.FOLDER: "lucide-folder-closed",
    Category.TAG: "lucide-tag",
    Category.PROPERTY: "lucide-text",
}

# Property type -> default icon
PROPERTY_TYPE_ICONS = {
    "text": "lucide-text",
    "multitext": "lucide-list",
    "number": "lucide-binary",
    "checkbox": "lucide-check-square",
    "date": "lucide-calendar",
    "datetime": "lucide-clock",
    "tags": "lucide-tags",
    "aliases": "lucide-forward",
}

# Named colors accepted besides hex values
NAMED_COLORS = ("red", "orange", "yellow", "green", "cyan", "blue", "purple", "pink", "gray")


class Limits:
    """Resource limits and default values."""

    # Rules
    MAX_RULE_NAME_LENGTH = 200
    MAX_CONDITIONS_PER_RULE = 100
    MAX_CONDITION_VALUE_LENGTH = 4096

    # Regex cache
    DEFAULT_REGEX_CACHE_SIZE = 256
    MAX_REGEX_LENGTH = 1024

    # Rule name suggestions
    MAX_NAME_SUGGESTIONS = 20


class ConfigKey:
    """Configuration key constants."""

    # Top-level keys
    ROOT = "iconic"
    RULES = "rules"
    VAULT = "vault"
    LOGGING = "logging"
    OVERRIDES = "overrides"

    # Rules configuration
    RULES_FILE = "file"
    REGEX_CACHE_SIZE = "regex_cache_size"

    # Vault configuration
    VAULT_ROOT = "root"
    VAULT_IGNORE = "ignore"
    VAULT_STARRED = "starred"

    # Logging configuration
    LOG_LEVEL = "level"
    LOG_FILE = "file"


# Default configuration values
DEFAULT_CONFIG = {
    ConfigKey.ROOT: {
        ConfigKey.RULES: {
            ConfigKey.RULES_FILE: None,
            ConfigKey.REGEX_CACHE_SIZE: Limits.DEFAULT_REGEX_CACHE_SIZE,
        },
        ConfigKey.VAULT: {
            ConfigKey.VAULT_ROOT: None,
            ConfigKey.VAULT_IGNORE: [".obsidian/**", ".trash/**", "**/.*"],
            ConfigKey.VAULT_STARRED: [],
        },
        ConfigKey.LOGGING: {
            ConfigKey.LOG_LEVEL: "INFO",
            ConfigKey.LOG_FILE: None,
        },
        ConfigKey.OVERRIDES: {},
    }
}
