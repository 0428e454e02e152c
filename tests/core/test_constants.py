#!/usr/bin/env python3
"""Tests for package constants."""

from iconic.core.constants import (
    DEFAULT_CONFIG,
    DEFAULT_ICONS,
    NAMED_COLORS,
    PROPERTY_TYPE_ICONS,
    Category,
    ConfigKey,
    ErrorCode,
    Limits,
)


class TestErrorCode:
    """Tests for ErrorCode."""

    def test_values(self):
        """Test error codes are stable integers."""
        assert ErrorCode.SUCCESS == 0
        assert ErrorCode.INVALID_INPUT == 1
        assert ErrorCode.NOT_FOUND == 2
        assert ErrorCode.CONFLICT == 4


class TestCategory:
    """Tests for Category."""

    def test_parse(self):
        """Test parsing known and unknown names."""
        assert Category.parse("file") == Category.FILE
        assert Category.parse(Category.TAG) == Category.TAG
        assert Category.parse("bookmark") is None
        assert Category.parse(None) is None

    def test_string_compatible(self):
        """Test members compare equal to their raw names."""
        assert Category.FOLDER == "folder"

    def test_every_category_has_default_icon(self):
        """Test default icons cover all categories."""
        assert set(DEFAULT_ICONS) == set(Category)


class TestDefaults:
    """Tests for default values."""

    def test_property_type_icons(self):
        """Test every property type has an icon."""
        for prop_type in ("text", "multitext", "number", "checkbox", "date", "datetime", "tags", "aliases"):
            assert PROPERTY_TYPE_ICONS[prop_type].startswith("lucide-")

    def test_named_colors(self):
        """Test the named color palette."""
        assert "red" in NAMED_COLORS
        assert "gray" in NAMED_COLORS

    def test_default_config(self):
        """Test default configuration layout."""
        root = DEFAULT_CONFIG[ConfigKey.ROOT]
        assert root[ConfigKey.RULES][ConfigKey.REGEX_CACHE_SIZE] == Limits.DEFAULT_REGEX_CACHE_SIZE
        assert root[ConfigKey.RULES][ConfigKey.RULES_FILE] is None
        assert ".obsidian/**" in root[ConfigKey.VAULT][ConfigKey.VAULT_IGNORE]
        assert root[ConfigKey.LOGGING][ConfigKey.LOG_LEVEL] == "INFO"
