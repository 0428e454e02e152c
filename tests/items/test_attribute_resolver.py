#!/usr/bin/env python3
"""Tests for attribute resolution."""

from datetime import datetime, timezone

import pytest

from iconic.items.models import ABSENT, Item, Source
from iconic.items.resolver import (
    AttributeResolver,
    normalize_tag,
    parent_path,
    parse_bool,
    split_path,
    to_bool,
    to_millis,
)


@pytest.fixture
def resolver():
    """Attribute resolver."""
    return AttributeResolver()


class TestHelpers:
    """Tests for path, tag and timestamp helpers."""

    def test_split_path(self):
        """Test separators and empty segments."""
        assert split_path("notes/daily/2024.md") == ["notes", "daily", "2024.md"]
        assert split_path("/notes\\a.md") == ["notes", "a.md"]
        assert split_path("") == []

    def test_parent_path(self):
        """Test the containing folder path."""
        assert parent_path("notes/daily/2024.md") == "notes/daily"
        assert parent_path("note.md") == ""

    @pytest.mark.parametrize("tag,expected", [("#project", "project"), (" project ", "project"), ("#", "")])
    def test_normalize_tag(self, tag, expected):
        """Test '#' and whitespace are stripped."""
        assert normalize_tag(tag) == expected

    def test_to_millis(self):
        """Test timestamp conversion."""
        aware = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert to_millis(aware) == 1704067200000
        assert to_millis(datetime(2024, 1, 1)) == 1704067200000
        assert to_millis(1704067200000) == 1704067200000
        assert to_millis(None) is ABSENT
        assert to_millis(True) is ABSENT
        assert to_millis("yesterday") is ABSENT

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_to_millis_non_finite(self, value):
        """Test non-finite numbers are not timestamps."""
        assert to_millis(value) is ABSENT

    @pytest.mark.parametrize(
        "text,expected",
        [("true", True), ("FALSE", False), (" True ", True), ("yes", None), ("", None)],
    )
    def test_parse_bool(self, text, expected):
        """Test only true/false text is recognized."""
        assert parse_bool(text) is expected

    @pytest.mark.parametrize(
        "value,default,expected",
        [
            (True, False, True),
            (0, True, False),
            ("false", True, False),
            ("True", False, True),
            ("yes", True, True),
            ("yes", False, False),
            (None, True, True),
            (None, False, False),
        ],
    )
    def test_to_bool(self, value, default, expected):
        """Test flags given as text fall back to the default when unreadable."""
        assert to_bool(value, default=default) is expected


class TestAttributeResolver:
    """Tests for AttributeResolver."""

    def test_file(self, resolver):
        """Test file attributes and derived values."""
        item = Item(
            "file",
            "notes/daily/draft-intro.md",
            "draft-intro.md",
            attributes={
                "tags": ["#draft", "project/alpha", "", 3],
                "created": 1000,
                "modified": datetime(2024, 1, 1, tzinfo=timezone.utc),
                "size": "2048",
                "starred": True,
            },
        )
        attrs = resolver.resolve(item)
        assert attrs.category == "file"
        assert attrs.value(Source.NAME) == "draft-intro.md"
        assert attrs.value(Source.BASENAME) == "draft-intro"
        assert attrs.value(Source.EXTENSION) == "md"
        assert attrs.value(Source.PATH) == "notes/daily/draft-intro.md"
        assert attrs.value(Source.PARENT) == "daily"
        assert attrs.value(Source.DEPTH) == 3
        assert attrs.value(Source.TAGS) == frozenset({"draft", "project/alpha"})
        assert attrs.value(Source.CREATED) == 1000
        assert attrs.value(Source.MODIFIED) == 1704067200000
        assert attrs.value(Source.SIZE) == 2048
        assert attrs.value(Source.STARRED) is True

    def test_file_at_root(self, resolver):
        """Test defaults for a bare file."""
        attrs = resolver.resolve(Item("file", "README", "README"))
        assert attrs.value(Source.EXTENSION) == ""
        assert attrs.value(Source.BASENAME) == "README"
        assert attrs.value(Source.PARENT) == ""
        assert attrs.value(Source.DEPTH) == 1
        assert attrs.value(Source.TAGS) == frozenset()
        assert attrs.value(Source.STARRED) is False

    def test_missing_values_are_absent(self, resolver):
        """Test unusable fields resolve to ABSENT."""
        attrs = resolver.resolve(Item("file", "a.md", "a.md", attributes={"size": "big", "created": "never"}))
        assert attrs.value(Source.SIZE) is ABSENT
        assert attrs.value(Source.CREATED) is ABSENT
        assert attrs.value(Source.MODIFIED) is ABSENT

    def test_dotfile_has_no_extension(self, resolver):
        """Test names starting with a dot."""
        attrs = resolver.resolve(Item("file", ".gitignore", ".gitignore"))
        assert attrs.value(Source.EXTENSION) == ""

    def test_explicit_extension(self, resolver):
        """Test a collaborator-supplied extension wins."""
        attrs = resolver.resolve(Item("file", "archive.tar.gz", "archive.tar.gz", attributes={"extension": "tar.gz"}))
        assert attrs.value(Source.EXTENSION) == "tar.gz"
        assert attrs.value(Source.BASENAME) == "archive"

    def test_folder(self, resolver):
        """Test folder attributes."""
        attrs = resolver.resolve(Item("folder", "notes/daily", "daily", attributes={"children": 4}))
        assert attrs.value(Source.NAME) == "daily"
        assert attrs.value(Source.PARENT) == "notes"
        assert attrs.value(Source.DEPTH) == 2
        assert attrs.value(Source.CHILDREN) == 4
        assert attrs.value(Source.EXTENSION) is ABSENT

    def test_tag(self, resolver):
        """Test tag attributes."""
        attrs = resolver.resolve(Item("tag", "#project/alpha", "alpha", attributes={"count": 5}))
        assert attrs.value(Source.NAME) == "project/alpha"
        assert attrs.value(Source.PARENT) == "project"
        assert attrs.value(Source.DEPTH) == 2
        assert attrs.value(Source.COUNT) == 5

    def test_property(self, resolver):
        """Test property attributes."""
        attrs = resolver.resolve(Item("property", "status", "status", attributes={"type": "text"}))
        assert attrs.value(Source.NAME) == "status"
        assert attrs.value(Source.TYPE) == "text"
        assert attrs.value(Source.COUNT) is ABSENT

    def test_unknown_category(self, resolver):
        """Test an unknown category resolves to nothing."""
        attrs = resolver.resolve(Item("bookmark", "x", "x"))
        assert len(attrs) == 0

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    @pytest.mark.parametrize(
        "category,field,source",
        [
            ("file", "size", Source.SIZE),
            ("file", "created", Source.CREATED),
            ("file", "modified", Source.MODIFIED),
            ("folder", "children", Source.CHILDREN),
            ("tag", "count", Source.COUNT),
            ("property", "count", Source.COUNT),
        ],
    )
    def test_non_finite_numbers_are_absent(self, resolver, category, field, source, value):
        """Test nan and infinities resolve to ABSENT instead of raising."""
        attrs = resolver.resolve(Item(category, "x", "x", attributes={field: value}))
        assert attrs.value(source) is ABSENT

    @pytest.mark.parametrize("category", ["file", "folder"])
    @pytest.mark.parametrize(
        "starred,expected",
        [(True, True), ("true", True), ("FALSE", False), ("false", False), ("yes", False), (None, False)],
    )
    def test_starred_text(self, resolver, category, starred, expected):
        """Test starred flags given as text are parsed, not truth-tested."""
        attrs = resolver.resolve(Item(category, "notes", "notes", attributes={"starred": starred}))
        assert attrs.value(Source.STARRED) is expected
