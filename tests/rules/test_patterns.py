#!/usr/bin/env python3
"""Tests for the regex cache and glob path filter."""

import logging

import pytest

from iconic.core.constants import Limits
from iconic.rules.patterns import PathFilter, RegexCache, glob_to_regex


class TestRegexCache:
    """Tests for RegexCache."""

    def test_compile_is_cached(self, regex_cache):
        """Test repeated lookups return the same compiled pattern."""
        first = regex_cache.compile("^draft-")
        assert regex_cache.compile("^draft-") is first
        stats = regex_cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1

    def test_search(self, regex_cache):
        """Test unanchored search."""
        assert regex_cache.search("intro", "draft-intro.md")
        assert not regex_cache.search("^intro", "draft-intro.md")

    def test_invalid_pattern_cached_as_invalid(self, regex_cache, log_handler):
        """Test invalid patterns are remembered and reported once."""
        assert regex_cache.compile("([") is None
        assert regex_cache.compile("([") is None
        assert "([" in regex_cache
        assert len(log_handler.messages(logging.WARNING)) == 1

    def test_overlong_pattern_is_invalid(self, regex_cache):
        """Test the pattern length limit."""
        assert regex_cache.compile("a" * (Limits.MAX_REGEX_LENGTH + 1)) is None

    def test_invalidate(self, regex_cache):
        """Test eviction of one pattern."""
        regex_cache.compile("x")
        assert regex_cache.invalidate("x") is True
        assert regex_cache.invalidate("x") is False
        assert len(regex_cache) == 0

    def test_bounded(self, logger):
        """Test the least recently used pattern is evicted."""
        cache = RegexCache(max_entries=2, logger=logger)
        cache.compile("a")
        cache.compile("b")
        cache.compile("a")
        cache.compile("c")
        assert "a" in cache
        assert "b" not in cache
        assert len(cache) == 2

    def test_clear(self, regex_cache):
        """Test clearing."""
        regex_cache.compile("a")
        regex_cache.clear()
        assert len(regex_cache) == 0


class TestGlobToRegex:
    """Tests for glob translation."""

    @pytest.mark.parametrize(
        "pattern,path,expected",
        [
            ("*.md", "note.md", True),
            ("*.md", "notes/note.md", False),
            ("**/*.md", "note.md", True),
            ("**/*.md", "notes/daily/note.md", True),
            (".obsidian/**", ".obsidian", True),
            (".obsidian/**", ".obsidian/plugins/x.json", True),
            (".obsidian/**", "notes/.obsidian", False),
            ("**/.*", ".trash", True),
            ("**/.*", "notes/.hidden", True),
            ("**/.*", "notes/visible.md", False),
            ("notes/?.md", "notes/a.md", True),
            ("notes/?.md", "notes/ab.md", False),
            ("a/**/b", "a/b", True),
            ("a/**/b", "a/x/y/b", True),
            ("file[1].md", "file[1].md", True),
        ],
    )
    def test_translation(self, pattern, path, expected):
        """Test glob semantics."""
        assert bool(glob_to_regex(pattern).match(path)) is expected


class TestPathFilter:
    """Tests for PathFilter."""

    def test_matches_any_pattern(self):
        """Test OR logic across patterns."""
        path_filter = PathFilter([".obsidian/**", "**/*.canvas"])
        assert path_filter.matches(".obsidian/app.json")
        assert path_filter.matches("boards/plan.canvas")
        assert not path_filter.matches("notes/plan.md")
        assert path_filter.matching_patterns("x.canvas") == ["**/*.canvas"]

    def test_normalizes_paths(self):
        """Test leading slashes and backslashes."""
        path_filter = PathFilter(["notes/*.md"])
        assert path_filter.matches("/notes/a.md")
        assert path_filter.matches("notes\\a.md")

    def test_case_insensitive(self):
        """Test case-insensitive matching."""
        path_filter = PathFilter(["*.MD"], case_sensitive=False)
        assert path_filter.matches("note.md")
        assert not PathFilter(["*.MD"]).matches("note.md")

    def test_empty_filter(self):
        """Test a filter without patterns matches nothing."""
        path_filter = PathFilter()
        assert not path_filter
        assert len(path_filter) == 0
        assert not path_filter.matches("anything")

    def test_empty_pattern_rejected(self):
        """Test invalid patterns."""
        with pytest.raises(ValueError):
            PathFilter([""])

    def test_patterns_property(self):
        """Test registered patterns are listed in order."""
        path_filter = PathFilter(["b", "a"])
        path_filter.add("c")
        assert path_filter.patterns == ["b", "a", "c"]
