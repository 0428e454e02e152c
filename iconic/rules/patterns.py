#!/usr/bin/env python3
r"""Pattern support for rule evaluation and vault scanning.

This module provides:
- RegexCache: compiled regular expressions for matchesRegex conditions,
  cached by literal pattern, with invalid patterns remembered as such
- PathFilter: glob matching of vault paths (*, ?, ** across segments)

Example:
    >>> cache = RegexCache()
    >>> cache.search(r"^draft-", "draft-intro.md")
    True
    >>> cache.search("([", "anything")  # invalid: logged once, never matches
    False
    >>> PathFilter([".obsidian/**"]).matches(".obsidian/app.json")
    True
"""

import re
from typing import Iterable, List, Optional, Pattern

from iconic.core.constants import Limits
from iconic.infrastructure.cache_manager import CacheConfig, LRUCache
from iconic.infrastructure.logger import Logger, get_logger

_MISSING = object()


class RegexCache:
    """Read-through cache of compiled regular expressions.

    Keys are the literal pattern strings, so an entry never goes stale: the
    same text always compiles to the same expression. Patterns that fail to
    compile are cached as None so they are reported only once.
    """

    def __init__(
        self, max_entries: int = Limits.DEFAULT_REGEX_CACHE_SIZE, logger: Optional[Logger] = None
    ):
        """Initialize regex cache.

        Args:
            max_entries: Maximum number of patterns kept
            logger: Logger for invalid patterns
        """
        self._cache = LRUCache(CacheConfig(max_entries=max_entries))
        self._logger = logger or get_logger()

    def compile(self, pattern: str) -> Optional[Pattern[str]]:
        """Get the compiled form of a pattern.

        Args:
            pattern: Regular expression source

        Returns:
            Compiled pattern, or None if the pattern is invalid
        """
        cached = self._cache.get(pattern, _MISSING)
        if cached is not _MISSING:
            return cached

        compiled: Optional[Pattern[str]] = None
        if len(pattern) > Limits.MAX_REGEX_LENGTH:
            self._logger.warning(
                "Regex pattern too long, condition will never match",
                length=len(pattern),
                limit=Limits.MAX_REGEX_LENGTH,
            )
        else:
            try:
                compiled = re.compile(pattern)
            except re.error as e:
                self._logger.warning(
                    "Invalid regex pattern, condition will never match",
                    pattern=pattern,
                    error=str(e),
                )

        self._cache.set(pattern, compiled)
        return compiled

    def search(self, pattern: str, text: str) -> bool:
        """Check whether ``pattern`` matches anywhere in ``text``.

        Invalid patterns never match.
        """
        compiled = self.compile(pattern)
        if compiled is None:
            return False
        return compiled.search(text) is not None

    def invalidate(self, pattern: str) -> bool:
        """Drop one pattern from the cache."""
        return self._cache.invalidate(pattern)

    def clear(self) -> None:
        """Drop all cached patterns."""
        self._cache.clear()

    def get_stats(self) -> dict:
        """Cache statistics (entries, hits, misses, evictions)."""
        return self._cache.get_stats()

    def __contains__(self, pattern: str) -> bool:
        return pattern in self._cache

    def __len__(self) -> int:
        return len(self._cache)


def glob_to_regex(pattern: str) -> Pattern[str]:
    """Translate a path glob into a compiled regular expression.

    ``*`` and ``?`` stay within one path segment; ``**`` spans any number of
    segments, including none (``**/*.md`` matches ``a.md`` and
    ``notes/daily/a.md``).
    """
    doublestar = "\x00DOUBLESTAR\x00"
    star = "\x00STAR\x00"
    question = "\x00QUESTION\x00"

    escaped = pattern.replace("\\", "/")
    escaped = escaped.replace("**", doublestar).replace("*", star).replace("?", question)
    escaped = re.escape(escaped)

    escaped = escaped.replace(re.escape(doublestar) + re.escape("/"), "(?:.*/|)")
    escaped = escaped.replace(re.escape("/") + re.escape(doublestar), "(?:/.*|)")
    escaped = escaped.replace(re.escape(doublestar), ".*")
    escaped = escaped.replace(re.escape(star), "[^/]*")
    escaped = escaped.replace(re.escape(question), "[^/]")

    return re.compile("^" + escaped + "$")


class PathFilter:
    """Matches vault paths against a list of glob patterns (OR logic)."""

    def __init__(self, patterns: Iterable[str] = (), case_sensitive: bool = True):
        """Initialize path filter.

        Args:
            patterns: Glob patterns (e.g., ".obsidian/**", "**/*.canvas")
            case_sensitive: Whether matching respects case

        Raises:
            ValueError: If a pattern is empty
        """
        self._case_sensitive = case_sensitive
        self._patterns: List[str] = []
        self._compiled: List[Pattern[str]] = []
        for pattern in patterns:
            self.add(pattern)

    def add(self, pattern: str) -> None:
        """Add a glob pattern."""
        if not pattern:
            raise ValueError("Glob pattern cannot be empty")
        self._patterns.append(pattern)
        normalized = pattern if self._case_sensitive else pattern.lower()
        self._compiled.append(glob_to_regex(normalized))

    def _normalize(self, path: str) -> str:
        path = path.replace("\\", "/").lstrip("/")
        return path if self._case_sensitive else path.lower()

    def matches(self, path: str) -> bool:
        """Check if a vault-relative path matches any pattern."""
        normalized = self._normalize(path)
        return any(regex.match(normalized) for regex in self._compiled)

    def matching_patterns(self, path: str) -> List[str]:
        """List the patterns that match a path."""
        normalized = self._normalize(path)
        return [p for p, regex in zip(self._patterns, self._compiled) if regex.match(normalized)]

    @property
    def patterns(self) -> List[str]:
        """Registered patterns, in insertion order."""
        return list(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def __bool__(self) -> bool:
        return bool(self._patterns)
