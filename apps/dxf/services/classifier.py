"""
Pattern classifier for GEB/GEBERIT related drawing content.

The classifier owns the matching rule only; the extractor decides which
part of a record is handed to it.
"""
import json
import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_PATTERN_TOKENS = ("GEBERIT", "GEB")


class PatternClassifier:
    """
    Case-insensitive substring match against a set of tokens.

    Usage:
        classifier = PatternClassifier(["GEBERIT", "GEB"])
        classifier.matches("geb-pipe")                  # True
        classifier.matches({"layer": "0", "text": "x"})  # False
        classifier.matches_entry("GEB_WC", block_data)  # True
    """

    def __init__(self, tokens: Iterable[str] = DEFAULT_PATTERN_TOKENS):
        self.tokens = tuple(t for t in (tokens or ()) if t)
        if not self.tokens:
            raise ValueError("PatternClassifier needs at least one token")
        # Longest first so the alternation reports the most specific token.
        ordered = sorted(self.tokens, key=len, reverse=True)
        self.pattern = re.compile(
            "|".join(re.escape(t) for t in ordered), re.IGNORECASE
        )

    @classmethod
    def from_regex(cls, pattern: str) -> "PatternClassifier":
        """Build a classifier from a raw regular expression."""
        classifier = cls.__new__(cls)
        classifier.tokens = (pattern,)
        classifier.pattern = re.compile(pattern, re.IGNORECASE)
        return classifier

    @classmethod
    def from_settings(cls) -> "PatternClassifier":
        from django.conf import settings

        config = getattr(settings, "GEB_EXTRACTOR", {})
        return cls(config.get("PATTERN_TOKENS", DEFAULT_PATTERN_TOKENS))

    def matches_text(self, value: Any) -> bool:
        return isinstance(value, str) and self.pattern.search(value) is not None

    def matches(self, value: Any) -> bool:
        """Match a string, or any string nested inside a mapping or list."""
        if isinstance(value, str):
            return self.matches_text(value)
        if isinstance(value, Mapping):
            return any(self.matches(v) for v in value.values())
        if isinstance(value, (list, tuple)):
            return any(self.matches(v) for v in value)
        return False

    def matches_entry(self, name: Optional[str], record: Any) -> bool:
        """
        Match a named table entry (block or layer).

        Falls back to the serialized record, so keys and stringified
        values count too. Over-inclusion is accepted here.
        """
        if self.matches_text(name) or self.matches(record):
            return True
        try:
            serialized = json.dumps(record, default=str)
        except (TypeError, ValueError) as e:
            logger.debug(f"Could not serialize entry {name!r}: {e}")
            return False
        return self.matches_text(serialized)

    def __repr__(self):
        return f"<PatternClassifier(pattern={self.pattern.pattern!r})>"
