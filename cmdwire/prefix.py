"""Prefix detection for messages addressed to the bot."""

from dataclasses import dataclass
from typing import Iterable, Tuple


@dataclass(frozen=True)
class PrefixMatch:
    """Result of checking a message against the bot's prefixes.

    Attributes:
        matched: True if the text began with one of the prefixes.
        prefix: The prefix that matched, or "" when nothing matched.
        remainder: Text after the prefix. Equal to the input when
            nothing matched.
    """
    matched: bool
    prefix: str
    remainder: str


class PrefixMatcher:
    """Checks message text against an ordered set of prefixes.

    Prefixes are tried in the order given; the first one the text
    starts with wins. Empty and duplicate prefixes are dropped.
    """

    def __init__(self, prefixes: Iterable[str]):
        ordered = []
        for prefix in prefixes:
            if prefix and prefix not in ordered:
                ordered.append(prefix)
        self._prefixes: Tuple[str, ...] = tuple(ordered)

    @property
    def prefixes(self) -> Tuple[str, ...]:
        return self._prefixes

    def match(self, text: str) -> PrefixMatch:
        """Strip the first matching prefix from text.

        The input string is never modified; the remainder is a new
        string.
        """
        for prefix in self._prefixes:
            if text.startswith(prefix):
                return PrefixMatch(True, prefix, text[len(prefix):])
        return PrefixMatch(False, "", text)
