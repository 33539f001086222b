"""
Range types produced by the span locator.

A ``TextRange`` is a bare half-open character range. A ``SpanMatch`` is a
range located in a specific document together with how it was found.
"""

from dataclasses import dataclass
from enum import Enum


class MatchStrategy(str, Enum):
    """The strategy that produced a match, from strictest to most tolerant."""

    EXACT = "exact"
    WHITESPACE = "whitespace"
    PHRASE = "phrase"

    @property
    def is_line_block(self) -> bool:
        """True when matches cover whole lines rather than exact characters."""
        return self is not MatchStrategy.EXACT


@dataclass(frozen=True)
class TextRange:
    """A half-open character range ``[start, end)`` into a document's raw text."""

    start: int
    end: int

    @property
    def length(self) -> int:
        """Number of characters covered by the range."""
        return self.end - self.start


@dataclass(frozen=True)
class SpanMatch(TextRange):
    """An excerpt located in a document.

    Attributes:
        start: Offset of the first matched character
        end: Offset one past the last matched character
        strategy: Which strategy found the match
        start_line: 0-based index of the line containing ``start``
        end_line: 0-based index of the last line covered (inclusive)
        matched_text: The raw document text at ``[start, end)``
        phrase: The normalized form that was compared, for diagnostics

    Example:
        >>> match = locate("The quick fox.\\nIt jumps.", "quick fox")
        >>> (match.start, match.end, match.strategy)
        (4, 13, <MatchStrategy.EXACT: 'exact'>)
    """

    strategy: MatchStrategy = MatchStrategy.EXACT
    start_line: int = 0
    end_line: int = 0
    matched_text: str = ""
    phrase: str = ""

    @property
    def is_line_block(self) -> bool:
        """True when the match replaces whole lines (heuristic strategies)."""
        return self.strategy.is_line_block

    def __str__(self) -> str:
        """Return a user-friendly string representation."""
        if self.start_line == self.end_line:
            lines = f"line {self.start_line + 1}"
        else:
            lines = f"lines {self.start_line + 1}-{self.end_line + 1}"
        return f"{self.strategy.value} match at [{self.start}, {self.end}) ({lines})"
