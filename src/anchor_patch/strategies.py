"""
Matching strategies used by the span locator.

Each strategy is a plain function with the same signature::

    strategy(document_text, excerpt, config) -> SpanMatch | None

and ``DEFAULT_STRATEGIES`` lists them from cheapest/safest to most tolerant.
The locator tries them in order and stops at the first match; a later
strategy is never preferred over an earlier one.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .config import LocatorConfig
from .normalization import (
    count_nonempty_lines,
    first_significant_clause,
    normalize_markdown,
    normalize_whitespace,
    strip_list_marker,
)
from .span import MatchStrategy, SpanMatch

logger = logging.getLogger(__name__)

StrategyFunc = Callable[[str, str, LocatorConfig], "SpanMatch | None"]


class _Lines:
    """Line view of a document that maps line indexes back to offsets."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.lines = text.split("\n")
        self.offsets = []
        offset = 0
        for line in self.lines:
            self.offsets.append(offset)
            offset += len(line) + 1

    def __len__(self) -> int:
        return len(self.lines)

    def block(self, first: int, last: int, strategy: MatchStrategy, phrase: str) -> SpanMatch:
        """Build a match covering lines ``first..last`` inclusive, without the final newline."""
        start = self.offsets[first]
        end = self.offsets[last] + len(self.lines[last])
        return SpanMatch(
            start=start,
            end=end,
            strategy=strategy,
            start_line=first,
            end_line=last,
            matched_text=self.text[start:end],
            phrase=phrase,
        )


def find_exact(document_text: str, excerpt: str, config: LocatorConfig) -> SpanMatch | None:
    """Find the leftmost verbatim occurrence of ``excerpt``.

    This is the common case: a proposal's original text was copied from the
    raw document shown to the assistant.
    """
    pos = document_text.find(excerpt)
    if pos == -1:
        return None

    end = pos + len(excerpt)
    start_line = document_text.count("\n", 0, pos)
    end_line = start_line + excerpt.count("\n")
    logger.debug("Exact match at [%d, %d)", pos, end)
    return SpanMatch(
        start=pos,
        end=end,
        strategy=MatchStrategy.EXACT,
        start_line=start_line,
        end_line=end_line,
        matched_text=document_text[pos:end],
        phrase=excerpt,
    )


def _extend(target: str, pos: int, piece: str) -> int:
    """Match ``piece`` against ``target`` after ``pos`` characters already matched.

    Pieces are joined by a single space. Returns the new matched length, or
    -1 once the accumulation is no longer a prefix of ``target``.
    """
    if not piece:
        return pos
    if pos:
        if not target.startswith(" ", pos):
            return -1
        pos += 1
    if not target.startswith(piece, pos):
        return -1
    return pos + len(piece)


def find_whitespace_block(
    document_text: str, excerpt: str, config: LocatorConfig
) -> SpanMatch | None:
    """Find a block of whole lines equal to the excerpt modulo whitespace.

    For each start line the following lines are trimmed and joined with single
    spaces until the accumulated text equals the whitespace-normalized excerpt.
    A start line is abandoned as soon as the accumulation stops being a prefix
    of the target, and never runs more than ``config.whitespace_slack``
    characters past the target length. Blank start lines are skipped so a
    match never absorbs the separator in front of a paragraph.

    Each line is normalized once and matched in place against the target, so
    a start line costs time proportional to the prefix it shares with the
    excerpt.

    Returns:
        A line-block match covering the matched lines, or None
    """
    target = normalize_whitespace(excerpt)
    if not target:
        return None

    view = _Lines(document_text)
    limit = len(target) + config.whitespace_slack
    pieces = [normalize_whitespace(line) for line in view.lines]
    # Rendered list items lose their bullets, so keep a second track with
    # each line's list marker removed
    bare_pieces = [normalize_whitespace(strip_list_marker(line.strip())) for line in view.lines]

    for i in range(len(view)):
        if not pieces[i]:
            continue

        pos = bare_pos = 0
        for j in range(i, len(view)):
            if pos >= 0:
                pos = _extend(target, pos, pieces[j])
            if bare_pos >= 0:
                bare_pos = _extend(target, bare_pos, bare_pieces[j])

            if len(target) in (pos, bare_pos):
                logger.debug("Whitespace-normalized match on lines %d-%d", i, j)
                return view.block(i, j, MatchStrategy.WHITESPACE, target)

            if (pos < 0 and bare_pos < 0) or max(pos, bare_pos) > limit:
                break

    return None


def phrase_for(excerpt: str, config: LocatorConfig) -> str:
    """Return the lower-cased normalized phrase prefix the phrase strategy searches for."""
    clause = first_significant_clause(excerpt, config.min_clause_length)
    return normalize_markdown(clause).lower()[: config.phrase_prefix_length]


def find_markdown_phrase(
    document_text: str, excerpt: str, config: LocatorConfig
) -> SpanMatch | None:
    """Find the line where the excerpt's first clause starts, ignoring markdown.

    The first significant clause of the excerpt is normalized with
    ``normalize_markdown``, lower-cased and cut to
    ``config.phrase_prefix_length`` characters. The first document line whose
    normalized, lower-cased form contains that prefix starts the match.

    The end is an estimate: ``max(1, line_block_factor * non-empty excerpt
    lines)`` lines from the start, bounded by the document end, with trailing
    blank lines trimmed. The result is a heuristic block, not an exact span.
    """
    phrase = phrase_for(excerpt, config)
    if not phrase:
        return None

    view = _Lines(document_text)

    for i, line in enumerate(view.lines):
        if phrase not in normalize_markdown(line).lower():
            continue

        span = max(1, config.line_block_factor * count_nonempty_lines(excerpt))
        last = min(len(view), i + span) - 1
        while last > i and not view.lines[last].strip():
            last -= 1

        logger.debug("Markdown phrase %r matched lines %d-%d", phrase, i, last)
        return view.block(i, last, MatchStrategy.PHRASE, phrase)

    return None


@dataclass(frozen=True)
class Strategy:
    """A named matching strategy."""

    strategy: MatchStrategy
    func: StrategyFunc

    @property
    def name(self) -> str:
        return self.strategy.value

    def __call__(self, document_text: str, excerpt: str, config: LocatorConfig) -> SpanMatch | None:
        return self.func(document_text, excerpt, config)


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    Strategy(MatchStrategy.EXACT, find_exact),
    Strategy(MatchStrategy.WHITESPACE, find_whitespace_block),
    Strategy(MatchStrategy.PHRASE, find_markdown_phrase),
)
