"""
Text normalization for tolerant excerpt matching.

Excerpts captured through a rendering layer differ from the raw markdown in
three independent ways: whitespace is collapsed, markup is stripped, and list
markers are removed. The functions here undo those differences by normalizing
BOTH the excerpt and the document text to a common form before comparison.

Every normalizer is idempotent: ``f(f(s)) == f(s)``.

Example:
    >>> normalize_whitespace("Save 15 hours\\n  per week")
    'Save 15 hours per week'
    >>> normalize_markdown("- **Save** [15 hours](http://x) per week")
    'Save 15 hours per week'
"""

import re

_WHITESPACE_RE = re.compile(r"\s+")

# Emphasis and code markers. Underscores only count as markers when they are
# not inside a word, so snake_case identifiers survive.
_EMPHASIS_RE = re.compile(r"\*\*|~~|\*|`|(?<![^\W_])_+|_+(?![^\W_])")

# [text](target) and ![alt](target); nested links are unwrapped by repetition
_LINK_RE = re.compile(r"!?\[([^\[\]]*)\]\([^()]*\)")

# Leading block markers on each line: bullets, ordinals, headings, blockquotes
_LINE_MARKER_RE = re.compile(
    r"^[ \t]*(?:(?:[-*+•]|\d+[.)]|#{1,6}|>)(?:[ \t]+|$))+",
    re.MULTILINE,
)

# A single leading bullet or ordinal, as dropped by rendered list items
_LIST_MARKER_RE = re.compile(r"^\s*(?:[-*+•]|\d+[.)])\s+")

# Sentence terminators and line breaks used to split an excerpt into clauses
_CLAUSE_SPLIT_RE = re.compile(r"[.!?\n]+")

_SPECIAL_CHARS = {
    # Quotes
    "‘": "'",  # Left single quotation mark
    "’": "'",  # Right single quotation mark
    "“": '"',  # Left double quotation mark
    "”": '"',  # Right double quotation mark
    # Bullets
    "·": "•",  # Middle dot
    "◦": "•",  # White bullet
    "▪": "•",  # Black small square
    "●": "•",  # Black circle
    # Dashes
    "–": "-",  # En dash
    "—": "-",  # Em dash
    "‐": "-",  # Hyphen
    "‑": "-",  # Non-breaking hyphen
    "−": "-",  # Minus sign
    # Spaces
    " ": " ",  # Non-breaking space
    "​": "",  # Zero-width space
}
_SPECIAL_CHARS_TABLE = str.maketrans(_SPECIAL_CHARS)


def normalize_whitespace(text: str) -> str:
    """Normalize whitespace in text for matching.

    Replaces runs of whitespace characters with single spaces and strips
    leading/trailing whitespace.

    Args:
        text: The text to normalize

    Returns:
        Normalized text with single spaces

    Example:
        >>> normalize_whitespace("hello    world\\n\\ttest")
        'hello world test'
    """
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_special_chars(text: str) -> str:
    """Fold typographic quotes, bullets, dashes and odd spaces to plain forms.

    Rich-text editors often substitute smart quotes and dashes for the
    keyboard characters stored in the raw file (or the other way round).

    Example:
        >>> normalize_special_chars("plaintiff’s 2020–2024 claim")
        "plaintiff's 2020-2024 claim"
    """
    return text.translate(_SPECIAL_CHARS_TABLE)


def strip_markdown(text: str) -> str:
    """Remove inline markdown syntax and leading block markers.

    Keeps link and image text while dropping their targets, drops bold,
    italic, strike-through and code markers, and removes leading list bullets,
    ordinal markers, heading markers and blockquote markers on every line.
    Line structure is preserved.

    Example:
        >>> strip_markdown("## A **bold** [link](http://x)")
        'A bold link'
    """
    # Removing one construct can expose another ("~*~", nested links), so
    # repeat until stable
    previous = None
    while previous != text:
        previous = text
        # Block markers first so "* item" bullets are not taken for emphasis
        text = _LINE_MARKER_RE.sub("", text)
        text = _EMPHASIS_RE.sub("", text)
        text = _LINK_RE.sub(r"\1", text)

    return text


def normalize_markdown(text: str) -> str:
    """Full normalization used by the markdown-tolerant phrase strategy.

    Applies special character folding, markdown stripping and whitespace
    collapsing. Case is preserved; callers lower-case when they need to.

    Args:
        text: Raw or rendered text

    Returns:
        The normalized single-line string
    """
    text = strip_markdown(normalize_special_chars(text))
    text = normalize_whitespace(text)
    # A marker can only surface again at the very start once lines are joined
    return normalize_whitespace(_LINE_MARKER_RE.sub("", text))


def strip_list_marker(line: str) -> str:
    """Remove a leading list bullet or ordinal marker from a single line.

    Example:
        >>> strip_list_marker("  12. Save time")
        'Save time'
    """
    return _LIST_MARKER_RE.sub("", line, count=1)


def first_significant_clause(text: str, min_length: int = 10) -> str:
    """Return the first clause of ``text`` long enough to identify it.

    Splits on sentence terminators and newlines and returns the first fragment
    whose trimmed length exceeds ``min_length``. When no fragment qualifies
    the whole trimmed text is returned, so short excerpts still produce a
    usable phrase.

    Example:
        >>> first_significant_clause("Hi. Save 15 hours per week. Now!")
        'Save 15 hours per week'
    """
    for fragment in _CLAUSE_SPLIT_RE.split(text):
        fragment = fragment.strip()
        if len(fragment) > min_length:
            return fragment
    return text.strip()


def count_nonempty_lines(text: str) -> int:
    """Count the lines of ``text`` that contain something besides whitespace."""
    return sum(1 for line in text.split("\n") if line.strip())
