"""
Span locator: find an excerpt's true range in a document's raw text.

The excerpt may have been captured through a lossy rendering layer, so the
locator runs a cascade of strategies from exact to increasingly tolerant
(see ``anchor_patch.strategies``). The first strategy that succeeds wins.
"""

import logging
from collections.abc import Sequence

from .config import LocatorConfig
from .errors import ExcerptNotFoundError, InvalidInputError
from .span import SpanMatch
from .strategies import DEFAULT_STRATEGIES, Strategy, phrase_for
from .suggestions import SuggestionGenerator

logger = logging.getLogger(__name__)


class SpanLocator:
    """Locates excerpts in raw document text.

    The locator holds no per-document state; one instance can serve any
    number of documents and threads.

    Example:
        >>> locator = SpanLocator()
        >>> match = locator.locate("- Save 15 hours\\n  per week", "Save 15 hours per week")
        >>> match.strategy, match.start_line, match.end_line
        (<MatchStrategy.WHITESPACE: 'whitespace'>, 0, 1)
    """

    def __init__(
        self,
        config: LocatorConfig | None = None,
        strategies: Sequence[Strategy] | None = None,
    ) -> None:
        """Initialize the locator.

        Args:
            config: Tuning constants (defaults to ``LocatorConfig()``)
            strategies: Ordered strategies to try (defaults to
                ``DEFAULT_STRATEGIES``)
        """
        self.config = config or LocatorConfig()
        self.strategies = tuple(strategies) if strategies is not None else DEFAULT_STRATEGIES

    def _check_inputs(self, document_text: str, excerpt: str) -> None:
        if not excerpt:
            raise InvalidInputError("Excerpt must be a non-empty string")
        if len(document_text) > self.config.max_document_length:
            raise InvalidInputError(
                f"Document is {len(document_text)} characters long; "
                f"the limit is {self.config.max_document_length}"
            )

    def find(self, document_text: str, excerpt: str) -> SpanMatch | None:
        """Locate ``excerpt`` in ``document_text`` without raising on a miss.

        Args:
            document_text: Full raw text of one document
            excerpt: The text to locate (must be non-empty)

        Returns:
            The first strategy's match, or None if no strategy matched

        Raises:
            InvalidInputError: If the excerpt is empty or the document exceeds
                ``config.max_document_length``
        """
        self._check_inputs(document_text, excerpt)

        if not document_text:
            return None

        for strategy in self.strategies:
            match = strategy(document_text, excerpt, self.config)
            # An empty range is never substituted
            if match is not None and match.length > 0:
                logger.debug("Located excerpt: %s", match)
                return match
            logger.debug("Strategy '%s' found no match", strategy.name)

        return None

    def locate(self, document_text: str, excerpt: str) -> SpanMatch:
        """Locate ``excerpt`` in ``document_text``.

        Args:
            document_text: Full raw text of one document
            excerpt: The text to locate (must be non-empty)

        Returns:
            The match found by the first successful strategy

        Raises:
            ExcerptNotFoundError: If no strategy matched. The error carries the
                normalized phrase that was tried and suggestions.
            InvalidInputError: If the excerpt is empty or the document is too
                large
        """
        match = self.find(document_text, excerpt)
        if match is None:
            raise ExcerptNotFoundError(excerpt, **self.diagnose(document_text, excerpt))
        return match

    def diagnose(self, document_text: str, excerpt: str) -> dict:
        """Collect diagnostics for an excerpt that could not be located.

        Returns:
            Keyword arguments for ``ExcerptNotFoundError``: the normalized
            phrase, the strategy names tried and suggestions
        """
        return {
            "phrase": phrase_for(excerpt, self.config) or None,
            "strategies": [strategy.name for strategy in self.strategies],
            "suggestions": SuggestionGenerator.generate_suggestions(excerpt, document_text),
        }


_default_locator = SpanLocator()


def locate(document_text: str, excerpt: str, config: LocatorConfig | None = None) -> SpanMatch:
    """Locate ``excerpt`` in ``document_text`` with the default strategies.

    See ``SpanLocator.locate``.
    """
    locator = _default_locator if config is None else SpanLocator(config)
    return locator.locate(document_text, excerpt)
