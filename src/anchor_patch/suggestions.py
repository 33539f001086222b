"""
Suggestion generation for helpful error messages.

This module provides suggestions when an excerpt cannot be located in a
document, helping reviewers tell a stale proposal from a formatting mismatch.
"""

from rapidfuzz import fuzz

from .normalization import normalize_markdown


class SuggestionGenerator:
    """Generates helpful suggestions when an excerpt cannot be located.

    Analyzes the excerpt and the document to provide actionable suggestions
    for resolving ExcerptNotFoundError issues.
    """

    @staticmethod
    def generate_suggestions(excerpt: str, document_text: str) -> list[str]:
        """Generate helpful suggestions when an excerpt is not found.

        Args:
            excerpt: The excerpt that was searched for
            document_text: The raw document text that was searched

        Returns:
            List of suggestion strings
        """
        suggestions = []

        if not document_text.strip():
            return ["The document is empty"]

        # Curly vs straight quotes (common when copying from a rendered page)
        curly = "‘’“”"
        if any(c in excerpt for c in curly) != any(c in document_text for c in curly):
            suggestions.append(
                "Excerpt and document use different quote styles (curly vs straight)"
            )

        for similar in SuggestionGenerator.find_similar_text(excerpt, document_text):
            suggestions.append(f'Did you mean: "{similar}"')

        if not suggestions:
            suggestions.extend(
                [
                    "The document may have changed since the excerpt was captured",
                    "Try a shorter or more distinctive excerpt",
                ]
            )

        return suggestions

    @staticmethod
    def find_similar_text(
        excerpt: str,
        document_text: str,
        max_suggestions: int = 3,
        min_similarity: float = 0.6,
    ) -> list[str]:
        """Find document lines similar to the excerpt.

        Compares the markdown-normalized excerpt with each non-blank line of the
        document using fuzzy matching. This helps reviewers spot a proposal
        whose original text was slightly reworded.

        Args:
            excerpt: The excerpt that was searched for
            document_text: The raw document text
            max_suggestions: Maximum number of suggestions to return
            min_similarity: Minimum similarity threshold (0.0 to 1.0)

        Returns:
            Raw document lines (trimmed), most similar first

        Example:
            >>> SuggestionGenerator.find_similar_text(
            ...     "Save 15 hour per week", "# Intro\\n- Save 15 hours per week"
            ... )
            ['- Save 15 hours per week']
        """
        target = normalize_markdown(excerpt).lower()
        if not target:
            return []

        candidates: list[tuple[str, float]] = []
        seen: set[str] = set()

        for line in document_text.split("\n"):
            original = line.strip()
            if not original or original in seen:
                continue
            seen.add(original)

            normalized = normalize_markdown(original).lower()
            if not normalized:
                continue

            similarity = fuzz.ratio(target, normalized) / 100.0
            if similarity < min_similarity:
                # Long excerpts spanning lines still score well on the part they share
                similarity = fuzz.partial_ratio(target, normalized) / 100.0 * 0.9

            if similarity >= min_similarity:
                candidates.append((original, similarity))

        # Sort by similarity (descending), stable on document order
        candidates.sort(key=lambda x: x[1], reverse=True)
        return [text for text, _score in candidates[:max_suggestions]]
