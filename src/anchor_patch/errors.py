"""
Custom exception classes for the anchor_patch package.

These exceptions provide helpful error messages with suggestions for
resolving common issues when locating excerpts and applying proposed
patches to review documents.
"""


class AnchorPatchError(Exception):
    """Base exception for all anchor_patch errors."""

    pass


class ExcerptNotFoundError(AnchorPatchError):
    """Raised when an excerpt cannot be located by any matching strategy.

    Attributes:
        excerpt: The excerpt that was being searched for
        phrase: The last normalized phrase that was tried (for diagnostics)
        strategies: Names of the strategies that were attempted, in order
        suggestions: List of helpful suggestions for resolving the issue
        hint: Additional context about why the excerpt wasn't found
    """

    headline = "Could not find"

    def __init__(
        self,
        excerpt: str,
        phrase: str | None = None,
        strategies: list[str] | None = None,
        suggestions: list[str] | None = None,
        hint: str | None = None,
    ) -> None:
        self.excerpt = excerpt
        self.phrase = phrase
        self.strategies = strategies or []
        self.suggestions = suggestions or []
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format a helpful error message with suggestions."""
        preview = self.excerpt if len(self.excerpt) <= 60 else self.excerpt[:57] + "..."
        msg = f"{self.headline} '{preview}'"

        if self.strategies:
            msg += f" (tried: {', '.join(self.strategies)})"

        if self.phrase:
            msg += f"\n\nNormalized phrase: '{self.phrase}'"

        if self.hint:
            msg += f"\n\nNote: {self.hint}"

        if self.suggestions:
            msg += "\n\nSuggestions:\n"
            for suggestion in self.suggestions:
                msg += f"  • {suggestion}\n"

        return msg


class OriginalTextMissingError(ExcerptNotFoundError):
    """Raised when a stored proposal's original text is no longer in the document.

    The document changed after the proposal was made (another accepted edit
    shifted or altered the region). The proposal should be discarded or
    recreated; it is never applied by guesswork.
    """

    headline = "Original text not found in document"

    def __init__(
        self,
        excerpt: str,
        document_id: str | None = None,
        phrase: str | None = None,
        strategies: list[str] | None = None,
        suggestions: list[str] | None = None,
    ) -> None:
        self.document_id = document_id
        hint = "The document may have changed since the proposal was made."
        if document_id:
            hint = f"'{document_id}' may have changed since the proposal was made."
        super().__init__(
            excerpt,
            phrase=phrase,
            strategies=strategies,
            suggestions=suggestions,
            hint=hint,
        )


class InvalidInputError(AnchorPatchError, ValueError):
    """Raised when an input violates a precondition.

    Examples are an empty excerpt, a negative or inverted range, a range past
    the end of the document, an oversized document, or a document id that
    escapes the store root.
    """

    pass


class AnnotationNotFoundError(AnchorPatchError):
    """Raised when an annotation id is not present in the collection.

    Attributes:
        annotation_id: The id that was looked up
    """

    def __init__(self, annotation_id: str) -> None:
        self.annotation_id = annotation_id
        super().__init__(f"Annotation '{annotation_id}' not found")


class AnnotationResolvedError(AnchorPatchError):
    """Raised when trying to change an annotation that is already resolved."""

    def __init__(self, annotation_id: str) -> None:
        self.annotation_id = annotation_id
        super().__init__(
            f"Annotation '{annotation_id}' is already resolved and cannot be changed"
        )


class NoProposalError(AnchorPatchError):
    """Raised when accepting or rejecting an annotation with no proposed patch."""

    def __init__(self, annotation_id: str) -> None:
        self.annotation_id = annotation_id
        super().__init__(f"Annotation '{annotation_id}' has no proposed patch to process")


class DocumentNotFoundError(AnchorPatchError):
    """Raised when a document store has no document under the given id."""

    def __init__(self, document_id: str) -> None:
        self.document_id = document_id
        super().__init__(f"Document '{document_id}' not found")


class StoreError(AnchorPatchError):
    """Raised when persisted annotations cannot be read or written.

    Attributes:
        path: The backing file, when the store is file-based
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)


class ValidationError(AnchorPatchError):
    """Raised when configuration content is invalid.

    Attributes:
        errors: List of specific validation error messages (optional)
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)
