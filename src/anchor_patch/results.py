"""
Result classes for patch operations.

This module provides result types that carry the outcome of applying or
rejecting a proposed patch.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.annotation import Annotation
    from .span import SpanMatch, TextRange


@dataclass
class PatchResult:
    """Result of applying a patch to a document.

    Attributes:
        text: The new document text
        annotations: The full updated annotation collection
        span: The range that was replaced, in the old document's coordinates
        delta: Signed length change, ``len(replacement) - len(replaced_text)``
        replaced_text: The old text at ``span``
        replacement: The text that was spliced in
        shifted: Ids of annotations whose anchors were repaired
    """

    text: str
    annotations: "list[Annotation]"
    span: "SpanMatch | TextRange"
    delta: int
    replaced_text: str
    replacement: str
    shifted: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        """Get string representation of the result."""
        sign = "+" if self.delta >= 0 else ""
        return (
            f"Replaced [{self.span.start}, {self.span.end}) ({sign}{self.delta} chars), "
            f"{len(self.shifted)} anchor{'s' if len(self.shifted) != 1 else ''} shifted"
        )


@dataclass
class ReviewResult:
    """Result of an accept or reject decision made through a review session.

    Recoverable failures (a stale proposal, a missing proposal) are reported
    here with ``success=False`` instead of being raised.

    Attributes:
        success: Whether the decision was applied
        action: "accept" or "reject"
        annotation_id: The annotation the decision was made on
        message: Human-readable message about the result
        annotation: The updated annotation, when successful
        text: The new document text, for successful accepts
        patch: The underlying PatchResult, for successful accepts
        error: The exception that prevented the decision, if any
    """

    success: bool
    action: str
    annotation_id: str
    message: str
    annotation: "Annotation | None" = None
    text: str | None = None
    patch: PatchResult | None = None
    error: Exception | None = None

    def __str__(self) -> str:
        """Get string representation of the result."""
        status = "✓" if self.success else "✗"
        return f"{status} {self.action} {self.annotation_id}: {self.message}"
