"""
Patch applicator and anchor repair.

Splices a replacement into a document at a located range, then repairs the
offsets of the other open annotations on the same document so they keep
pointing at the same text.

All operations here are pure: inputs are never mutated and updated copies
are returned. Persisting the result (and serializing writes per document)
is the caller's job; see ``anchor_patch.review.ReviewSession``.

Example:
    >>> text = "The quick fox.\\nIt jumps."
    >>> note = Annotation("story.md", 0, 14, "The quick fox.",
    ...                   proposed_patch=ProposedPatch("The quick fox.", "The slow fox."))
    >>> result = apply_proposal(text, [note], note.id)
    >>> result.text
    'The slow fox.\\nIt jumps.'
"""

import logging
from collections.abc import Iterable

from .constants import ACCEPTED_MESSAGE, REJECTED_MESSAGE
from .errors import (
    AnnotationNotFoundError,
    AnnotationResolvedError,
    InvalidInputError,
    NoProposalError,
    OriginalTextMissingError,
)
from .locator import SpanLocator
from .models.annotation import Annotation, MessageRole
from .results import PatchResult
from .span import SpanMatch, TextRange

logger = logging.getLogger(__name__)


def _find_annotation(annotations: list[Annotation], annotation_id: str) -> Annotation:
    for annotation in annotations:
        if annotation.id == annotation_id:
            return annotation
    raise AnnotationNotFoundError(annotation_id)


def shift_anchors(
    annotations: Iterable[Annotation],
    document_id: str,
    edit_end: int,
    delta: int,
    exclude_id: str | None = None,
) -> tuple[list[Annotation], list[str]]:
    """Shift the anchors of annotations that start after an edited region.

    Only open annotations on ``document_id`` whose ``range_start`` is strictly
    greater than ``edit_end`` move. Annotations that overlap or precede the
    edit keep their offsets; those may go stale, which is accepted.

    Args:
        annotations: The annotation collection (any documents)
        document_id: The document that was edited
        edit_end: End offset of the replaced region, in pre-edit coordinates
        delta: Signed length change of the edit
        exclude_id: Annotation to leave alone (the one being resolved)

    Returns:
        Tuple of (updated collection in the original order, ids of shifted
        annotations)
    """
    updated = []
    shifted = []

    for annotation in annotations:
        if (
            delta != 0
            and annotation.id != exclude_id
            and annotation.document_id == document_id
            and annotation.is_open
            and annotation.range_start > edit_end
        ):
            annotation = annotation.shifted(delta)
            shifted.append(annotation.id)
        updated.append(annotation)

    if shifted:
        logger.debug("Shifted %d anchor(s) in %s by %+d", len(shifted), document_id, delta)

    return updated, shifted


class PatchApplicator:
    """Applies proposed patches and keeps annotation anchors consistent.

    Example:
        >>> applicator = PatchApplicator()
        >>> result = applicator.apply_proposal(text, annotations, "c1")
        >>> save(result.text, result.annotations)
    """

    def __init__(self, locator: SpanLocator | None = None) -> None:
        """Initialize the applicator.

        Args:
            locator: Locator used to resolve proposal text (defaults to a
                locator with default settings)
        """
        self.locator = locator or SpanLocator()

    def apply(
        self,
        document_text: str,
        span: SpanMatch | TextRange,
        replacement: str,
        annotations: Iterable[Annotation],
        editing_annotation_id: str,
    ) -> PatchResult:
        """Replace ``span`` with ``replacement`` and resolve the editing annotation.

        Line-block matches already cover whole lines, so the matched lines are
        replaced by ``replacement`` as a single block.

        Args:
            document_text: Current raw text of the document
            span: The range to replace
            replacement: Text to splice in
            annotations: The annotation collection
            editing_annotation_id: The annotation whose patch is being accepted

        Returns:
            PatchResult with the new text and the full updated collection

        Raises:
            InvalidInputError: If the range is negative, inverted or past the
                end of the document
            AnnotationNotFoundError: If the editing annotation is missing
            AnnotationResolvedError: If the editing annotation is resolved
        """
        if span.start < 0 or span.end < span.start or span.end > len(document_text):
            raise InvalidInputError(
                f"Invalid range [{span.start}, {span.end}) for a document of "
                f"{len(document_text)} characters"
            )

        annotations = list(annotations)
        editing = _find_annotation(annotations, editing_annotation_id)
        if editing.is_resolved:
            raise AnnotationResolvedError(editing_annotation_id)

        replaced_text = document_text[span.start : span.end]
        new_text = document_text[: span.start] + replacement + document_text[span.end :]
        delta = len(replacement) - len(replaced_text)

        if isinstance(span, SpanMatch) and span.is_line_block:
            logger.warning(
                "Replacing lines %d-%d of %s via %s match",
                span.start_line + 1,
                span.end_line + 1,
                editing.document_id,
                span.strategy.value,
            )

        updated, shifted = shift_anchors(
            annotations,
            editing.document_id,
            span.end,
            delta,
            exclude_id=editing_annotation_id,
        )
        resolved = editing.resolved().with_message(MessageRole.SYSTEM, ACCEPTED_MESSAGE)
        updated = [resolved if a.id == editing_annotation_id else a for a in updated]

        logger.debug(
            "Applied patch for %s at [%d, %d), delta %+d",
            editing_annotation_id,
            span.start,
            span.end,
            delta,
        )

        return PatchResult(
            text=new_text,
            annotations=updated,
            span=span,
            delta=delta,
            replaced_text=replaced_text,
            replacement=replacement,
            shifted=shifted,
        )

    def apply_proposal(
        self,
        document_text: str,
        annotations: Iterable[Annotation],
        editing_annotation_id: str,
    ) -> PatchResult:
        """Locate and apply the editing annotation's stored proposed patch.

        Args:
            document_text: Current raw text of the document
            annotations: The annotation collection
            editing_annotation_id: The annotation whose patch is accepted

        Returns:
            PatchResult with the new text and the full updated collection

        Raises:
            OriginalTextMissingError: If the proposal's original text can no
                longer be located. Nothing is modified.
            NoProposalError: If the annotation has no proposed patch
            AnnotationNotFoundError: If the editing annotation is missing
            AnnotationResolvedError: If the editing annotation is resolved
        """
        annotations = list(annotations)
        editing = _find_annotation(annotations, editing_annotation_id)
        if editing.is_resolved:
            raise AnnotationResolvedError(editing_annotation_id)
        if editing.proposed_patch is None:
            raise NoProposalError(editing_annotation_id)

        proposal = editing.proposed_patch
        span = self.locator.find(document_text, proposal.original)
        if span is None:
            diagnostics = self.locator.diagnose(document_text, proposal.original)
            raise OriginalTextMissingError(
                proposal.original, document_id=editing.document_id, **diagnostics
            )

        return self.apply(
            document_text, span, proposal.replacement, annotations, editing_annotation_id
        )

    def reject(self, annotations: Iterable[Annotation], annotation_id: str) -> list[Annotation]:
        """Discard an annotation's proposed patch without touching the document.

        The proposal is cleared and a system message asking for an alternative
        is appended. The annotation stays open.

        Returns:
            The full updated collection

        Raises:
            NoProposalError: If the annotation has no proposed patch
            AnnotationNotFoundError: If the annotation is missing
            AnnotationResolvedError: If the annotation is resolved
        """
        annotations = list(annotations)
        target = _find_annotation(annotations, annotation_id)
        if target.is_resolved:
            raise AnnotationResolvedError(annotation_id)
        if target.proposed_patch is None:
            raise NoProposalError(annotation_id)

        rejected = target.with_proposal(None).with_message(MessageRole.SYSTEM, REJECTED_MESSAGE)
        logger.debug("Rejected proposal on %s", annotation_id)
        return [rejected if a.id == annotation_id else a for a in annotations]


_default_applicator = PatchApplicator()


def apply_patch(
    document_text: str,
    span: SpanMatch | TextRange,
    replacement: str,
    annotations: Iterable[Annotation],
    editing_annotation_id: str,
) -> PatchResult:
    """Apply ``replacement`` at ``span``. See ``PatchApplicator.apply``."""
    return _default_applicator.apply(
        document_text, span, replacement, annotations, editing_annotation_id
    )


def apply_proposal(
    document_text: str,
    annotations: Iterable[Annotation],
    editing_annotation_id: str,
) -> PatchResult:
    """Locate and apply a stored proposal. See ``PatchApplicator.apply_proposal``."""
    return _default_applicator.apply_proposal(document_text, annotations, editing_annotation_id)


def reject_proposal(annotations: Iterable[Annotation], annotation_id: str) -> list[Annotation]:
    """Discard a stored proposal. See ``PatchApplicator.reject``."""
    return _default_applicator.reject(annotations, annotation_id)
