"""
ReviewSession: run annotation decisions against document and annotation stores.

The session is the caller the engine expects: it snapshots a document and the
annotation collection, runs the pure engine, and persists the results. Writes
to one document are serialized with a per-document lock.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict

from .errors import (
    AnnotationNotFoundError,
    AnnotationResolvedError,
    ExcerptNotFoundError,
    NoProposalError,
)
from .locator import SpanLocator
from .models.annotation import Annotation, MessageRole, ProposedPatch
from .patch import PatchApplicator
from .proposals import parse_proposal
from .results import ReviewResult
from .stores import AnnotationStore, DocumentStore

logger = logging.getLogger(__name__)

# Failures the caller can recover from by re-proposing or abandoning
RECOVERABLE_ERRORS = (ExcerptNotFoundError, NoProposalError, AnnotationResolvedError)


class ReviewSession:
    """Creates annotations, attaches proposals, and accepts or rejects them.

    Example:
        >>> session = ReviewSession(FileDocumentStore("docs"),
        ...                         JsonAnnotationStore("docs/.comments.json"))
        >>> note = session.create_annotation("intro.md", 0, 14, "The quick fox.")
        >>> session.propose(note.id, ProposedPatch("The quick fox.", "The slow fox."))
        >>> result = session.accept(note.id)
        >>> print(result)
        ✓ accept ...: Change applied to intro.md
    """

    def __init__(
        self,
        documents: DocumentStore,
        annotations: AnnotationStore,
        locator: SpanLocator | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            documents: Where raw document text is read and written
            annotations: Where the annotation collection is persisted
            locator: Locator for resolving proposals (default settings if None)
        """
        self.documents = documents
        self.annotations = annotations
        self.applicator = PatchApplicator(locator)
        self._locks: defaultdict[str, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()
        # Annotation saves overwrite the whole collection, so they share a lock
        self._collection_lock = threading.RLock()

    def _document_lock(self, document_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks[document_id]

    def get(self, annotation_id: str) -> Annotation:
        """Return the annotation with ``annotation_id``.

        Raises:
            AnnotationNotFoundError: If there is no such annotation
        """
        for annotation in self.annotations.load():
            if annotation.id == annotation_id:
                return annotation
        raise AnnotationNotFoundError(annotation_id)

    def list_annotations(self, document_id: str | None = None) -> list[Annotation]:
        """List annotations, optionally only those on one document."""
        return self.annotations.list(document_id)

    def _update(self, annotation_id: str, change) -> Annotation:
        """Apply ``change`` to one annotation and persist the collection."""
        with self._collection_lock:
            collection = self.annotations.load()
            for index, annotation in enumerate(collection):
                if annotation.id == annotation_id:
                    updated = change(annotation)
                    collection[index] = updated
                    self.annotations.save(collection)
                    return updated
        raise AnnotationNotFoundError(annotation_id)

    def create_annotation(
        self,
        document_id: str,
        range_start: int,
        range_end: int,
        selected_text: str,
        message: str | None = None,
    ) -> Annotation:
        """Create and persist an open annotation.

        Args:
            document_id: The annotated document
            range_start: Start offset from the rendering layer
            range_end: End offset from the rendering layer
            selected_text: The text as the reviewer saw it
            message: Optional first user message

        Returns:
            The new annotation

        Raises:
            InvalidInputError: If the range is negative or inverted
        """
        annotation = Annotation(document_id, range_start, range_end, selected_text)
        if message:
            annotation = annotation.with_message(MessageRole.USER, message)

        with self._collection_lock:
            collection = self.annotations.load()
            collection.append(annotation)
            self.annotations.save(collection)

        logger.debug("Created annotation %s on %s", annotation.id, document_id)
        return annotation

    def add_message(self, annotation_id: str, role: MessageRole, content: str) -> Annotation:
        """Append a message to an annotation's thread."""
        return self._update(annotation_id, lambda a: a.with_message(role, content))

    def propose(
        self,
        annotation_id: str,
        proposal: ProposedPatch,
        response: str | None = None,
    ) -> Annotation:
        """Attach a proposed patch, replacing any earlier one.

        Args:
            annotation_id: The annotation to propose on
            proposal: The candidate edit
            response: Optional assistant message to append with it

        Raises:
            AnnotationResolvedError: If the annotation is already resolved
        """

        def change(annotation: Annotation) -> Annotation:
            if annotation.is_resolved:
                raise AnnotationResolvedError(annotation_id)
            # Clear first so there is never more than one live proposal
            annotation = annotation.with_proposal(None)
            if response:
                annotation = annotation.with_message(MessageRole.ASSISTANT, response)
            return annotation.with_proposal(proposal)

        return self._update(annotation_id, change)

    def record_response(self, annotation_id: str, response: str) -> Annotation:
        """Store an assistant reply, attaching any ``<propose_diff>`` it carries.

        Any earlier proposal is cleared; a reply without a proposal leaves the
        annotation with none.
        """
        parsed = parse_proposal(response)

        def change(annotation: Annotation) -> Annotation:
            if annotation.is_resolved:
                raise AnnotationResolvedError(annotation_id)
            annotation = annotation.with_proposal(None)
            annotation = annotation.with_message(MessageRole.ASSISTANT, parsed.text)
            return annotation.with_proposal(parsed.proposal)

        return self._update(annotation_id, change)

    def accept(self, annotation_id: str) -> ReviewResult:
        """Apply an annotation's proposed patch to its document.

        On success the new document text and the whole updated annotation
        collection are persisted. Recoverable failures (stale or missing
        proposal, already resolved) are returned with ``success=False`` and
        leave both stores untouched.

        Raises:
            AnnotationNotFoundError: If there is no such annotation
            DocumentNotFoundError: If the annotated document does not exist
        """
        annotation = self.get(annotation_id)
        document_id = annotation.document_id

        with self._document_lock(document_id), self._collection_lock:
            text = self.documents.read(document_id)
            collection = self.annotations.load()

            try:
                result = self.applicator.apply_proposal(text, collection, annotation_id)
            except RECOVERABLE_ERRORS as e:
                logger.info("Could not accept %s: %s", annotation_id, e)
                return ReviewResult(
                    success=False,
                    action="accept",
                    annotation_id=annotation_id,
                    message=str(e).splitlines()[0],
                    error=e,
                )

            self.documents.write(document_id, result.text)
            self.annotations.save(result.annotations)

        updated = next(a for a in result.annotations if a.id == annotation_id)
        return ReviewResult(
            success=True,
            action="accept",
            annotation_id=annotation_id,
            message=f"Change applied to {document_id} ({result})",
            annotation=updated,
            text=result.text,
            patch=result,
        )

    def reject(self, annotation_id: str) -> ReviewResult:
        """Discard an annotation's proposed patch; the document is not touched.

        Raises:
            AnnotationNotFoundError: If there is no such annotation
        """
        with self._collection_lock:
            collection = self.annotations.load()
            try:
                collection = self.applicator.reject(collection, annotation_id)
            except RECOVERABLE_ERRORS as e:
                return ReviewResult(
                    success=False,
                    action="reject",
                    annotation_id=annotation_id,
                    message=str(e),
                    error=e,
                )
            self.annotations.save(collection)

        updated = next(a for a in collection if a.id == annotation_id)
        return ReviewResult(
            success=True,
            action="reject",
            annotation_id=annotation_id,
            message="Proposal discarded",
            annotation=updated,
        )
