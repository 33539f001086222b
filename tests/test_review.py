"""
Tests for ReviewSession.

A session ties the pure engine to stores: it creates annotations, attaches
proposals, and persists the outcome of accept and reject decisions.
"""

import threading

import pytest

from anchor_patch import (
    AnnotationNotFoundError,
    AnnotationResolvedError,
    DocumentNotFoundError,
    FileDocumentStore,
    InMemoryAnnotationStore,
    InMemoryDocumentStore,
    JsonAnnotationStore,
    MessageRole,
    NoProposalError,
    OriginalTextMissingError,
    ProposedPatch,
    ReviewSession,
)
from anchor_patch.constants import ACCEPTED_MESSAGE

TEXT = "The quick fox.\nIt jumps."


@pytest.fixture
def documents():
    return InMemoryDocumentStore({"story.md": TEXT})


@pytest.fixture
def session(documents):
    return ReviewSession(documents, InMemoryAnnotationStore())


class TestAnnotations:
    """Test creating and updating annotations."""

    def test_create_annotation(self, session):
        """Test a created annotation is persisted and open."""
        note = session.create_annotation("story.md", 0, 14, "The quick fox.", "Too slow?")

        assert session.get(note.id) == note
        assert note.is_open
        assert note.messages[0].role is MessageRole.USER
        assert session.list_annotations("story.md") == [note]
        assert session.list_annotations("other.md") == []

    def test_get_unknown(self, session):
        """Test looking up a missing annotation raises."""
        with pytest.raises(AnnotationNotFoundError):
            session.get("missing")

    def test_add_message(self, session):
        """Test messages are appended and persisted."""
        note = session.create_annotation("story.md", 0, 14, "The quick fox.")
        session.add_message(note.id, MessageRole.USER, "Shorter please")
        assert session.get(note.id).messages[-1].content == "Shorter please"

    def test_propose_replaces_earlier_proposal(self, session):
        """Test only the latest proposal is kept."""
        note = session.create_annotation("story.md", 0, 14, "The quick fox.")
        session.propose(note.id, ProposedPatch("The quick fox.", "A"))
        updated = session.propose(note.id, ProposedPatch("The quick fox.", "B"), "Try this")

        assert updated.proposed_patch.replacement == "B"
        assert updated.messages[-1].role is MessageRole.ASSISTANT

    def test_record_response_with_proposal(self, session):
        """Test an assistant reply carrying a block attaches a proposal."""
        note = session.create_annotation("story.md", 0, 14, "The quick fox.")
        updated = session.record_response(
            note.id,
            "Try this.\n<propose_diff><original>The quick fox.</original>"
            "<replacement>The slow fox.</replacement>"
            "<explanation>Calmer</explanation></propose_diff>",
        )

        assert updated.proposed_patch == ProposedPatch("The quick fox.", "The slow fox.", "Calmer")
        assert updated.messages[-1].content == "Try this."

    def test_record_response_without_proposal_clears(self, session):
        """Test a plain reply leaves no live proposal."""
        note = session.create_annotation("story.md", 0, 14, "The quick fox.")
        session.propose(note.id, ProposedPatch("The quick fox.", "A"))
        updated = session.record_response(note.id, "Never mind.")
        assert updated.proposed_patch is None

    def test_propose_on_resolved(self, session):
        """Test resolved annotations accept no new proposals."""
        note = session.create_annotation("story.md", 0, 14, "The quick fox.")
        session.propose(note.id, ProposedPatch("The quick fox.", "The slow fox."))
        session.accept(note.id)

        with pytest.raises(AnnotationResolvedError):
            session.propose(note.id, ProposedPatch("The slow fox.", "x"))


class TestAccept:
    """Test accepting proposals through a session."""

    def test_accept_writes_document_and_annotations(self, session, documents):
        """Test a successful accept persists text and the resolved annotation."""
        note = session.create_annotation("story.md", 0, 14, "The quick fox.")
        later = session.create_annotation("story.md", 15, 24, "It jumps.")
        session.propose(note.id, ProposedPatch("The quick fox.", "The slow fox."))

        result = session.accept(note.id)

        assert result.success
        assert result.action == "accept"
        assert documents.read("story.md") == "The slow fox.\nIt jumps."
        assert result.text == documents.read("story.md")
        assert session.get(note.id).is_resolved
        assert session.get(note.id).messages[-1].content == ACCEPTED_MESSAGE
        assert session.get(later.id).range_start == 14
        assert str(result).startswith(f"✓ accept {note.id}: Change applied to story.md")

    def test_stale_proposal_changes_nothing(self, session, documents):
        """Test a proposal whose original is gone fails without side effects."""
        note = session.create_annotation("story.md", 0, 14, "The quick fox.")
        session.propose(note.id, ProposedPatch("A completely different sentence", "x"))
        before = session.list_annotations()

        result = session.accept(note.id)

        assert not result.success
        assert isinstance(result.error, OriginalTextMissingError)
        assert result.message.startswith("Original text not found")
        assert documents.read("story.md") == TEXT
        assert session.list_annotations() == before

    def test_accept_without_proposal(self, session):
        """Test accepting with nothing proposed is reported, not raised."""
        note = session.create_annotation("story.md", 0, 14, "The quick fox.")
        result = session.accept(note.id)
        assert not result.success
        assert isinstance(result.error, NoProposalError)

    def test_accept_twice(self, session, documents):
        """Test a resolved annotation is never applied again."""
        note = session.create_annotation("story.md", 0, 3, "The")
        session.propose(note.id, ProposedPatch("The", "A"))
        assert session.accept(note.id).success

        result = session.accept(note.id)

        assert not result.success
        assert isinstance(result.error, AnnotationResolvedError)
        assert documents.read("story.md") == "A quick fox.\nIt jumps."

    def test_missing_document_raises(self, session):
        """Test an annotation on an unknown document raises."""
        note = session.create_annotation("gone.md", 0, 1, "x")
        session.propose(note.id, ProposedPatch("x", "y"))
        with pytest.raises(DocumentNotFoundError):
            session.accept(note.id)

    def test_concurrent_accepts_on_one_document(self, documents):
        """Test parallel accepts on one document all land."""
        words = [f"word{i}" for i in range(8)]
        documents.write("story.md", " ".join(words))
        session = ReviewSession(documents, InMemoryAnnotationStore())
        ids = []
        for word in words:
            note = session.create_annotation("story.md", 0, 1, word)
            session.propose(note.id, ProposedPatch(word, word.upper()))
            ids.append(note.id)

        threads = [threading.Thread(target=session.accept, args=(i,)) for i in ids]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert documents.read("story.md") == " ".join(w.upper() for w in words)
        assert all(a.is_resolved for a in session.list_annotations())


class TestReject:
    """Test rejecting proposals through a session."""

    def test_reject(self, session, documents):
        """Test rejecting clears the proposal and leaves the document alone."""
        note = session.create_annotation("story.md", 0, 14, "The quick fox.")
        session.propose(note.id, ProposedPatch("The quick fox.", "The slow fox."))

        result = session.reject(note.id)

        assert result.success
        assert result.message == "Proposal discarded"
        assert session.get(note.id).proposed_patch is None
        assert session.get(note.id).is_open
        assert documents.read("story.md") == TEXT

    def test_reject_without_proposal(self, session):
        """Test rejecting with nothing proposed is reported."""
        note = session.create_annotation("story.md", 0, 14, "The quick fox.")
        result = session.reject(note.id)
        assert not result.success
        assert isinstance(result.error, NoProposalError)

    def test_reject_unknown(self, session):
        """Test rejecting a missing annotation raises."""
        with pytest.raises(AnnotationNotFoundError):
            session.reject("missing")


class TestFileBackedSession:
    """Test a session over a directory and a JSON annotation file."""

    def test_accept_round_trip(self, tmp_path):
        """Test an accepted wrapped bullet is written to disk."""
        (tmp_path / "ads.md").write_text("- Save 15 hours\n  per week\n\nNext para")
        store_path = tmp_path / ".comments.json"
        session = ReviewSession(FileDocumentStore(tmp_path), JsonAnnotationStore(store_path))

        note = session.create_annotation("ads.md", 2, 26, "Save 15 hours per week")
        session.propose(note.id, ProposedPatch("Save 15 hours per week", "- Save 20 hours per week"))
        result = session.accept(note.id)

        assert result.success
        assert (tmp_path / "ads.md").read_text() == "- Save 20 hours per week\n\nNext para"
        reloaded = JsonAnnotationStore(store_path).load()
        assert reloaded[0].is_resolved
        assert reloaded[0].proposed_patch is None
