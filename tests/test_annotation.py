"""Tests for the annotation model and its JSON layout."""

import pytest

from anchor_patch import (
    Annotation,
    AnnotationMessage,
    AnnotationStatus,
    InvalidInputError,
    MessageRole,
    ProposedPatch,
)

STORED = {
    "id": "c1",
    "filePath": "ads/hooks.md",
    "selectionStart": 12,
    "selectionEnd": 34,
    "selectedText": "Save 15 hours per week",
    "status": "open",
    "messages": [
        {
            "id": "m1",
            "role": "user",
            "content": "Make this punchier",
            "createdAt": "2024-05-01T10:00:00+00:00",
        }
    ],
    "proposedDiff": {
        "original": "Save 15 hours per week",
        "replacement": "Save 20 hours per week",
        "explanation": "Stronger claim",
    },
    "createdAt": "2024-05-01T09:59:00+00:00",
}


class TestAnnotationModel:
    """Test construction and copy helpers."""

    def test_defaults(self):
        """Test a new annotation is open with no proposal or messages."""
        note = Annotation("doc.md", 0, 5, "hello")
        assert note.is_open
        assert not note.is_resolved
        assert note.proposed_patch is None
        assert note.messages == ()
        assert note.id

    def test_ids_are_unique(self):
        """Test generated ids differ."""
        assert Annotation("doc.md", 0, 1).id != Annotation("doc.md", 0, 1).id

    @pytest.mark.parametrize("start,end", [(-1, 3), (5, 2)])
    def test_invalid_range(self, start, end):
        """Test negative and inverted ranges are rejected."""
        with pytest.raises(InvalidInputError):
            Annotation("doc.md", start, end)

    def test_empty_range_allowed(self):
        """Test a collapsed range is a valid anchor."""
        assert Annotation("doc.md", 4, 4).range_end == 4

    def test_messages_coerced_to_tuple(self):
        """Test a list of messages is stored as a tuple."""
        note = Annotation("doc.md", 0, 1, messages=[AnnotationMessage(MessageRole.USER, "hi")])
        assert isinstance(note.messages, tuple)

    def test_with_message(self):
        """Test appending a message returns a new annotation."""
        note = Annotation("doc.md", 0, 1)
        updated = note.with_message(MessageRole.ASSISTANT, "How about this?")
        assert note.messages == ()
        assert updated.messages[0].role is MessageRole.ASSISTANT
        assert updated.messages[0].content == "How about this?"

    def test_shifted(self):
        """Test shifting moves both offsets."""
        note = Annotation("doc.md", 10, 20).shifted(-4)
        assert (note.range_start, note.range_end) == (6, 16)

    def test_shifted_clamps_at_zero(self):
        """Test a shift never produces negative offsets."""
        note = Annotation("doc.md", 2, 5).shifted(-10)
        assert (note.range_start, note.range_end) == (0, 0)

    def test_resolved_consumes_proposal(self):
        """Test resolving clears the proposed patch."""
        note = Annotation("doc.md", 0, 1, proposed_patch=ProposedPatch("a", "b"))
        resolved = note.resolved()
        assert resolved.status is AnnotationStatus.RESOLVED
        assert resolved.proposed_patch is None

    def test_str(self):
        """Test the display form mentions the id, document and proposal."""
        note = Annotation("doc.md", 0, 5, "hello", id="c9", proposed_patch=ProposedPatch("a", "b"))
        assert str(note) == "○ c9 doc.md [0, 5) 'hello' [patch proposed]"


class TestAnnotationSerialization:
    """Test the flat-file JSON layout."""

    def test_from_dict(self):
        """Test a stored entry loads with every field mapped."""
        note = Annotation.from_dict(STORED)

        assert note.id == "c1"
        assert note.document_id == "ads/hooks.md"
        assert (note.range_start, note.range_end) == (12, 34)
        assert note.status is AnnotationStatus.OPEN
        assert note.proposed_patch == ProposedPatch(
            "Save 15 hours per week", "Save 20 hours per week", "Stronger claim"
        )
        assert note.messages[0].role is MessageRole.USER
        assert note.messages[0].created_at == "2024-05-01T10:00:00+00:00"

    def test_round_trip_preserves_layout(self):
        """Test loading then saving gives back the same dictionary."""
        assert Annotation.from_dict(STORED).to_dict() == STORED

    def test_no_proposal_key_when_absent(self):
        """Test proposedDiff is omitted when there is no proposal."""
        data = Annotation("doc.md", 0, 1).to_dict()
        assert "proposedDiff" not in data
        assert data["status"] == "open"

    def test_missing_optional_fields(self):
        """Test minimal entries load with defaults."""
        note = Annotation.from_dict(
            {"id": "x", "filePath": "a.md", "selectionStart": 0, "selectionEnd": 2}
        )
        assert note.selected_text == ""
        assert note.is_open
        assert note.created_at

    def test_missing_required_field(self):
        """Test an entry without a document path is rejected."""
        with pytest.raises(KeyError):
            Annotation.from_dict({"id": "x", "selectionStart": 0, "selectionEnd": 1})

    def test_unknown_status(self):
        """Test an unknown status value is rejected."""
        with pytest.raises(ValueError):
            Annotation.from_dict({**STORED, "status": "archived"})
