"""
Annotation model: a reviewer comment anchored to a range of a document.

Annotations serialize to the camelCase layout of the flat ``.comments.json``
file (``filePath``, ``selectionStart``, ``proposedDiff`` ...), so existing
comment files load unchanged.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from ..errors import InvalidInputError


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AnnotationStatus(str, Enum):
    """Annotation lifecycle state. Moves from OPEN to RESOLVED only."""

    OPEN = "open"
    RESOLVED = "resolved"


class MessageRole(str, Enum):
    """Author of a message in an annotation's thread."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class ProposedPatch:
    """A candidate edit awaiting a decision.

    Attributes:
        original: The text the proposal claims to replace
        replacement: The new text
        explanation: Why the change was proposed (not validated)
    """

    original: str
    replacement: str
    explanation: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "original": self.original,
            "replacement": self.replacement,
            "explanation": self.explanation,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProposedPatch:
        return cls(
            original=data["original"],
            replacement=data["replacement"],
            explanation=data.get("explanation", ""),
        )


@dataclass(frozen=True)
class AnnotationMessage:
    """One turn in an annotation's discussion thread."""

    role: MessageRole
    content: str
    id: str = field(default_factory=_new_id)
    created_at: str = field(default_factory=_now)

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "role": self.role.value,
            "content": self.content,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnnotationMessage:
        return cls(
            role=MessageRole(data["role"]),
            content=data["content"],
            id=data.get("id") or _new_id(),
            created_at=data.get("createdAt") or _now(),
        )


@dataclass(frozen=True)
class Annotation:
    """A reviewer comment anchored to a character range of one document.

    Annotations are immutable; operations return updated copies via the
    ``with_*`` helpers so a failed edit can never leave a half-updated
    collection behind.

    Attributes:
        document_id: Key of the owning document
        range_start: Start offset as captured by the rendering layer
        range_end: End offset as captured by the rendering layer
        selected_text: The excerpt as the rendering layer perceived it
        id: Opaque unique identifier
        status: OPEN or RESOLVED
        proposed_patch: The candidate edit awaiting a decision, if any
        messages: Discussion thread, oldest first
        created_at: ISO-8601 creation timestamp

    Note:
        ``range_start``/``range_end`` are best-effort coordinates. They are
        not guaranteed to bound ``selected_text`` in the raw document.

    Raises:
        InvalidInputError: If ``range_start < 0`` or ``range_end < range_start``
    """

    document_id: str
    range_start: int
    range_end: int
    selected_text: str = ""
    id: str = field(default_factory=_new_id)
    status: AnnotationStatus = AnnotationStatus.OPEN
    proposed_patch: ProposedPatch | None = None
    messages: tuple[AnnotationMessage, ...] = ()
    created_at: str = field(default_factory=_now)

    def __post_init__(self) -> None:
        if self.range_start < 0 or self.range_end < self.range_start:
            raise InvalidInputError(
                f"Invalid annotation range [{self.range_start}, {self.range_end}): "
                "expected 0 <= start <= end"
            )
        # Accept any iterable of messages but store an immutable tuple
        object.__setattr__(self, "messages", tuple(self.messages))

    @property
    def is_open(self) -> bool:
        return self.status is AnnotationStatus.OPEN

    @property
    def is_resolved(self) -> bool:
        return self.status is AnnotationStatus.RESOLVED

    def with_message(self, role: MessageRole, content: str) -> Annotation:
        """Return a copy with a message appended to the thread."""
        return replace(self, messages=self.messages + (AnnotationMessage(role, content),))

    def with_proposal(self, proposal: ProposedPatch | None) -> Annotation:
        """Return a copy with the proposed patch replaced (or cleared with None)."""
        return replace(self, proposed_patch=proposal)

    def shifted(self, delta: int) -> Annotation:
        """Return a copy with both range offsets moved by ``delta``."""
        return replace(
            self,
            range_start=max(0, self.range_start + delta),
            range_end=max(0, self.range_end + delta),
        )

    def resolved(self) -> Annotation:
        """Return a resolved copy with the proposed patch consumed."""
        return replace(self, status=AnnotationStatus.RESOLVED, proposed_patch=None)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the flat-file JSON layout."""
        data: dict[str, Any] = {
            "id": self.id,
            "filePath": self.document_id,
            "selectionStart": self.range_start,
            "selectionEnd": self.range_end,
            "selectedText": self.selected_text,
            "status": self.status.value,
            "messages": [message.to_dict() for message in self.messages],
            "createdAt": self.created_at,
        }
        if self.proposed_patch is not None:
            data["proposedDiff"] = self.proposed_patch.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Annotation:
        """Deserialize from the flat-file JSON layout.

        Raises:
            KeyError: If a required field is missing
            ValueError: If the status or a message role is unknown
        """
        proposal = data.get("proposedDiff")
        return cls(
            id=data["id"],
            document_id=data["filePath"],
            range_start=int(data["selectionStart"]),
            range_end=int(data["selectionEnd"]),
            selected_text=data.get("selectedText", ""),
            status=AnnotationStatus(data.get("status", "open")),
            proposed_patch=ProposedPatch.from_dict(proposal) if proposal else None,
            messages=tuple(AnnotationMessage.from_dict(m) for m in data.get("messages", [])),
            created_at=data.get("createdAt") or _now(),
        )

    def __str__(self) -> str:
        """Return a user-friendly string representation."""
        marker = "✓" if self.is_resolved else "○"
        preview = self.selected_text.replace("\n", " ")
        if len(preview) > 50:
            preview = preview[:47] + "..."
        patch = " [patch proposed]" if self.proposed_patch else ""
        return (
            f"{marker} {self.id} {self.document_id} "
            f"[{self.range_start}, {self.range_end}) '{preview}'{patch}"
        )
