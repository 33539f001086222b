"""
Data model classes for anchor_patch.

These classes describe review annotations and the patches proposed on them.
"""

from anchor_patch.models.annotation import (
    Annotation,
    AnnotationMessage,
    AnnotationStatus,
    MessageRole,
    ProposedPatch,
)

__all__ = [
    "Annotation",
    "AnnotationMessage",
    "AnnotationStatus",
    "MessageRole",
    "ProposedPatch",
]
