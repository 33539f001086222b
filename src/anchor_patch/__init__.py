"""
anchor_patch - Locate review excerpts in raw documents and apply proposed patches.

A reviewer selects text in a rendered document and an assistant proposes a
replacement. The excerpt may have lost whitespace, markdown markup or list
markers on its way through the renderer. This package finds the excerpt's
true span in the raw text, splices in the replacement, and shifts the
anchors of the other open annotations on the document.

Example:
    >>> from anchor_patch import Annotation, ProposedPatch, apply_proposal
    >>> text = "The quick fox.\\nIt jumps."
    >>> note = Annotation("story.md", 0, 14, "The quick fox.",
    ...                   proposed_patch=ProposedPatch("The quick fox.", "The slow fox."))
    >>> apply_proposal(text, [note], note.id).text
    'The slow fox.\\nIt jumps.'
"""

__version__ = "0.1.0"
__all__ = [
    "SpanLocator",
    "locate",
    "PatchApplicator",
    "apply_patch",
    "apply_proposal",
    "reject_proposal",
    "shift_anchors",
    "ReviewSession",
    "LocatorConfig",
    "load_config",
    "MatchStrategy",
    "SpanMatch",
    "TextRange",
    "Annotation",
    "AnnotationMessage",
    "AnnotationStatus",
    "MessageRole",
    "ProposedPatch",
    "ParsedResponse",
    "parse_proposal",
    "PatchResult",
    "ReviewResult",
    "SuggestionGenerator",
    "InMemoryDocumentStore",
    "FileDocumentStore",
    "InMemoryAnnotationStore",
    "JsonAnnotationStore",
    "AnchorPatchError",
    "ExcerptNotFoundError",
    "OriginalTextMissingError",
    "InvalidInputError",
    "AnnotationNotFoundError",
    "AnnotationResolvedError",
    "NoProposalError",
    "DocumentNotFoundError",
    "StoreError",
    "ValidationError",
]

# Import configuration
from .config import LocatorConfig, load_config
from .errors import (
    AnchorPatchError,
    AnnotationNotFoundError,
    AnnotationResolvedError,
    DocumentNotFoundError,
    ExcerptNotFoundError,
    InvalidInputError,
    NoProposalError,
    OriginalTextMissingError,
    StoreError,
    ValidationError,
)

# Import span locator
from .locator import SpanLocator, locate

# Import model classes
from .models.annotation import (
    Annotation,
    AnnotationMessage,
    AnnotationStatus,
    MessageRole,
    ProposedPatch,
)

# Import patch applicator
from .patch import PatchApplicator, apply_patch, apply_proposal, reject_proposal, shift_anchors
from .proposals import ParsedResponse, parse_proposal

# Import result types
from .results import PatchResult, ReviewResult
from .review import ReviewSession
from .span import MatchStrategy, SpanMatch, TextRange

# Import storage
from .stores import (
    FileDocumentStore,
    InMemoryAnnotationStore,
    InMemoryDocumentStore,
    JsonAnnotationStore,
)

# Import suggestion generator
from .suggestions import SuggestionGenerator
