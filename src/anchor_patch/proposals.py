"""
Parsing of proposed patches out of assistant responses.

The assistant proposes an edit by ending its reply with a block such as::

    <propose_diff>
    <original>exact text to replace</original>
    <replacement>new text</replacement>
    <explanation>why this change improves the copy</explanation>
    </propose_diff>
"""

import re
from dataclasses import dataclass

from .models.annotation import ProposedPatch

PROPOSAL_RE = re.compile(
    r"<propose_diff>\s*"
    r"<original>([\s\S]*?)</original>\s*"
    r"<replacement>([\s\S]*?)</replacement>\s*"
    r"<explanation>([\s\S]*?)</explanation>\s*"
    r"</propose_diff>"
)


@dataclass(frozen=True)
class ParsedResponse:
    """An assistant response split into visible text and an optional proposal.

    Attributes:
        text: The response with the proposal block removed
        proposal: The proposed patch, or None if the response had none
    """

    text: str
    proposal: ProposedPatch | None = None


def parse_proposal(response: str) -> ParsedResponse:
    """Extract the first ``<propose_diff>`` block from an assistant response.

    The original, replacement and explanation are trimmed. The block is
    removed from the visible text, which is trimmed as well. A response
    without a block is returned unchanged.

    Example:
        >>> parsed = parse_proposal(
        ...     "Tighter.\\n<propose_diff><original>a</original>"
        ...     "<replacement>b</replacement><explanation>c</explanation></propose_diff>"
        ... )
        >>> parsed.text, parsed.proposal.replacement
        ('Tighter.', 'b')
    """
    match = PROPOSAL_RE.search(response)
    if match is None:
        return ParsedResponse(text=response)

    proposal = ProposedPatch(
        original=match.group(1).strip(),
        replacement=match.group(2).strip(),
        explanation=match.group(3).strip(),
    )
    text = (response[: match.start()] + response[match.end() :]).strip()
    return ParsedResponse(text=text, proposal=proposal)
