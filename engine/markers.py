from __future__ import annotations

import re
from dataclasses import dataclass

from .prompts import SALE_CLOSED_MARKER, SALE_LOST_MARKER
from .states import ConversationOutcome


MARKERS = {
    SALE_CLOSED_MARKER: ConversationOutcome.SOLD,
    SALE_LOST_MARKER: ConversationOutcome.LOST,
}

_MARKER_PATTERNS = {
    marker: re.compile(r"([ \t]*)" + re.escape(marker) + r"([ \t]*)")
    for marker in MARKERS
}


@dataclass(frozen=True)
class ParsedReply:
    text: str
    outcome: ConversationOutcome | None = None


def _close_gap(match: re.Match) -> str:
    # Blanks around the token shrink to one; elsewhere the text is untouched.
    return " " if match.group(1) or match.group(2) else ""


def parse_reply(raw: str) -> ParsedReply:
    """Detect a conclusion marker anywhere in a model reply.

    When both markers appear, the one occurring first decides the outcome and
    the other is left in the text untouched.
    """
    raw = raw or ""
    found = [(raw.find(m), m) for m in MARKERS if m in raw]
    if not found:
        return ParsedReply(text=raw)
    _, marker = min(found)
    text = _MARKER_PATTERNS[marker].sub(_close_gap, raw).strip()
    return ParsedReply(text=text, outcome=MARKERS[marker])
