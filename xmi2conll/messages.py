"""
Human-readable diagnostics for a single document.

Positions are reported as ``index N (l. L, c. C)``: the codepoint index into
the document text followed by the 1-based line and column.
"""

from __future__ import annotations

import bisect
import logging
import re
from typing import List

from .mention import Mention

logger = logging.getLogger(__name__)

PREFIX = "[xmi2conll]"
CONTEXT_CHARS = 30

_NEWLINE_PATTERN = re.compile(r"\r\n|\n|\r")


class MessageGenerator:
    """
    Formats and logs the diagnostics concerning one document text.

    Also serves as the diagnostics sink of a
    :class:`~xmi2conll.tracker.MentionTracker`.
    """

    def __init__(self, document_text: str, *, context_chars: int = CONTEXT_CHARS):
        self._text = document_text
        self._context_chars = context_chars
        self._line_starts: List[int] = [match.end() for match in _NEWLINE_PATTERN.finditer(document_text)]
        self.skipped_mentions: List[Mention] = []
        self.crossing_mentions: List[Mention] = []

    def format_position(self, pos: int) -> str:
        line_index = bisect.bisect_right(self._line_starts, pos)
        line_start = self._line_starts[line_index - 1] if line_index else 0
        return f"index {pos} (l. {line_index + 1}, c. {pos - line_start + 1})"

    def format_range(self, begin: int, end: int) -> str:
        return f"from {self.format_position(begin)} to {self.format_position(end)}"

    def context(self, start: int, end: int) -> str:
        start = max(0, start - self._context_chars)
        end = min(len(self._text), end + self._context_chars)
        return self._text[start:end]

    def no_token(self, pos: int, token: str) -> str:
        message = (
            f"{PREFIX} The provided tokenization does not match the document text: "
            "expecting token, but there is only whitespace until the end of the text.\n"
            f"location: {self.format_position(pos)}\n"
            f"expected token: {token}"
        )
        logger.error(message)
        return message

    def wrong_token(self, pos: int, token: str) -> str:
        token_end = min(len(self._text), pos + len(token))
        message = (
            f"{PREFIX} The provided tokenization does not match the document text: "
            "text and expected token deviate.\n"
            f"location: {self.format_position(pos)}\n"
            f"expected token: {token}\n"
            f"there instead: {self._text[pos:token_end]}\n"
            f"more context:\n{self.context(pos, token_end)}"
        )
        logger.error(message)
        return message

    def remaining_text(self, pos: int) -> str:
        message = (
            f"{PREFIX} Warning: The remainder of the document text starting at "
            f"{self.format_position(pos)} is not covered by the provided tokenization."
        )
        logger.warning(message)
        return message

    def mention_skipped(self, mention: Mention) -> None:
        self.skipped_mentions.append(mention)
        logger.warning(
            "%s Warning: mention of entity %s %s does not hit any token in the provided tokenization.",
            PREFIX, mention.entity_id, self.format_range(mention.begin, mention.end),
        )

    def mention_crosses_sentence_boundary(self, mention: Mention) -> None:
        self.crossing_mentions.append(mention)
        logger.warning(
            "%s Warning: mention of entity %s %s crosses a sentence boundary in the provided tokenization.",
            PREFIX, mention.entity_id, self.format_range(mention.begin, mention.end),
        )
