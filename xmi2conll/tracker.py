"""
Tracking of mentions hitting the tokens of a document.

Given the spans of the tokens of a text in order (without overlap), a
``MentionTracker`` determines for every token which mentions start and/or
end there and reports them to a :class:`~xmi2conll.consumer.MentionConsumer`.

Mentions are always closed at sentence boundaries. A mention that also hits
tokens of the next sentence ("crosses a sentence boundary") is re-opened at
the first token of that sentence.

Whether a mention ends with a token can only be decided once the span of the
*next* token is known, so the tracker is driven like this for each sentence
with tokens ``a``, ``b`` and ``c``::

    tracker.start_sentence(a.start, a.end)
    tracker.advance_token(b.start, b.end, consumer_for_a)
    tracker.advance_token(c.start, c.end, consumer_for_b)
    tracker.end_sentence(consumer_for_c)

and ``tracker.finish()`` is called once after the last sentence.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Iterator, List, Optional, Protocol

from .consumer import MentionConsumer
from .mention import Mention

logger = logging.getLogger(__name__)


class DiagnosticsSink(Protocol):
    """Receives the annotation warnings raised while tracking mentions."""

    def mention_skipped(self, mention: Mention) -> None:
        """*mention* does not hit any token and will never be reported."""
        ...

    def mention_crosses_sentence_boundary(self, mention: Mention) -> None:
        """*mention* hits tokens on both sides of a sentence boundary."""
        ...


class LoggingDiagnostics:
    """Default sink: logs each occasion with the raw mention offsets."""

    def mention_skipped(self, mention: Mention) -> None:
        logger.warning(
            "mention of entity %s [%d, %d) does not hit any token",
            mention.entity_id, mention.begin, mention.end,
        )

    def mention_crosses_sentence_boundary(self, mention: Mention) -> None:
        logger.warning(
            "mention of entity %s [%d, %d) crosses a sentence boundary",
            mention.entity_id, mention.begin, mention.end,
        )


def _ends_after(mention: Mention, token_start: int) -> bool:
    # Mention reaches a token starting at token_start (or an earlier one).
    return mention.end > token_start


def _begins_before(mention: Mention, token_end: int) -> bool:
    # Mention starts early enough to reach a token ending at token_end (or a later one).
    return mention.begin < token_end


class MentionTracker:
    """
    Note: the list of mentions passed in is sorted in place and must not be
    modified afterwards.
    """

    def __init__(self, mentions: List[Mention], diagnostics: Optional[DiagnosticsSink] = None):
        mentions.sort(key=lambda mention: mention.begin)
        self._mentions: Iterator[Mention] = iter(mentions)
        self._next_mention: Optional[Mention] = next(self._mentions, None)
        self._diagnostics: DiagnosticsSink = diagnostics or LoggingDiagnostics()
        # Mentions loaded at the current token come first, followed by
        # mentions opened at earlier tokens that are still open.
        self._open: Deque[Mention] = deque()
        self._newly_opened = 0
        self._finished = False

    def start_sentence(self, token_start: int, token_end: int) -> None:
        """To be called with the span of the first token of a sentence."""
        # Mentions closed at the end of the previous sentence that go on here are re-opened.
        for _ in range(len(self._open)):
            mention = self._open.popleft()
            if _ends_after(mention, token_start):
                self._diagnostics.mention_crosses_sentence_boundary(mention)
                self._open.append(mention)
        self._load_mentions(token_start, token_end)
        self._newly_opened = len(self._open)

    def advance_token(self, token_start: int, token_end: int, consumer: MentionConsumer) -> None:
        """
        To be called with the span of every token of a sentence except the first.

        The markers reported to *consumer* belong to the *previous* token.
        Exceptions raised by the consumer are passed on to the caller.
        """
        remaining = len(self._open)
        self._load_mentions(token_start, token_end)
        newly_opened = len(self._open) - remaining

        consumer.begin_markers()
        for index in range(remaining):
            mention = self._open.popleft()
            goes_on = _ends_after(mention, token_start)
            if goes_on:
                self._open.append(mention)
            if index < self._newly_opened:
                if goes_on:
                    consumer.open_only(mention.entity_id)
                else:
                    consumer.open_and_close(mention.entity_id)
            elif not goes_on:
                consumer.close_only(mention.entity_id)
        consumer.end_markers()

        # Survivors went behind the mentions loaded for this token, which are now in front.
        self._newly_opened = newly_opened

    def end_sentence(self, consumer: MentionConsumer) -> None:
        """
        To be called after the last token of a sentence; reports the markers of
        that token. All open mentions are closed here.
        """
        consumer.begin_markers()
        for index, mention in enumerate(self._open):
            if index < self._newly_opened:
                consumer.open_and_close(mention.entity_id)
            else:
                consumer.close_only(mention.entity_id)
        consumer.end_markers()

    def finish(self) -> None:
        """Report the mentions lying behind the last token as skipped."""
        if self._finished:
            return
        self._finished = True
        while self._next_mention is not None:
            self._diagnostics.mention_skipped(self._next_mention)
            self._next_mention = next(self._mentions, None)
        self._open.clear()
        self._newly_opened = 0

    def _load_mentions(self, token_start: int, token_end: int) -> None:
        # Append all mentions starting before the end of this token.
        while self._next_mention is not None and _begins_before(self._next_mention, token_end):
            mention = self._next_mention
            if _ends_after(mention, token_start):
                self._open.append(mention)
            else:
                self._diagnostics.mention_skipped(mention)
            self._next_mention = next(self._mentions, None)
