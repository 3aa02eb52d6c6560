"""Shared fixtures for the xmi2conll tests.

Provides a diagnostics sink that records what it is told, and helpers that
align a tokenization with a text and run the mention tracker over it.
"""

from typing import Callable, List, Sequence, Tuple

import pytest

from xmi2conll.aligner import Aligner
from xmi2conll.consumer import Marker, RecordingConsumer
from xmi2conll.mention import Mention
from xmi2conll.tracker import MentionTracker

Span = Tuple[int, int]


class RecordingDiagnostics:
    """Diagnostics sink collecting the mentions it is told about."""

    def __init__(self) -> None:
        self.skipped: List[Mention] = []
        self.crossing: List[Mention] = []

    def mention_skipped(self, mention: Mention) -> None:
        self.skipped.append(mention)

    def mention_crosses_sentence_boundary(self, mention: Mention) -> None:
        self.crossing.append(mention)


def _align(text: str, sentences: Sequence[Sequence[str]]) -> List[List[Span]]:
    aligner = Aligner(text)
    spans: List[List[Span]] = []
    for sentence in sentences:
        sentence_spans = []
        for token in sentence:
            assert aligner.find_next_token(), f"token {token!r} not found"
            start = aligner.position
            assert text.startswith(token, start), f"token {token!r} not at {start}"
            aligner.advance(len(token))
            sentence_spans.append((start, start + len(token)))
        spans.append(sentence_spans)
    return spans


def _track(
    mentions: List[Mention],
    sentence_spans: Sequence[Sequence[Span]],
    diagnostics: RecordingDiagnostics,
) -> List[List[Marker]]:
    tracker = MentionTracker(mentions, diagnostics)
    consumer = RecordingConsumer()
    for spans in sentence_spans:
        first, rest = spans[0], spans[1:]
        tracker.start_sentence(*first)
        for span in rest:
            tracker.advance_token(span[0], span[1], consumer)
        tracker.end_sentence(consumer)
    tracker.finish()
    return consumer.batches


@pytest.fixture
def diagnostics() -> RecordingDiagnostics:
    return RecordingDiagnostics()


@pytest.fixture
def align() -> Callable[[str, Sequence[Sequence[str]]], List[List[Span]]]:
    """Return a function mapping sentences of token strings to token spans."""
    return _align


@pytest.fixture
def track(diagnostics: RecordingDiagnostics):
    """Return a function running the tracker; marker batches come back one per token."""

    def run(mentions: List[Mention], sentence_spans: Sequence[Sequence[Span]]) -> List[List[Marker]]:
        return _track(mentions, sentence_spans, diagnostics)

    return run


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Point the settings file at a temporary directory."""
    directory = tmp_path / "config"
    monkeypatch.setenv("XMI2CONLL_CONFIG_DIR", str(directory))
    return directory


DOCUMENT_TEXT = "This is a documenttext."
DOCUMENT_TOKENS = [["This", "is", "a", "document", "text", "."]]

MULTI_SENTENCE_TEXT = "Sentence one. Sentence two! Sentence three?"
MULTI_SENTENCE_TOKENS = [
    ["Sentence", "one", "."],
    ["Sentence", "two", "!"],
    ["Sentence", "three", "?"],
]
