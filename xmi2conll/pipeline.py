"""
Conversion of one document: XMI annotations plus a tokenization to CoNLL-2012.

The tokenization is read line by line, one token per line; empty lines mark
sentence boundaries. Every token has to be found, in order, in the document
text, with nothing but whitespace in between.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .aligner import Aligner
from .config import ConversionConfig
from .conll2012 import CoNLL2012Writer
from .entities import collect_mention_texts, write_entity_report
from .errors import AlignmentError, TokenMismatchError, TokenNotFoundError
from .mention import Entity, Mention
from .messages import MessageGenerator
from .tracker import MentionTracker

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Surrounding control characters and spaces are dropped from token lines.
# Other whitespace is kept and has to match the text.
LINE_TRIM_CHARS = "".join(chr(code) for code in range(0x21))


@dataclass
class ConversionResult:
    ok: bool
    document_name: str = ""
    tokens: int = 0
    sentences: int = 0
    skipped_mentions: List[Mention] = field(default_factory=list)
    crossing_mentions: List[Mention] = field(default_factory=list)
    residual_position: Optional[int] = None
    error: Optional[AlignmentError] = None
    entities_written: int = 0


def document_name_from_path(path: PathLike) -> str:
    """File name of *path* without its last extension."""
    name = Path(path).name
    dot = name.rfind(".")
    return name if dot < 0 else name[:dot]


def convert_tokens(
    text: str,
    mentions: List[Mention],
    token_lines: Iterable[str],
    writer: CoNLL2012Writer,
    messages: Optional[MessageGenerator] = None,
) -> ConversionResult:
    """
    Align *token_lines* with *text* and write tokens and mention markers.

    Raises :class:`~xmi2conll.errors.AlignmentError` as soon as a token
    cannot be found; whatever was written to *writer* up to that point is
    incomplete.
    """
    messages = messages or MessageGenerator(text)
    aligner = Aligner(text)
    tracker = MentionTracker(mentions, messages)
    result = ConversionResult(ok=False, document_name=writer.document_name)

    inside_sentence = False
    writer.start_document()
    for line in token_lines:
        token = line.strip(LINE_TRIM_CHARS)
        if not token:
            if inside_sentence:
                tracker.end_sentence(writer)
                inside_sentence = False
                result.sentences += 1
            writer.sentence_boundary()
            continue

        if not aligner.find_next_token():
            messages.no_token(aligner.position, token)
            raise TokenNotFoundError(aligner.position, token)
        token_start = aligner.position
        if not text.startswith(token, token_start):
            messages.wrong_token(token_start, token)
            raise TokenMismatchError(token_start, token, text[token_start:token_start + len(token)])
        aligner.advance(len(token))
        token_end = token_start + len(token)

        if inside_sentence:
            tracker.advance_token(token_start, token_end, writer)
        else:
            tracker.start_sentence(token_start, token_end)
            inside_sentence = True
        writer.append_token(token)
        result.tokens += 1

    if inside_sentence:
        tracker.end_sentence(writer)
        result.sentences += 1
    writer.end_document()
    tracker.finish()

    if aligner.find_next_token():
        result.residual_position = aligner.position
        messages.remaining_text(aligner.position)

    result.ok = True
    result.skipped_mentions = list(messages.skipped_mentions)
    result.crossing_mentions = list(messages.crossing_mentions)
    return result


def convert_document(
    text: str,
    mentions: List[Mention],
    entities: List[Entity],
    tokens_path: PathLike,
    output_path: PathLike,
    entities_path: Optional[PathLike] = None,
    config: Optional[ConversionConfig] = None,
) -> ConversionResult:
    """
    Convert one document to a CoNLL-2012 file and an entity report.

    If the tokenization does not match the text, the output file receives the
    plain document text instead (unless disabled in *config*) and no entity
    report is written.
    """
    config = config or ConversionConfig()
    output_path = Path(output_path)
    document_name = config.document_name or document_name_from_path(output_path)
    messages = MessageGenerator(text, context_chars=config.context_chars)

    # The tracker reorders the list it is given.
    tracked_mentions = list(mentions)

    with open(output_path, "w", encoding="utf-8", newline="") as output, \
            open(tokens_path, "r", encoding="utf-8") as token_lines:
        writer = CoNLL2012Writer(
            output,
            document_name,
            part_number=config.part_number,
            placeholder=config.placeholder,
            filler_columns=config.filler_columns,
        )
        try:
            result = convert_tokens(text, tracked_mentions, token_lines, writer, messages)
        except AlignmentError as exc:
            if config.write_fallback_text:
                output.seek(0)
                output.truncate()
                output.write(text)
            return ConversionResult(
                ok=False,
                document_name=document_name,
                skipped_mentions=list(messages.skipped_mentions),
                crossing_mentions=list(messages.crossing_mentions),
                error=exc,
            )

    logger.info(
        "Wrote %d tokens in %d sentences of document '%s' to %s",
        result.tokens, result.sentences, document_name, output_path,
    )

    if entities_path is not None:
        references = collect_mention_texts(mentions, text)
        with open(entities_path, "w", encoding="utf-8", newline="") as report:
            result.entities_written = write_entity_report(entities, references, report)
        logger.info("Wrote %d entities to %s", result.entities_written, entities_path)
    return result
