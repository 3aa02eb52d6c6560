"""
CoNLL-2012 output with coreference markers.

Only columns one, two, three, four (document ID, part number, word number,
word) and the coreference column are filled; the part number is always 0
and the seven columns in between are set to ``_``. Without predicate
arguments the coreference column is column twelve::

    document_name	0	8	token_text	_	_	_	_	_	_	_	(21508|(21557)

The coreference column is a ``|``-separated list of the entity IDs of the
mentions starting and/or ending with the token: ``(123`` starts here,
``123)`` ends here, ``(123)`` starts and ends here. Tokens without such
mentions get ``_``.

The file is bracketed by ``#begin document (<name>); part 0`` and
``#end document <name>``; sentences are separated by an empty line and
token numbering restarts at 1 for every sentence.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, TextIO, Tuple

from .consumer import MentionConsumer

EMPTY_FIELD = "_"
MARKER_SEPARATOR = "|"
FILLER_COLUMNS = 7

_MARKER_PATTERN = re.compile(r"^(\()?([^()|]+)(\))?$")
_BEGIN_PATTERN = re.compile(r"^#begin document \((.*)\); part (\d+)$")
_END_PATTERN = re.compile(r"^#end document (.*)$")


class CoNLL2012Writer(MentionConsumer):
    """
    Writes tokens and their mention markers to a text stream.

    Exceptions raised by the stream's ``write`` are passed on.
    """

    def __init__(
        self,
        stream: TextIO,
        document_name: str,
        *,
        part_number: int = 0,
        placeholder: str = EMPTY_FIELD,
        filler_columns: int = FILLER_COLUMNS,
    ):
        self._stream = stream
        self.document_name = document_name
        self.part_number = part_number
        self.placeholder = placeholder
        self._filler = "\t".join([EMPTY_FIELD] * filler_columns)
        self._token_index = 0
        self._first_marker = True

    @property
    def token_index(self) -> int:
        return self._token_index

    def start_document(self) -> None:
        self._stream.write(f"#begin document ({self.document_name}); part {self.part_number}")
        self._token_index = 0

    def append_token(self, token_text: str) -> None:
        """Start a new token line; the coreference column follows via the marker methods."""
        self._token_index += 1
        self._stream.write(
            f"\n{self.document_name}\t{self.part_number}\t{self._token_index}\t{token_text}\t{self._filler}\t"
        )

    def sentence_boundary(self) -> None:
        self._token_index = 0
        self._stream.write("\n")

    def end_document(self) -> None:
        self._stream.write(f"\n#end document {self.document_name}")

    def begin_markers(self) -> None:
        self._first_marker = True

    def open_only(self, entity_id: str) -> None:
        self._write_marker(entity_id, True, False)

    def close_only(self, entity_id: str) -> None:
        self._write_marker(entity_id, False, True)

    def open_and_close(self, entity_id: str) -> None:
        self._write_marker(entity_id, True, True)

    def end_markers(self) -> None:
        if self._first_marker:
            self._stream.write(self.placeholder)

    def _write_marker(self, entity_id: str, opens: bool, closes: bool) -> None:
        if self._first_marker:
            self._first_marker = False
        else:
            self._stream.write(MARKER_SEPARATOR)
        self._stream.write(format_marker(entity_id, opens, closes))


def format_marker(entity_id: str, opens: bool, closes: bool) -> str:
    return f"{'(' if opens else ''}{entity_id}{')' if closes else ''}"


def parse_coref_column(value: str) -> List[Tuple[str, bool, bool]]:
    """
    Decode a coreference column into ``(entity_id, opens, closes)`` triples.

    ``_`` (or an empty string) yields an empty list.
    """
    value = value.strip()
    if not value or value == EMPTY_FIELD:
        return []
    markers: List[Tuple[str, bool, bool]] = []
    for item in value.split(MARKER_SEPARATOR):
        match = _MARKER_PATTERN.match(item)
        if not match or not (match.group(1) or match.group(3)):
            raise ValueError(f"Invalid coreference marker '{item}' in '{value}'")
        markers.append((match.group(2), bool(match.group(1)), bool(match.group(3))))
    return markers


@dataclass
class CoNLL2012Token:
    index: int
    form: str
    markers: List[Tuple[str, bool, bool]] = field(default_factory=list)


@dataclass
class CoNLL2012Document:
    name: str
    part_number: int = 0
    sentences: List[List[CoNLL2012Token]] = field(default_factory=list)

    @property
    def tokens(self) -> List[CoNLL2012Token]:
        return [token for sentence in self.sentences for token in sentence]


def read_conll2012(text: str) -> CoNLL2012Document:
    """
    Read a document written by :class:`CoNLL2012Writer`.

    The word is taken from column four and the markers from the last column.
    """
    document: Optional[CoNLL2012Document] = None
    current: List[CoNLL2012Token] = []
    # Only "\n" ends a line; tokens may contain other line separators.
    for line_no, line in enumerate(text.split("\n"), start=1):
        line = line[:-1] if line.endswith("\r") else line
        if line.startswith("#"):
            begin = _BEGIN_PATTERN.match(line)
            if begin:
                document = CoNLL2012Document(name=begin.group(1), part_number=int(begin.group(2)))
            elif _END_PATTERN.match(line) and document is not None and current:
                document.sentences.append(current)
                current = []
            continue
        if document is None:
            raise ValueError(f"Line {line_no}: token line before '#begin document'")
        if not line.strip():
            if current:
                document.sentences.append(current)
                current = []
            continue
        columns = line.split("\t")
        if len(columns) < 5:
            raise ValueError(f"Line {line_no}: expected at least 5 columns, got {len(columns)}")
        current.append(
            CoNLL2012Token(
                index=int(columns[2]),
                form=columns[3],
                markers=parse_coref_column(columns[-1]),
            )
        )
    if document is None:
        raise ValueError("No '#begin document' line found")
    if current:
        document.sentences.append(current)
    return document
