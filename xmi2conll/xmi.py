"""
Readers for the UIMA XMI files written by annotation tools.

A reader extracts the document text (the ``sofaString`` of the first Sofa),
the mentions and the entities from the top-level elements of an XMI file.
Malformed elements are skipped with a warning.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Callable, Dict, List, Optional, Tuple, Union

from .aligner import UNICODE_SEPARATORS
from .errors import XmiFormatError
from .mention import Entity, Mention

logger = logging.getLogger(__name__)

PREFIX = "[xmi2conll]"

_MEMBER_SEPARATOR = re.compile("[" + re.escape(UNICODE_SEPARATORS) + "]+")

Source = Union[str, Path, IO[bytes]]


@dataclass
class XmiDocument:
    text: Optional[str]
    mentions: List[Mention] = field(default_factory=list)
    entities: List[Entity] = field(default_factory=list)


def _parse_offsets(attrs: Dict[str, str]) -> Optional[Tuple[int, int]]:
    begin = attrs.get("begin")
    end = attrs.get("end")
    if begin is None or end is None:
        return None
    return int(begin), int(end)


class XmiReader:
    """
    Base class: walks the top-level elements of an XMI file.

    Element and attribute names are handed to :meth:`read_element` in their
    prefixed form (``cas:Sofa``, ``xmi:id``) as declared in the file.
    """

    def __init__(self) -> None:
        self.text: Optional[str] = None

    def read(self, source: Source) -> XmiDocument:
        prefixes: Dict[str, str] = {}
        depth = 0
        try:
            for event, item in ET.iterparse(source, events=("start-ns", "start", "end")):
                if event == "start-ns":
                    prefix, uri = item
                    prefixes[uri] = prefix
                elif event == "start":
                    if depth == 1:
                        attrs = {_qualified_name(key, prefixes): value for key, value in item.attrib.items()}
                        self.read_element(_qualified_name(item.tag, prefixes), attrs)
                    depth += 1
                else:
                    depth -= 1
                    if depth <= 1:
                        item.clear()
        except ET.ParseError as exc:
            raise XmiFormatError(f"XML error: {exc}") from exc
        return self.document()

    def read_element(self, qname: str, attrs: Dict[str, str]) -> None:
        raise NotImplementedError

    def document(self) -> XmiDocument:
        raise NotImplementedError

    def read_sofa(self, attrs: Dict[str, str]) -> None:
        if self.text is None:
            self.text = attrs.get("sofaString")


def _qualified_name(name: str, prefixes: Dict[str, str]) -> str:
    if not name.startswith("{"):
        return name
    uri, _, local = name[1:].partition("}")
    prefix = prefixes.get(uri)
    return f"{prefix}:{local}" if prefix else local


def _local_name(qname: str) -> str:
    return qname.split(":", 1)[-1]


class CorefAnnotatorXmiReader(XmiReader):
    """Reads XMI files written by CorefAnnotator (Nils Reiter)."""

    def __init__(self) -> None:
        super().__init__()
        self.mentions: List[Mention] = []
        self.entities: List[Entity] = []

    def read_element(self, qname: str, attrs: Dict[str, str]) -> None:
        name = _local_name(qname)
        if name == "Mention":
            self._read_mention(attrs)
        elif name == "Entity":
            self._read_entity(attrs, "entity")
        elif name == "EntityGroup":
            self._read_entity(attrs, "entity group")
        elif name == "Sofa":
            self.read_sofa(attrs)

    def document(self) -> XmiDocument:
        return XmiDocument(text=self.text, mentions=self.mentions, entities=self.entities)

    def _read_mention(self, attrs: Dict[str, str]) -> None:
        entity = attrs.get("Entity")
        if entity is None:
            logger.warning("%s Warning: skipping mention without entity", PREFIX)
            return
        try:
            offsets = _parse_offsets(attrs)
        except ValueError:
            logger.warning(
                "%s Warning: mention offsets %r/%r cannot be parsed as numbers, skipping this mention",
                PREFIX, attrs.get("begin"), attrs.get("end"),
            )
            return
        if offsets is None:
            logger.warning("%s Warning: skipping mention without begin and/or end", PREFIX)
            return
        self.mentions.append(Mention(offsets[0], offsets[1], entity))

    def _read_entity(self, attrs: Dict[str, str], kind: str) -> None:
        entity_id = attrs.get("xmi:id")
        if entity_id is None:
            logger.warning("%s Warning: skipping %s without xmi:id", PREFIX, kind)
            return
        label = attrs.get("Label")
        if label is None:
            logger.warning("%s Warning: %s %s does not have a label, ignoring this %s", PREFIX, kind, entity_id, kind)
            return
        members = None
        if kind == "entity group":
            members_string = attrs.get("Members")
            if members_string is None:
                logger.warning(
                    "%s Warning: entity group %s does not have a member list, treating it as a non-group entity",
                    PREFIX, entity_id,
                )
            else:
                members = frozenset(member for member in _MEMBER_SEPARATOR.split(members_string) if member)
                if not members:
                    logger.warning("%s Warning: entity group %s has an empty member list", PREFIX, entity_id)
        self.entities.append(Entity(entity_id, label, members))


class AthenXmiReader(XmiReader):
    """
    Reads XMI files written by Athen (Würzburg/Kallimachos).

    Named entities carry their entity ID directly; the label of an entity is
    its most frequent ``Name``.
    """

    def __init__(self) -> None:
        super().__init__()
        self.mentions: List[Mention] = []
        self._names: Dict[str, Counter] = defaultdict(Counter)

    def read_element(self, qname: str, attrs: Dict[str, str]) -> None:
        if qname == "type:NamedEntity":
            self._read_named_entity(attrs)
        elif qname == "cas:Sofa":
            self.read_sofa(attrs)

    def document(self) -> XmiDocument:
        entities = []
        for entity_id, names in self._names.items():
            if not names:
                logger.warning("%s Warning: named entity %s does not have a name", PREFIX, entity_id)
                label = "?"
            else:
                label = names.most_common(1)[0][0]
            entities.append(Entity(entity_id, label))
        return XmiDocument(text=self.text, mentions=self.mentions, entities=entities)

    def _read_named_entity(self, attrs: Dict[str, str]) -> None:
        entity_id = attrs.get("ID")
        if entity_id is None:
            logger.warning("%s Warning: skipping named entity without ID", PREFIX)
            return
        try:
            offsets = _parse_offsets(attrs)
        except ValueError:
            logger.warning(
                "%s Warning: offsets %r/%r of named entity %s cannot be parsed as numbers, skipping this named entity",
                PREFIX, attrs.get("begin"), attrs.get("end"), entity_id,
            )
            return
        if offsets is None:
            logger.warning("%s Warning: skipping named entity %s without begin and/or end", PREFIX, entity_id)
            return
        self.mentions.append(Mention(offsets[0], offsets[1], entity_id))
        names = self._names[entity_id]
        name = attrs.get("Name")
        if name is not None:
            names[name] += 1


@dataclass
class XmiFormat:
    name: str
    aliases: Tuple[str, ...]
    description: str
    reader_factory: Callable[[], XmiReader]

    def read(self, source: Source) -> XmiDocument:
        return self.reader_factory().read(source)


class XmiFormatRegistry:
    def __init__(self) -> None:
        self._formats: Dict[str, XmiFormat] = {}
        self._order: List[XmiFormat] = []

    def register(self, entry: XmiFormat) -> None:
        self._formats[entry.name.lower()] = entry
        for alias in entry.aliases:
            self._formats[alias.lower()] = entry
        self._order.append(entry)

    def get(self, name: str) -> Optional[XmiFormat]:
        if not name:
            return None
        return self._formats.get(name.lower())

    def require(self, name: str) -> XmiFormat:
        entry = self.get(name)
        if entry is None:
            raise XmiFormatError(f"unknown XMI format \"{name}\" (supported: {', '.join(self.names())})")
        return entry

    def names(self) -> List[str]:
        return [entry.name for entry in self._order]

    def formats(self) -> List[XmiFormat]:
        return list(self._order)


registry = XmiFormatRegistry()

registry.register(
    XmiFormat(
        name="ca",
        aliases=("corefannotator",),
        description="CorefAnnotator (Nils Reiter)",
        reader_factory=CorefAnnotatorXmiReader,
    )
)

registry.register(
    XmiFormat(
        name="at",
        aliases=("athen",),
        description="Athen (Würzburg/Kallimachos)",
        reader_factory=AthenXmiReader,
    )
)


def read_xmi(source: Source, format_name: str) -> XmiDocument:
    """Read *source* with the reader registered for *format_name*."""
    return registry.require(format_name).read(source)
