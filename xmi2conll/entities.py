"""
Entity report: the entities of a document with the texts of their mentions.

The report lists, for each entity (sorted by ID) that has at least one
mention, a header line ``id<TAB>label`` (followed by ``<TAB>`` and the
space-separated sorted member IDs for entity groups) and one line
``<TAB>mention text<TAB>count`` per distinct mention text.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from typing import Dict, Iterable, List, TextIO

from tabulate import tabulate

from .mention import Entity, Mention


def collect_mention_texts(mentions: Iterable[Mention], text: str) -> Dict[str, Counter]:
    """Count, per entity ID, how often each mention text occurs."""
    references: Dict[str, Counter] = defaultdict(Counter)
    for mention in mentions:
        references[mention.entity_id][mention.covered_text(text)] += 1
    return dict(references)


def _sorted_counts(counts: Counter) -> List[tuple]:
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


def write_entity_report(entities: Iterable[Entity], references: Dict[str, Counter], stream: TextIO) -> int:
    """Write the entity report to *stream*; returns the number of entities written."""
    written = 0
    for entity in sorted(entities, key=lambda entity: entity.id):
        counts = references.get(entity.id)
        if not counts:
            continue
        stream.write(f"{entity.id}\t{entity.label}")
        if entity.is_group:
            stream.write("\t" + " ".join(sorted(entity.member_ids)))
        stream.write("\n")
        for mention_text, count in _sorted_counts(counts):
            stream.write(f"\t{mention_text}\t{count}\n")
        written += 1
    return written


def format_entity_table(entities: Iterable[Entity], references: Dict[str, Counter]) -> str:
    """Summarize entities and their mention counts as a plain-text table."""
    rows = []
    for entity in sorted(entities, key=lambda entity: entity.id):
        counts = references.get(entity.id)
        if not counts:
            continue
        most_common = _sorted_counts(counts)[0][0]
        rows.append([
            entity.id,
            entity.label,
            len(entity.member_ids) if entity.is_group else "",
            sum(counts.values()),
            most_common.replace("\n", " "),
        ])
    return tabulate(rows, headers=["Entity", "Label", "Members", "Mentions", "Most frequent text"])
