from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional


@dataclass(frozen=True)
class Mention:
    """
    A span of text referring to an entity.

    Offsets are codepoint indices into the document text; ``begin`` is
    inclusive, ``end`` exclusive.
    """
    begin: int
    end: int
    entity_id: str

    def covered_text(self, text: str) -> str:
        return text[self.begin:self.end]


@dataclass(frozen=True)
class Entity:
    id: str
    label: str
    member_ids: Optional[FrozenSet[str]] = None  # None for entities that are not groups

    @property
    def is_group(self) -> bool:
        return self.member_ids is not None
