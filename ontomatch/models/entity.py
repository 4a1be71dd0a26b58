from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TypeVar

from ontomatch.core.config import settings


@dataclass(frozen=True)
class RawEntity:
    """
    Annotation straight from Spotlight: surface text + DBpedia IRI.
    Local ontology fields do not exist yet.
    """

    source_text: str
    external_id: str

    @property
    def key(self) -> tuple[str, str]:
        return (self.source_text, self.external_id)


@dataclass(frozen=True)
class MatchedEntity:
    """
    Raw entity that has been found in the local ontology with >= 1 type.
    Only the cross-index matcher builds these.
    """

    source_text: str
    external_id: str
    local_id: str
    types: tuple[str, ...]

    @property
    def key(self) -> tuple[str, str, str, tuple[str, ...]]:
        return (self.source_text, self.external_id, self.local_id, self.types)

    @property
    def type_list(self) -> str:
        # every type is followed by the delimiter, e.g. "A;B;"
        d = settings.TYPE_DELIMITER
        return "".join(f"{t}{d}" for t in self.types)

    def to_row(self) -> str:
        # no quoting: embedded commas are written as-is
        return f"{self.source_text},{self.external_id},{self.local_id},{self.type_list}"


E = TypeVar("E", RawEntity, MatchedEntity)


def unique_entities(entities: Iterable[E]) -> list[E]:
    """
    Dedupe on the full field tuple, keep first-seen order.
    """
    seen: dict[tuple, E] = {}

    for e in entities:
        if e.key not in seen:
            seen[e.key] = e

    return list(seen.values())
