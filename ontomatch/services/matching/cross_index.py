from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from ontomatch.models.entity import MatchedEntity, RawEntity, unique_entities
from ontomatch.services.matching.ontology import TypeAssertions

logger = logging.getLogger(__name__)


def match_entities(
    entities: Iterable[RawEntity],
    ontology: TypeAssertions,
    translate: Callable[[str], str],
) -> list[MatchedEntity]:
    """
    For each raw entity: translate its IRI, look up asserted types.
    No types -> dropped (that's the normal "no match" case, not an error).
    """
    out: list[MatchedEntity] = []
    dropped = 0

    for e in unique_entities(entities):
        local_id = translate(e.external_id)
        types = tuple(ontology.types_of(local_id))

        if not types:
            dropped += 1
            continue

        out.append(
            MatchedEntity(
                source_text=e.source_text,
                external_id=e.external_id,
                local_id=local_id,
                types=types,
            )
        )

    logger.debug("cross-index matched=%d dropped=%d", len(out), dropped)

    return unique_entities(out)
