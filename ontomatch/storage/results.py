from __future__ import annotations

import uuid
from collections.abc import Iterable
from pathlib import Path

from ontomatch.core.errors import InputError
from ontomatch.models.entity import MatchedEntity
from ontomatch.storage.files import ensure_dir


def write_entities(out_path: str | Path, encoding: str, entities: Iterable[MatchedEntity]) -> int:
    """
    One line per entity, no header:
        source_text,external_id,local_id,type_list
    Returns number of lines written.

    Atomic write: temp file -> rename, so a failed write leaves no partial CSV.
    """
    p = Path(out_path)
    ensure_dir(p.parent)
    tmp_path = p.with_name(p.name + f".tmp_{uuid.uuid4().hex}")

    n = 0
    try:
        with tmp_path.open("w", encoding=encoding, newline="\n") as f:
            for e in entities:
                f.write(e.to_row() + "\n")
                n += 1

        tmp_path.replace(p)
    except (OSError, UnicodeEncodeError) as e:
        tmp_path.unlink(missing_ok=True)
        raise InputError("OUTPUT_UNWRITABLE", detail=f"{p}: {e}", stage="output") from e

    return n
