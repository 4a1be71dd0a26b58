from __future__ import annotations

import codecs
import logging
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Final

from ontomatch.core.errors import InputError

logger = logging.getLogger(__name__)

SEP_RE: Final[re.Pattern[str]] = re.compile(r"[\\/]+")

# names accepted on the command line, mapped to python codecs
ENCODING_ALIASES: Final[dict[str, str]] = {
    "UTF_8": "utf-8",
    "ISO_8859_1": "iso-8859-1",
    "US_ASCII": "ascii",
    "UTF_16": "utf-16",
    "UTF_16BE": "utf-16-be",
    "UTF_16LE": "utf-16-le",
}


def ensure_dir(path: Path) -> None:
    # exist_ok: several document workers may race to create the same dir
    path.mkdir(parents=True, exist_ok=True)


def parse_encoding(name: str | None) -> str:
    """
    UTF_8 / ISO_8859_1 / ... or any python codec name.
    Unknown names fall back to utf-8.
    """
    if not name:
        return "utf-8"

    alias = ENCODING_ALIASES.get(name.strip().upper())
    if alias:
        return alias

    try:
        return codecs.lookup(name.strip()).name
    except LookupError:
        logger.warning("unknown encoding %r, falling back to utf-8", name)
        return "utf-8"


def output_filename(input_path: str) -> str:
    """
    docs/a.txt -> docs_a.txt.csv
    """
    name = SEP_RE.sub("_", (input_path or "").strip()).strip("_")
    return f"{name or 'document'}.csv"


def read_document(path: str | Path, encoding: str = "utf-8") -> str:
    p = Path(path)
    try:
        return p.read_text(encoding=encoding).strip()
    except FileNotFoundError:
        raise InputError("TEXT_NOT_FOUND", detail=str(p)) from None
    except (OSError, UnicodeDecodeError) as e:
        raise InputError("TEXT_UNREADABLE", detail=f"{p}: {e}") from e


def list_working_dir(root: str | Path = ".") -> list[str]:
    """
    Regular files directly inside root (not recursive), sorted.
    """
    base = Path(root)
    return sorted(str(p) for p in base.iterdir() if p.is_file())


def unique_output_names(input_paths: Sequence[str]) -> list[str]:
    """
    output_filename for every input, with a numeric suffix when two inputs
    collide (a/b.txt and a_b.txt -> a_b.txt.csv, a_b.txt_2.csv).
    """
    taken: set[str] = set()
    out: list[str] = []

    for path in input_paths:
        name = output_filename(path)
        stem = name[: -len(".csv")]
        i = 2
        while name in taken:
            name = f"{stem}_{i}.csv"
            i += 1
        taken.add(name)
        out.append(name)

    return out
