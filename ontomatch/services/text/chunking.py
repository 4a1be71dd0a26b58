from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from ontomatch.core.config import settings
from ontomatch.services.text.normalize import normalize_text, strip_service_chars


@dataclass(frozen=True)
class Chunk:
    index: int
    lines: tuple[str, ...]

    @property
    def text(self) -> str:
        return " ".join(self.lines).strip()


def _joined_len(current_len: int, n_lines: int, line: str) -> int:
    # lines are joined with a single space
    return current_len + (1 if n_lines else 0) + len(line)


def iter_chunks(lines: Iterable[str], max_len: int | None = None) -> Iterator[Chunk]:
    """
    Greedy packing of sentence-lines into chunks.

    - a line is never split
    - a line is added only while the joined length stays strictly below max_len
    - a single line >= max_len gets a chunk of its own (oversized)
    - order is kept, every line lands in exactly one chunk
    """
    max_len = settings.MAX_CHUNK_CHARS if max_len is None else max_len
    if max_len < 1:
        raise ValueError("max_len must be positive")

    current: list[str] = []
    current_len = 0
    index = 0

    for line in lines:
        candidate_len = _joined_len(current_len, len(current), line)

        if current and candidate_len >= max_len:
            yield Chunk(index=index, lines=tuple(current))
            index += 1
            current = []
            current_len = 0
            candidate_len = len(line)

        current.append(line)
        current_len = candidate_len

        if len(current) == 1 and current_len >= max_len:
            yield Chunk(index=index, lines=tuple(current))
            index += 1
            current = []
            current_len = 0

    if current:
        yield Chunk(index=index, lines=tuple(current))


def split_sentences(text: str) -> list[str]:
    return normalize_text(strip_service_chars(text)).splitlines()


def chunk_document(text: str, max_len: int | None = None) -> list[Chunk]:
    """
    strip service chars -> one sentence per line -> size-bounded chunks
    """
    return list(iter_chunks(split_sentences(text), max_len=max_len))
