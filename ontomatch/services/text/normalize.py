from __future__ import annotations

import re

from ontomatch.core.config import settings

# a space right after a sentence terminator becomes a line break
SENTENCE_END_RE = re.compile(r"([.?!]) ")


def normalize_text(text: str) -> str:
    """
    Put each sentence on its own line.
    Heuristic only: "e.g. this" is split too, which is fine for chunking.
    """
    return SENTENCE_END_RE.sub("\\1\n", text or "")


def strip_service_chars(text: str, chars: str | None = None) -> str:
    """
    Drop characters that break the Spotlight request (quotes and percent signs).
    """
    chars = settings.CHUNK_STRIP_CHARS if chars is None else chars
    if not chars:
        return text

    return text.translate(str.maketrans("", "", chars))
