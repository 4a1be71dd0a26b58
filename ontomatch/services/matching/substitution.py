"""
IRI rewriting from DBpedia names to local ontology names.

A substitution spec is a small text file:

    http://example.com/onto#     <- line 1: prefix that replaces DBpedia's prefix
    y                            <- line 2: 'y' strips substituted chars from both ends
    _ -                          <- line 3+: "<from> <to>", one char each
    , .

It is compiled once per run into an immutable SubstitutionSpec, which is then
used as a plain `str -> str` function.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from ontomatch.core.config import settings
from ontomatch.core.errors import ConfigurationError


@dataclass(frozen=True)
class SubstitutionSpec:
    prefix: str
    strip_ends: bool
    substitutions: Mapping[str, str] = field(default_factory=dict)
    prefix_length: int = 28

    def translate(self, external_id: str) -> str:
        name = external_id[self.prefix_length :]

        if self.strip_ends and self.substitutions:
            name = name.strip("".join(self.substitutions))

        name = "".join(self.substitutions.get(c, c) for c in name)

        return f"{self.prefix}{name}"

    def __call__(self, external_id: str) -> str:
        return self.translate(external_id)


def identity_translator(external_id: str) -> str:
    return external_id


def _parse_rule(line: str, lineno: int) -> tuple[str, str]:
    if len(line) != 3 or line[1] != " ":
        raise ConfigurationError(
            "INVALID_SUBSTITUTION_RULE",
            detail=f"line {lineno}: expected '<char> <char>', got {line!r}",
        )

    return line[0], line[2]


def compile_substitution_spec(text: str, *, prefix_length: int | None = None) -> SubstitutionSpec:
    """
    Parse and validate the whole spec up front. Any bad line fails the compile,
    nothing is partially applied.
    """
    if prefix_length is None:
        prefix_length = settings.EXTERNAL_PREFIX_LENGTH

    # no strip(): the rule "_  " maps to a space
    lines = [line.rstrip("\r") for line in (text or "").split("\n")]
    while lines and lines[-1] == "":
        lines.pop()

    if not lines:
        raise ConfigurationError("EMPTY_SUBSTITUTION_SPEC", detail="missing prefix line")
    if len(lines) < 2 or not lines[1]:
        raise ConfigurationError("INVALID_SUBSTITUTION_SPEC", detail="line 2: missing strip flag")

    prefix = lines[0]
    strip_ends = lines[1][0] == "y"

    subs: dict[str, str] = {}
    for lineno, line in enumerate(lines[2:], start=3):
        src, dst = _parse_rule(line, lineno)
        subs[src] = dst

    return SubstitutionSpec(
        prefix=prefix,
        strip_ends=strip_ends,
        substitutions=MappingProxyType(subs),
        prefix_length=prefix_length,
    )


def load_substitution_spec(path: str | Path, encoding: str = "utf-8") -> SubstitutionSpec:
    p = Path(path)
    try:
        text = p.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError("SUBSTITUTION_SPEC_UNREADABLE", detail=f"{p}: {e}") from e

    return compile_substitution_spec(text)
