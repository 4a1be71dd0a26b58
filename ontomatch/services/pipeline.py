from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from ontomatch.core.config import settings
from ontomatch.core.errors import OntomatchError, ServiceError
from ontomatch.models.entity import MatchedEntity, RawEntity, unique_entities
from ontomatch.services.matching.cross_index import match_entities
from ontomatch.services.matching.ontology import RdfOntology, TypeAssertions
from ontomatch.services.matching.substitution import identity_translator, load_substitution_spec
from ontomatch.services.spotlight.client import (
    SpotlightClient,
    default_spotlight_client,
    validate_confidence,
)
from ontomatch.services.text.chunking import chunk_document
from ontomatch.storage.files import (
    ensure_dir,
    parse_encoding,
    read_document,
    unique_output_names,
)
from ontomatch.storage.results import write_entities

logger = logging.getLogger(__name__)

Translator = Callable[[str], str]


@dataclass(frozen=True)
class DocumentResult:
    entities: list[MatchedEntity]
    chunk_count: int
    skipped_chunks: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class DocumentReport:
    path: str
    status: str  # "ok" | "error"
    out_path: str | None = None
    entity_count: int = 0
    chunk_count: int = 0
    skipped_chunks: list[int] = field(default_factory=list)
    error_detail: str | None = None


def extract_entities(
    text: str,
    confidence: float,
    client: SpotlightClient,
    max_len: int | None = None,
) -> tuple[list[RawEntity], int, list[int]]:
    """
    Chunk the document and annotate chunk by chunk.
    A chunk that exhausts its retries is skipped; the rest still count.
    """
    raw: list[RawEntity] = []
    skipped: list[int] = []
    chunks = chunk_document(text, max_len=max_len)

    for ch in chunks:
        chunk_text = ch.text
        if not chunk_text:
            continue

        try:
            raw.extend(client.annotate(chunk_text, confidence))
        except ServiceError as e:
            logger.warning("chunk %d skipped: %s", ch.index, e)
            skipped.append(ch.index)

    return unique_entities(raw), len(chunks), skipped


def annotate_text(
    text: str,
    *,
    confidence: float,
    ontology: TypeAssertions,
    translate: Translator = identity_translator,
    client: SpotlightClient,
    max_len: int | None = None,
) -> DocumentResult:
    c = validate_confidence(confidence)
    raw, chunk_count, skipped = extract_entities(text, c, client, max_len=max_len)
    matched = match_entities(raw, ontology, translate)

    return DocumentResult(entities=matched, chunk_count=chunk_count, skipped_chunks=skipped)


def _process_document(
    path: str,
    *,
    ontology: TypeAssertions,
    translate: Translator,
    encoding: str,
    confidence: float,
    out_path: Path,
    client: SpotlightClient,
) -> DocumentReport:
    logger.info("annotating %s", path)

    try:
        text = read_document(path, encoding)
        res = annotate_text(
            text,
            confidence=confidence,
            ontology=ontology,
            translate=translate,
            client=client,
        )
        n = write_entities(out_path, encoding, res.entities)
    except OntomatchError as e:
        logger.error("document %s failed at stage=%s: %s", path, e.stage, e)
        return DocumentReport(path=path, status="error", error_detail=str(e))

    if res.skipped_chunks:
        logger.warning(
            "document %s: %d/%d chunks skipped", path, len(res.skipped_chunks), res.chunk_count
        )
    logger.info("wrote %d entities to %s", n, out_path)

    return DocumentReport(
        path=path,
        status="ok",
        out_path=str(out_path),
        entity_count=n,
        chunk_count=res.chunk_count,
        skipped_chunks=res.skipped_chunks,
    )


def annotate_and_match(
    text_paths: Sequence[str],
    ontology: TypeAssertions,
    translate: Translator = identity_translator,
    encoding: str = "utf-8",
    confidence: float = 0.5,
    out_dir: str | Path = "out",
    *,
    client: SpotlightClient | None = None,
    client_factory: Callable[[], SpotlightClient] | None = None,
    workers: int = 1,
) -> list[DocumentReport]:
    """
    Annotate every text file and write one CSV per file into out_dir.

    Documents are independent: one failing document does not stop the others.
    With workers > 1 each document gets its own Spotlight client
    (unless a shared `client` is passed in, e.g. in tests).
    """
    c = validate_confidence(confidence)
    out = Path(out_dir)
    ensure_dir(out)
    make_client = client_factory or default_spotlight_client

    jobs = list(zip(text_paths, (out / name for name in unique_output_names(text_paths))))

    def run_one(job: tuple[str, Path], cl: SpotlightClient) -> DocumentReport:
        path, out_path = job
        return _process_document(
            path,
            ontology=ontology,
            translate=translate,
            encoding=encoding,
            confidence=c,
            out_path=out_path,
            client=cl,
        )

    def run_owned(job: tuple[str, Path]) -> DocumentReport:
        if client is not None:
            return run_one(job, client)
        with make_client() as cl:
            return run_one(job, cl)

    if workers <= 1 or len(text_paths) <= 1:
        if client is not None:
            return [run_one(j, client) for j in jobs]
        with make_client() as cl:
            return [run_one(j, cl) for j in jobs]

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(run_owned, jobs))


def run_from_paths(
    text_paths: Sequence[str],
    ontology_path: str,
    substitution_path: str | None = None,
    encoding: str | None = None,
    confidence: float | None = None,
    out_dir: str | None = None,
    workers: int | None = None,
) -> list[DocumentReport]:
    """
    Load everything from disk and run. The substitution spec is compiled
    (and rejected if malformed) before the ontology is loaded or any request is sent.
    """
    enc = parse_encoding(encoding or settings.DEFAULT_ENCODING)
    conf = settings.DEFAULT_CONFIDENCE if confidence is None else confidence
    validate_confidence(conf)

    translate: Translator = identity_translator
    if substitution_path is not None:
        translate = load_substitution_spec(substitution_path, enc)

    ontology = RdfOntology.load(ontology_path)

    return annotate_and_match(
        text_paths,
        ontology,
        translate,
        encoding=enc,
        confidence=conf,
        out_dir=out_dir or settings.OUTPUT_DIR,
        workers=workers or settings.MAX_WORKERS,
    )
