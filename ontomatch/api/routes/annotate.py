import logging
import time

from fastapi import APIRouter, HTTPException, Request

from ontomatch.core.errors import InputError
from ontomatch.models.annotate import AnnotateRequest, AnnotateResponse, EntityOut
from ontomatch.services.matching.substitution import identity_translator
from ontomatch.services.pipeline import annotate_text

router = APIRouter(tags=["annotation"])
logger = logging.getLogger(__name__)


@router.post("/annotate", response_model=AnnotateResponse)
def annotate(request: Request, body: AnnotateRequest) -> AnnotateResponse:
    """
    Annotate one document with Spotlight and match it against the loaded ontology.
    Chunks Spotlight never answered for are reported in skipped_chunks.
    """
    t0 = time.perf_counter()

    text = (body.text or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Text must not be empty.")

    ontology = getattr(request.app.state, "ontology", None)
    if ontology is None:
        raise HTTPException(status_code=503, detail="Ontology not loaded.")

    client = getattr(request.app.state, "spotlight", None)
    if client is None:
        raise HTTPException(status_code=503, detail="Annotation service unavailable.")

    translate = getattr(request.app.state, "translator", None) or identity_translator

    try:
        res = annotate_text(
            text,
            confidence=body.confidence,
            ontology=ontology,
            translate=translate,
            client=client,
        )
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if res.chunk_count and len(res.skipped_chunks) == res.chunk_count:
        raise HTTPException(status_code=502, detail="Annotation service did not respond.")

    dt = (time.perf_counter() - t0) * 1000
    logger.info(
        "annotate chunks=%d skipped=%d entities=%d latency_ms=%.2f",
        res.chunk_count,
        len(res.skipped_chunks),
        len(res.entities),
        dt,
    )

    return AnnotateResponse(
        status="partial" if res.skipped_chunks else "ok",
        chunk_count=res.chunk_count,
        skipped_chunks=res.skipped_chunks,
        entities=[
            EntityOut(
                source_text=e.source_text,
                external_id=e.external_id,
                local_id=e.local_id,
                types=list(e.types),
            )
            for e in res.entities
        ],
    )
