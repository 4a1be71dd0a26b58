import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ontomatch.api.routes.annotate import router as annotate_router
from ontomatch.api.routes.health import router as health_router
from ontomatch.core.config import settings
from ontomatch.core.logging import setup_logging
from ontomatch.services.matching.ontology import RdfOntology
from ontomatch.services.matching.substitution import load_substitution_spec
from ontomatch.services.spotlight.client import default_spotlight_client
from ontomatch.storage.files import parse_encoding

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.ontology = None
    app.state.translator = None
    app.state.spotlight = default_spotlight_client()

    # Load ontology once (fail-soft: /annotate answers 503 without it)
    if settings.ONTOLOGY_PATH:
        try:
            app.state.ontology = RdfOntology.load(settings.ONTOLOGY_PATH)
        except Exception as e:
            logger.exception("Ontology load failed (annotation disabled): %s", e)

    # Substitution spec (fail-soft: identity translation without it)
    if settings.SUBSTITUTION_SPEC_PATH:
        try:
            app.state.translator = load_substitution_spec(
                settings.SUBSTITUTION_SPEC_PATH, parse_encoding(settings.DEFAULT_ENCODING)
            )
            logger.info("Substitution spec loaded: %s", settings.SUBSTITUTION_SPEC_PATH)
        except Exception as e:
            logger.exception("Substitution spec load failed: %s", e)

    yield

    app.state.spotlight.close()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.include_router(health_router)
app.include_router(annotate_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", extra={"path": request.url.path})

    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})
