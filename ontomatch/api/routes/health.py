from fastapi import APIRouter, Request

from ontomatch.models.annotate import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    return HealthResponse(
        status="ok",
        ontology_loaded=getattr(request.app.state, "ontology", None) is not None,
        substitution_loaded=getattr(request.app.state, "translator", None) is not None,
    )
