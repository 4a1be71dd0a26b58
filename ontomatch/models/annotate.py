from pydantic import BaseModel, Field


class AnnotateRequest(BaseModel):
    text: str
    confidence: float = Field(0.5, ge=0.0, le=1.0)


class EntityOut(BaseModel):
    source_text: str
    external_id: str
    local_id: str
    types: list[str]


class AnnotateResponse(BaseModel):
    status: str
    chunk_count: int
    skipped_chunks: list[int] = []
    entities: list[EntityOut] = []


class HealthResponse(BaseModel):
    status: str
    ontology_loaded: bool
    substitution_loaded: bool
