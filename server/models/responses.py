"""Pydantic models for knowledge-base responses. Serialised in camelCase."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from shared.models.knowledge import ConfidenceLevel, TruthPriority


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class SearchResultItem(CamelModel):
    """A single matching chunk as shown to the caller."""

    chunk_id: str
    content: str
    document_path: str | None = None
    file_name: str
    section_title: str | None = None
    similarity: float
    truth_priority: TruthPriority | None = None
    drive_url: str
    source_url: str | None = None
    summary: str | None = None


class SearchResponse(CamelModel):
    success: bool = True
    query: str
    results: list[SearchResultItem]
    total_results: int
    search_duration_ms: int


class Citation(CamelModel):
    """User-facing pointer from an answer back to the chunk it came from."""

    file_name: str
    section_title: str | None = None
    drive_url: str
    source_url: str | None = None
    excerpt: str
    similarity: float
    truth_priority: TruthPriority | None = None


class AnswerResponse(CamelModel):
    success: bool = True
    query: str
    answer: str
    citations: list[Citation]
    confidence: ConfidenceLevel
    chunks_used: int
    total_chunks_searched: int
    key_points: list[str]
    gaps: list[str]
    search_duration_ms: int
    answer_duration_ms: int


class ErrorResponse(CamelModel):
    success: bool = False
    error: str
