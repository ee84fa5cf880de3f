"""Pydantic models for indexed knowledge and the answer pipeline.

Hierarchy:
  Chunk: a stored unit of document text with its embedding.
  SearchResult: a chunk matched by a query, with similarity and document fields.
  AnswerResult: the validated, structured answer extracted from provider output.
  SearchQueryLog: append-only telemetry record written after every query.
"""

from enum import Enum

from pydantic import BaseModel, Field


class TruthPriority(str, Enum):
    """Corpus tier indicating how trusted a source is."""

    STANDARD = "standard"
    HIGH = "high"
    AUTHORITATIVE = "authoritative"


class ConfidenceLevel(str, Enum):
    """How well the retrieved context supports a synthesized answer."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Chunk(BaseModel):
    """Immutable chunk of an indexed document.

    Ingestion replaces all chunks of a document as one set; chunks are never
    updated in place.
    """

    model_config = {"frozen": True}

    id: str
    document_id: str
    content: str
    chunk_index: int
    section_title: str | None = None
    embedding: list[float] = []
    truth_priority: TruthPriority = TruthPriority.STANDARD
    token_count: int = 0


class SearchResult(BaseModel):
    """A chunk returned by a similarity search, denormalised with its document fields.

    Computed per query and never persisted, except as chunk ids in a SearchQueryLog.
    """

    id: str
    document_id: str
    content: str
    chunk_index: int = 0
    section_title: str | None = None
    truth_priority: TruthPriority | None = None
    token_count: int = 0
    similarity: float = Field(ge=0.0, le=1.0)

    file_name: str
    file_path: str | None = None
    drive_file_id: str | None = None
    source_url: str | None = None
    summary: str | None = None


class AnswerResult(BaseModel):
    """Structured answer extracted from provider output.

    sources_used holds positional indices into the result list that was given to
    the prompt builder for the same call, not chunk ids.
    """

    answer: str
    confidence: ConfidenceLevel = ConfidenceLevel.LOW
    key_points: list[str] = []
    gaps: list[str] = []
    sources_used: list[int] = []


class SearchQueryLog(BaseModel):
    """Telemetry record for one executed query."""

    query: str
    query_embedding: list[float]
    result_count: int
    top_chunk_ids: list[str] = Field(default=[], max_length=5)
    search_duration_ms: int
    context_type: str | None = None
    context_id: str | None = None
