"""Pydantic models for incoming knowledge-base requests."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from shared.models.knowledge import TruthPriority

MIN_QUERY_LENGTH = 3


class QueryRequest(BaseModel):
    """Fields shared by search and answer requests.

    Field names are accepted in camelCase (wire format) or snake_case.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    query: str = Field(default="", validate_default=True)
    limit: int
    threshold: float = Field(ge=0.0, le=1.0)
    truth_priority_filter: TruthPriority | None = None

    @field_validator("query", mode="before")
    @classmethod
    def _check_query(cls, value):
        if not value or not isinstance(value, str):
            raise ValueError("Query is required")
        if len(value.strip()) < MIN_QUERY_LENGTH:
            raise ValueError(f"Query must be at least {MIN_QUERY_LENGTH} characters")
        return value


class SearchRequest(QueryRequest):
    """Bare semantic search. Precision-biased defaults, results are shown directly."""

    limit: int = 10
    threshold: float = Field(default=0.7, ge=0.0, le=1.0)


class AnswerRequest(QueryRequest):
    """Grounded answer synthesis. Recall-biased defaults, grounding is judged by the provider."""

    limit: int = 8
    threshold: float = Field(default=0.3, ge=0.0, le=1.0)
