"""Shared pytest fixtures and in-memory fakes for the backend clients."""

import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from server.core.ChunkRetriever import ChunkRetriever
from server.core.QueryService import QueryService
from server.core.SearchLogger import SearchLogger
from server.dependencies.errors import register_exception_handlers
from server.routers.QueryRouter import router as query_router
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger
from shared.models.knowledge import SearchQueryLog, SearchResult, TruthPriority

ENV_KEYS = [
    "APP_API_KEY",
    "SEARCH_LOG_ENABLED",
    "SEARCH_LOG_DETACHED",
    "EMBED_ENGINE",
    "EMBED_MODEL",
    "EMBED_VECTOR_SIZE",
    "RAG_ENGINE",
    "LLM_ENGINE",
    "LLM_CHAT_MODEL",
    "LLM_MAX_TOKENS",
    "LLM_TEMPERATURE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of the tests."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def logger():
    return ColorLogger(logging.getLogger("kb_engine.tests"))


@pytest.fixture
def helper_config(logger):
    return HelperConfig(logger=logger)


def make_result(index: int, similarity: float, **overrides) -> SearchResult:
    """Build a SearchResult with predictable content for position `index`."""
    fields = {
        "id": f"chunk-{index}",
        "document_id": f"doc-{index}",
        "content": f"Content of chunk {index}.",
        "chunk_index": index,
        "section_title": f"Section {index}",
        "truth_priority": TruthPriority.STANDARD,
        "similarity": similarity,
        "file_name": f"file-{index}.pdf",
        "file_path": f"/kb/file-{index}.pdf",
        "drive_file_id": f"drive-{index}",
    }
    fields.update(overrides)
    return SearchResult(**fields)


class FakeEmbedClient:
    vector_size = 4

    def __init__(self, vector: list[float] | None = None, error: Exception | None = None):
        self.vector = vector or [0.1, 0.2, 0.3, 0.4]
        self.error = error
        self.calls: list[str] = []

    async def do_embed_query(self, query: str) -> list[float]:
        self.calls.append(query)
        if self.error:
            raise self.error
        return self.vector


class FakeRAGClient:
    def __init__(self, results: list[SearchResult] | None = None, log_error: Exception | None = None):
        self.results = results or []
        self.log_error = log_error
        self.search_calls: list[dict] = []
        self.logged: list[SearchQueryLog] = []

    def get_search_log_collection(self) -> str:
        return "kb_search_history"

    async def do_search(self, vector, limit, score_threshold, truth_priority=None) -> list[SearchResult]:
        self.search_calls.append(
            {"vector": vector, "limit": limit, "score_threshold": score_threshold, "truth_priority": truth_priority}
        )
        return list(self.results[:limit])

    async def do_log_search(self, record: SearchQueryLog) -> None:
        if self.log_error:
            raise self.log_error
        self.logged.append(record)


class FakeLLMClient:
    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def do_complete(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        if self.error:
            raise self.error
        return self.reply


@pytest.fixture
def embed_client():
    return FakeEmbedClient()


@pytest.fixture
def rag_client():
    return FakeRAGClient()


@pytest.fixture
def llm_client():
    return FakeLLMClient()


@pytest.fixture
def query_service(helper_config, embed_client, rag_client, llm_client):
    return QueryService(
        helper_config=helper_config,
        embed_client=embed_client,
        retriever=ChunkRetriever(helper_config=helper_config, rag_client=rag_client),
        llm_client=llm_client,
        search_logger=SearchLogger(helper_config=helper_config, rag_client=rag_client),
    )


@pytest.fixture
def app(helper_config, logger, query_service):
    """The knowledge-base routes wired to fake clients, without the startup lifespan."""
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(query_router)
    app.state.logging = logger
    app.state.helper_config = helper_config
    app.state.query_service = query_service
    return app


@pytest.fixture
def api(app):
    return TestClient(app, raise_server_exceptions=False)
