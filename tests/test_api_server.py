"""Tests for the startup helpers of the API server."""

import httpx
import pytest
from conftest import FakeRAGClient

from server.api_server import build_query_service, check_connections, ensure_search_log_collection


class StartupRAGClient(FakeRAGClient):
    def __init__(self, exists=True, existence_error=None, health_status=200):
        super().__init__()
        self.exists = exists
        self.existence_error = existence_error
        self.health_status = health_status
        self.created: list[tuple[str, int]] = []

    def get_engine_name(self):
        return "qdrant"

    async def do_healthcheck(self):
        return httpx.Response(self.health_status)

    async def do_existence_check(self, collection):
        if self.existence_error:
            raise self.existence_error
        return self.exists

    async def do_create_collection(self, collection, vector_size, distance="Cosine"):
        self.created.append((collection, vector_size))


class HealthOnlyLLMClient:
    def __init__(self, status=200):
        self.status = status

    def get_engine_name(self):
        return "openai"

    async def do_healthcheck(self):
        return httpx.Response(self.status)


@pytest.mark.asyncio
async def test_missing_search_log_collection_is_created():
    rag = StartupRAGClient(exists=False)

    await ensure_search_log_collection(rag, vector_size=1536)

    assert rag.created == [("kb_search_history", 1536)]


@pytest.mark.asyncio
async def test_existing_search_log_collection_is_kept():
    rag = StartupRAGClient(exists=True)

    await ensure_search_log_collection(rag, vector_size=1536)

    assert rag.created == []


@pytest.mark.asyncio
async def test_search_log_collection_failure_is_not_fatal():
    rag = StartupRAGClient(existence_error=httpx.ConnectError("refused"))

    await ensure_search_log_collection(rag, vector_size=1536)

    assert rag.created == []


@pytest.mark.asyncio
async def test_unreachable_store_fails_startup():
    with pytest.raises(Exception, match="not reachable"):
        await check_connections(StartupRAGClient(health_status=503), HealthOnlyLLMClient())


@pytest.mark.asyncio
async def test_unreachable_provider_fails_startup():
    with pytest.raises(Exception, match="LLM client"):
        await check_connections(StartupRAGClient(), HealthOnlyLLMClient(status=401))


@pytest.mark.asyncio
async def test_healthy_backends_pass():
    await check_connections(StartupRAGClient(), HealthOnlyLLMClient())


def test_build_query_service_shares_the_store(helper_config, embed_client, llm_client):
    rag = FakeRAGClient()

    service = build_query_service(helper_config, embed_client, rag, llm_client)

    assert service.search_logger.enabled is True
    assert service._retriever._rag is rag
