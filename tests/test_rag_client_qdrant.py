"""Tests for the Qdrant REST backend."""

import json

import httpx
import pytest

from shared.clients.ClientInterface import ClientRequestError
from shared.clients.rag.qdrant.RAGClientQdrant import RAGClientQdrant
from shared.models.knowledge import SearchQueryLog, TruthPriority


@pytest.fixture
def qdrant(helper_config, monkeypatch):
    monkeypatch.setenv("RAG_QDRANT_BASE_URL", "http://qdrant.test:6333")
    monkeypatch.setenv("RAG_QDRANT_API_KEY", "qd-key")
    return RAGClientQdrant(helper_config)


def _hit(point_id, score, **payload):
    return {"id": point_id, "version": 1, "score": score, "payload": payload}


def test_base_url_is_required(helper_config, monkeypatch):
    monkeypatch.delenv("RAG_QDRANT_BASE_URL", raising=False)

    with pytest.raises(ValueError, match="RAG_QDRANT_BASE_URL"):
        RAGClientQdrant(helper_config)


def test_default_collections(qdrant):
    assert qdrant.get_collection() == "kb_chunks"
    assert qdrant.get_search_log_collection() == "kb_search_history"


def test_search_payload_without_filter(qdrant):
    payload = qdrant.get_search_payload([0.1, 0.2], limit=10, score_threshold=0.7)

    assert payload == {
        "vector": [0.1, 0.2],
        "limit": 10,
        "score_threshold": 0.7,
        "with_payload": True,
        "with_vector": False,
    }


def test_search_payload_with_tier_filter(qdrant):
    payload = qdrant.get_search_payload([0.1], limit=5, score_threshold=0.3, truth_priority=TruthPriority.HIGH)

    assert payload["filter"] == {"must": [{"key": "truth_priority", "match": {"value": "high"}}]}


def test_search_results_are_parsed(qdrant):
    raw = {
        "result": [
            _hit(
                "6f1c",
                0.91,
                chunk_id="chunk-a",
                document_id="doc-1",
                content="Refunds take 14 days.",
                chunk_index=3,
                section_title="Refunds",
                truth_priority="authoritative",
                file_name="faq.pdf",
                file_path="/kb/faq.pdf",
                drive_file_id="abc",
                summary="Customer FAQ",
            ),
            _hit(42, 1.0000002, content="Second", file_name="web.html", truth_priority="bogus", source_url="https://x.test"),
        ]
    }

    results = qdrant.extract_search_results(raw)

    first, second = results
    assert first.id == "chunk-a"
    assert first.document_id == "doc-1"
    assert first.chunk_index == 3
    assert first.truth_priority == TruthPriority.AUTHORITATIVE
    assert first.similarity == 0.91
    assert first.summary == "Customer FAQ"
    assert second.id == "42"
    assert second.similarity == 1.0
    assert second.truth_priority is None
    assert second.source_url == "https://x.test"


def test_empty_search_result(qdrant):
    assert qdrant.extract_search_results({"result": []}) == []


def test_search_log_point(qdrant):
    record = SearchQueryLog(
        query="refund policy",
        query_embedding=[0.1, 0.2],
        result_count=1,
        top_chunk_ids=["chunk-a"],
        search_duration_ms=7,
        context_type="answer",
    )

    point = qdrant.get_search_log_point(record)

    assert point["vector"] == [0.1, 0.2]
    assert "query_embedding" not in point["payload"]
    assert point["payload"]["query"] == "refund policy"
    assert point["payload"]["top_chunk_ids"] == ["chunk-a"]
    assert point["payload"]["context_type"] == "answer"
    assert "created_at" in point["payload"]
    assert point["id"] != qdrant.get_search_log_point(record)["id"]


@pytest.mark.asyncio
async def test_search_request(qdrant):
    seen: list[httpx.Request] = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"result": [_hit("p1", 0.8, chunk_id="c1", file_name="a.pdf")], "status": "ok"})

    await qdrant.boot(transport=httpx.MockTransport(handler))

    results = await qdrant.do_search([0.1, 0.2], limit=3, score_threshold=0.5)

    assert seen[0].method == "POST"
    assert seen[0].url == "http://qdrant.test:6333/collections/kb_chunks/points/search"
    assert seen[0].headers["api-key"] == "qd-key"
    assert json.loads(seen[0].content)["limit"] == 3
    assert [r.id for r in results] == ["c1"]
    await qdrant.close()


@pytest.mark.asyncio
async def test_search_error_raises(qdrant):
    await qdrant.boot(transport=httpx.MockTransport(lambda request: httpx.Response(404, text="Collection not found")))

    with pytest.raises(ClientRequestError) as info:
        await qdrant.do_search([0.1], limit=3, score_threshold=0.5)

    assert info.value.status_code == 404
    await qdrant.close()


@pytest.mark.asyncio
async def test_log_search_upserts_into_history_collection(qdrant):
    seen: list[httpx.Request] = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"result": {"status": "acknowledged"}})

    await qdrant.boot(transport=httpx.MockTransport(handler))
    record = SearchQueryLog(query="q", query_embedding=[0.3], result_count=0, search_duration_ms=1)

    await qdrant.do_log_search(record)

    assert seen[0].method == "PUT"
    assert seen[0].url == "http://qdrant.test:6333/collections/kb_search_history/points"
    assert len(json.loads(seen[0].content)["points"]) == 1
    await qdrant.close()


@pytest.mark.asyncio
async def test_collection_existence_and_creation(qdrant):
    seen: list[httpx.Request] = []

    def handler(request):
        seen.append(request)
        if request.method == "GET":
            return httpx.Response(200, json={"result": {"exists": False}})
        return httpx.Response(200, json={"result": True})

    await qdrant.boot(transport=httpx.MockTransport(handler))

    assert await qdrant.do_existence_check("kb_search_history") is False
    await qdrant.do_create_collection("kb_search_history", vector_size=4)

    assert seen[0].url == "http://qdrant.test:6333/collections/kb_search_history/exists"
    assert json.loads(seen[1].content) == {"vectors": {"size": 4, "distance": "Cosine"}}
    await qdrant.close()
