"""Query service: semantic search and grounded answer synthesis over the knowledge base.

search:  embed query → retrieve chunks → map results → log
answer:  embed query → retrieve chunks → (none → fixed answer) → build prompts →
         provider → parse → resolve citations → log
"""

import time

from server.core.ChunkRetriever import ANSWER_MAX_LIMIT, SEARCH_MAX_LIMIT, ChunkRetriever
from server.core.CitationResolver import resolve_citations
from server.core.PromptBuilder import ANSWER_SYSTEM_PROMPT, build_answer_prompt
from server.core.ResponseParser import parse_answer_response
from server.core.SearchLogger import SearchLogger
from server.models.requests import AnswerRequest, SearchRequest
from server.models.responses import AnswerResponse, SearchResponse, SearchResultItem
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.helper.HelperSourceUrl import get_drive_file_url, get_source_url
from shared.models.knowledge import ConfidenceLevel, SearchQueryLog, SearchResult

NO_RESULTS_ANSWER = (
    "I couldn't find any relevant information in the knowledge base to answer your question. "
    "Try rephrasing your query or ensure the relevant documents have been indexed."
)
NO_RESULTS_GAP = "No matching documents found in knowledge base"
LOGGED_TOP_CHUNKS = 5


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class QueryService:
    """Orchestrates embedding, retrieval, synthesis and telemetry for knowledge-base queries.

    Holds no per-request state; safe to share across concurrent requests.
    """

    def __init__(
        self,
        helper_config: HelperConfig,
        embed_client: EmbedClientInterface,
        retriever: ChunkRetriever,
        llm_client: LLMClientInterface,
        search_logger: SearchLogger,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._embed = embed_client
        self._retriever = retriever
        self._llm = llm_client
        self.search_logger = search_logger

    ##########################################
    ################ CORE ####################
    ##########################################

    async def do_search(self, request: SearchRequest) -> SearchResponse:
        """Run a bare semantic search.

        Args:
            request (SearchRequest): The validated search request.

        Returns:
            SearchResponse: Matching chunks, ranked by similarity.
        """
        self.logging.info("Searching KB: query=%r limit=%d threshold=%.2f", request.query[:80], request.limit, request.threshold)
        start = time.perf_counter()

        embedding = await self._embed.do_embed_query(request.query)
        results = await self._retriever.do_retrieve(
            embedding=embedding,
            limit=request.limit,
            threshold=request.threshold,
            truth_priority=request.truth_priority_filter,
            max_limit=SEARCH_MAX_LIMIT,
        )
        search_duration = _elapsed_ms(start)

        await self._log(request.query, embedding, results, search_duration, context_type="search")

        self.logging.info("Found %d result(s) in %dms", len(results), search_duration, color="green")
        return SearchResponse(
            query=request.query,
            results=[self._build_result_item(r) for r in results],
            total_results=len(results),
            search_duration_ms=search_duration,
        )

    async def do_answer(self, request: AnswerRequest) -> AnswerResponse:
        """Synthesize a grounded, cited answer from the knowledge base.

        The provider is never called when retrieval finds nothing.

        Args:
            request (AnswerRequest): The validated answer request.

        Returns:
            AnswerResponse: The answer with citations, confidence, key points and gaps.

        Raises:
            LLMProviderError: If the provider call fails.
        """
        self.logging.info("Generating answer for: query=%r", request.query[:80])
        start = time.perf_counter()

        embedding = await self._embed.do_embed_query(request.query)
        results = await self._retriever.do_retrieve(
            embedding=embedding,
            limit=request.limit,
            threshold=request.threshold,
            truth_priority=request.truth_priority_filter,
            max_limit=ANSWER_MAX_LIMIT,
        )
        search_duration = _elapsed_ms(start)
        self.logging.info("Found %d chunk(s) in %dms", len(results), search_duration)

        if not results:
            await self._log(request.query, embedding, results, search_duration, context_type="answer")
            return AnswerResponse(
                query=request.query,
                answer=NO_RESULTS_ANSWER,
                citations=[],
                confidence=ConfidenceLevel.LOW,
                chunks_used=0,
                total_chunks_searched=0,
                key_points=[],
                gaps=[NO_RESULTS_GAP],
                search_duration_ms=search_duration,
                answer_duration_ms=0,
            )

        answer_start = time.perf_counter()
        raw_text = await self._llm.do_complete(ANSWER_SYSTEM_PROMPT, build_answer_prompt(request.query, results))
        answer = parse_answer_response(raw_text)
        answer_duration = _elapsed_ms(answer_start)
        self.logging.info("Generated answer in %dms (confidence: %s)", answer_duration, answer.confidence.value)

        citations = resolve_citations(results, answer.sources_used)

        await self._log(request.query, embedding, results, search_duration, context_type="answer")

        self.logging.info("Answer complete in %dms", _elapsed_ms(start), color="green")
        return AnswerResponse(
            query=request.query,
            answer=answer.answer,
            citations=citations,
            confidence=answer.confidence,
            chunks_used=len(citations),
            total_chunks_searched=len(results),
            key_points=answer.key_points,
            gaps=answer.gaps,
            search_duration_ms=search_duration,
            answer_duration_ms=answer_duration,
        )

    ##########################################
    ############### HELPERS ##################
    ##########################################

    async def _log(
        self,
        query: str,
        embedding: list[float],
        results: list[SearchResult],
        search_duration: int,
        context_type: str,
    ) -> None:
        await self.search_logger.do_log(
            SearchQueryLog(
                query=query,
                query_embedding=embedding,
                result_count=len(results),
                top_chunk_ids=[r.id for r in results[:LOGGED_TOP_CHUNKS]],
                search_duration_ms=search_duration,
                context_type=context_type,
            )
        )

    def _build_result_item(self, result: SearchResult) -> SearchResultItem:
        return SearchResultItem(
            chunk_id=result.id,
            content=result.content,
            document_path=result.file_path,
            file_name=result.file_name,
            section_title=result.section_title,
            similarity=result.similarity,
            truth_priority=result.truth_priority,
            drive_url=get_drive_file_url(result.drive_file_id),
            source_url=get_source_url(result),
            summary=result.summary,
        )
