"""Similarity-ranked chunk retrieval with a similarity floor, a result cap and an optional tier filter."""

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.knowledge import SearchResult, TruthPriority

SEARCH_MAX_LIMIT = 50   # bare search, results are shown directly
ANSWER_MAX_LIMIT = 15   # answer synthesis, bounded by what the provider can ground against


def clamp_limit(limit: int, max_limit: int) -> int:
    return max(1, min(int(limit), max_limit))


class ChunkRetriever:
    """Clamps retrieval parameters and enforces the ranking contract on top of a RAG client."""

    def __init__(self, helper_config: HelperConfig, rag_client: RAGClientInterface) -> None:
        self.logging = helper_config.get_logger()
        self._rag = rag_client

    async def do_retrieve(
        self,
        embedding: list[float],
        limit: int,
        threshold: float,
        truth_priority: TruthPriority | None = None,
        max_limit: int = SEARCH_MAX_LIMIT,
    ) -> list[SearchResult]:
        """Retrieve the chunks most similar to an embedding.

        Args:
            embedding (list[float]): The query vector.
            limit (int): Requested number of results, clamped to [1, max_limit].
            threshold (float): Minimum similarity; every returned result reaches it.
            truth_priority (TruthPriority | None): Hard filter restricting candidates to one tier.
            max_limit (int): Hard ceiling for this kind of call.

        Returns:
            list[SearchResult]: Matches ranked by similarity descending. May be empty.
        """
        limit = clamp_limit(limit, max_limit)
        hits = await self._rag.do_search(
            vector=embedding,
            limit=limit,
            score_threshold=threshold,
            truth_priority=truth_priority,
        )
        results = [hit for hit in hits if hit.similarity >= threshold]
        if truth_priority is not None:
            results = [hit for hit in results if hit.truth_priority == truth_priority]
        if len(results) != len(hits):
            self.logging.warning(
                "Vector store returned %d hit(s) outside the requested threshold/filter; dropped.",
                len(hits) - len(results),
            )
        results.sort(key=lambda hit: hit.similarity, reverse=True)
        return results[:limit]
