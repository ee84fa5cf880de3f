"""Maps provider-claimed source indices back onto the retrieval set."""

from typing import Callable

from server.models.responses import Citation
from shared.helper.HelperSourceUrl import get_drive_file_url, get_source_url
from shared.models.knowledge import SearchResult

EXCERPT_LENGTH = 200
FALLBACK_CITATIONS = 5


def make_excerpt(content: str, length: int = EXCERPT_LENGTH) -> str:
    if len(content) <= length:
        return content
    return content[:length] + "..."


def build_citation(result: SearchResult, url_resolver: Callable[[str | None], str] = get_drive_file_url) -> Citation:
    """Build the caller-facing citation for one search result.

    Args:
        result (SearchResult): The cited chunk.
        url_resolver (Callable[[str | None], str]): Maps a drive file id to a viewer URL.

    Returns:
        Citation: The citation record.
    """
    return Citation(
        file_name=result.file_name,
        section_title=result.section_title,
        drive_url=url_resolver(result.drive_file_id),
        source_url=get_source_url(result),
        excerpt=make_excerpt(result.content),
        similarity=result.similarity,
        truth_priority=result.truth_priority,
    )


def valid_source_indices(results: list[SearchResult], sources_used: list[int]) -> list[int]:
    """Drop indices outside [0, len(results)) and repeats, keeping the provider's order."""
    indices: list[int] = []
    for idx in sources_used:
        if 0 <= idx < len(results) and idx not in indices:
            indices.append(idx)
    return indices


def fallback_source_indices(results: list[SearchResult]) -> list[int]:
    """Indices of the top results by descending similarity, ties kept in retrieval order."""
    ranked = sorted(range(len(results)), key=lambda idx: results[idx].similarity, reverse=True)
    return ranked[:FALLBACK_CITATIONS]


def resolve_citations(
    results: list[SearchResult],
    sources_used: list[int],
    url_resolver: Callable[[str | None], str] = get_drive_file_url,
) -> list[Citation]:
    """Build citations for the sources the provider claims to have used.

    When none of the claimed indices is usable but results exist, the top
    results are cited instead so the caller always gets traceable sources.

    Args:
        results (list[SearchResult]): The exact list given to the prompt builder.
        sources_used (list[int]): Indices reported by the provider.
        url_resolver (Callable[[str | None], str]): Maps a drive file id to a viewer URL.

    Returns:
        list[Citation]: Citations in the order of the claimed (or fallback) indices.
    """
    indices = valid_source_indices(results, sources_used)
    if not indices and results:
        indices = fallback_source_indices(results)
    return [build_citation(results[idx], url_resolver) for idx in indices]
