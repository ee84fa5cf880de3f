from fastapi import APIRouter, Depends, HTTPException, Request

from server.dependencies.auth import verify_api_key
from server.models.requests import AnswerRequest, SearchRequest
from server.models.responses import AnswerResponse, SearchResponse

router = APIRouter(prefix="/kb", tags=["knowledge-base"])


@router.post("/search", response_model_by_alias=True)
async def search_knowledge_base(
    request: Request,
    body: SearchRequest,
    _: None = Depends(verify_api_key),
) -> SearchResponse:
    """Semantic search across indexed documents.

    Args:
        request (Request): FastAPI request (provides app.state.query_service).
        body (SearchRequest): JSON body with query, limit, threshold and truthPriorityFilter.
        _ (None): Auth dependency result (unused).

    Returns:
        SearchResponse: Matching chunks ranked by similarity.
    """
    return await request.app.state.query_service.do_search(body)


@router.get("/search", response_model_by_alias=True)
async def search_knowledge_base_get(
    request: Request,
    q: str | None = None,
    limit: int = 10,
    priority: str | None = None,
    _: None = Depends(verify_api_key),
) -> SearchResponse:
    """Convenience form of POST /kb/search: /kb/search?q=...&limit=...&priority=..."""
    if not q:
        raise HTTPException(status_code=400, detail='Query parameter "q" is required')
    # ValidationError is mapped to 400 by the registered handlers
    body = SearchRequest.model_validate({"query": q, "limit": limit, "truthPriorityFilter": priority or None})
    return await request.app.state.query_service.do_search(body)


@router.post("/answer", response_model_by_alias=True)
async def answer_from_knowledge_base(
    request: Request,
    body: AnswerRequest,
    _: None = Depends(verify_api_key),
) -> AnswerResponse:
    """Synthesize a grounded answer with citations from the knowledge base.

    Args:
        request (Request): FastAPI request (provides app.state.query_service).
        body (AnswerRequest): JSON body with query, limit, threshold and truthPriorityFilter.
        _ (None): Auth dependency result (unused).

    Returns:
        AnswerResponse: Answer, citations, confidence, key points and gaps.
    """
    return await request.app.state.query_service.do_answer(body)
