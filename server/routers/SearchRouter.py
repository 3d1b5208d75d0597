from fastapi import APIRouter, Request

from server.models.requests import SearchRequest
from shared.models.search import SearchResponse

router = APIRouter(prefix="/search", tags=["search"])


@router.post("")
async def search_documents(request: Request, body: SearchRequest) -> SearchResponse:
    """Find the indexed documents most similar to a free-text query.

    Args:
        request (Request): FastAPI request (provides app.state.document_service).
        body (SearchRequest): JSON body with query string and limit.

    Returns:
        SearchResponse: Matching documents, most similar first.
    """
    results = await request.app.state.document_service.do_search(body.query, body.limit)
    return SearchResponse(query=body.query, results=results, total=len(results))
