"""Search endpoints: run a new search and page through its results."""

from fastapi import APIRouter, Depends, Query, Request

from orchestrator.core import SearchEngine
from server.dependencies import get_search_engine
from server.schemas.requests import SearchRequest
from server.schemas.responses import SearchResultsPageDTO
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Search"])


@router.post("/search", response_model=SearchResultsPageDTO)
async def search(
    request: Request,
    body: SearchRequest,
    engine: SearchEngine = Depends(get_search_engine),
):
    """Run a new search; page caches are dropped and page 1 is returned."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.info(
        "Search request received",
        extra={"extra_fields": {"request_id": request_id, "query_chars": len(body.query)}},
    )
    results_page = await engine.search(body.query)
    return SearchResultsPageDTO.from_results_page(results_page)


@router.get("/search/results", response_model=SearchResultsPageDTO)
async def search_results(
    page: int = Query(1, ge=1),
    engine: SearchEngine = Depends(get_search_engine),
):
    """Return one page of the current result set."""
    return SearchResultsPageDTO.from_results_page(engine.results_page(page))
