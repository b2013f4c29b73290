"""Page endpoints: generate or load the page behind a search result."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from config.config import PageFormat
from orchestrator.core import SearchEngine
from server.dependencies import get_search_engine
from server.schemas.requests import PageRequest
from server.schemas.responses import PageResponseDTO
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Pages"])


@router.post("/pages", response_model=PageResponseDTO)
async def open_page(
    request: Request,
    body: PageRequest,
    engine: SearchEngine = Depends(get_search_engine),
):
    """Generate the page for a result of the current set, or serve it from cache."""
    request_id = getattr(request.state, "request_id", "unknown")
    page = await engine.open_result(body.result_id)
    logger.info(
        "Page request served",
        extra={
            "extra_fields": {
                "request_id": request_id,
                "result_id": body.result_id,
                "format": page.page_format.value,
                "cached": page.cached,
            }
        },
    )
    return PageResponseDTO.from_page_result(page)


@router.get("/pages/{result_id}/html", response_class=HTMLResponse)
async def page_html(
    result_id: str,
    engine: SearchEngine = Depends(get_search_engine),
):
    """Serve the generated HTML document directly, e.g. for an iframe."""
    page = await engine.open_result(result_id)
    if page.page_format != PageFormat.HTML or page.html is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Pages are generated as structured content; switch the page format to html.",
        )
    return HTMLResponse(content=page.html)
