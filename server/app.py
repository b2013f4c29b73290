"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.config import APP_TITLE, Config
from models.errors import MdluexSearchError
from server.middleware import RequestIDMiddleware
from server.routes import health, pages, search, settings
from server.schemas.responses import ErrorResponseDTO
from server.utils import redact_sensitive_headers, status_for_error
from utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown logic."""
    logger.info("FastAPI server starting up")

    config = Config()
    for problem in config.validate():
        logger.warning(f"Configuration problem: {problem}")
    if not config.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY not set; Gemini needs a key from the settings endpoint")

    yield

    logger.info("FastAPI server shutting down")


async def handle_search_error(request: Request, exc: MdluexSearchError) -> JSONResponse:
    """Render domain errors as ``{"error": {"code", "message"}}``."""
    status_code = status_for_error(exc)
    request_id = getattr(request.state, "request_id", "unknown")
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Request failed",
        extra={
            "extra_fields": {
                "request_id": request_id,
                "path": request.url.path,
                "status": status_code,
                "code": exc.code,
                "error": exc.message,
                "headers": redact_sensitive_headers(dict(request.headers)),
            }
        },
    )
    body = ErrorResponseDTO(error=exc.to_dict())
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app() -> FastAPI:
    """Factory function to create FastAPI application."""
    app = FastAPI(
        title=f"{APP_TITLE} API",
        description="Search results and web pages simulated by a language model",
        version=health.API_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MdluexSearchError, handle_search_error)

    app.include_router(health.router)
    app.include_router(search.router)
    app.include_router(pages.router)
    app.include_router(settings.router)

    return app
