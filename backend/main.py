"""FastAPI application for Lyric Studio."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.api.routes import router
from backend.config import BackendSettings, get_backend_settings
from backend.services.feedback_service import FeedbackService
from backend.services.store import LyricStore, create_store
from lyric_studio import __version__
from lyric_studio.core.exceptions import DatabaseUnavailableError
from lyric_studio.services.llm import LLMClient
from lyric_studio.services.lyric_generator import ChatBackend

# Configure logging to output to stdout
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stdout,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings: BackendSettings = app.state.settings
    logger.info(f"Starting Lyric Studio API ({settings.environment}, store={settings.database_backend})")

    yield

    logger.info("Shutting down Lyric Studio API")


async def database_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    """Writes without a configured database fail loudly."""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": str(exc)},
    )


def create_app(
    settings: BackendSettings | None = None,
    store: LyricStore | None = None,
    llm: ChatBackend | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The store, LLM client and feedback service are built here, once, and
    shared by every request.

    Args:
        settings: Settings override (defaults to environment settings).
        store: Persistence store override (defaults to ``create_store(settings)``).
        llm: LLM backend override (defaults to ``LLMClient(settings)``).
    """
    if settings is None:
        settings = get_backend_settings()
    if store is None:
        store = create_store(settings)
    if llm is None:
        llm = LLMClient(settings)

    app = FastAPI(
        title="Lyric Studio API",
        description="Generate multilingual song lyrics from keywords and melodies",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs" if not settings.is_production else None,
        redoc_url="/api/redoc" if not settings.is_production else None,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.llm = llm
    app.state.feedback_service = FeedbackService(store)

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DatabaseUnavailableError, database_unavailable_handler)

    # Include API routes
    app.include_router(router, prefix="/api")

    return app


app = create_app()
