"""Main FastAPI application entry point."""

import os
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api import health, session
from .providers import GeminiClient
from .core import (
    CreativeSession,
    ImageGenerator,
    PhaseOrchestrator,
    QuestionGenerator,
    VisionAnalyzer,
)
from .utils.config import Config, load_config
from .utils.errors import (
    AnalysisError,
    GenerationError,
    ImageProcessingError,
    InvalidInputError,
    PhaseTransitionError,
)
from .utils.logger import get_logger, set_level

logger = get_logger(__name__)


def build_session(config: Config, gemini: GeminiClient) -> CreativeSession:
    """Wire every workflow component from configuration."""
    return CreativeSession(
        orchestrator=PhaseOrchestrator(),
        question_generator=QuestionGenerator(gemini, model=config.text_model),
        image_generator=ImageGenerator(
            gemini,
            model=config.image_model,
            default_reference_mime_type=config.default_mime_type,
            default_output_mime_type=config.default_output_mime_type,
        ),
        vision_analyzer=VisionAnalyzer(gemini, model=config.text_model),
        question_count=config.question_count,
        default_mime_type=config.default_mime_type,
    )


def create_app(
    config: Optional[Config] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Preloaded configuration (loaded from environment at startup if omitted)
        transport: Optional httpx transport for the Gemini client

    Returns:
        FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan context manager for startup and shutdown.

        A missing API key fails here, before any request is served.
        """
        logger.info("Application starting up...")

        app_config = config or load_config()
        set_level(app_config.log_level)

        gemini = GeminiClient(
            api_key=app_config.gemini_api_key,
            base_url=app_config.gemini_base_url,
            transport=transport,
        )
        await gemini.initialize()

        app.state.config = app_config
        app.state.gemini = gemini
        app.state.session = build_session(app_config, gemini)

        logger.info("Application startup complete")

        try:
            yield
        finally:
            logger.info("Application shutting down...")
            await gemini.close()
            logger.info("Application shutdown complete")

    app = FastAPI(
        title="KidCreatives",
        description="Turns a child's drawing into AI-enhanced art in five guided phases",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Restrict in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(session.router, prefix="/session", tags=["session"])

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": "kidcreatives",
            "version": __version__,
            "status": "running",
            "docs": "/docs",
        }

    return app


def register_error_handlers(app: FastAPI):
    """Map workflow errors to HTTP responses. Session state is unchanged by any of them."""

    def _handler(status_code: int):
        async def handle(request: Request, exc: Exception):
            logger.warning(
                f"Request failed: {exc}",
                extra={"path": request.url.path, "status": status_code, "error_type": type(exc).__name__}
            )
            return JSONResponse(
                status_code=status_code,
                content={"error": type(exc).__name__, "detail": str(exc)},
            )
        return handle

    app.add_exception_handler(PhaseTransitionError, _handler(409))
    app.add_exception_handler(InvalidInputError, _handler(422))
    app.add_exception_handler(ImageProcessingError, _handler(422))
    app.add_exception_handler(GenerationError, _handler(502))
    app.add_exception_handler(AnalysisError, _handler(502))


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))

    uvicorn.run(
        "kidcreatives.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=port,
        log_level="info",
    )
