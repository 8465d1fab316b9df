"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rag_lab.config import get_settings
from rag_lab.infrastructure.logging.log_config import setup_logging
from rag_lab.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — configure logging and report the active backends."""
    settings = get_settings()
    setup_logging(settings)

    logger.info(
        "Starting %s v%s (env=%s, vector_store=%s)",
        settings.app_title,
        settings.app_version,
        settings.app_env,
        settings.vector_store_backend,
    )
    if not settings.surus_api_key.strip():
        logger.warning("SURUS_API_KEY is not configured; surus embeddings will fail.")
    if not settings.generation_api_key.strip():
        logger.warning("GENERATION_API_KEY is not configured; query and chat will fail.")

    yield

    logger.info("Shutting down %s", settings.app_title)


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rag_lab.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
