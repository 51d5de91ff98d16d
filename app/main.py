"""
Mixcloud Playlist Sync - Main FastAPI Application
Loads Mixcloud playlists and serves their episodes to the player UI
"""

import logging
from logging.handlers import RotatingFileHandler
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from app.routes import episodes, playlists
from app.services.episode_store import EpisodeStore
from core.config import Config
from core.mixcloud_client import MixcloudClient

# Load environment variables
load_dotenv('.env.local')

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """Configure root logging with a rotating file and the console"""
    logs_dir = Config.get_log_dir()
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f'{Config.APP_NAME}.log'

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10_000_000,  # 10MB per file
        backupCount=5,
        encoding='utf-8'
    )
    console_handler = logging.StreamHandler()

    log_format = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    file_handler.setFormatter(log_format)
    console_handler.setFormatter(log_format)

    logging.basicConfig(
        level=logging.INFO,
        handlers=[file_handler, console_handler]
    )
    logger.info(f"Logging to file: {log_file}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown"""
    logger.info("Mixcloud Playlist Sync starting up...")
    if not Config.mixcloud_configured():
        logger.warning("⚠️  MIXCLOUD_CLIENT_ID / MIXCLOUD_CLIENT_SECRET not set; playlist loads will fail")
    yield
    logger.info("Mixcloud Playlist Sync shutting down...")


def create_app(
    store: Optional[EpisodeStore] = None,
    client_factory: Optional[Callable[[], MixcloudClient]] = None,
) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        store: Episode store to serve (a fresh in-memory store by default)
        client_factory: Builds the Mixcloud client per sync (reads env credentials by default)

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Mixcloud Playlist Sync",
        description="API for syncing Mixcloud playlists into a player queue",
        version=Config.APP_VERSION,
        lifespan=lifespan
    )

    app.state.store = store or EpisodeStore()
    app.state.client_factory = client_factory or MixcloudClient.from_env

    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(episodes.router, prefix="/api", tags=["episodes"])
    app.include_router(playlists.router, prefix="/api", tags=["playlists"])

    @app.get("/health")
    async def health_check():
        """
        Health check endpoint

        Returns:
            Health status, credential check and store sizes
        """
        return {
            "status": "healthy",
            "mixcloud_configured": Config.mixcloud_configured(),
            "store": app.state.store.counts(),
        }

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "Mixcloud Playlist Sync API",
            "version": Config.APP_VERSION,
            "docs": "/docs"
        }

    return app


setup_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
