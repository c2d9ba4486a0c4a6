"""FastAPI main application."""

import contextlib
import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from trickmatch.api.responses import ServerMessage
from trickmatch.api.routes import add_exception_handlers, router
from trickmatch.api.websocket import websocket_manager
from trickmatch.config import settings
from trickmatch.models.enums import Command
from trickmatch.repositories.base import MatchStore
from trickmatch.repositories.match_repository import MatchRepository
from trickmatch.repositories.memory_repository import MemoryMatchRepository
from trickmatch.services.log_service import LogService
from trickmatch.services.match_service import MatchService
from trickmatch.services.notifier import ChangeNotifier
from trickmatch.services.publisher_service import PublisherService

# Configure logging for the app (must be after imports but before app usage)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stdout,
)
logging.getLogger("trickmatch").setLevel(logging.INFO)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


async def handle_remote_change(command: Command, match_id: str, projection: dict[str, Any]) -> None:
    """Push a change committed by another instance to local subscribers."""
    logger.debug("Relaying %s for match %s from another instance", command.value, match_id)
    await websocket_manager.broadcast_to_match(
        ServerMessage(command=command, match_id=match_id, content=projection), match_id
    )


async def create_store() -> tuple[MatchStore, MatchRepository | None]:
    """Build the configured match store.

    Falls back to the in-memory store when MongoDB is unreachable.

    Returns:
        The store, and the Mongo repository if one needs disconnecting
    """
    if settings.store_backend == "memory":
        logger.info("Using in-memory match store")
        return MemoryMatchRepository(), None

    repository = MatchRepository()
    try:
        await repository.connect()
    except (ConnectionError, TimeoutError, OSError, PyMongoError):
        logger.warning("MongoDB not available, running without persistence")
        return MemoryMatchRepository(), None
    return repository, repository


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup and shutdown events.

    Handles:
    - Match store initialization
    - Redis connection setup
    - Wiring notifiers into the match service
    - Cleanup on shutdown
    """
    # Startup
    app.state.publisher_service = PublisherService()
    await app.state.publisher_service.connect()

    store, repository = await create_store()
    app.state.match_repository = repository

    notifiers: list[ChangeNotifier] = [websocket_manager]
    if app.state.publisher_service.is_connected:
        notifiers.append(app.state.publisher_service)

    app.state.match_service = MatchService(store, notifiers=notifiers, log_service=LogService())
    websocket_manager.set_match_service(app.state.match_service)

    # Relay changes committed by other instances
    await app.state.publisher_service.start_relay(handle_remote_change)

    yield

    # Shutdown
    websocket_manager.set_match_service(None)

    if app.state.match_repository:
        with contextlib.suppress(Exception):
            await app.state.match_repository.disconnect()

    with contextlib.suppress(Exception):
        await app.state.publisher_service.close()


# Create FastAPI app
app = FastAPI(
    title="Trick Match API",
    description="Two-team, best-of-three trick match service",
    version=VERSION,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url, "http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
add_exception_handlers(app)


@app.get("/")
async def root() -> dict[str, str]:
    """API info."""
    return {
        "message": "Trick Match API",
        "version": VERSION,
        "status": "running",
    }


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


def main() -> None:
    """Run the application."""
    uvicorn.run(
        "trickmatch.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info",
    )


if __name__ == "__main__":
    main()
