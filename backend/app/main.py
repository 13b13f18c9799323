"""Bate-papo Backend Application.

This is the main entry point for the Bate-papo chat backend: a single
group chat where clients join as participants, poll for messages and are
evicted after a period without heartbeats.

Modules:
    - participants: Join, heartbeat and the inactivity reaper
    - messages: Public/private messages with per-viewer visibility
    - store: DuckDB document store for both collections
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.clock import SystemClock
from app.config import AppConfig, get_config
from app.messages.router import router as messages_router
from app.messages.service import MessageLog
from app.participants.reaper import InactivityReaper
from app.participants.router import router as participants_router
from app.participants.service import PresenceRegistry
from app.store import ChatStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def build_services(app: FastAPI, config: AppConfig, clock=None) -> None:
    """Create the store and services and attach them to ``app.state``."""
    clock = clock or SystemClock()
    store = ChatStore(db_path=config.storage.db_path)
    registry = PresenceRegistry(
        store, clock=clock, broadcast_target=config.presence.broadcast_target
    )
    app.state.chat_store = store
    app.state.presence_registry = registry
    app.state.message_log = MessageLog(store, registry, clock=clock)
    app.state.reaper = InactivityReaper(
        registry,
        clock=clock,
        threshold_ms=config.presence.inactivity_threshold_ms,
        interval_ms=config.presence.sweep_interval_ms,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    # Startup
    config = get_config()

    configured_level = getattr(logging, config.logging.level.upper(), None)
    if configured_level is not None:
        logging.getLogger().setLevel(configured_level)
        logger.info("Root logger level set to %s", config.logging.level.upper())

    if getattr(app.state, "chat_store", None) is None:
        build_services(app, config)
    await app.state.reaper.start()

    yield  # Application runs here

    # Shutdown
    await app.state.reaper.stop()
    app.state.chat_store.close()
    app.state.chat_store = None
    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    application = FastAPI(
        title="Bate-papo API",
        description="Polling group chat with presence tracking",
        version="0.1.0",
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=get_config().server.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.include_router(participants_router)
    application.include_router(messages_router)

    @application.get("/health")
    async def health() -> dict:
        """Health check endpoint.

        Returns:
            dict: Status object indicating the server is running.
        """
        return {"status": "ok"}

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    server = get_config().server
    uvicorn.run(app, host=server.host, port=server.port)
