"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from geoshare.api import navigation, routes, ws
from geoshare.config import settings
from geoshare.core.broadcaster import Broadcaster
from geoshare.core.scheduler import create_scheduler
from geoshare.core.sessions import SessionRegistry
from geoshare.db.session import engine
from geoshare.models.base import Base
from geoshare.models import tables  # noqa: F401

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    # Create tables if they don't exist
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception:
        logger.exception("Failed to create tables - saved routes unavailable until the database is reachable")

    broadcaster = Broadcaster()
    await broadcaster.connect()

    registry = SessionRegistry(
        settings.navigation_config(),
        idle_timeout_seconds=settings.session_idle_timeout_seconds,
    )

    # Wire up API modules
    navigation.sessions = registry
    navigation.broadcaster = broadcaster
    ws.sessions = registry
    ws.broadcaster = broadcaster

    scheduler = create_scheduler(registry, broadcaster)
    scheduler.start()
    logger.info(
        "Geoshare started - arrival threshold %.0f m, idle timeout %ds",
        settings.arrival_threshold_m, settings.session_idle_timeout_seconds,
    )

    yield

    # Shutdown
    scheduler.shutdown(wait=False)
    await broadcaster.close()
    await engine.dispose()
    logger.info("Geoshare shut down")


app = FastAPI(
    title="Geoshare Navigation",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(routes.router)
app.include_router(navigation.router)
app.include_router(ws.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "sessions": len(navigation.sessions) if navigation.sessions else 0}
