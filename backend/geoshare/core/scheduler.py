"""APScheduler setup for periodic housekeeping."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from geoshare.core.broadcaster import Broadcaster
from geoshare.core.sessions import SessionRegistry

logger = logging.getLogger(__name__)


async def sweep_sessions(registry: SessionRegistry, broadcaster: Broadcaster | None = None) -> None:
    """Close idle navigation sessions and release their channels."""
    try:
        closed = registry.sweep_idle()
    except Exception:
        logger.exception("Error sweeping navigation sessions")
        return
    if broadcaster is not None:
        for session_id in closed:
            await broadcaster.forget(session_id)


def create_scheduler(registry: SessionRegistry, broadcaster: Broadcaster | None = None) -> AsyncIOScheduler:
    """Create and configure the scheduler with all jobs."""
    from geoshare.config import settings

    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        sweep_sessions,
        "interval",
        seconds=settings.session_sweep_interval_seconds,
        args=[registry, broadcaster],
        id="sweep_sessions",
        name="Close idle navigation sessions",
        max_instances=1,
    )

    return scheduler
