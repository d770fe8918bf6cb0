"""
APScheduler integration for FastAPI.

Runs housekeeping in-process with an in-memory data store.

Jobs:
- Job sweep: purges background jobs past their retention window
"""

from apscheduler import AsyncScheduler, ConflictPolicy
from apscheduler.datastores.memory import MemoryDataStore
from apscheduler.triggers.interval import IntervalTrigger

from shopfloor.config import get_settings
from shopfloor.core.logging import get_logger

logger = get_logger(__name__)

# Global scheduler instance
scheduler: AsyncScheduler | None = None


async def job_sweep() -> None:
    """Remove expired background jobs even if nobody polls them."""
    from shopfloor.services.jobs import get_job_manager

    removed = get_job_manager().purge_expired()
    if removed:
        logger.bind(removed=removed).info("job_sweep_completed")


async def start_scheduler() -> AsyncScheduler | None:
    """Initialize and start the scheduler."""
    global scheduler

    settings = get_settings()
    if not settings.scheduler_enabled:
        logger.info("scheduler_disabled_by_config")
        return None

    scheduler = AsyncScheduler(data_store=MemoryDataStore())

    # Start the scheduler first (required before calling other methods in APScheduler 4.x)
    await scheduler.__aenter__()

    await scheduler.add_schedule(
        job_sweep,
        IntervalTrigger(seconds=settings.job_sweep_interval_seconds),
        id="job_sweep",
        conflict_policy=ConflictPolicy.replace,
    )

    await scheduler.start_in_background()

    logger.bind(jobs=["job_sweep"], interval_seconds=settings.job_sweep_interval_seconds).info(
        "scheduler_started"
    )
    return scheduler


async def stop_scheduler() -> None:
    """Gracefully stop the scheduler."""
    global scheduler
    if scheduler:
        await scheduler.__aexit__(None, None, None)
        logger.info("scheduler_stopped")
        scheduler = None
