"""Background job tracker for asynchronous production operations."""

from shopfloor.config import get_settings
from shopfloor.services.procedures import get_procedure_invoker

from .executor import JobExecutor
from .manager import JobManager
from .models import Job, JobResult, JobState
from .store import BaseJobStore, InMemoryJobStore

__all__ = [
    "BaseJobStore",
    "InMemoryJobStore",
    "Job",
    "JobExecutor",
    "JobManager",
    "JobResult",
    "JobState",
    "get_job_manager",
    "reset_job_manager",
]

_manager_instance: JobManager | None = None


def get_job_manager() -> JobManager:
    """
    Get the process-wide job manager.

    Uses the shared procedure invoker and an in-memory store.
    """
    global _manager_instance
    if _manager_instance is not None:
        return _manager_instance

    settings = get_settings()
    store = InMemoryJobStore()
    executor = JobExecutor(
        get_procedure_invoker(),
        store,
        timeout_seconds=settings.job_execution_timeout_seconds,
    )
    _manager_instance = JobManager(executor, store, retention_seconds=settings.job_retention_seconds)
    return _manager_instance


def reset_job_manager() -> None:
    """Reset the manager instance. Useful for testing."""
    global _manager_instance
    _manager_instance = None
