"""Background job lifecycle: submission, scheduling, polling and expiry."""

import asyncio
import heapq
import time
import uuid
from collections.abc import Callable, Mapping
from typing import Any

from shopfloor.core.datetime_utils import utc_now
from shopfloor.core.logging import get_logger
from shopfloor.schemas.common import Partition
from shopfloor.schemas.production import ProductionKind

from .executor import JobExecutor
from .models import Job, JobState
from .store import BaseJobStore

logger = get_logger(__name__)


class JobManager:
    """
    Creates jobs, runs them as independent asyncio tasks and expires them.

    Every accepted job starts right away; there is no queue limit,
    concurrency cap or priority. A job that reached a terminal state is
    kept for `retention_seconds` and then removed whether or not anyone
    polled it. Expiry deadlines live in one heap that is drained by
    `purge_expired()`, which runs before every lookup and periodically
    from the scheduler.

    A procedure call that never returns leaves its job `processing`
    forever unless the executor was given a timeout.
    """

    def __init__(
        self,
        executor: JobExecutor,
        store: BaseJobStore,
        retention_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._executor = executor
        self._store = store
        self._retention = retention_seconds
        self._clock = clock
        self._expiry: list[tuple[float, str]] = []
        self._tasks: set[asyncio.Task[None]] = set()

    def submit(
        self,
        kind: ProductionKind,
        request: Mapping[str, Any],
        target: Partition,
    ) -> Job:
        """
        Store a new pending job and schedule its execution.

        Returns before the procedure runs; must be called from a running
        event loop.
        """
        job = Job(id=str(uuid.uuid4()), kind=kind, request=dict(request), target=target)
        self._store.put(job)

        task = asyncio.create_task(self._run(job.id), name=f"job-{job.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        logger.bind(job_id=job.id, kind=kind.value, partition=target.value).info("job_submitted")
        return job

    def status(self, job_id: str) -> Job | None:
        """Snapshot of a job, or None if unknown or expired."""
        self.purge_expired()
        return self._store.get(job_id)

    def remove(self, job_id: str) -> None:
        """
        Drop a job immediately. Safe to call repeatedly.

        A job removed while its procedure runs stays gone; the outcome is
        discarded when the call returns.
        """
        self._store.remove(job_id)

    def purge_expired(self) -> int:
        """Remove every job whose retention window has elapsed."""
        now = self._clock()
        removed = 0
        while self._expiry and self._expiry[0][0] <= now:
            _, job_id = heapq.heappop(self._expiry)
            if self._store.remove(job_id):
                removed += 1
        if removed:
            logger.bind(count=removed, remaining=len(self._store)).debug("jobs_purged")
        return removed

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every scheduled job to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel in-flight jobs; their records stay `processing`."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.bind(cancelled=len(tasks)).warning("jobs_cancelled_on_shutdown")

    async def _run(self, job_id: str) -> None:
        job = self._store.get(job_id)
        if job is None:
            return

        job.state = JobState.PROCESSING
        job.started_at = utc_now()
        if not self._store.replace(job):
            return
        logger.bind(job_id=job.id, kind=job.kind.value).debug("job_processing")

        if await self._executor.execute(job) is None:
            return
        heapq.heappush(self._expiry, (self._clock() + self._retention, job.id))
