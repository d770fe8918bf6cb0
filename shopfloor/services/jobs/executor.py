"""Runs the procedure behind one background job."""

import asyncio

from shopfloor.core.datetime_utils import utc_now
from shopfloor.core.logging import get_logger
from shopfloor.services.procedures import BaseProcedureInvoker
from shopfloor.services.production import get_descriptor, run_production_procedure

from .models import Job, JobResult, JobState
from .store import BaseJobStore

logger = get_logger(__name__)


class JobExecutor:
    """
    Performs exactly one procedure call per job and records the terminal state.

    A status-only result is still a completed job; the warning travels in
    the result. Exceptions mark the job failed and are never retried.
    """

    def __init__(
        self,
        invoker: BaseProcedureInvoker,
        store: BaseJobStore,
        timeout_seconds: float | None = None,
    ) -> None:
        """
        Initialize executor.

        Args:
            invoker: Procedure invoker used for every job
            store: Store the terminal state is written back to
            timeout_seconds: Upper bound on one procedure call; None waits forever
        """
        self._invoker = invoker
        self._store = store
        self._timeout = timeout_seconds

    async def execute(self, job: Job) -> Job | None:
        """
        Run the job's procedure, store the terminal record and return it.

        Returns None when the record was removed while the call was in
        flight; the outcome is then discarded.
        """
        try:
            async with asyncio.timeout(self._timeout):
                outcome = await run_production_procedure(self._invoker, job.kind, job.request, job.target)
        except TimeoutError as e:
            job.state = JobState.FAILED
            if self._timeout is None:
                job.error = str(e) or e.__class__.__name__
            else:
                procedure = get_descriptor(job.kind).name
                job.error = f"Procedure {procedure} timed out after {self._timeout:g}s"
        except Exception as e:
            job.state = JobState.FAILED
            job.error = str(e) or e.__class__.__name__
        else:
            job.state = JobState.COMPLETED
            job.result = JobResult(
                rows=outcome.rows,
                production_id=outcome.production_id,
                status_warning=outcome.status_warning,
            )

        job.completed_at = utc_now()

        log = logger.bind(job_id=job.id, kind=job.kind.value, partition=job.target.value)
        if not self._store.replace(job):
            log.bind(state=job.state.value, error=job.error).info("job_outcome_discarded")
            return None

        if job.state is JobState.FAILED:
            log.bind(error=job.error).error("job_failed")
        elif job.result and job.result.status_warning:
            log.bind(status_value=job.result.status_warning.status_value).warning("job_status_warning")
        else:
            log.bind(row_count=len(job.result.rows) if job.result else 0).info("job_completed")
        return job
