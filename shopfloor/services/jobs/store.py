"""Job storage backends."""

import threading
from abc import ABC, abstractmethod

from .models import Job


class BaseJobStore(ABC):
    """Storage of job records keyed by id."""

    @abstractmethod
    def put(self, job: Job) -> None:
        """Insert or overwrite a job record."""
        pass

    @abstractmethod
    def replace(self, job: Job) -> bool:
        """Overwrite an existing record; returns False if the id is gone."""
        pass

    @abstractmethod
    def get(self, job_id: str) -> Job | None:
        """Return the job, or None if it expired or never existed."""
        pass

    @abstractmethod
    def remove(self, job_id: str) -> bool:
        """Delete a job record; returns whether it existed."""
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass


class InMemoryJobStore(BaseJobStore):
    """
    Process-local job store.

    Records are copied on the way in and out, so a snapshot handed to a
    caller never changes under it. Nothing survives a restart.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}
        self._lock = threading.Lock()

    def put(self, job: Job) -> None:
        with self._lock:
            self._jobs[job.id] = job.model_copy(deep=True)

    def replace(self, job: Job) -> bool:
        with self._lock:
            if job.id not in self._jobs:
                return False
            self._jobs[job.id] = job.model_copy(deep=True)
            return True

    def get(self, job_id: str) -> Job | None:
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy(deep=True) if job else None

    def remove(self, job_id: str) -> bool:
        with self._lock:
            return self._jobs.pop(job_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)
