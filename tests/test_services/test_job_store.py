"""Tests for the in-memory job store."""

from shopfloor.schemas.common import Partition
from shopfloor.schemas.production import ProductionKind
from shopfloor.services.jobs import InMemoryJobStore, Job, JobState


def _job(job_id: str = "job-1") -> Job:
    return Job(id=job_id, kind=ProductionKind.START, request={"UserID": 1}, target=Partition.KOL)


class TestInMemoryJobStore:
    """Tests for InMemoryJobStore."""

    def test_put_and_get(self):
        store = InMemoryJobStore()
        store.put(_job())

        job = store.get("job-1")
        assert job is not None
        assert job.state == JobState.PENDING
        assert len(store) == 1

    def test_get_unknown_returns_none(self):
        assert InMemoryJobStore().get("missing") is None

    def test_put_overwrites(self):
        store = InMemoryJobStore()
        job = _job()
        store.put(job)

        job.state = JobState.PROCESSING
        store.put(job)

        assert store.get("job-1").state == JobState.PROCESSING
        assert len(store) == 1

    def test_snapshots_are_isolated(self):
        """Mutating a stored or returned job must not change the stored record."""
        store = InMemoryJobStore()
        job = _job()
        store.put(job)

        job.request["UserID"] = 99
        snapshot = store.get("job-1")
        snapshot.state = JobState.FAILED

        stored = store.get("job-1")
        assert stored.request["UserID"] == 1
        assert stored.state == JobState.PENDING

    def test_remove_is_idempotent(self):
        store = InMemoryJobStore()
        store.put(_job())

        assert store.remove("job-1") is True
        assert store.remove("job-1") is False
        assert store.remove("never-existed") is False

        assert store.get("job-1") is None
        assert len(store) == 0

    def test_replace_updates_existing(self):
        store = InMemoryJobStore()
        job = _job()
        store.put(job)

        job.state = JobState.COMPLETED
        assert store.replace(job) is True

        assert store.get("job-1").state == JobState.COMPLETED

    def test_replace_does_not_resurrect(self):
        store = InMemoryJobStore()
        job = _job()
        store.put(job)
        store.remove("job-1")

        job.state = JobState.COMPLETED
        assert store.replace(job) is False

        assert store.get("job-1") is None
        assert len(store) == 0
