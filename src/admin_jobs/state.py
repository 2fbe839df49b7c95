"""Local view of a job, updated only from server snapshots."""

from loguru import logger

from .common.schema_job import Job, status_rank


class JobState:
    """Reducer over server snapshots.

    The client never edits a job itself. A snapshot either replaces the local
    copy whole or is rejected:

    - it belongs to another job
    - the local copy is already terminal
    - its status is behind the local one (late or out-of-order response)
    """

    def __init__(self, job: Job | None = None):
        self.job: Job | None = job
        self.error: str | None = None

    def observe(self, job: Job) -> None:
        """Start tracking ``job``, dropping whatever was tracked before."""
        self.job = job
        self.error = None

    def apply(self, snapshot: Job) -> bool:
        current = self.job
        if current is None:
            self.observe(snapshot)
            return True

        if snapshot.id != current.id:
            logger.warning(f"Ignoring snapshot of job {snapshot.id}; tracking {current.id}")
            return False

        if current.is_terminal:
            logger.debug(f"Job {current.id} is {current.status.value}; snapshot ignored")
            return False

        if status_rank(snapshot.status) < status_rank(current.status):
            logger.warning(
                f"Ignoring stale snapshot of job {current.id}: "
                + f"{snapshot.status.value} after {current.status.value}"
            )
            return False

        self.job = snapshot
        self.error = None
        return True

    def record_error(self, message: str) -> None:
        self.error = message

    @property
    def is_active(self) -> bool:
        return self.job is not None and self.job.is_active

    @property
    def is_terminal(self) -> bool:
        return self.job is not None and self.job.is_terminal
