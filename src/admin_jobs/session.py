"""Job control - start, resume, cancel and observe one job of a kind."""

import asyncio
from collections.abc import Mapping
from types import TracebackType
from typing import Any, Self

from loguru import logger

from .client import JobApiClient
from .common.errors import JobClientError, JobStateError
from .common.job_kind import BaseJobParams, JobKind
from .common.schema_job import Job, JobStatus
from .config import ClientSettings
from .poller import ErrorListener, JobPoller, UpdateListener, notify
from .presentation import JobView, build_view
from .state import JobState


class JobSession:
    """What one progress dialog does for one job kind.

    Responsibilities:
    - Resumes the kind's active job instead of starting a duplicate
    - Starts a job when nothing is running
    - Requests cancellation and keeps polling until the backend confirms
      a terminal status
    - Owns the poller and tears it down on close

    Closing a session only stops observing. The backend job keeps running.

    Example:
        async with JobSession(api, VendorSyncKind()) as session:
            if await session.open() is None:
                await session.start({"currency": "EUR", "conversion_rate": 4.05})
            job = await session.wait()
    """

    def __init__(
        self,
        api: JobApiClient,
        kind: JobKind,
        *,
        interval: float | None = None,
        on_update: UpdateListener | None = None,
        on_error: ErrorListener | None = None,
    ):
        self.api: JobApiClient = api
        self.kind: JobKind = kind
        self.interval: float = kind.poll_interval if interval is None else interval
        self.on_update: UpdateListener | None = on_update
        self.on_error: ErrorListener | None = on_error

        self.state: JobState = JobState()
        self._poller: JobPoller | None = None
        self._start_lock: asyncio.Lock = asyncio.Lock()
        self._cancel_in_flight: bool = False

    @classmethod
    def from_settings(
        cls,
        api: JobApiClient,
        kind: JobKind,
        settings: ClientSettings,
        *,
        on_update: UpdateListener | None = None,
        on_error: ErrorListener | None = None,
    ) -> "JobSession":
        """Session polling at the interval configured for ``kind``, if any."""
        return cls(
            api,
            kind,
            interval=settings.poll_interval_for(kind.name, kind.poll_interval),
            on_update=on_update,
            on_error=on_error,
        )

    @property
    def job(self) -> Job | None:
        return self.state.job

    @property
    def error(self) -> str | None:
        return self.state.error

    @property
    def polling(self) -> bool:
        return self._poller is not None and self._poller.running

    @property
    def cancel_pending(self) -> bool:
        job = self.state.job
        return self._cancel_in_flight or (job is not None and job.status == JobStatus.cancelling)

    # ---------------------------
    # Lifecycle
    # ---------------------------

    async def open(self, job_id: str | None = None) -> Job | None:
        """Observe ``job_id``, or the kind's active job when no id is given.

        Returns:
            The observed job, or None when nothing is running and the
            caller should offer to start one.
        """
        try:
            if job_id is not None:
                job = await self.api.fetch_status(self.kind, job_id)
            else:
                job = await self.api.fetch_active(self.kind)
        except JobClientError as e:
            self._fail("open", e)
            raise

        if job is None:
            logger.info(f"No active {self.kind.name} job")
            return None

        logger.info(f"Resuming {self.kind.name} job {job.id} ({job.status.value})")
        await self._observe(job)
        return job

    async def start(self, params: BaseJobParams | Mapping[str, Any] | None = None) -> Job:
        """Start a job unless one is already running, in which case it is resumed.

        The active-job check is advisory: two operators starting at the
        same moment can still both get through.
        """
        async with self._start_lock:
            current = self.state.job
            if current is not None and current.is_active:
                return current

            try:
                job = await self.api.fetch_active(self.kind)
                if job is not None:
                    logger.info(f"{self.kind.name} job {job.id} already running; resuming it")
                else:
                    job = await self.api.start_job(self.kind, params)
            except JobClientError as e:
                self._fail("start", e)
                raise

            await self._observe(job)
            return job

    async def cancel(self) -> Job:
        """Request cancellation of the observed job.

        The job moves to whatever the backend confirms (normally
        ``cancelling``) and polling continues until it is terminal.
        """
        job = self.state.job
        if job is None:
            raise JobStateError("No job to cancel")
        if not self.kind.supports_cancel:
            raise JobStateError(f"Jobs of kind '{self.kind.name}' cannot be cancelled")
        if job.is_terminal:
            raise JobStateError(f"Job {job.id} is already {job.status.value}")
        if self.cancel_pending:
            return job

        self._cancel_in_flight = True
        try:
            confirmed = await self.api.cancel_job(self.kind, job)
        except JobClientError as e:
            self._fail("cancel", e)
            raise
        finally:
            self._cancel_in_flight = False

        if self.state.apply(confirmed):
            notify(self.on_update, confirmed, f"{self.kind.name} session")

        if self.state.is_terminal:
            await self._stop_poller()

        return self.state.job or confirmed

    async def wait(self) -> Job | None:
        """Wait until the observed job is terminal (or the session is closed)."""
        if self._poller is None:
            return self.state.job
        return await self._poller.wait()

    async def close(self) -> None:
        job = self.state.job
        if job is not None and job.is_active:
            logger.info(f"{self.kind.name} job {job.id} is still running in the background")
        await self._stop_poller()

    def view(self) -> JobView | None:
        job = self.state.job
        if job is None:
            return None
        return build_view(
            job,
            error=self.state.error,
            cancel_pending=self.cancel_pending,
            can_cancel=self.kind.supports_cancel,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ---------------------------
    # Internals
    # ---------------------------

    async def _observe(self, job: Job) -> None:
        await self._stop_poller()
        self.state.observe(job)
        notify(self.on_update, job, f"{self.kind.name} session")

        self._poller = JobPoller(
            self.api,
            self.kind,
            self.state,
            interval=self.interval,
            on_update=self.on_update,
            on_error=self.on_error,
        )
        self._poller.start()

    async def _stop_poller(self) -> None:
        poller, self._poller = self._poller, None
        if poller is not None:
            await poller.close()

    def _fail(self, action: str, error: JobClientError) -> None:
        logger.error(f"Failed to {action} {self.kind.name} job: {error.message}")
        self.state.record_error(error.message)
        notify(self.on_error, error.message, f"{self.kind.name} session")
