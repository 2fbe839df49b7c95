"""Poll loop - re-fetches job status until the job is terminal."""

import asyncio
from collections.abc import Callable
from types import TracebackType
from typing import Self, TypeVar

from loguru import logger

from .client import JobApiClient
from .common.errors import JobClientError, JobStateError
from .common.job_kind import JobKind
from .common.schema_job import Job
from .state import JobState

UpdateListener = Callable[[Job], None]
ErrorListener = Callable[[str], None]

A = TypeVar("A")


class JobPoller:
    """Owned, cancellable poll task for the job held by a `JobState`.

    Responsibilities:
    - Fetches status every ``interval`` seconds, the next fetch being
      scheduled only after the previous one finished (never two in flight)
    - Feeds every snapshot through the state reducer
    - Records fetch failures and keeps polling
    - Stops by itself once the job is terminal

    Closing cancels the task even mid-request. A closed poller never touches
    the state or calls a listener again. The backend job is not affected.

    Example:
        async with JobPoller(api, AutoMapKind(), state) as poller:
            job = await poller.wait()
    """

    def __init__(
        self,
        api: JobApiClient,
        kind: JobKind,
        state: JobState,
        *,
        interval: float | None = None,
        on_update: UpdateListener | None = None,
        on_error: ErrorListener | None = None,
    ):
        self.api: JobApiClient = api
        self.kind: JobKind = kind
        self.state: JobState = state
        self.interval: float = kind.poll_interval if interval is None else interval
        self.on_update: UpdateListener | None = on_update
        self.on_error: ErrorListener | None = on_error

        self._task: asyncio.Task[Job | None] | None = None
        self._finished: asyncio.Event = asyncio.Event()
        self._closed: bool = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Begin polling if the tracked job is still active. Idempotent."""
        if self._closed:
            raise JobStateError("Poller is closed")
        if self.running:
            return

        job = self.state.job
        if job is None or job.is_terminal:
            self._finished.set()
            return

        self._finished.clear()
        self._task = asyncio.create_task(
            self._run(job.id), name=f"poll-{self.kind.name}-{job.id}"
        )

    async def wait(self) -> Job | None:
        """Wait for the loop to end (terminal job or close) and return the last snapshot."""
        if self._task is None:
            return self.state.job

        _ = await self._finished.wait()

        task = self._task
        if task.done() and not task.cancelled():
            exc = task.exception()
            if exc is not None:
                raise exc
        return self.state.job

    async def close(self) -> None:
        self._closed = True
        task = self._task
        if task is None:
            self._finished.set()
            return

        # Called from a listener running inside the loop: it exits on its own
        if task is asyncio.current_task():
            return

        if not task.done():
            _ = task.cancel()
        try:
            _ = await task
        except asyncio.CancelledError:
            pass
        finally:
            self._finished.set()

    async def __aenter__(self) -> Self:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ---------------------------
    # Loop
    # ---------------------------

    async def _run(self, job_id: str) -> Job | None:
        logger.info(f"Polling {self.kind.name} job {job_id} every {self.interval}s")
        try:
            while not self._closed:
                await asyncio.sleep(self.interval)
                if self._closed:
                    break

                try:
                    snapshot = await self.api.fetch_status(self.kind, job_id)
                except JobClientError as e:
                    if self._closed:
                        break
                    logger.warning(f"Status poll of {self.kind.name} job {job_id} failed: {e.message}")
                    self.state.record_error(e.message)
                    self._notify(self.on_error, e.message)
                    continue

                if self._closed:
                    break

                if self.state.apply(snapshot):
                    self._notify(self.on_update, snapshot)

                current = self.state.job
                if current is None or current.id != job_id:
                    break
                if current.is_terminal:
                    logger.info(f"{self.kind.name} job {job_id} finished: {current.status.value}")
                    break
        finally:
            self._finished.set()

        return self.state.job

    def _notify(self, listener: Callable[[A], None] | None, arg: A) -> None:
        if self._closed:
            return
        notify(listener, arg, f"{self.kind.name} poller")


def notify(listener: Callable[[A], None] | None, arg: A, owner: str) -> None:
    """Call a listener, logging instead of raising if it fails."""
    if listener is None:
        return
    try:
        listener(arg)
    except Exception as e:
        logger.error(f"Error in listener of {owner}: {e}")
