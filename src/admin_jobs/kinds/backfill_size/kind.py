"""Recompute normalized_size / size_country for every product variant."""

from collections.abc import Mapping
from typing import Any, ClassVar, override

from pydantic import JsonValue

from ...common.job_kind import BaseJobParams, JobKind
from ...common.schema_job import (
    Job,
    JobError,
    JobProgress,
    JobRequest,
    JobStatus,
    JobTiming,
)
from .schema import BackfillStatus

BACKFILL_JOB_ID = "backfill-size"


class BackfillSizeKind(JobKind):
    """Singleton backfill job.

    - Status and active queries share one endpoint
    - A start that finds a backfill already running answers ``started: false``
    - Cannot be cancelled
    """

    poll_interval: ClassVar[float] = 10.0
    supports_cancel: ClassVar[bool] = False
    singleton_id: ClassVar[str | None] = BACKFILL_JOB_ID

    start_path: ClassVar[str] = "/admin/backfill-size"
    status_path: ClassVar[str] = "/admin/backfill-size/status"

    @property
    @override
    def name(self) -> str:
        return "backfill_size"

    @override
    def start_request(self, params: BaseJobParams) -> JobRequest:
        return JobRequest(method="POST", path=self.start_path, json_body={})

    @override
    def status_request(self, job_id: str) -> JobRequest:
        return JobRequest(method="GET", path=self.status_path)

    @override
    def active_request(self) -> JobRequest:
        return JobRequest(method="GET", path=self.status_path)

    @override
    def build_job(self, raw: Mapping[str, Any]) -> Job:
        doc = BackfillStatus.model_validate(raw)

        if doc.running:
            status = JobStatus.running
        elif doc.error:
            status = JobStatus.failed
        elif doc.completed_at is not None:
            status = JobStatus.completed
        else:
            status = JobStatus.pending

        return Job(
            id=BACKFILL_JOB_ID,
            status=status,
            progress=JobProgress(
                processed=doc.processed,
                total=doc.total,
                successful=doc.updated,
                updated=doc.updated,
            ),
            timing=JobTiming(started_at=doc.started_at, completed_at=doc.completed_at),
            error=JobError(message=doc.error) if doc.error else None,
        )

    @override
    def parse_active(self, data: JsonValue) -> Job | None:
        job = self.parse_job(data)
        if job is None or job.status != JobStatus.running:
            return None
        return job

    @override
    def parse_start(self, data: JsonValue) -> Job | None:
        # {started, message}: whether new or already running, status is re-fetched
        return None
