"""Presentation - pure functions from a job snapshot to what a dialog shows."""

import math
from datetime import datetime
from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

from .common.schema_job import Job, JobLogEntry, JobStatus
from .utils.timestamp import elapsed_seconds, format_elapsed

STATUS_LABELS: dict[JobStatus, str] = {
    JobStatus.pending: "Pending",
    JobStatus.running: "Running",
    JobStatus.cancelling: "Cancelling",
    JobStatus.completed: "Completed",
    JobStatus.failed: "Failed",
    JobStatus.cancelled: "Cancelled",
    JobStatus.stopped: "Stopped",
}

PrimaryAction = Literal["Cancel", "Close", "Done"]


def progress_percent(processed: int, total: int) -> int:
    """Progress bar value in [0, 100].

    Zero while the total is unknown; clamped when stale counters put
    ``processed`` past ``total``. Halves round up.
    """
    if total <= 0:
        return 0
    percent = math.floor(processed * 100 / total + 0.5)
    return max(0, min(100, percent))


def format_log_entry(entry: JobLogEntry) -> str:
    parts: list[str] = []
    if entry.time:
        parts.append(f"[{entry.time}]")
    if entry.status:
        parts.append(entry.status.upper())
    if entry.product_name:
        parts.append(entry.product_name)
    if entry.category_path:
        parts.append(f"-> {entry.category_path}")
    if entry.message:
        detailed = entry.product_name or entry.category_path
        parts.append(f"({entry.message})" if detailed else entry.message)
    return " ".join(parts)


def summarize(job: Job, elapsed: str) -> str | None:
    progress = job.progress
    match job.status:
        case JobStatus.completed:
            return f"Completed successfully. Processed {progress.processed}/{progress.total} in {elapsed}."
        case JobStatus.cancelled | JobStatus.stopped:
            label = STATUS_LABELS[job.status]
            return f"{label} after processing {progress.processed}/{progress.total}."
        case JobStatus.failed:
            message = job.error.message if job.error else "Unknown error"
            return f"Failed: {message}"
        case _:
            return None


class JobView(BaseModel):
    """Everything a progress dialog renders for one snapshot."""

    job_id: str
    status: JobStatus
    status_label: str

    percent: int = Field(ge=0, le=100)
    processed: int
    total: int
    successful: int
    failed: int
    current_page: int | None = None

    started_at: datetime | None = None
    completed_at: datetime | None = None
    elapsed: str

    logs: list[str]
    summary: str | None = None
    error: str | None = None

    primary_action: PrimaryAction
    cancel_enabled: bool

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


def build_view(
    job: Job,
    *,
    error: str | None = None,
    cancel_pending: bool = False,
    can_cancel: bool = True,
    now: datetime | None = None,
) -> JobView:
    progress = job.progress
    timing = job.timing

    elapsed = timing.elapsed_formatted or format_elapsed(
        elapsed_seconds(timing.started_at, timing.completed_at, now)
    )

    if job.is_terminal:
        primary_action: PrimaryAction = "Done"
    elif can_cancel:
        primary_action = "Cancel"
    else:
        primary_action = "Close"

    return JobView(
        job_id=job.id,
        status=job.status,
        status_label=STATUS_LABELS[job.status],
        percent=progress_percent(progress.processed, progress.total),
        processed=progress.processed,
        total=progress.total,
        successful=progress.successful,
        failed=progress.failed,
        current_page=progress.current_page,
        started_at=timing.started_at,
        completed_at=timing.completed_at,
        elapsed=elapsed,
        logs=[format_log_entry(entry) for entry in job.logs],
        summary=summarize(job, elapsed),
        error=error,
        primary_action=primary_action,
        cancel_enabled=can_cancel and job.is_active and not cancel_pending,
    )
