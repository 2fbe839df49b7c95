"""Common module - schemas, errors and the job kind base class."""

from .errors import ApiError, JobClientError, JobStateError, TransportError
from .job_kind import BaseJobParams, JobKind, RestJobKind
from .schema_job import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    ApiResponse,
    Job,
    JobError,
    JobLogEntry,
    JobProgress,
    JobRequest,
    JobStatus,
    JobTiming,
    status_rank,
)

__all__ = [
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "ApiError",
    "ApiResponse",
    "BaseJobParams",
    "Job",
    "JobClientError",
    "JobError",
    "JobKind",
    "JobLogEntry",
    "JobProgress",
    "JobRequest",
    "JobStateError",
    "JobStatus",
    "JobTiming",
    "RestJobKind",
    "TransportError",
    "status_rank",
]
