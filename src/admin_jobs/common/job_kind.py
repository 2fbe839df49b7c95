"""JobKind - Abstract base class describing one backend job type."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar, override

from pydantic import BaseModel, ConfigDict, JsonValue

from .errors import JobStateError
from .schema_job import Job, JobRequest, JobStatus


class BaseJobParams(BaseModel):
    """Start parameters of a job kind. Kinds without parameters use this as is."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid")


class JobKind(ABC):
    """
    Endpoint layout and response normalisation for one job type.

    - Builds the requests for start / status / active / cancel
    - Turns the kind's response shape into a `Job` snapshot
    - Stateless; one instance can serve any number of sessions
    """

    poll_interval: ClassVar[float] = 3.0
    supports_cancel: ClassVar[bool] = True
    singleton_id: ClassVar[str | None] = None
    params_schema: ClassVar[type[BaseJobParams]] = BaseJobParams

    @property
    @abstractmethod
    def name(self) -> str: ...

    # ---------------------------
    # Requests
    # ---------------------------

    @abstractmethod
    def start_request(self, params: BaseJobParams) -> JobRequest: ...

    @abstractmethod
    def status_request(self, job_id: str) -> JobRequest: ...

    @abstractmethod
    def active_request(self) -> JobRequest: ...

    def cancel_request(self, job_id: str) -> JobRequest:
        raise JobStateError(f"Jobs of kind '{self.name}' cannot be cancelled")

    # ---------------------------
    # Responses
    # ---------------------------

    def build_job(self, raw: Mapping[str, Any]) -> Job:
        return Job.model_validate(raw)

    def parse_job(self, data: JsonValue) -> Job | None:
        if not isinstance(data, dict):
            return None
        return self.build_job(data)

    def parse_active(self, data: JsonValue) -> Job | None:
        return self.parse_job(data)

    def parse_start(self, data: JsonValue) -> Job | None:
        """Job created by a start call, or None when the caller must re-fetch status."""
        return self.parse_job(data)

    def parse_cancel(self, data: JsonValue, current: Job) -> Job:
        if isinstance(data, dict) and "id" in data:
            return self.build_job(data)
        if isinstance(data, dict) and isinstance(data.get("status"), str):
            return current.model_copy(update={"status": JobStatus(data["status"])})
        return current

    # ---------------------------
    # Params
    # ---------------------------

    def validate_params(
        self, params: BaseJobParams | Mapping[str, Any] | None
    ) -> BaseJobParams:
        if params is None:
            return self.params_schema()
        if isinstance(params, self.params_schema):
            return params
        if isinstance(params, BaseModel):
            params = params.model_dump()
        return self.params_schema.model_validate(params)

    @override
    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} every {self.poll_interval}s>"


def _unwrap(data: JsonValue, key: str | None) -> JsonValue:
    if key is None:
        return data
    if isinstance(data, dict):
        return data.get(key)
    return None


class RestJobKind(JobKind):
    """Job kind following the uniform admin contract.

    - POST ``start_path`` with the params as body
    - GET ``status_path?jobId=<id>``
    - GET ``active_path`` answering ``{job: Job | null}``
    - POST ``cancel_path`` with ``{jobId}``

    Subclasses set the paths and, when the backend nests the job inside
    ``data``, the key holding it.
    """

    start_path: ClassVar[str] = "/start-job"
    status_path: ClassVar[str] = "/job-status"
    active_path: ClassVar[str] = "/active-job"
    cancel_path: ClassVar[str] = "/cancel-job"

    job_key: ClassVar[str | None] = None
    active_key: ClassVar[str | None] = "job"

    @override
    def start_request(self, params: BaseJobParams) -> JobRequest:
        return JobRequest(
            method="POST",
            path=self.start_path,
            json_body=params.model_dump(exclude_none=True),
        )

    @override
    def status_request(self, job_id: str) -> JobRequest:
        return JobRequest(method="GET", path=self.status_path, params={"jobId": job_id})

    @override
    def active_request(self) -> JobRequest:
        return JobRequest(method="GET", path=self.active_path)

    @override
    def cancel_request(self, job_id: str) -> JobRequest:
        if not self.supports_cancel:
            return super().cancel_request(job_id)
        return JobRequest(method="POST", path=self.cancel_path, json_body={"jobId": job_id})

    @override
    def parse_job(self, data: JsonValue) -> Job | None:
        return super().parse_job(_unwrap(data, self.job_key))

    @override
    def parse_active(self, data: JsonValue) -> Job | None:
        return super().parse_job(_unwrap(data, self.active_key))

    @override
    def parse_cancel(self, data: JsonValue, current: Job) -> Job:
        return super().parse_cancel(_unwrap(data, self.job_key), current)
