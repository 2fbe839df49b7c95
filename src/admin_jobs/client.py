"""Async HTTP client for the admin backend job endpoints."""

from collections.abc import Callable, Mapping
from types import TracebackType
from typing import Any, Self, TypeVar

import httpx
from loguru import logger
from pydantic import JsonValue

from .common.errors import ApiError, TransportError
from .common.job_kind import BaseJobParams, JobKind
from .common.schema_job import ApiResponse, Job, JobRequest
from .config import DEFAULT_TIMEOUT, ClientSettings

T = TypeVar("T")


class JobApiClient:
    """Thin wrapper around `httpx.AsyncClient` speaking the admin envelope.

    Every response is judged by its body: ``success: false`` or a truthy
    ``error`` is a failure whatever the HTTP status code says.

    Example:
        async with JobApiClient("https://api.example.com", token=token) as api:
            job = await api.start_job(AutoMapKind())
            job = await api.fetch_status(AutoMapKind(), job.id)
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self.base_url: str = base_url.rstrip("/")
        self._client: httpx.AsyncClient = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "JobApiClient":
        return cls(
            settings.base_url,
            token=settings.token,
            timeout=settings.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---------------------------
    # Transport
    # ---------------------------

    async def request(
        self, req: JobRequest, default_message: str = "Request failed"
    ) -> JsonValue:
        """Perform one call and return the envelope's ``data``.

        Raises:
            TransportError: no response was received
            ApiError: the body reports failure or is not an envelope
        """
        logger.debug(f"{req.method} {req.path} params={req.params}")
        try:
            response = await self._client.request(
                req.method,
                req.path,
                params=req.params,
                json=req.json_body,
            )
        except httpx.TransportError as e:
            raise TransportError(str(e) or type(e).__name__) from e

        try:
            body = ApiResponse.model_validate(response.json())
        except ValueError as e:
            raise ApiError(
                f"{default_message} (HTTP {response.status_code})",
                status_code=response.status_code,
            ) from e

        if not body.ok:
            raise ApiError(body.error_message(default_message), status_code=response.status_code)

        return body.data

    # ---------------------------
    # Job operations
    # ---------------------------

    async def fetch_status(self, kind: JobKind, job_id: str) -> Job:
        """One status read. No retry: the poll loop decides what a failure means."""
        message = "Failed to fetch status"
        data = await self.request(kind.status_request(job_id), message)
        job = _parse(kind.parse_job, data, message)
        if job is None:
            raise ApiError(f"{message}: response carries no job")
        return job

    async def fetch_active(self, kind: JobKind) -> Job | None:
        message = "Failed to check for an active job"
        data = await self.request(kind.active_request(), message)
        return _parse(kind.parse_active, data, message)

    async def start_job(
        self,
        kind: JobKind,
        params: BaseJobParams | Mapping[str, Any] | None = None,
    ) -> Job:
        message = "Failed to start job"
        validated = kind.validate_params(params)
        data = await self.request(kind.start_request(validated), message)

        job = _parse(kind.parse_start, data, message)
        if job is not None:
            logger.info(f"Started {kind.name} job {job.id}")
            return job

        if kind.singleton_id is None:
            raise ApiError(f"{message}: response carries no job")

        if isinstance(data, dict) and data.get("started") is False:
            logger.info(f"{kind.name}: {data.get('message') or 'already running'}")
        return await self.fetch_status(kind, kind.singleton_id)

    async def cancel_job(self, kind: JobKind, job: Job) -> Job:
        """Ask the backend to stop a job and return the snapshot it confirms."""
        message = "Failed to cancel job"
        data = await self.request(kind.cancel_request(job.id), message)
        confirmed = _parse(lambda d: kind.parse_cancel(d, job), data, message)
        logger.info(f"Cancellation of {kind.name} job {job.id} requested: {confirmed.status.value}")
        return confirmed


def _parse(parse: Callable[[JsonValue], T], data: JsonValue, message: str) -> T:
    try:
        return parse(data)
    except ValueError as e:
        raise ApiError(f"{message}: malformed job payload ({e})") from e
