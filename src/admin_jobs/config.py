import os
from collections.abc import Mapping
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

# --------------------------------------------------
# Environment variables
# --------------------------------------------------
ENV_BASE_URL = "ADMIN_API_BASE_URL"
ENV_TOKEN = "ADMIN_API_TOKEN"
ENV_TIMEOUT = "ADMIN_API_TIMEOUT"
ENV_POLL_INTERVAL_PREFIX = "ADMIN_POLL_INTERVAL_"

DEFAULT_TIMEOUT = 30.0


class ClientSettings(BaseModel):
    """Connection settings for the admin backend."""

    base_url: str = Field(..., min_length=1, description="Admin API root URL")
    token: str | None = Field(None, description="Bearer token for authenticated calls")
    timeout: float = Field(DEFAULT_TIMEOUT, gt=0, description="Per-request timeout (s)")
    poll_intervals: dict[str, float] = Field(
        default_factory=dict,
        description="Poll interval overrides keyed by job kind name",
    )

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="forbid", frozen=True)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("poll_intervals")
    @classmethod
    def validate_intervals(cls, v: dict[str, float]) -> dict[str, float]:
        for name, interval in v.items():
            if interval <= 0:
                raise ValueError(f"Poll interval for '{name}' must be positive")
        return v

    def poll_interval_for(self, kind_name: str, default: float) -> float:
        return self.poll_intervals.get(kind_name, default)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ClientSettings":
        env = os.environ if environ is None else environ

        base_url = env.get(ENV_BASE_URL)
        if not base_url:
            raise RuntimeError(f"{ENV_BASE_URL} is required")

        poll_intervals = {
            key[len(ENV_POLL_INTERVAL_PREFIX) :].lower(): float(value)
            for key, value in env.items()
            if key.startswith(ENV_POLL_INTERVAL_PREFIX) and value
        }

        return cls(
            base_url=base_url,
            token=env.get(ENV_TOKEN) or None,
            timeout=float(env.get(ENV_TIMEOUT) or DEFAULT_TIMEOUT),
            poll_intervals=poll_intervals,
        )
