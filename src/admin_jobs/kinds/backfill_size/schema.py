from datetime import datetime

from pydantic import Field, field_validator

from ...common.schema_job import WireModel


class BackfillStatus(WireModel):
    """Status document of the size backfill.

    There is only ever one backfill, so the backend reports a flat document
    rather than a job with an id.
    """

    running: bool = False
    processed: int = Field(0, ge=0)
    total: int = Field(0, ge=0)
    updated: int = Field(0, ge=0)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error: str | None = None

    @field_validator("running", mode="before")
    @classmethod
    def unknown_flag(cls, v: object) -> object:
        return False if v is None else v

    @field_validator("processed", "total", "updated", mode="before")
    @classmethod
    def unknown_counter(cls, v: object) -> object:
        return 0 if v is None else v
