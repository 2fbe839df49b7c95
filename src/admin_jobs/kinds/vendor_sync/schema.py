from pydantic import Field, field_validator

from ...common.job_kind import BaseJobParams

LUXURY_VENDOR_ID = "65053474-4e40-44ee-941c-ef5253ea9fc9"


class VendorSyncParams(BaseJobParams):
    currency: str = Field(
        "EUR",
        pattern=r"^[A-Za-z]{3}$",
        description="Vendor price currency (ISO 4217)",
    )
    conversion_rate: float = Field(
        4.05,
        gt=0,
        description="Multiplier from the vendor currency to the store currency",
    )
    increment_percent: float = Field(
        20.0,
        ge=0,
        description="Markup applied on top of the converted vendor price",
    )

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()
