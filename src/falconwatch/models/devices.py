"""Device inventory response model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DeviceScroll(BaseModel):
    """Decoded ``devices-scroll`` response.

    Only the number of ``resources`` matters to the monitor; the device IDs
    themselves are opaque. ``body`` keeps the response text as received so it
    can be logged alongside anomalies.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    resources: list[str] = Field(default_factory=list)
    meta: dict[str, Any] = Field(default_factory=dict)
    body: str = Field(default="", exclude=True, repr=False)

    @field_validator("resources", mode="before")
    @classmethod
    def _null_resources(cls, value: Any) -> Any:
        # The API sends ``"resources": null`` for an empty inventory.
        return [] if value is None else value

    @field_validator("meta", mode="before")
    @classmethod
    def _null_meta(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def count(self) -> int:
        return len(self.resources)

    @classmethod
    def from_body(cls, text: str) -> DeviceScroll:
        """Decode a response body, raising :class:`pydantic.ValidationError` on failure."""
        return cls.model_validate_json(text).model_copy(update={"body": text})
