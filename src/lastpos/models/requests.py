"""Pydantic request models for service entrypoints.

These models provide a consistent "validate → normalize → execute" flow.
They are used internally by :mod:`lastpos.validation`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PageRequest(BaseModel):
    """Normalized pagination window for a full listing.

    ``limit=None`` means "everything from ``offset`` on".  Numeric strings
    (query parameters) are accepted; booleans and fractions are not.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    limit: int | None = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)

    @field_validator("limit", "offset", mode="before")
    @classmethod
    def _reject_bools(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("must be an integer")
        return value

    @field_validator("offset", mode="before")
    @classmethod
    def _offset_default(cls, value: Any) -> Any:
        return 0 if value is None else value

    def window(self, total: int) -> slice:
        if self.limit is None:
            return slice(self.offset, total)
        return slice(self.offset, self.offset + self.limit)
