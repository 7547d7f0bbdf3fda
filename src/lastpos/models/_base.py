"""Base model for lastpos records and results.

Every model inherits from :class:`LastPosBaseModel` which provides:

* ``alias_generator=to_camel`` so snake_case fields serialize to the
  camelCase keys producers and callers use (``entityId``,
  ``receivedAt``...).
* ``populate_by_name`` so Python code can construct models with
  snake_case keyword arguments.
* Immutability: records are snapshots and are never mutated after a read.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class LastPosBaseModel(BaseModel):
    """Base for lastpos models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase JSON-compatible representation."""
        return self.model_dump(mode="json", by_alias=True)
