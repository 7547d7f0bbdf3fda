"""Result models returned by the query service.

All results serialize to camelCase through :meth:`LastPosBaseModel.to_dict`
so the boundary layer can render them without renaming keys.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field

from lastpos.ingestion.normalize import utc_now_iso
from lastpos.models._base import LastPosBaseModel
from lastpos.models.position import PositionRecord
from lastpos.models.view import View


class LookupStatus(StrEnum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    DECODE_ERROR = "decode_error"


class LookupOutcome(LastPosBaseModel):
    """Result of resolving one id inside a batch or listing.

    ``record`` is set only for ``FOUND``; ``error`` only for
    ``DECODE_ERROR``.
    """

    entity_id: str
    status: LookupStatus
    record: PositionRecord | None = None
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.status == LookupStatus.FOUND


class PositionResult(LastPosBaseModel):
    """Single lookup result."""

    entity_id: str
    view: View
    data: dict[str, Any]
    timestamp: str = Field(default_factory=utc_now_iso)


class BatchSummary(LastPosBaseModel):
    """Partial-failure summary of a batch lookup.

    ``found + not_found == requested`` always holds; ids whose content
    could not be decoded count as not found and are also listed in
    ``decode_error_ids``.
    """

    requested: int
    found: int
    not_found: int
    not_found_ids: list[str] = Field(default_factory=list)
    decode_error_ids: list[str] = Field(default_factory=list)
    view: View = View.FULL


class BatchResult(LastPosBaseModel):
    data: list[dict[str, Any]]
    summary: BatchSummary
    timestamp: str = Field(default_factory=utc_now_iso)


class ListingSummary(LastPosBaseModel):
    total: int
    returned: int
    offset: int
    limit: int | None
    view: View


class ListingResult(LastPosBaseModel):
    data: list[dict[str, Any]]
    summary: ListingSummary
    timestamp: str = Field(default_factory=utc_now_iso)


class ExistenceResult(LastPosBaseModel):
    entity_id: str
    exists: bool
    timestamp: str = Field(default_factory=utc_now_iso)


class StoreStats(LastPosBaseModel):
    """Key count and best-effort memory accounting for one namespace."""

    count: int
    memory_bytes: int
    key_pattern: str
    timestamp: str = Field(default_factory=utc_now_iso)


class ServiceStats(LastPosBaseModel):
    namespace: str
    service: str
    version: str
    stats: StoreStats
    store_connection: str


class HealthStatus(LastPosBaseModel):
    """Health of one namespace.

    ``healthy`` follows the liveness probe only; an empty namespace is
    still healthy.
    """

    namespace: str
    healthy: bool
    store: str
    count: int | None = None
    error: str | None = None
    timestamp: str = Field(default_factory=utc_now_iso)
