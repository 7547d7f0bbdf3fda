"""Canonical position record model."""

from __future__ import annotations

import json
from typing import Any

from pydantic import Field, field_validator

from lastpos.ingestion.normalize import normalize_timestamp, safe_float, safe_str, utc_now_iso
from lastpos.models._base import LastPosBaseModel


class PositionRecord(LastPosBaseModel):
    """Last known position of one entity, independent of storage encoding.

    Coordinates and timestamps are ``None`` when the stored record lacked
    them.  Records only exist in memory; the engine never writes them back.

    Parameters
    ----------
    entity_id : str
        Device or user identifier, unique within its namespace.
    lat : float or None
        Latitude in degrees.
    lng : float or None
        Longitude in degrees.
    timestamp : str or None
        Producer-supplied time of fix (ISO-8601).
    received_at : str or None
        Time the producer pipeline received the fix.
    updated_at : str or None
        Time the stored record was last written.
    metadata : dict or None
        Opaque producer payload (speed, heading, accuracy, app info...).
    display_name : str or None
        Human-readable label.
    retrieved_at : str
        Time this engine read the record.
    """

    entity_id: str
    lat: float | None = None
    lng: float | None = None
    timestamp: str | None = None
    received_at: str | None = None
    updated_at: str | None = None
    metadata: dict[str, Any] | None = None
    display_name: str | None = None
    retrieved_at: str = Field(default_factory=utc_now_iso)

    @field_validator("entity_id", mode="before")
    @classmethod
    def _entity_id_non_empty(cls, value: Any) -> str:
        entity_id = safe_str(value)
        if entity_id is None:
            raise ValueError("entity_id must be non-empty")
        return entity_id

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("timestamp", "received_at", "updated_at", mode="before")
    @classmethod
    def _coerce_timestamps(cls, value: Any) -> str | None:
        return normalize_timestamp(value)

    @field_validator("display_name", mode="before")
    @classmethod
    def _coerce_display_name(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("metadata", mode="before")
    @classmethod
    def _coerce_metadata(cls, value: Any) -> Any:
        # Some producers double-encode metadata inside the outer blob.
        if isinstance(value, str):
            if not value.strip():
                return None
            try:
                value = json.loads(value)
            except ValueError as exc:
                raise ValueError(f"metadata is not valid JSON: {exc}") from exc
            except RecursionError as exc:
                raise ValueError("metadata is nested too deeply") from exc
        if value is not None and not isinstance(value, dict):
            raise ValueError(f"metadata must be an object, got {type(value).__name__}")
        return value

    @property
    def name(self) -> str:
        """Display label, falling back to the identifier."""
        return self.display_name or self.entity_id
