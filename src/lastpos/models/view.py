"""Response view names."""

from __future__ import annotations

from enum import StrEnum


class View(StrEnum):
    """Output shape requested by a caller.

    ``full`` exposes every canonical field, ``gps`` only ``id/lat/lng``
    and ``mobile`` adds ``name``.  Unknown names resolve to ``FULL``
    instead of raising ``ValueError``.
    """

    FULL = "full"
    GPS = "gps"
    MOBILE = "mobile"

    @classmethod
    def _missing_(cls, value: object) -> View:
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return cls.FULL
