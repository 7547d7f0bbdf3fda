"""View projection.

Trims a canonical :class:`~lastpos.models.position.PositionRecord` to the
shape a caller asked for.  Projection is pure and total: it never fails
and never touches storage.
"""

from __future__ import annotations

from typing import Any

from lastpos.models.position import PositionRecord
from lastpos.models.view import View

__all__ = ["View", "project", "project_many"]


def project(record: PositionRecord, view: View | str = View.FULL) -> dict[str, Any]:
    """Project *record* into *view*.

    ============  =======================  =====================================
    view          keys                     rule
    ============  =======================  =====================================
    ``full``      every canonical field    unmodified, camelCase keys
    ``gps``       ``id, lat, lng``         none
    ``mobile``    ``id, lat, lng, name``   ``name`` falls back to ``entityId``
    ============  =======================  =====================================
    """
    resolved = View(view)
    if resolved == View.GPS:
        return {"id": record.entity_id, "lat": record.lat, "lng": record.lng}
    if resolved == View.MOBILE:
        return {"id": record.entity_id, "lat": record.lat, "lng": record.lng, "name": record.name}
    return record.to_dict()


def project_many(records: list[PositionRecord], view: View | str = View.FULL) -> list[dict[str, Any]]:
    resolved = View(view)
    return [project(record, resolved) for record in records]
