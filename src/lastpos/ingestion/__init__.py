"""Ingestion layer.

This package turns raw Redis content, whatever its physical encoding, into
canonical :class:`~lastpos.models.position.PositionRecord` objects.
"""

__all__: list[str] = []
