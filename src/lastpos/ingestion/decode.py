"""Canonical record decoding.

A producer may store the same logical record under four physical Redis
encodings.  Each encoding is a :class:`PhysicalType` tag with its own
reader and decoder; anything else resolves to ``UNSUPPORTED`` and decodes
to ``None``.

==================  ==============  =========================================
encoding            Redis type      current value
==================  ==============  =========================================
serialized-object   ``string``      the JSON blob itself
field-map           ``hash``        one field per attribute
append-log          ``list``        last appended element (``LINDEX -1``)
ranked-set          ``zset``        highest-scored member (``ZREVRANGE 0 0``)
==================  ==============  =========================================
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any

from pydantic import ValidationError

from lastpos._connection import RedisBackend
from lastpos._constants import DISPLAY_NAME_FIELDS
from lastpos.exceptions import PositionDecodeError
from lastpos.ingestion.normalize import first_present, parse_json_object
from lastpos.models.namespace import NamespaceSpec
from lastpos.models.position import PositionRecord

_logger = logging.getLogger(__name__)


class PhysicalType(StrEnum):
    STRING = "string"
    HASH = "hash"
    LIST = "list"
    ZSET = "zset"
    NONE = "none"
    UNSUPPORTED = "unsupported"

    @classmethod
    def _missing_(cls, value: object) -> PhysicalType:
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if member.value == lowered:
                    return member
        return cls.UNSUPPORTED


def _canonical_fields(data: dict[str, Any], fallback_id: str, spec: NamespaceSpec) -> dict[str, Any]:
    """Map producer keys onto :class:`PositionRecord` fields."""
    fields: dict[str, Any] = {
        "entity_id": first_present(data, "entityId", *spec.id_fields) or fallback_id,
        "lat": first_present(data, "lat", "latitude"),
        "lng": first_present(data, "lng", "lon", "longitude"),
        "timestamp": data.get("timestamp"),
        "received_at": data.get("receivedAt"),
        "updated_at": data.get("updatedAt"),
        "metadata": data.get("metadata"),
        "display_name": first_present(data, *DISPLAY_NAME_FIELDS),
    }
    return fields


def _build_record(fields: dict[str, Any], key: str) -> PositionRecord:
    try:
        return PositionRecord(**fields)
    except ValidationError as exc:
        raise PositionDecodeError(f"record at {key!r} has invalid fields: {exc.error_count()} error(s)", key=key) from exc


def _decode_blob(raw: Any, fallback_id: str, spec: NamespaceSpec, key: str) -> PositionRecord | None:
    data = parse_json_object(raw, key=key)
    if data is None:
        return None
    return _build_record(_canonical_fields(data, fallback_id, spec), key)


def _decode_hash(raw: Any, fallback_id: str, spec: NamespaceSpec, key: str) -> PositionRecord | None:
    if not raw:
        return None
    data = dict(raw)
    # metadata is a nested blob inside the field map
    data["metadata"] = parse_json_object(data.get("metadata"), key=key, what="metadata")
    return _build_record(_canonical_fields(data, fallback_id, spec), key)


def _decode_ranked(raw: Any, fallback_id: str, spec: NamespaceSpec, key: str) -> PositionRecord | None:
    if not raw:
        return None
    return _decode_blob(raw[0], fallback_id, spec, key)


_Decoder = Callable[[Any, str, NamespaceSpec, str], PositionRecord | None]

_DECODERS: dict[PhysicalType, _Decoder] = {
    PhysicalType.STRING: _decode_blob,
    PhysicalType.HASH: _decode_hash,
    PhysicalType.LIST: _decode_blob,
    PhysicalType.ZSET: _decode_ranked,
}


def decode(
    raw_value: Any,
    physical_type: PhysicalType | str,
    fallback_id: str,
    spec: NamespaceSpec,
    *,
    key: str = "",
) -> PositionRecord | None:
    """Decode a raw stored value into a canonical record.

    Parameters
    ----------
    raw_value : Any
        What the type-specific read returned (``str`` for string/list,
        ``dict`` for hash, ``list`` for zset).
    physical_type : PhysicalType or str
        Redis type reported by ``TYPE``.
    fallback_id : str
        Identifier derived from the key, used when the payload has none.
    spec : NamespaceSpec
        Namespace whose identifier field names apply.
    key : str
        Full Redis key, for error messages.

    Returns
    -------
    PositionRecord or None
        ``None`` when there is no decodable payload or the type is
        unsupported.

    Raises
    ------
    PositionDecodeError
        If the payload is present but corrupt.
    """
    tag = PhysicalType(physical_type)
    decoder = _DECODERS.get(tag)
    if decoder is None:
        if tag != PhysicalType.NONE:
            _logger.warning("Unsupported Redis type for %s %s: %s", spec.label, fallback_id, physical_type)
        return None
    return decoder(raw_value, fallback_id, spec, key or spec.key_for(fallback_id))


async def read_raw(client: RedisBackend, key: str, physical_type: PhysicalType) -> Any:
    """Issue the type-specific read for *key*."""
    if physical_type == PhysicalType.STRING:
        return await client.get(key)
    if physical_type == PhysicalType.HASH:
        return await client.hgetall(key)
    if physical_type == PhysicalType.LIST:
        return await client.lindex(key, -1)
    if physical_type == PhysicalType.ZSET:
        return await client.zrevrange(key, 0, 0)
    return None


_CONTENT_PROBES: dict[PhysicalType, Callable[[RedisBackend, str], Awaitable[int]]] = {
    PhysicalType.STRING: lambda client, key: client.strlen(key),
    PhysicalType.HASH: lambda client, key: client.hlen(key),
    PhysicalType.LIST: lambda client, key: client.llen(key),
    PhysicalType.ZSET: lambda client, key: client.zcard(key),
}


async def has_content(client: RedisBackend, key: str, physical_type: PhysicalType) -> bool:
    """Return whether *key* holds non-empty content for its type."""
    probe = _CONTENT_PROBES.get(physical_type)
    if probe is None:
        return False
    size = await probe(client, key)
    return bool(size and size > 0)
