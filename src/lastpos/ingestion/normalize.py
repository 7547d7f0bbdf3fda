"""Normalization helpers.

Centralizes defensive parsing and placeholder handling for values read
from Redis, where everything a producer wrote into a hash arrives as text.
"""

from __future__ import annotations

import json
import math
from datetime import UTC, datetime
from typing import Any

from lastpos._constants import MS_THRESHOLD
from lastpos.exceptions import PositionDecodeError

_SENTINELS = frozenset({"", "--", "NaN", "nan", "null", "undefined"})


def safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip() in _SENTINELS:
        return None
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def first_present(data: dict[str, Any], *keys: str) -> Any:
    """Return the first value under *keys* that is not ``None`` or empty."""
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def normalize_timestamp(value: Any) -> str | None:
    """Normalize a producer timestamp to an ISO-8601 string.

    - Empty/missing -> None
    - Strings are kept as written (producers send ISO-8601)
    - Numbers are epoch seconds or milliseconds (>= 1e12) and are
      rendered as UTC ISO-8601
    - Numbers no calendar can represent raise ValueError
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            ts = float(value)
        except OverflowError as exc:
            raise ValueError(f"timestamp {value!r} is out of range") from exc
        if math.isnan(ts) or math.isinf(ts) or ts <= 0:
            return None
        if ts >= MS_THRESHOLD:
            ts /= 1000.0
        try:
            moment = datetime.fromtimestamp(ts, tz=UTC)
        except (OverflowError, OSError, ValueError) as exc:
            raise ValueError(f"timestamp {value!r} is out of range") from exc
        return moment.isoformat().replace("+00:00", "Z")
    return safe_str(value)


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_json_object(text: Any, *, key: str = "", what: str = "record") -> dict[str, Any] | None:
    """Parse a serialized JSON object.

    Returns ``None`` for empty content (empty string or JSON ``null``).

    Raises
    ------
    PositionDecodeError
        If *text* is not valid JSON or is valid JSON but not an object.
    """
    if text is None:
        return None
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise PositionDecodeError(f"{what} at {key!r} is not valid UTF-8", key=key) from exc
    if isinstance(text, str) and not text.strip():
        return None
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise PositionDecodeError(f"{what} at {key!r} is not valid JSON: {exc}", key=key) from exc
    except RecursionError as exc:
        raise PositionDecodeError(f"{what} at {key!r} is nested too deeply", key=key) from exc
    if parsed is None:
        return None
    if not isinstance(parsed, dict):
        raise PositionDecodeError(
            f"{what} at {key!r} must be a JSON object, got {type(parsed).__name__}",
            key=key,
        )
    return parsed
