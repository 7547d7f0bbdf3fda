"""Custom exception hierarchy for lastpos.

Every exception carries a stable :class:`ErrorCode` so the boundary layer
can branch on ``exc.code`` instead of parsing messages.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    INVALID_CONFIG = "INVALID_CONFIG"
    INVALID_IDENTIFIER = "INVALID_IDENTIFIER"
    INVALID_BATCH = "INVALID_BATCH"
    INVALID_PAGINATION = "INVALID_PAGINATION"
    NOT_FOUND = "NOT_FOUND"
    DECODE_ERROR = "DECODE_ERROR"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class LastPosError(Exception):
    """Base exception for all lastpos errors."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details: dict[str, Any] = dict(details or {})
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Return the error structure rendered by the boundary layer."""
        payload: dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": str(self.code),
        }
        if self.details:
            payload["details"] = self.details
        return payload


class LastPosConfigError(LastPosError):
    """Invalid or missing configuration."""

    code = ErrorCode.INVALID_CONFIG


class LastPosValidationError(LastPosError):
    """Request parameters rejected before any storage access."""


class InvalidIdentifierError(LastPosValidationError):
    """Identifier is empty, too long, or uses characters outside ``[A-Za-z0-9._-]``."""

    code = ErrorCode.INVALID_IDENTIFIER

    def __init__(self, message: str, *, value: Any = None) -> None:
        self.value = value
        super().__init__(message, details={"value": value})


class InvalidBatchError(LastPosValidationError):
    """Batch is empty, not a sequence, over the ceiling, or holds invalid entries.

    ``invalid_entries`` lists every offending entry as
    ``{"index": int, "value": Any, "error": str}``; nothing in the batch is
    admitted when it is non-empty.
    """

    code = ErrorCode.INVALID_BATCH

    def __init__(
        self,
        message: str,
        *,
        invalid_entries: list[dict[str, Any]] | None = None,
        requested: int | None = None,
        maximum: int | None = None,
    ) -> None:
        self.invalid_entries: list[dict[str, Any]] = list(invalid_entries or [])
        self.requested = requested
        self.maximum = maximum
        details: dict[str, Any] = {}
        if self.invalid_entries:
            details["invalidEntries"] = self.invalid_entries
        if requested is not None:
            details["requested"] = requested
        if maximum is not None:
            details["maximum"] = maximum
        super().__init__(message, details=details)


class InvalidPaginationError(LastPosValidationError):
    """``limit`` or ``offset`` out of range."""

    code = ErrorCode.INVALID_PAGINATION

    def __init__(self, message: str, *, parameter: str, value: Any = None) -> None:
        self.parameter = parameter
        self.value = value
        super().__init__(message, details={"parameter": parameter, "value": value})


class PositionNotFoundError(LastPosError):
    """No decodable record exists for a valid identifier.

    Only raised by single lookups; batches, listings and existence
    checks report absence as a normal outcome.
    """

    code = ErrorCode.NOT_FOUND

    def __init__(self, message: str, *, entity_id: str, namespace: str = "") -> None:
        self.entity_id = entity_id
        self.namespace = namespace
        super().__init__(message, details={"entityId": entity_id, "namespace": namespace})


class PositionDecodeError(LastPosError):
    """Key is present but its content is corrupt or unreadable."""

    code = ErrorCode.DECODE_ERROR

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message, details={"key": key} if key else None)


class StoreUnavailableError(LastPosError):
    """Connection or liveness failure talking to Redis."""

    code = ErrorCode.STORE_UNAVAILABLE
