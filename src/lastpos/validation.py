"""Admission rules for identifiers, batches and pagination.

These checks are authoritative: the boundary layer may pre-filter
requests, but every service entrypoint re-validates here before touching
storage.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from lastpos._constants import IDENTIFIER_ALLOWED, IDENTIFIER_PATTERN, MAX_BATCH_SIZE, MAX_IDENTIFIER_LENGTH, MAX_PAGE_LIMIT
from lastpos.exceptions import InvalidBatchError, InvalidIdentifierError, InvalidPaginationError
from lastpos.models.requests import PageRequest


def identifier_problem(value: Any, max_length: int = MAX_IDENTIFIER_LENGTH) -> str | None:
    """Return why *value* is not an acceptable identifier, or ``None``."""
    if not isinstance(value, str):
        return "identifier must be a string"
    candidate = value.strip()
    if not candidate:
        return "identifier must be a non-empty string"
    if len(candidate) > max_length:
        return f"identifier cannot exceed {max_length} characters"
    if not IDENTIFIER_PATTERN.match(candidate):
        return f"identifier contains invalid characters (allowed: {IDENTIFIER_ALLOWED})"
    return None


def validate_identifier(value: Any, *, max_length: int = MAX_IDENTIFIER_LENGTH) -> str:
    """Return the normalized identifier.

    Raises
    ------
    InvalidIdentifierError
        If *value* is empty, too long or uses disallowed characters.
    """
    problem = identifier_problem(value, max_length)
    if problem is not None:
        raise InvalidIdentifierError(problem, value=value)
    return value.strip()


def validate_batch(
    values: Any,
    *,
    max_size: int = MAX_BATCH_SIZE,
    max_length: int = MAX_IDENTIFIER_LENGTH,
) -> list[str]:
    """Return the normalized identifiers of a batch.

    Admission is all-or-nothing: a single bad entry rejects the batch and
    the error lists every offending entry.

    Raises
    ------
    InvalidBatchError
        If *values* is not a list/tuple, is empty, exceeds *max_size* or
        holds invalid identifiers.
    """
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        raise InvalidBatchError(f"identifiers must be an array, got {type(values).__name__}")
    if not values:
        raise InvalidBatchError("identifiers cannot be empty")
    if len(values) > max_size:
        raise InvalidBatchError(
            f"at most {max_size} identifiers are allowed per request",
            requested=len(values),
            maximum=max_size,
        )

    invalid: list[dict[str, Any]] = []
    cleaned: list[str] = []
    for index, value in enumerate(values):
        problem = identifier_problem(value, max_length)
        if problem is not None:
            invalid.append({"index": index, "value": value, "error": problem})
        else:
            cleaned.append(value.strip())

    if invalid:
        raise InvalidBatchError(
            f"{len(invalid)} of {len(values)} identifiers are invalid",
            invalid_entries=invalid,
            requested=len(values),
        )
    return cleaned


def validate_pagination(
    limit: Any = None,
    offset: Any = None,
    *,
    max_limit: int = MAX_PAGE_LIMIT,
) -> PageRequest:
    """Return a normalized pagination window.

    Raises
    ------
    InvalidPaginationError
        If ``limit`` is not within ``1..max_limit`` or ``offset`` is negative.
    """
    try:
        page = PageRequest(limit=limit, offset=offset)
    except ValidationError as exc:
        first = exc.errors()[0]
        parameter = str(first["loc"][0]) if first.get("loc") else "limit"
        value = limit if parameter == "limit" else offset
        if parameter == "limit":
            message = f"limit must be an integer between 1 and {max_limit}"
        else:
            message = "offset must be an integer greater than or equal to 0"
        raise InvalidPaginationError(message, parameter=parameter, value=value) from exc

    if page.limit is not None and page.limit > max_limit:
        raise InvalidPaginationError(
            f"limit must be an integer between 1 and {max_limit}",
            parameter="limit",
            value=limit,
        )
    return page
