from __future__ import annotations

import pytest

from lastpos.exceptions import InvalidBatchError, InvalidIdentifierError, InvalidPaginationError
from lastpos.validation import identifier_problem, validate_batch, validate_identifier, validate_pagination


def test_identifier_accepts_allowed_charset() -> None:
    assert validate_identifier("Dev_01.a-b") == "Dev_01.a-b"
    assert validate_identifier("  padded  ") == "padded"


@pytest.mark.parametrize(
    ("value", "fragment"),
    [
        ("", "non-empty"),
        ("   ", "non-empty"),
        ("x" * 101, "exceed"),
        ("dev 01", "invalid characters"),
        ("gps:last:x", "invalid characters"),
        ("dev*", "invalid characters"),
        (7, "string"),
    ],
)
def test_identifier_problems(value: object, fragment: str) -> None:
    problem = identifier_problem(value)

    assert problem is not None
    assert fragment in problem


def test_identifier_length_boundary() -> None:
    assert validate_identifier("x" * 100) == "x" * 100
    with pytest.raises(InvalidIdentifierError) as exc_info:
        validate_identifier("x" * 5, max_length=4)
    assert exc_info.value.value == "xxxxx"


def test_batch_returns_trimmed_ids() -> None:
    assert validate_batch([" a ", "b"]) == ["a", "b"]
    assert validate_batch(("a",)) == ["a"]


def test_batch_respects_custom_ceiling() -> None:
    with pytest.raises(InvalidBatchError) as exc_info:
        validate_batch(["a", "b", "c"], max_size=2)

    assert exc_info.value.to_dict()["details"] == {"requested": 3, "maximum": 2}


def test_batch_collects_all_invalid_entries() -> None:
    with pytest.raises(InvalidBatchError) as exc_info:
        validate_batch(["ok", None, "no spaces", "fine"])

    assert [(entry["index"], entry["value"]) for entry in exc_info.value.invalid_entries] == [
        (1, None),
        (2, "no spaces"),
    ]


def test_batch_rejects_generators() -> None:
    with pytest.raises(InvalidBatchError):
        validate_batch(entity_id for entity_id in ["a"])


def test_pagination_defaults() -> None:
    page = validate_pagination()

    assert page.limit is None
    assert page.offset == 0
    assert page.window(5) == slice(0, 5)


def test_pagination_accepts_numeric_strings() -> None:
    page = validate_pagination("20", "40")

    assert (page.limit, page.offset) == (20, 40)
    assert page.window(100) == slice(40, 60)


def test_pagination_limit_boundaries() -> None:
    assert validate_pagination(1).limit == 1
    assert validate_pagination(1000).limit == 1000
    with pytest.raises(InvalidPaginationError):
        validate_pagination(1001)
    with pytest.raises(InvalidPaginationError):
        validate_pagination(5, max_limit=4)


def test_pagination_error_names_parameter() -> None:
    with pytest.raises(InvalidPaginationError) as exc_info:
        validate_pagination(10, -5)

    assert exc_info.value.parameter == "offset"
    assert exc_info.value.value == -5
    assert exc_info.value.to_dict()["code"] == "INVALID_PAGINATION"


def test_pagination_rejects_fractional_limit() -> None:
    with pytest.raises(InvalidPaginationError):
        validate_pagination(2.5)
