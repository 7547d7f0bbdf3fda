from __future__ import annotations

import pytest

from lastpos.exceptions import PositionDecodeError
from lastpos.ingestion.normalize import first_present, normalize_timestamp, parse_json_object, safe_float


def test_safe_float_placeholders() -> None:
    assert safe_float("-12.04") == -12.04
    assert safe_float(" 3 ") == 3.0
    assert safe_float("--") is None
    assert safe_float("") is None
    assert safe_float("undefined") is None
    assert safe_float(float("inf")) is None
    assert safe_float(True) is None


def test_timestamp_seconds_and_millis_agree() -> None:
    assert normalize_timestamp(1_700_000_000) == "2023-11-14T22:13:20Z"
    assert normalize_timestamp(1_700_000_000_000) == "2023-11-14T22:13:20Z"


def test_timestamp_strings_are_kept() -> None:
    assert normalize_timestamp("2024-05-01T10:00:00.123Z") == "2024-05-01T10:00:00.123Z"
    assert normalize_timestamp("  ") is None
    assert normalize_timestamp(0) is None


def test_first_present_skips_blank_values() -> None:
    assert first_present({"a": "", "b": None, "c": "x"}, "a", "b", "c") == "x"
    assert first_present({}, "a") is None


def test_parse_json_object_errors_carry_key() -> None:
    with pytest.raises(PositionDecodeError) as exc_info:
        parse_json_object("42", key="gps:last:a")

    assert exc_info.value.key == "gps:last:a"
    assert "must be a JSON object" in str(exc_info.value)


@pytest.mark.parametrize("value", [1e30, 1e300, 10**400])
def test_timestamp_out_of_range_raises_value_error(value: float) -> None:
    with pytest.raises(ValueError, match="out of range"):
        normalize_timestamp(value)


def test_safe_float_huge_integer_is_none() -> None:
    assert safe_float(10**400) is None
