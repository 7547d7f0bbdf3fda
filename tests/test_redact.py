from __future__ import annotations

from lastpos._redact import redact_for_log, redact_url


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "redis_host": "cache",
        "redis_password": "pw",
        "nested": {"password": "pw", "token": "abc"},
        "redis_url": None,
    }

    redacted = redact_for_log(payload)
    assert redacted["redis_host"] == "cache"
    assert redacted["redis_password"] == "<redacted>"
    assert redacted["nested"]["password"] == "<redacted>"
    assert redacted["nested"]["token"] == "<redacted>"
    assert redacted["redis_url"] is None


def test_redact_for_log_masks_urls() -> None:
    redacted = redact_for_log({"redis_url": "redis://:pw@cache:6380/0"})
    assert redacted["redis_url"] == "redis://:***@cache:6380/0"


def test_redact_url_without_password_is_unchanged() -> None:
    assert redact_url("redis://cache:6379/0") == "redis://cache:6379/0"
