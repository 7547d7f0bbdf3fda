"""Shared constants."""

from __future__ import annotations

import re

DEFAULT_DEVICE_KEY_PREFIX = "gps:last:"
DEFAULT_MOBILE_KEY_PREFIX = "mobile:last:"

DEFAULT_REDIS_HOST = "localhost"
DEFAULT_REDIS_PORT = 6379

#: Ceiling on ids per batch lookup.
MAX_BATCH_SIZE = 100
#: Ceiling on ``limit`` for full listings.
MAX_PAGE_LIMIT = 1000
MAX_IDENTIFIER_LENGTH = 100

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")
IDENTIFIER_ALLOWED = "A-Za-z0-9._-"

#: Producer field names carrying a human-readable label, in lookup order.
DISPLAY_NAME_FIELDS: tuple[str, ...] = ("displayName", "name", "deviceName")

# Threshold to distinguish epoch seconds from milliseconds.
MS_THRESHOLD = 1_000_000_000_000

SERVICE_NAMES = {
    "device": "gps-last-position-api",
    "mobile": "mobile-last-position-api",
}
