# Overview: Identity suppliers for new rows and human-facing listing codes.

"""
Identifier Service

- new_id(): opaque primary key for every row the marketplace creates (UUID4).
- generate_listing_id(): seller-facing listing code,
  GS-<base36 ms timestamp>-<6 base36 random chars>, uppercased.

Listing codes are unique per material (UNIQUE constraint on
materials.listing_id); the random suffix makes same-millisecond collisions
vanishingly rare.
"""
from __future__ import annotations

import secrets
import time
import uuid

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
LISTING_PREFIX = "GS"
LISTING_RANDOM_LENGTH = 6


def new_id() -> str:
    return str(uuid.uuid4())


def to_base36(value: int) -> str:
    """Non-negative int -> lowercase base36 string."""
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_listing_id(now_ms: int | None = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    random_part = "".join(secrets.choice(_BASE36) for _ in range(LISTING_RANDOM_LENGTH))
    return f"{LISTING_PREFIX}-{to_base36(now_ms)}-{random_part}".upper()
