"""
Utility functions for tabletads.
"""

from __future__ import annotations

import math
import time
import uuid
from datetime import datetime, timezone
from typing import Any


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return str(uuid.uuid4())


def current_timestamp_ms() -> int:
    """Get current Unix timestamp in milliseconds."""
    return int(time.time() * 1000)


def current_datetime() -> datetime:
    """Get current datetime in UTC."""
    return datetime.now(timezone.utc)


def current_iso_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return current_datetime().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def is_present_coordinate(value: float | None) -> bool:
    """
    True when a coordinate is usable.

    ``0`` counts as missing, so points exactly on the equator or the prime
    meridian are rejected along with ``None`` and non-finite values.
    """
    if not value:
        return False
    return math.isfinite(value)


class Timer:
    """Context manager for timing code blocks."""

    def __init__(self) -> None:
        self.start_time: float = 0
        self.end_time: float = 0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.end_time = time.perf_counter()

    @property
    def elapsed_s(self) -> float:
        """Get elapsed time in seconds."""
        return self.end_time - self.start_time
