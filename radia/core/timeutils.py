#!/usr/bin/env python3
"""
timeutils.py
-------------------
Clock, timestamp and id helpers shared by the store.

All stored timestamps are UTC ISO-8601 strings with a trailing 'Z'.
Components take a ``clock`` callable so tests can pin "now".
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iso_millis(value: datetime) -> str:
    """Format as ``2026-10-19T08:30:00.123Z`` (record timestamps)."""
    value = as_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def iso_micros(value: datetime) -> str:
    """Format as ``2026-10-19T08:30:00.123456Z`` (snapshot keys)."""
    return as_utc(value).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class MonotonicIdGenerator:
    """
    Generate record ids from epoch milliseconds.

    Ids are decimal strings. When the clock has not advanced (or went
    backwards) since the previous id, the previous id plus one is used,
    so ids from one generator are unique and increasing.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or utc_now
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            candidate = int(as_utc(self._clock()).timestamp() * 1000)
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return str(candidate)
