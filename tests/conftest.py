"""
conftest.py
-----------
Shared pytest fixtures for Radia store tests.

Provides fixtures for:
- A controllable clock
- In-memory and failure-injecting key-value stores
- A loaded DataStore with synchronous backups
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Set

import pytest

from radia.core.config import StoreConfig
from radia.core.exceptions import StoreIOError
from radia.database import DataStore, MemoryKeyValueStore


class FixedClock:
    """Clock returning a settable instant; advance() moves it forward."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FlakyKeyValueStore(MemoryKeyValueStore):
    """Memory store whose reads or writes can be made to fail per key."""

    def __init__(self, initial=None) -> None:
        super().__init__(initial)
        self.fail_writes: Set[str] = set()
        self.fail_all_writes = False
        self.fail_reads = False

    def set(self, key: str, value: str) -> None:
        if self.fail_all_writes or key in self.fail_writes:
            raise StoreIOError(f"simulated write failure for '{key}'")
        super().set(key, value)

    def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise StoreIOError(f"simulated read failure for '{key}'")
        return super().get(key)


# ----- Clock Fixtures -----

@pytest.fixture
def start_time():
    """Reference instant for every test: 2026-10-19 08:30 UTC."""
    return datetime(2026, 10, 19, 8, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(start_time):
    """Controllable clock starting at start_time."""
    return FixedClock(start_time)


# ----- Store Fixtures -----

@pytest.fixture
def kv():
    """Empty in-memory key-value store."""
    return MemoryKeyValueStore()


@pytest.fixture
def flaky_kv():
    """In-memory key-value store with failure injection."""
    return FlakyKeyValueStore()


@pytest.fixture
def config():
    """Configuration with synchronous backups and no timer thread."""
    return StoreConfig(app_version="2.2.0", background_backups=False)


@pytest.fixture
def make_store(clock, config):
    """Factory building DataStores over a given key-value store."""
    stores = []

    def _make(kv, load=True, **overrides):
        store_config = config.with_overrides(**overrides) if overrides else config
        store = DataStore(kv, config=store_config, clock=clock)
        if load:
            store.load_data()
        stores.append(store)
        return store

    yield _make

    for store in stores:
        store.scheduler.shutdown()


@pytest.fixture
def store(make_store, kv):
    """Loaded DataStore over an empty in-memory store."""
    return make_store(kv)
