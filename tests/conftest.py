"""Shared test fixtures and configuration.

Sets up environment variables so growthhub.config never touches real
data files, and provides an in-memory fake durable backend.
"""

import asyncio
import os

# Patch env vars BEFORE any growthhub imports
os.environ.setdefault("STORAGE_BACKEND", "sqlite")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("STATE_CACHE_PATH", "")
os.environ.setdefault("STORE_CONNECT_TIMEOUT_MS", "800")

import pytest

from growthhub.ports.storage_port import StorageError


class FakeHandle:
    """Dict-backed StorageHandle with switchable failures."""

    def __init__(self, backend: "FakeBackend") -> None:
        self._backend = backend
        self.closed = False

    def _check(self, kind: str) -> None:
        if self.closed:
            raise StorageError("handle closed")
        if kind in self._backend.fail_on:
            raise StorageError(f"simulated {kind} failure")

    async def _delay(self) -> None:
        if self._backend.write_delay:
            await asyncio.sleep(self._backend.write_delay)

    async def put_asset(self, asset_id, asset):
        await self._delay()
        self._check("write")
        self._backend.assets[asset_id] = asset

    async def get_asset(self, asset_id):
        self._check("read")
        return self._backend.assets.get(asset_id)

    async def put_state(self, key, payload):
        await self._delay()
        self._check("write")
        self._backend.state[key] = payload

    async def get_state(self, key):
        self._check("read")
        return self._backend.state.get(key)

    async def delete_state(self, key):
        self._check("delete")
        self._backend.state.pop(key, None)

    def close(self):
        self.closed = True


class FakeBackend:
    """In-memory StorageBackend. Data survives across handles, like a file."""

    def __init__(self, fail_on=(), open_delay: float = 0.0, write_delay: float = 0.0) -> None:
        self.fail_on = set(fail_on)
        self.open_delay = open_delay
        self.write_delay = write_delay
        self.assets: dict = {}
        self.state: dict = {}
        self.open_calls = 0
        self.destroy_calls = 0
        self.handles: list[FakeHandle] = []

    async def open(self):
        self.open_calls += 1
        if self.open_delay:
            await asyncio.sleep(self.open_delay)
        if "open" in self.fail_on:
            raise StorageError("simulated open failure")
        handle = FakeHandle(self)
        self.handles.append(handle)
        return handle

    async def destroy(self):
        self.destroy_calls += 1
        if "destroy" in self.fail_on:
            raise StorageError("simulated destroy failure")
        self.assets.clear()
        self.state.clear()


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def failing_backend():
    """A backend that can never be opened."""
    return FakeBackend(fail_on={"open"})


@pytest.fixture
def state_cache():
    from growthhub.data.state_cache import StateCache
    return StateCache()


@pytest.fixture
def make_store(state_cache):
    """Build an isolated AssetStore around a given backend."""
    from growthhub.data.asset_store import AssetStore

    def _make(backend, cache=None, timeout: float = 0.5):
        return AssetStore(
            backend=backend,
            state_cache=cache if cache is not None else state_cache,
            connect_timeout=timeout,
        )

    return _make


@pytest.fixture
def store(make_store, fake_backend):
    return make_store(fake_backend)


@pytest.fixture
def sample_asset():
    from growthhub.data.models import Asset
    return Asset.from_bytes("summer.jpg", b"\xff\xd8\xff\xe0fake-jpeg-bytes")


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_brandportal.db")


@pytest.fixture
def make_backend():
    """Factory for FakeBackend with custom failures or delays."""
    return FakeBackend
