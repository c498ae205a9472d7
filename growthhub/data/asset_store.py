"""
GrowthHub Core — Asset Store.

Persists uploaded media and JSON state snapshots. The durable backend is
treated as an optimisation: if it is slow to open, errors, or rejects a
write, the store drops into volatile (in-memory) mode for the rest of the
process and keeps serving every call from memory.

No public method raises. Reads of missing or unreadable keys return None.

While volatile, assets live only in process memory and are lost when the
process exits. State snapshots are also mirrored to the StateCache.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Union

from growthhub.data.models import Asset, LastSession
from growthhub.data.state_cache import StateCache

if TYPE_CHECKING:
    from growthhub.ports.storage_port import StorageBackend, StorageHandle

logger = logging.getLogger(__name__)

SESSION_KEY = "persistent_session"
_CACHE_PREFIX = "bkp_"


# ---------------------------------------------------------------------------
# Store mode
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Unconnected:
    """No connection attempt has been made yet."""


@dataclass(frozen=True)
class Connecting:
    """An open() is in flight; concurrent callers await the same attempt."""

    attempt: asyncio.Task


@dataclass(frozen=True)
class Connected:
    handle: StorageHandle


@dataclass(frozen=True)
class Volatile:
    """Memory-only. Never reconnects."""


StoreMode = Union[Unconnected, Connecting, Connected, Volatile]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _decode(payload: str | None, key: str) -> Any:
    if payload is None:
        return None
    try:
        return json.loads(payload)
    except ValueError:
        logger.warning("State '%s' is not valid JSON, treating as missing", key)
        return None


class AssetStore:
    """Key/blob store with permanent fallback to memory."""

    def __init__(
        self,
        backend: StorageBackend | None = None,
        state_cache: StateCache | None = None,
        connect_timeout: float | None = None,
    ) -> None:
        if backend is None or state_cache is None or connect_timeout is None:
            from growthhub.config import settings

            if backend is None:
                from growthhub.adapters.storage_factory import create_storage_backend
                backend = create_storage_backend()
            if state_cache is None:
                state_cache = StateCache(settings.STATE_CACHE_PATH)
            if connect_timeout is None:
                connect_timeout = settings.STORE_CONNECT_TIMEOUT_MS / 1000

        self._backend = backend
        self._cache = state_cache
        self._connect_timeout = connect_timeout
        self._mode: StoreMode = Unconnected()
        self._memory: dict[str, Any] = {}
        self._connection_attempts = 0

    # -- mode -----------------------------------------------------------------

    @property
    def mode(self) -> StoreMode:
        return self._mode

    @property
    def connection_attempts(self) -> int:
        """How many times the durable backend has been asked to open."""
        return self._connection_attempts

    def is_using_fallback_mode(self) -> bool:
        return isinstance(self._mode, Volatile)

    def _enter_volatile(self, reason: str) -> None:
        if isinstance(self._mode, Volatile):
            return
        if isinstance(self._mode, Connected):
            try:
                self._mode.handle.close()
            except Exception as exc:
                logger.debug("Closing storage handle failed: %s", exc)
        self._mode = Volatile()
        logger.warning(
            "Durable storage unavailable (%s); using in-memory storage for "
            "the rest of this session. Unsaved assets are lost on exit.",
            reason,
        )

    async def _open_backend(self) -> StorageHandle | None:
        self._connection_attempts += 1
        try:
            handle = await asyncio.wait_for(
                self._backend.open(), timeout=self._connect_timeout,
            )
        except asyncio.TimeoutError:
            self._enter_volatile(f"open timed out after {self._connect_timeout:.3f}s")
            return None
        except Exception as exc:
            self._enter_volatile(f"open failed: {exc}")
            return None

        self._mode = Connected(handle)
        logger.info("Asset store connected to durable storage")
        return handle

    async def _connect(self) -> StorageHandle | None:
        """Return the cached handle, or None when volatile."""
        mode = self._mode
        if isinstance(mode, Connected):
            return mode.handle
        if isinstance(mode, Volatile):
            return None
        if isinstance(mode, Connecting):
            return await asyncio.shield(mode.attempt)

        attempt = asyncio.ensure_future(self._open_backend())
        self._mode = Connecting(attempt)
        return await asyncio.shield(attempt)

    def _is_current(self, handle: StorageHandle) -> bool:
        return isinstance(self._mode, Connected) and self._mode.handle is handle

    async def _durable_write(
        self, what: str, write: Callable[[StorageHandle], Awaitable[None]],
    ) -> bool:
        """Run write against the durable backend. False means keep it in memory.

        A failure on a handle that a hard reset already replaced is retried
        once on a fresh connection instead of forcing volatile mode.
        """
        for _ in range(2):
            handle = await self._connect()
            if handle is None:
                return False
            try:
                await write(handle)
                return True
            except Exception as exc:
                if self._is_current(handle):
                    self._enter_volatile(f"write of {what} failed: {exc}")
                    return False
                logger.debug("Write of %s hit a handle closed by reset: %s", what, exc)
        return False

    # -- assets ---------------------------------------------------------------

    async def save_asset(self, asset_id: str, asset: Asset) -> None:
        """Store an asset, stamping it with the current time."""
        stored = replace(asset, timestamp=_now_ms())
        if await self._durable_write(
            f"asset {asset_id}", lambda h: h.put_asset(asset_id, stored),
        ):
            logger.info("Asset %s saved (%d bytes)", asset_id, stored.size)
            return

        self._memory[f"asset_{asset_id}"] = stored
        logger.debug("Asset %s kept in memory", asset_id)

    async def get_asset(self, asset_id: str) -> Asset | None:
        """Return the stored asset, or None if missing or unreadable."""
        mem_key = f"asset_{asset_id}"
        if mem_key in self._memory or isinstance(self._mode, Volatile):
            return self._memory.get(mem_key)

        handle = await self._connect()
        if handle is None:
            return self._memory.get(mem_key)
        try:
            return await handle.get_asset(asset_id)
        except Exception as exc:
            logger.warning("Reading asset %s failed: %s", asset_id, exc)
            return None

    # -- state ----------------------------------------------------------------

    async def save_state(self, key: str, data: Any) -> None:
        """Serialize and store a JSON-compatible value."""
        try:
            payload = json.dumps(data)
        except (TypeError, ValueError) as exc:
            logger.error("State '%s' is not JSON-serializable, not saved: %s", key, exc)
            return

        self._cache.set(_CACHE_PREFIX + key, payload)

        if await self._durable_write(
            f"state '{key}'", lambda h: h.put_state(key, payload),
        ):
            return

        self._memory[f"state_{key}"] = payload

    async def load_state(self, key: str) -> Any:
        """Return the stored value, or None if missing or malformed.

        The state cache wins over the durable backend.
        """
        cached = self._cache.get(_CACHE_PREFIX + key)
        if cached is not None:
            try:
                return json.loads(cached)
            except ValueError:
                logger.warning("Cached state '%s' is malformed, skipping cache", key)

        mem_key = f"state_{key}"
        if mem_key in self._memory or isinstance(self._mode, Volatile):
            return _decode(self._memory.get(mem_key), key)

        handle = await self._connect()
        if handle is None:
            return _decode(self._memory.get(mem_key), key)
        try:
            payload = await handle.get_state(key)
        except Exception as exc:
            logger.warning("Reading state '%s' failed: %s", key, exc)
            return None
        return _decode(payload, key)

    async def delete_state(self, key: str) -> None:
        """Remove a state entry everywhere. Durable failures are ignored."""
        self._cache.remove(_CACHE_PREFIX + key)
        self._memory.pop(f"state_{key}", None)

        handle = await self._connect()
        if handle is None:
            return
        try:
            await handle.delete_state(key)
        except Exception as exc:
            logger.debug("Deleting state '%s' failed: %s", key, exc)

    # -- reset ----------------------------------------------------------------

    async def hard_reset_database(self) -> None:
        """Wipe everything, including the durable database on disk.

        Used to recover from corruption. Always returns, even if the delete
        fails or is blocked. A volatile store stays volatile.
        """
        mode = self._mode
        if isinstance(mode, Connecting):
            await asyncio.shield(mode.attempt)
            mode = self._mode
        if isinstance(mode, Connected):
            try:
                mode.handle.close()
            except Exception as exc:
                logger.debug("Closing storage handle failed: %s", exc)
            self._mode = Unconnected()

        self._memory.clear()
        self._cache.clear()

        try:
            await asyncio.wait_for(self._backend.destroy(), timeout=self._connect_timeout)
        except asyncio.TimeoutError:
            logger.warning("Deleting durable storage timed out")
        except Exception as exc:
            logger.warning("Deleting durable storage failed: %s", exc)
        else:
            logger.info("Asset store hard reset complete")

    # -- session --------------------------------------------------------------

    async def set_last_session(self, email: str, company_id: str | None = None) -> None:
        session = LastSession(email=email, company_id=company_id, updated=_now_ms())
        await self.save_state(SESSION_KEY, session.to_dict())

    async def get_last_session(self) -> LastSession | None:
        raw = await self.load_state(SESSION_KEY)
        if not isinstance(raw, dict) or not raw.get("email"):
            return None
        try:
            return LastSession.from_dict(raw)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Stored session is malformed, ignoring it: %s", exc)
            return None

    async def clear_last_session(self) -> None:
        await self.delete_state(SESSION_KEY)
