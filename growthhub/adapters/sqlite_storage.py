"""SQLite storage adapter — implements StorageBackend.

One database file holds two tables: media_assets (binary uploads) and
app_state (serialized JSON snapshots). Blocking sqlite3 calls run in a
worker thread so the event loop is never stalled by disk I/O.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from pathlib import Path

from growthhub.data.models import Asset
from growthhub.ports.storage_port import StorageError, StorageHandle

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 29
ASSET_TABLE = "media_assets"
STATE_TABLE = "app_state"

_SIDECAR_SUFFIXES = ("-journal", "-wal", "-shm")


class SQLiteStorageHandle:
    """An open SQLite connection. All access goes through one lock."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def _run(self, fn, *args):
        return await asyncio.to_thread(self._locked, fn, *args)

    def _locked(self, fn, *args):
        with self._lock:
            if self._closed:
                raise StorageError("Connection is closed")
            try:
                return fn(*args)
            except sqlite3.Error as exc:
                raise StorageError(str(exc)) from exc

    # -- assets -------------------------------------------------------------

    def _put_asset(self, asset_id: str, asset: Asset) -> None:
        with self._conn:
            self._conn.execute(
                f"""
                INSERT OR REPLACE INTO {ASSET_TABLE}
                    (id, name, mime_type, data, timestamp)
                VALUES (?, ?, ?, ?, ?)
                """,
                (asset_id, asset.name, asset.mime_type, asset.data, asset.timestamp),
            )

    def _get_asset(self, asset_id: str) -> Asset | None:
        row = self._conn.execute(
            f"SELECT * FROM {ASSET_TABLE} WHERE id = ?", (asset_id,)
        ).fetchone()
        if row is None:
            return None
        return Asset(
            name=row["name"],
            mime_type=row["mime_type"],
            data=bytes(row["data"]),
            timestamp=row["timestamp"],
        )

    async def put_asset(self, asset_id: str, asset: Asset) -> None:
        await self._run(self._put_asset, asset_id, asset)

    async def get_asset(self, asset_id: str) -> Asset | None:
        return await self._run(self._get_asset, asset_id)

    # -- state ----------------------------------------------------------------

    def _put_state(self, key: str, payload: str) -> None:
        with self._conn:
            self._conn.execute(
                f"INSERT OR REPLACE INTO {STATE_TABLE} (key, payload) VALUES (?, ?)",
                (key, payload),
            )

    def _get_state(self, key: str) -> str | None:
        row = self._conn.execute(
            f"SELECT payload FROM {STATE_TABLE} WHERE key = ?", (key,)
        ).fetchone()
        return None if row is None else row["payload"]

    def _delete_state(self, key: str) -> None:
        with self._conn:
            self._conn.execute(f"DELETE FROM {STATE_TABLE} WHERE key = ?", (key,))

    async def put_state(self, key: str, payload: str) -> None:
        await self._run(self._put_state, key, payload)

    async def get_state(self, key: str) -> str | None:
        return await self._run(self._get_state, key)

    async def delete_state(self, key: str) -> None:
        await self._run(self._delete_state, key)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._conn.close()
        logger.debug("SQLite handle closed")


class SQLiteStorageBackend:
    """SQLite implementation of StorageBackend."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from growthhub.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path

    @property
    def db_path(self) -> str:
        return self._db_path

    def _open_sync(self) -> SQLiteStorageHandle:
        Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            self._init_db(conn)
        except sqlite3.Error:
            conn.close()
            raise
        return SQLiteStorageHandle(conn)

    def _init_db(self, conn: sqlite3.Connection) -> None:
        """Create both tables if they don't exist and stamp the schema version."""
        with conn:
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {ASSET_TABLE} (
                    id         TEXT    PRIMARY KEY,
                    name       TEXT    NOT NULL,
                    mime_type  TEXT    NOT NULL,
                    data       BLOB    NOT NULL,
                    timestamp  INTEGER NOT NULL
                )
            """)
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {STATE_TABLE} (
                    key      TEXT PRIMARY KEY,
                    payload  TEXT NOT NULL
                )
            """)
            version = conn.execute("PRAGMA user_version").fetchone()[0]
            if version != SCHEMA_VERSION:
                conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        logger.debug("Storage tables initialized at %s", self._db_path)

    async def open(self) -> SQLiteStorageHandle:
        """Open the database on a daemon thread.

        A hung open never blocks interpreter exit. If the caller gives up
        before the open finishes, the late handle is closed on arrival.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def _settle(handle, exc) -> None:
            if future.cancelled():
                if handle is not None:
                    handle.close()
                    logger.debug("Closed SQLite handle that opened after its caller left")
                return
            if exc is not None:
                future.set_exception(exc)
            else:
                future.set_result(handle)

        def _worker() -> None:
            handle, exc = None, None
            try:
                handle = self._open_sync()
            except Exception as err:
                exc = err
            try:
                loop.call_soon_threadsafe(_settle, handle, exc)
            except RuntimeError:
                # loop already closed
                if handle is not None:
                    handle.close()

        threading.Thread(target=_worker, name="sqlite-open", daemon=True).start()
        try:
            handle = await future
        except (sqlite3.Error, OSError) as exc:
            raise StorageError(f"Cannot open {self._db_path}: {exc}") from exc
        logger.info("Durable storage opened at %s", self._db_path)
        return handle

    def _destroy_sync(self) -> None:
        for suffix in ("", *_SIDECAR_SUFFIXES):
            Path(self._db_path + suffix).unlink(missing_ok=True)

    async def destroy(self) -> None:
        """Delete the database file and its journal siblings."""
        try:
            await asyncio.to_thread(self._destroy_sync)
        except OSError as exc:
            raise StorageError(f"Cannot delete {self._db_path}: {exc}") from exc
        logger.info("Durable storage deleted at %s", self._db_path)


class DisabledStorageBackend:
    """A backend that is never available; the store starts volatile."""

    async def open(self) -> StorageHandle:
        raise StorageError("Durable storage is disabled")

    async def destroy(self) -> None:
        return None
