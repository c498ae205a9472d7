"""Storage backend factory — creates the right adapter based on config."""

from __future__ import annotations

from growthhub.config import settings
from growthhub.ports.storage_port import StorageBackend


def create_storage_backend(db_path: str | None = None) -> StorageBackend:
    """Return the storage backend matching the STORAGE_BACKEND setting.

    Args:
        db_path: Overrides DATABASE_PATH for the sqlite backend.
    """
    provider = settings.STORAGE_BACKEND.lower()

    if provider == "sqlite":
        from growthhub.adapters.sqlite_storage import SQLiteStorageBackend

        return SQLiteStorageBackend(db_path=db_path or settings.DATABASE_PATH)

    if provider == "none":
        from growthhub.adapters.sqlite_storage import DisabledStorageBackend

        return DisabledStorageBackend()

    raise ValueError(f"Unknown STORAGE_BACKEND: {provider!r}")
