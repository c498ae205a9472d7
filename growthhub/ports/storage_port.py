"""Storage port — abstract interface for the durable asset/state backend.

The AssetStore depends on these protocols, never on a specific database.
"""

from __future__ import annotations

from typing import Protocol

from growthhub.data.models import Asset


class StorageError(Exception):
    """Raised when any durable storage operation fails."""


class StorageHandle(Protocol):
    """An open connection to the durable backend."""

    async def put_asset(self, asset_id: str, asset: Asset) -> None: ...

    async def get_asset(self, asset_id: str) -> Asset | None: ...

    async def put_state(self, key: str, payload: str) -> None: ...

    async def get_state(self, key: str) -> str | None: ...

    async def delete_state(self, key: str) -> None: ...

    def close(self) -> None: ...


class StorageBackend(Protocol):
    """Opens handles and wipes the on-disk representation."""

    async def open(self) -> StorageHandle: ...

    async def destroy(self) -> None: ...
