"""
GrowthHub Core — Data Models.

Media assets uploaded by users and the "last session" snapshot used to
resume a login. Both are persisted by the AssetStore.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path

_DEFAULT_MIME = "application/octet-stream"


@dataclass(frozen=True)
class Asset:
    """An uploaded media file (image, video, PDF...).

    Immutable once stored; saving again under the same ID replaces it.
    """

    name: str                 # display filename, e.g. "summer.jpg"
    mime_type: str            # e.g. "image/jpeg"
    data: bytes
    timestamp: int = 0        # ms since epoch, set when the asset is stored

    @classmethod
    def from_bytes(cls, name: str, data: bytes, mime_type: str | None = None) -> Asset:
        """Build an asset, guessing the MIME type from the filename if needed."""
        if mime_type is None:
            mime_type = mimetypes.guess_type(name)[0] or _DEFAULT_MIME
        return cls(name=name, mime_type=mime_type, data=bytes(data))

    @classmethod
    def from_path(cls, path: str | Path, mime_type: str | None = None) -> Asset:
        """Read a file from disk into an asset."""
        p = Path(path)
        return cls.from_bytes(p.name, p.read_bytes(), mime_type)

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class LastSession:
    """Who was logged in last, so the app can resume on startup."""

    email: str
    company_id: str | None = None
    updated: int = 0          # ms since epoch

    def to_dict(self) -> dict:
        return {"email": self.email, "companyId": self.company_id, "updated": self.updated}

    @classmethod
    def from_dict(cls, raw: dict) -> LastSession:
        """Rebuild a session from its stored form.

        Raises ValueError if any field has the wrong type.
        """
        email = raw.get("email")
        company_id = raw.get("companyId")
        updated = raw.get("updated", 0)
        if not isinstance(email, str) or not email:
            raise ValueError(f"email must be a non-empty string, got {email!r}")
        if company_id is not None and not isinstance(company_id, str):
            raise ValueError(f"companyId must be a string, got {company_id!r}")
        if updated is None:
            updated = 0
        if isinstance(updated, bool) or not isinstance(updated, (int, float)):
            raise ValueError(f"updated must be a timestamp in ms, got {updated!r}")
        return cls(email=email, company_id=company_id, updated=int(updated))
