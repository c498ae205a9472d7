"""
GrowthHub Core — State Cache.

A small synchronous key/string cache that mirrors every state snapshot.
Reads are served from here first, so state stays available even when the
durable backend is flaky. Optionally backed by a JSON file on disk.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class StateCache:
    """Best-effort key → string cache; never raises."""

    def __init__(self, path: str | None = None) -> None:
        self._path = Path(path) if path else None
        self._entries: dict[str, str] = {}
        self._loaded = self._path is None

    def _load(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, ValueError) as exc:
            logger.warning("State cache at %s unreadable, starting empty: %s", self._path, exc)
            return
        if not isinstance(raw, dict):
            logger.warning("State cache at %s is not an object, ignoring it", self._path)
            return
        self._entries = {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _flush(self) -> None:
        if self._path is None:
            return
        tmp = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(self._path.parent), suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._entries, fh)
            os.replace(tmp, self._path)
        except (OSError, TypeError, ValueError) as exc:
            logger.debug("State cache write to %s failed: %s", self._path, exc)
            if tmp is not None:
                try:
                    os.unlink(tmp)
                except OSError:
                    pass

    def get(self, key: str) -> str | None:
        self._load()
        return self._entries.get(key)

    def set(self, key: str, value: str) -> None:
        self._load()
        self._entries[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        self._load()
        if self._entries.pop(key, None) is not None:
            self._flush()

    def clear(self) -> None:
        self._loaded = True
        self._entries.clear()
        if self._path is None:
            return
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            logger.debug("State cache delete of %s failed: %s", self._path, exc)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        self._load()
        return len(self._entries)
