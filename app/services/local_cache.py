"""Version-stamped persistent key/value cache backed by JSON files.

Each key lives in its own file holding ``{key, version, timestamp, data}``.
A payload written under another version, or one that no longer parses, reads
as absent and its file is removed.
"""

from __future__ import annotations

import json
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from app.core.config import get_settings
from app.core.logger import get_logger

logger = get_logger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


@dataclass(frozen=True, slots=True)
class CachedPayload:
    data: Any
    timestamp: float


class PersistentLocalCache:
    """File-per-key cache; a version mismatch is treated as absence."""

    def __init__(self, directory: str | os.PathLike[str], version: str) -> None:
        self._directory = Path(directory)
        self._version = version

    @classmethod
    def from_settings(cls) -> PersistentLocalCache:
        settings = get_settings()
        return cls(settings.LOCAL_CACHE_DIR, settings.LOCAL_CACHE_VERSION)

    @property
    def version(self) -> str:
        return self._version

    @property
    def directory(self) -> Path:
        return self._directory

    def _path_for(self, key: str) -> Path:
        return self._directory / f"{_UNSAFE_FILENAME_CHARS.sub('_', key)}.json"

    def _load(self, path: Path) -> dict[str, Any] | None:
        try:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            logger.warning("Local cache file unreadable, discarding: path=%s error=%s", path, exc)
            self._remove(path)
            return None

        if not isinstance(payload, dict) or "timestamp" not in payload or "data" not in payload:
            logger.warning("Local cache file malformed, discarding: path=%s", path)
            self._remove(path)
            return None
        return payload

    def _remove(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Local cache file could not be removed: path=%s error=%s", path, exc)

    def read(self, key: str) -> CachedPayload | None:
        """Return the cached payload for ``key`` or None when absent or stale-versioned."""
        path = self._path_for(key)
        payload = self._load(path)
        if payload is None:
            return None

        if payload.get("version") != self._version:
            logger.info(
                "Local cache version mismatch, discarding: key=%s stored=%s current=%s",
                key,
                payload.get("version"),
                self._version,
            )
            self._remove(path)
            return None

        try:
            timestamp = float(payload["timestamp"])
        except (TypeError, ValueError):
            self._remove(path)
            return None
        return CachedPayload(data=payload["data"], timestamp=timestamp)

    def write(self, key: str, data: Any, timestamp: float) -> None:
        """Store ``data`` for ``key`` stamped with ``timestamp`` and the current version."""
        self._directory.mkdir(parents=True, exist_ok=True)
        payload = {"key": key, "version": self._version, "timestamp": timestamp, "data": data}
        path = self._path_for(key)

        fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def clear(self, key: str) -> None:
        self._remove(self._path_for(key))

    def keys(self, prefix: str = "") -> list[str]:
        """Return stored keys starting with ``prefix``, regardless of version."""
        if not self._directory.exists():
            return []

        found: list[str] = []
        for path in sorted(self._directory.glob("*.json")):
            if path.name.startswith(".tmp-"):
                continue
            payload = self._load(path)
            if payload is None:
                continue
            key = str(payload.get("key") or path.stem)
            if key.startswith(prefix):
                found.append(key)
        return found

    def clear_prefix(self, prefix: str) -> int:
        keys = self.keys(prefix)
        for key in keys:
            self.clear(key)
        return len(keys)

    def size_bytes(self, prefix: str = "") -> int:
        """Approximate on-disk footprint of the keys starting with ``prefix``."""
        total = 0
        for key in self.keys(prefix):
            try:
                total += self._path_for(key).stat().st_size
            except OSError:
                continue
        return total
