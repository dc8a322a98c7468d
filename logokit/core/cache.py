"""On-disk TTL cache for catalog responses: logo lists, categories, etc.

One JSON file per key under the cache root.  Each file holds a single
entry::

    {"data": ..., "timestamp": <ms>, "ttl": <ms>, "version": "1.0.0"}

Expiry is only checked on read; stale, expired and unreadable files are
deleted by the read that finds them.  Writes never raise: caching is
advisory, so a failed write is logged and reported through ``CacheResult``.
"""

from __future__ import annotations

import json
import re
import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from logokit.core.config import CACHE_DIR
from logokit.core.logger import get_logger

_log = get_logger("cache")

CACHE_VERSION = "1.0.0"
DEFAULT_TTL = 3600  # seconds

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def _now_ms() -> int:
    return int(time.time() * 1000)


def sanitize_key(key: str) -> str:
    """Map a logical key to a filesystem-safe token.

    Keys that differ only in unsafe characters collide; that is accepted.
    """
    return _UNSAFE_KEY_CHARS.sub("_", key)


@dataclass(frozen=True)
class CacheResult:
    ok: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.ok


OK = CacheResult(True)


@dataclass
class CacheStats:
    entries: int = 0
    total_size: int = 0
    oldest_entry: int | None = None  # epoch ms
    newest_entry: int | None = None


class CacheStore:
    """Versioned, expiring key-value store local to the current user."""

    def __init__(
        self,
        cache_dir: Path | None = None,
        version: str = CACHE_VERSION,
        enabled: bool = True,
    ) -> None:
        self.cache_dir = Path(cache_dir) if cache_dir is not None else CACHE_DIR / "cache"
        self.version = version
        self.enabled = enabled

    def _path(self, key: str) -> Path:
        return self.cache_dir / f"{sanitize_key(key)}.json"

    def _ensure_dir(self) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def get(self, key: str) -> Any | None:
        """Return the live value for ``key`` or None."""
        if not self.enabled:
            return None
        path = self._path(key)
        try:
            content = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            _log.warning("Cache: cannot read %s: %s", path.name, e)
            return None

        try:
            entry = json.loads(content.decode("utf-8"))
            version = entry["version"]
            stored_at = int(entry["timestamp"])
            ttl = int(entry["ttl"])
            data = entry["data"]
        except (ValueError, KeyError, TypeError, OverflowError):
            _log.debug("Cache: corrupt entry %s, removing", key)
            self.delete(key)
            return None

        if version != self.version:
            _log.debug("Cache: stale version %s for %s, removing", version, key)
            self.delete(key)
            return None
        if _now_ms() - stored_at > ttl:
            _log.debug("Cache: expired %s", key)
            self.delete(key)
            return None
        return data

    def set(self, key: str, value: Any, ttl: float = DEFAULT_TTL) -> CacheResult:
        """Store ``value`` for ``ttl`` seconds."""
        if not self.enabled:
            return CacheResult(False, "cache disabled")
        entry = {
            "data": value,
            "timestamp": _now_ms(),
            "ttl": int(ttl * 1000),
            "version": self.version,
        }
        try:
            payload = json.dumps(entry)
        except (TypeError, ValueError) as e:
            _log.warning("Cache: value for %s is not serializable: %s", key, e)
            return CacheResult(False, str(e))
        try:
            self._ensure_dir()
            self._path(key).write_text(payload, encoding="utf-8")
        except OSError as e:
            _log.warning("Failed to write to cache (%s): %s", key, e)
            return CacheResult(False, str(e))
        return OK

    def delete(self, key: str) -> CacheResult:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            _log.warning("Failed to delete cache entry %s: %s", key, e)
            return CacheResult(False, str(e))
        return OK

    def clear(self) -> CacheResult:
        """Remove every entry and leave an empty, usable cache directory."""
        _log.debug("Cache: clear %s", self.cache_dir)
        try:
            shutil.rmtree(self.cache_dir, ignore_errors=False)
        except FileNotFoundError:
            pass
        except OSError as e:
            _log.warning("Failed to clear cache: %s", e)
            return CacheResult(False, str(e))
        try:
            self._ensure_dir()
        except OSError as e:
            _log.warning("Failed to recreate cache directory: %s", e)
            return CacheResult(False, str(e))
        return OK

    def stats(self) -> CacheStats:
        """Raw inventory of the cache directory; liveness is not checked."""
        stats = CacheStats()
        if not self.cache_dir.is_dir():
            return stats
        for path in sorted(self.cache_dir.glob("*.json")):
            try:
                size = path.stat().st_size
            except OSError:
                continue
            stats.entries += 1
            stats.total_size += size
            try:
                stamp = int(json.loads(path.read_bytes())["timestamp"])
            except (OSError, ValueError, KeyError, TypeError, OverflowError):
                continue
            if stats.oldest_entry is None or stamp < stats.oldest_entry:
                stats.oldest_entry = stamp
            if stats.newest_entry is None or stamp > stats.newest_entry:
                stats.newest_entry = stamp
        return stats
