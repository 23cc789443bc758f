"""Compiled-code cache.

Compilation is CPU-heavy, so handlers can keep their output across runs in a
CompiledCache. The loader never touches it; handlers reach it through
``context.cache`` (see get_or_compile).

Disk layout: one UTF-8 file per key under the cache dir, named by the SHA-256
of the key, plus a small JSON index mapping hashes back to keys.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import shutil
from collections.abc import Awaitable
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING
from typing import Protocol

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)

INDEX_FILENAME = ".sfc_loader_cache_index.json"


class CompiledCache(Protocol):
    """Protocol for compiled-code caches."""

    async def get(self, key: str) -> str | None:
        """Return the cached text for key, or None."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store text for key."""
        ...


def get_cache_dir() -> Path:
    """Default on-disk cache location."""
    return Path.home() / ".sfc-loader" / "cache"


class MemoryCompiledCache:
    """In-process cache, mostly useful for tests and short-lived runs."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._store.get(key)

    async def set(self, key: str, value: str) -> None:
        self._store[key] = value

    def __len__(self) -> int:
        return len(self._store)


class DiskCompiledCache:
    """File-backed compiled-code cache.

    File I/O runs in a worker thread so the event loop is never blocked.
    """

    def __init__(self, cache_dir: str | Path | None = None):
        """Initialize cache.

        Args:
            cache_dir: Cache directory (default: ~/.sfc-loader/cache). Created
                lazily on first write.
        """
        self.cache_dir = Path(cache_dir).expanduser() if cache_dir else get_cache_dir()

    @staticmethod
    def _hash_key(key: str) -> str:
        return hashlib.sha256(key.encode("utf-8")).hexdigest()

    def _entry_path(self, key: str) -> Path:
        return self.cache_dir / self._hash_key(key)

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)

    def _read(self, key: str) -> str | None:
        entry_path = self._entry_path(key)
        if not entry_path.exists():
            return None
        try:
            return entry_path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to read cache entry {entry_path}: {e}")
            return None

    def _write(self, key: str, value: str) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        entry_path = self._entry_path(key)
        # Write to temp file then rename so readers never see partial content
        tmp_path = entry_path.with_suffix(".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(entry_path)

        index = self._read_index()
        index[entry_path.name] = key
        (self.cache_dir / INDEX_FILENAME).write_text(json.dumps(index, indent=2), encoding="utf-8")

    def _read_index(self) -> dict[str, str]:
        index_path = self.cache_dir / INDEX_FILENAME
        if not index_path.exists():
            return {}
        try:
            return json.loads(index_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable cache index {index_path}: {e}")
            return {}

    def entries(self) -> dict[str, int]:
        """Return cached keys with their size in bytes."""
        if not self.cache_dir.exists():
            return {}
        index = self._read_index()
        result: dict[str, int] = {}
        for entry_hash, key in index.items():
            entry_path = self.cache_dir / entry_hash
            if entry_path.is_file():
                result[key] = entry_path.stat().st_size
        return result

    def size(self) -> int:
        """Total size of the cache directory in bytes."""
        if not self.cache_dir.exists():
            return 0
        return sum(entry.stat().st_size for entry in self.cache_dir.rglob("*") if entry.is_file())

    def clear(self) -> int:
        """Remove the cache directory.

        Returns:
            Number of entries removed
        """
        if not self.cache_dir.exists():
            return 0
        count = len(self.entries())
        shutil.rmtree(self.cache_dir)
        logger.info(f"Cleared compiled cache at {self.cache_dir} ({count} entries)")
        return count

    def __repr__(self) -> str:
        return f"DiskCompiledCache({self.cache_dir})"


async def get_or_compile(context: Context, key: str, compile: Callable[[], Awaitable[str]]) -> str:
    """Return cached compiled text for key, compiling and storing it on a miss.

    Without ``context.cache`` this simply compiles.
    """
    cache = context.cache
    if cache is None:
        return await compile()

    cached = await cache.get(key)
    if cached is not None:
        logger.debug(f"[cache] hit {key}")
        return cached

    compiled = await compile()
    await cache.set(key, compiled)
    logger.debug(f"[cache] stored {key}")
    return compiled


__all__ = [
    "CompiledCache",
    "MemoryCompiledCache",
    "DiskCompiledCache",
    "get_cache_dir",
    "get_or_compile",
]
