"""Per-context module cache.

Single source of truth for "has this path been requested yet". Each path maps
to at most one CacheEntry:

- no entry: never requested (or a failed resolution was evicted)
- PENDING: a resolution is in flight; the entry holds its task
- RESOLVED: the final module value
- FAILED: the resolution raised and failures are retained

Only the loader mutates the cache. Entries change between suspension points of
the event loop, so the check-then-install sequence in the loader needs no lock.
Sharing one cache between threads would need a lock around the install of a
PENDING entry; nothing else writes concurrently to the same entry.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class EntryState(str, Enum):
    """State of a cache entry."""

    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


@dataclass(frozen=True)
class CacheEntry:
    """Tagged cache entry.

    Attributes:
        state: Entry state
        task: In-flight resolution (PENDING only)
        value: Resolved module (RESOLVED only)
        error: Retained failure (FAILED only)
    """

    state: EntryState
    task: asyncio.Task | None = None
    value: Any = None
    error: BaseException | None = None

    @classmethod
    def pending(cls, task: asyncio.Task) -> CacheEntry:
        return cls(EntryState.PENDING, task=task)

    @classmethod
    def resolved(cls, value: Any) -> CacheEntry:
        return cls(EntryState.RESOLVED, value=value)

    @classmethod
    def failed(cls, error: BaseException) -> CacheEntry:
        return cls(EntryState.FAILED, error=error)


class ModuleCache:
    """Explicit map of path to CacheEntry.

    Keys are plain data: any string, including "__class__" or "constructor",
    is just a path.
    """

    def __init__(
        self,
        modules: Mapping[str, Any] | ModuleCache | None = None,
        *,
        include_failed: bool = False,
    ) -> None:
        """Initialize cache, optionally seeded with resolved modules.

        Args:
            modules: Pre-supplied modules (path -> module) or another cache whose
                settled entries are copied. The argument itself is never retained.
            include_failed: Also copy FAILED entries from another cache
        """
        self._entries: dict[str, CacheEntry] = {}
        if isinstance(modules, ModuleCache):
            # PENDING tasks settle the source cache only, so they are not copied
            for path, entry in modules._entries.items():
                if entry.state == EntryState.RESOLVED or (include_failed and entry.state == EntryState.FAILED):
                    self._entries[path] = entry
        elif modules:
            for path, module in modules.items():
                self._entries[path] = CacheEntry.resolved(module)

    def get_entry(self, path: str) -> CacheEntry | None:
        return self._entries.get(path)

    def set_pending(self, path: str, task: asyncio.Task) -> None:
        if path in self._entries:
            raise RuntimeError(f"Cache entry for {path} already exists ({self._entries[path].state.value})")
        self._entries[path] = CacheEntry.pending(task)

    def set_resolved(self, path: str, value: Any) -> None:
        self._entries[path] = CacheEntry.resolved(value)

    def set_failed(self, path: str, error: BaseException) -> None:
        self._entries[path] = CacheEntry.failed(error)

    def evict(self, path: str) -> CacheEntry | None:
        """Remove the entry for path, returning it if present."""
        return self._entries.pop(path, None)

    def is_resolved(self, path: str) -> bool:
        entry = self._entries.get(path)
        return entry is not None and entry.state == EntryState.RESOLVED

    def is_pending(self, path: str) -> bool:
        entry = self._entries.get(path)
        return entry is not None and entry.state == EntryState.PENDING

    def resolved_modules(self) -> dict[str, Any]:
        """Snapshot of all resolved modules (path -> module)."""
        return {path: entry.value for path, entry in self._entries.items() if entry.state == EntryState.RESOLVED}

    def stats(self) -> dict[str, int]:
        """Count entries per state."""
        counts = {state.value: 0 for state in EntryState}
        for entry in self._entries.values():
            counts[entry.state.value] += 1
        return counts

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __repr__(self) -> str:
        return f"ModuleCache({self.stats()})"


__all__ = ["EntryState", "CacheEntry", "ModuleCache"]
