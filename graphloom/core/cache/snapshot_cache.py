"""
In-memory snapshot cache with expiry, version stamps and read strategies.

Concurrency model:
- one asyncio.Lock per key serializes reads, writes and the expiry sweep
- each write carries a per-key version reserved before its fetch started;
  a write older than the last committed version is discarded
- values are deep-copied on the way in and on the way out
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import datetime

from pydantic import BaseModel

from graphloom.models.cache import CacheKey, CacheMetrics, CacheStrategy
from graphloom.models.graph import GraphSnapshot
from graphloom.utils.exceptions import CacheError
from graphloom.utils.logger import get_logger

logger = get_logger(__name__)

Fetcher = Callable[[], Awaitable[GraphSnapshot]]
Transform = Callable[[GraphSnapshot | None], GraphSnapshot]
StoredCallback = Callable[[CacheKey, GraphSnapshot, int], None]


class CacheEntry(BaseModel):
    """Stored snapshot with its write time and version stamp."""

    snapshot: GraphSnapshot
    timestamp: float
    version: int


class SnapshotCache:
    """
    Cache of graph snapshots keyed by logical name.

    Entries expire after ttl_seconds. Expiry is checked lazily on access and
    proactively by a periodic sweep task.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        sweep_interval_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize snapshot cache.

        Args:
            ttl_seconds: Time-to-live of an entry
            sweep_interval_seconds: Period of the background expiry sweep
            clock: Monotonic time source in seconds
        """
        self.ttl_seconds = ttl_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self._clock = clock

        self._entries: dict[CacheKey, CacheEntry] = {}
        self._locks: dict[CacheKey, asyncio.Lock] = {key: asyncio.Lock() for key in CacheKey}
        self._reserved: dict[CacheKey, int] = {key: 0 for key in CacheKey}
        self._committed: dict[CacheKey, int] = {key: 0 for key in CacheKey}
        self._version = 0

        self._hits = 0
        self._misses = 0
        self._updates = 0
        self._discarded = 0
        self._last_access: datetime | None = None

        self._sweeper_task: asyncio.Task | None = None
        self._refresh_tasks: set[asyncio.Task] = set()

    # Keys and versions

    @staticmethod
    def _key(key: CacheKey | str) -> CacheKey:
        try:
            return CacheKey(key)
        except ValueError as e:
            raise CacheError(f"Unknown cache key: {key}", context={"key": str(key)}) from e

    def next_version(self, key: CacheKey | str) -> int:
        """
        Reserve the next version stamp for a key.

        Reserve before starting the work whose result will be written, so a
        slow writer that started earlier loses to a faster one that started later.
        """
        key = self._key(key)
        self._reserved[key] += 1
        return self._reserved[key]

    def _is_expired(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.timestamp > self.ttl_seconds

    # Core operations

    async def get(self, key: CacheKey | str) -> GraphSnapshot | None:
        """
        Get an unexpired snapshot.

        Expired entries are evicted and reported as absent.

        Returns:
            Independent copy of the cached snapshot, or None
        """
        key = self._key(key)
        async with self._locks[key]:
            self._last_access = datetime.now()
            entry = self._entries.get(key)

            if entry is None:
                self._misses += 1
                return None

            if self._is_expired(entry):
                del self._entries[key]
                self._misses += 1
                logger.debug(f"Cache entry expired: {key.value}", extra={"key": key.value})
                return None

            self._hits += 1
            return entry.snapshot.model_copy(deep=True)

    async def has(self, key: CacheKey | str) -> bool:
        """Check for an unexpired entry without touching hit/miss counters."""
        key = self._key(key)
        async with self._locks[key]:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if self._is_expired(entry):
                del self._entries[key]
                return False
            return True

    async def set(
        self, key: CacheKey | str, snapshot: GraphSnapshot, version: int | None = None
    ) -> bool:
        """
        Store a snapshot.

        Args:
            key: Cache key
            snapshot: Snapshot to store (copied)
            version: Version stamp from next_version(); reserved now if omitted

        Returns:
            True if stored, False if discarded as stale
        """
        _, accepted = await self.update(key, lambda _current: snapshot, version)
        return accepted

    async def update(
        self,
        key: CacheKey | str,
        transform: Transform,
        version: int | None = None,
    ) -> tuple[GraphSnapshot | None, bool]:
        """
        Atomically replace a key's snapshot with transform(current).

        The transform runs under the key's lock and receives a private copy
        of the current unexpired snapshot (or None). If it raises, the cache
        is left untouched and the exception propagates.

        Args:
            key: Cache key
            transform: Function computing the new snapshot
            version: Version stamp from next_version(); reserved now if omitted

        Returns:
            (snapshot now cached, accepted). When the write is discarded as
            stale the newer cached snapshot is returned with accepted=False.
        """
        key = self._key(key)
        if version is None:
            version = self.next_version(key)

        async with self._locks[key]:
            entry = self._entries.get(key)
            if entry is not None and self._is_expired(entry):
                del self._entries[key]
                entry = None

            if version < self._committed[key]:
                self._discarded += 1
                logger.debug(
                    f"Discarding stale write to {key.value}",
                    extra={"key": key.value, "version": version, "committed": self._committed[key]},
                )
                current = entry.snapshot.model_copy(deep=True) if entry else None
                return current, False

            current = entry.snapshot.model_copy(deep=True) if entry else None
            new_snapshot = transform(current)

            self._entries[key] = CacheEntry(
                snapshot=new_snapshot.model_copy(deep=True),
                timestamp=self._clock(),
                version=version,
            )
            self._committed[key] = version
            self._version += 1
            self._updates += 1

            return new_snapshot.model_copy(deep=True), True

    async def invalidate(self, key: CacheKey | str | None = None) -> None:
        """
        Drop one entry, or every entry when key is None.

        Version stamps are kept so in-flight writes that started before the
        invalidation still lose to newer ones.
        """
        keys = [self._key(key)] if key is not None else list(CacheKey)
        for cache_key in keys:
            async with self._locks[cache_key]:
                self._entries.pop(cache_key, None)
        self._version += 1

    async def cleanup(self) -> int:
        """
        Evict every expired entry.

        Returns:
            Number of evicted entries
        """
        evicted = 0
        for key in CacheKey:
            async with self._locks[key]:
                entry = self._entries.get(key)
                if entry is not None and self._is_expired(entry):
                    del self._entries[key]
                    evicted += 1
        if evicted:
            logger.debug(f"Cache sweep evicted {evicted} entries", extra={"evicted": evicted})
        return evicted

    async def clear(self) -> None:
        """Drop every entry and reset metrics."""
        for key in CacheKey:
            async with self._locks[key]:
                self._entries.pop(key, None)
        self._hits = 0
        self._misses = 0
        self._updates = 0
        self._discarded = 0
        self._last_access = None
        self._version = 0

    def metrics(self) -> CacheMetrics:
        """Read-only snapshot of the cache counters."""
        return CacheMetrics(
            hits=self._hits,
            misses=self._misses,
            updates=self._updates,
            discarded_writes=self._discarded,
            last_access=self._last_access,
            size=len(self._entries),
            version=self._version,
        )

    # Read strategies

    async def fetch(
        self,
        key: CacheKey | str,
        fetcher: Fetcher,
        strategy: CacheStrategy = CacheStrategy.CACHE_FIRST,
        on_stored: StoredCallback | None = None,
    ) -> GraphSnapshot:
        """
        Read a snapshot under a read strategy.

        Args:
            key: Cache key
            fetcher: Produces a fresh snapshot
            strategy: cache_first, network_first or stale_while_revalidate
            on_stored: Called after a fresh snapshot is committed

        Returns:
            Snapshot for the caller

        Raises:
            CacheError: If the strategy is unknown
        """
        key = self._key(key)
        try:
            strategy = CacheStrategy(strategy)
        except ValueError as e:
            raise CacheError(f"Unknown cache strategy: {strategy}") from e

        if strategy == CacheStrategy.NETWORK_FIRST:
            return await self._refresh(key, fetcher, on_stored)

        cached = await self.get(key)
        if cached is None:
            return await self._refresh(key, fetcher, on_stored)

        if strategy == CacheStrategy.STALE_WHILE_REVALIDATE:
            self._schedule_refresh(key, fetcher, on_stored)

        return cached

    async def _refresh(
        self,
        key: CacheKey,
        fetcher: Fetcher,
        on_stored: StoredCallback | None,
    ) -> GraphSnapshot:
        version = self.next_version(key)
        fresh = await fetcher()

        stored, accepted = await self.update(key, lambda _current: fresh, version)

        if accepted and on_stored is not None:
            on_stored(key, stored, version)

        # A newer write won the race; serve what the cache now holds
        return stored if stored is not None else fresh

    def _schedule_refresh(
        self,
        key: CacheKey,
        fetcher: Fetcher,
        on_stored: StoredCallback | None,
    ) -> None:
        task = asyncio.create_task(self._refresh(key, fetcher, on_stored))
        self._refresh_tasks.add(task)
        task.add_done_callback(self._on_refresh_done)

    def _on_refresh_done(self, task: asyncio.Task) -> None:
        self._refresh_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(
                f"Background refresh failed: {error}",
                extra={"operation": "stale_while_revalidate", "error_type": type(error).__name__},
            )

    async def wait_for_refreshes(self) -> None:
        """Wait until every scheduled background refresh has finished."""
        while self._refresh_tasks:
            await asyncio.gather(*list(self._refresh_tasks), return_exceptions=True)

    # Background sweep

    def start_sweeper(self) -> None:
        """Start the periodic expiry sweep."""
        if self._sweeper_task is None or self._sweeper_task.done():
            self._sweeper_task = asyncio.create_task(self._sweep_worker())

    async def stop_sweeper(self) -> None:
        """Stop the periodic expiry sweep."""
        if self._sweeper_task and not self._sweeper_task.done():
            self._sweeper_task.cancel()
            try:
                await self._sweeper_task
            except asyncio.CancelledError:
                pass
        self._sweeper_task = None

    async def _sweep_worker(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            await self.cleanup()
