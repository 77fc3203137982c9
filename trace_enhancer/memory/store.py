"""
In-process shared store for file content, rate-limit flags, failure counters
and soft/hard TTL cached values.
Implements ISharedStore for single-process deployments and tests; multi-instance
deployments plug in a networked implementation of the same interface.

Only the file content cache is bounded (least recently used entries are
evicted past max_files). Flags, counters and cached values are small and
keyed per repository or service, and are only dropped when they expire.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from threading import Lock
from typing import Awaitable, Callable, Optional

from trace_enhancer.shared.constants import MAX_CACHED_FILES
from trace_enhancer.shared.interfaces import ISharedStore

logger = logging.getLogger(__name__)


class InMemorySharedStore(ISharedStore):
    """Dictionary-backed store with TTL expiry and stale-while-revalidate."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_files: int = MAX_CACHED_FILES,
    ):
        self._clock = clock
        self._lock = Lock()
        self._max_files = max_files
        self._bytes: OrderedDict[str, bytes] = OrderedDict()
        self._flags: dict[str, float] = {}              # key -> expires at
        self._counters: dict[str, tuple[int, Optional[float]]] = {}
        self._cached: dict[str, tuple[str, float]] = {}  # key -> (value, stored at)
        self._refreshing: set[str] = set()
        self._tasks: set[asyncio.Task] = set()

    async def get_bytes(self, key: str) -> Optional[bytes]:
        with self._lock:
            value = self._bytes.get(key)
            if value is not None:
                self._bytes.move_to_end(key)
            return value

    async def set_bytes(self, key: str, value: bytes) -> None:
        with self._lock:
            self._bytes[key] = value
            self._bytes.move_to_end(key)
            while len(self._bytes) > self._max_files:
                evicted, _ = self._bytes.popitem(last=False)
                logger.debug(f"File cache full, evicted {evicted}")

    async def get_flag(self, key: str) -> bool:
        with self._lock:
            expires_at = self._flags.get(key)
            if expires_at is None:
                return False
            if self._clock() >= expires_at:
                del self._flags[key]
                return False
            return True

    async def set_flag(self, key: str, ttl_seconds: float) -> None:
        with self._lock:
            self._flags[key] = self._clock() + ttl_seconds

    async def increment(self, key: str, ttl_seconds: Optional[float] = None) -> int:
        with self._lock:
            now = self._clock()
            value, expires_at = self._counters.get(key, (0, None))
            if expires_at is not None and now >= expires_at:
                value, expires_at = 0, None
            if value == 0 and ttl_seconds is not None:
                expires_at = now + ttl_seconds
            value += 1
            self._counters[key] = (value, expires_at)
            return value

    async def cached_eval(
        self,
        key: str,
        soft_ttl_seconds: float,
        hard_ttl_seconds: float,
        compute: Callable[[], Awaitable[str]],
    ) -> str:
        """Serve fresh values, refresh stale ones in the background, recompute expired ones.

        age < soft: cached value.
        soft <= age < hard: cached value, one background refresh per key.
        age >= hard or missing: compute now.
        """
        with self._lock:
            entry = self._cached.get(key)
            now = self._clock()
            if entry is not None:
                value, stored_at = entry
                age = now - stored_at
                if age < soft_ttl_seconds:
                    return value
                if age < hard_ttl_seconds:
                    if key not in self._refreshing:
                        self._refreshing.add(key)
                        task = asyncio.ensure_future(self._refresh(key, compute))
                        self._tasks.add(task)
                        task.add_done_callback(self._tasks.discard)
                    return value

        value = await compute()
        with self._lock:
            self._cached[key] = (value, self._clock())
        return value

    async def _refresh(self, key: str, compute: Callable[[], Awaitable[str]]) -> None:
        try:
            value = await compute()
            with self._lock:
                self._cached[key] = (value, self._clock())
        except Exception as e:
            logger.warning(f"Background refresh of {key} failed, keeping stale value: {e}")
        finally:
            with self._lock:
                self._refreshing.discard(key)

    async def wait_for_refreshes(self) -> None:
        """Wait for scheduled background refreshes to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
