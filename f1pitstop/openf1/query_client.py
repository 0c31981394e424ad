"""
Keyed query cache for OpenF1 fetches.

Each query is identified by a tuple key (e.g. ``("drivers", "all", "latest")``).
Results are kept in memory and persisted through LocalStorageManager so a
restarted dashboard can reuse them. A cached result is served until it
goes stale; after that the fetcher runs again, with retries.
"""
import json
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

from f1pitstop.config import cfg
from f1pitstop.storage.local_storage import LocalStorageManager
from f1pitstop.utils.logger import logger


QueryKey = tuple


@dataclass(frozen=True)
class QueryOptions:
    stale_time: float = field(default_factory=lambda: cfg.cache.stale_time)
    gc_time: float = field(default_factory=lambda: cfg.cache.gc_time)
    retry: int = field(default_factory=lambda: cfg.cache.retry)
    retry_delay: float = field(default_factory=lambda: cfg.cache.retry_delay)
    enabled: bool = True


@dataclass
class QueryResult:
    """Outcome of a query: the data, or the error that replaced it."""

    data: Any = None
    error: Optional[Exception] = None
    status: str = "success"  # success | error | disabled
    updated_at: Optional[float] = None

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    @property
    def is_disabled(self) -> bool:
        return self.status == "disabled"


@dataclass
class _Entry:
    data: Any
    updated_at: float
    last_access: float
    gc_time: float


def hash_query_key(key: QueryKey) -> str:
    """Deterministic string form of a query key."""
    return json.dumps(list(key), sort_keys=True, default=str, separators=(",", ":"))


class QueryClient:
    """In-memory query cache with persistence and stale/gc lifetimes."""

    def __init__(
        self,
        storage: LocalStorageManager | None = None,
        defaults: QueryOptions | None = None,
        max_age: float | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.storage = storage
        self.defaults = defaults or QueryOptions()
        self.max_age = max_age if max_age is not None else cfg.cache.max_age
        self._clock = clock
        self._sleep = sleep
        self._entries: dict[str, _Entry] = {}
        self._keys: dict[str, QueryKey] = {}

    # --- Cache access -------------------------------------------------------

    def _options(self, **overrides: Any) -> QueryOptions:
        overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self.defaults, **overrides)

    def _restore(self, key_hash: str) -> Optional[_Entry]:
        if self.storage is None:
            return None
        stored = self.storage.get(key_hash)
        if not isinstance(stored, dict) or "updated_at" not in stored:
            return None
        now = self._clock()
        if now - stored["updated_at"] > self.max_age:
            logger.debug(f"Dropping expired persisted query {key_hash}")
            self.storage.remove(key_hash)
            return None
        return _Entry(
            data=stored.get("data"),
            updated_at=stored["updated_at"],
            last_access=now,
            gc_time=self.defaults.gc_time,
        )

    def _lookup(self, key: QueryKey) -> Optional[_Entry]:
        key_hash = hash_query_key(key)
        entry = self._entries.get(key_hash)
        if entry is None:
            entry = self._restore(key_hash)
            if entry is not None:
                self._entries[key_hash] = entry
                self._keys[key_hash] = tuple(key)
        if entry is not None:
            entry.last_access = self._clock()
        return entry

    def get_query_data(self, key: QueryKey) -> Any:
        entry = self._lookup(key)
        return entry.data if entry is not None else None

    def set_query_data(self, key: QueryKey, data: Any, gc_time: float | None = None) -> None:
        key_hash = hash_query_key(key)
        now = self._clock()
        gc_time = gc_time if gc_time is not None else self.defaults.gc_time
        self._entries[key_hash] = _Entry(data=data, updated_at=now, last_access=now, gc_time=gc_time)
        self._keys[key_hash] = tuple(key)
        if self.storage is not None:
            self.storage.set(key_hash, {"key": list(key), "data": data, "updated_at": now})

    def invalidate_queries(self, prefix: QueryKey) -> int:
        """Drop every cached query whose key starts with ``prefix``."""
        prefix = tuple(prefix)
        dropped = 0
        for key_hash, key in list(self._keys.items()):
            if key[: len(prefix)] == prefix:
                self._entries.pop(key_hash, None)
                self._keys.pop(key_hash, None)
                if self.storage is not None:
                    self.storage.remove(key_hash)
                dropped += 1
        if self.storage is not None:
            for key_hash in self.storage.keys():
                stored = self.storage.get(key_hash)
                key = tuple(stored.get("key", [])) if isinstance(stored, dict) else ()
                if key[: len(prefix)] == prefix:
                    self.storage.remove(key_hash)
                    dropped += 1
        return dropped

    def gc(self, gc_time: float | None = None) -> int:
        """
        Evict in-memory entries idle for longer than their own ``gc_time``.

        A ``gc_time`` argument caps every entry's lifetime at that many seconds.
        """
        now = self._clock()

        def _limit(entry: _Entry) -> float:
            return entry.gc_time if gc_time is None else min(entry.gc_time, gc_time)

        expired = [h for h, e in self._entries.items() if now - e.last_access > _limit(e)]
        for key_hash in expired:
            self._entries.pop(key_hash, None)
            self._keys.pop(key_hash, None)
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()
        self._keys.clear()
        if self.storage is not None:
            self.storage.clear()

    # --- Fetching -----------------------------------------------------------

    def _is_fresh(self, entry: _Entry, stale_time: float) -> bool:
        return self._clock() - entry.updated_at < stale_time

    def fetch_query(self, key: QueryKey, fn: Callable[[], Any], **options: Any) -> Any:
        """
        Return cached data for ``key`` if fresh, otherwise run ``fn``.

        Args:
            key: Query key tuple.
            fn: Zero-argument fetcher.
            **options: Overrides for QueryOptions (stale_time, retry, ...).

        Returns:
            The query data.

        Raises:
            The fetcher's last exception once retries are exhausted.
        """
        opts = self._options(**options)
        entry = self._lookup(key)
        if entry is not None:
            entry.gc_time = opts.gc_time
        if entry is not None and self._is_fresh(entry, opts.stale_time):
            logger.debug(f"Query cache hit: {key}")
            return entry.data

        logger.debug(f"Query cache miss: {key}")
        attempts = max(0, opts.retry) + 1
        last_error: Optional[Exception] = None
        for attempt in range(attempts):
            if attempt:
                self._sleep(opts.retry_delay)
            try:
                data = fn()
            except Exception as e:
                last_error = e
                logger.warning(f"Query {key} failed (attempt {attempt + 1}/{attempts}): {e}")
                continue
            self.set_query_data(key, data, gc_time=opts.gc_time)
            return data

        raise last_error

    def query(self, key: QueryKey, fn: Callable[[], Any], **options: Any) -> QueryResult:
        """Like fetch_query, but reports failures as a QueryResult instead of raising."""
        opts = self._options(**options)
        if not opts.enabled:
            return QueryResult(status="disabled")
        self.gc()
        try:
            data = self.fetch_query(key, fn, **options)
        except Exception as e:
            logger.error(f"Query {key} errored: {e}")
            return QueryResult(error=e, status="error")
        entry = self._entries.get(hash_query_key(key))
        return QueryResult(data=data, updated_at=entry.updated_at if entry else None)
