import asyncio
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from lora.config import CACHE_CONFIG, logger
from lora.config.constants import CacheConfig
from lora.models.cache import CacheEntry
from lora.utils.similarity import cosine_similarity, most_similar

Clock = Callable[[], float]


class ExactStore:
    """
    Fingerprint -> result, short TTL. Expired entries are evicted lazily on
    lookup and by :meth:`sweep`; above capacity the oldest entries go first.
    """

    def __init__(
        self,
        ttl: float = CACHE_CONFIG.EXACT_TTL_SECONDS,
        max_entries: int = CACHE_CONFIG.MAX_EXACT_ENTRIES,
        clock: Clock = time.monotonic,
    ):
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Optional[CacheEntry]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            return entry

    async def put(self, key: str, payload: Dict[str, Any]) -> CacheEntry:
        entry = CacheEntry(key=key, payload=payload, ttl=self.ttl, created_at=self._clock())
        async with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = entry
            self._evict_locked()
        return entry

    async def delete(self, key: str):
        async with self._lock:
            self._entries.pop(key, None)

    async def clear(self) -> int:
        async with self._lock:
            count = len(self._entries)
            self._entries.clear()
        return count

    async def sweep(self) -> int:
        async with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def _evict_locked(self):
        if len(self._entries) <= self.max_entries:
            return
        now = self._clock()
        for key in [k for k, e in self._entries.items() if e.is_expired(now)]:
            del self._entries[key]
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)


class SemanticStore:
    """
    Embedding -> result, long TTL. Lookups return the single most similar
    live entry when it reaches ``threshold`` (inclusive). Writes within
    ``reword_threshold`` of an existing entry replace it in place.

    Lookups scan a snapshot taken under the lock so that long scans never
    block concurrent writers. Writes match and replace under one lock hold,
    so concurrent rewordings of one claim collapse into a single entry.
    """

    def __init__(
        self,
        ttl: float = CACHE_CONFIG.SEMANTIC_TTL_SECONDS,
        threshold: float = CACHE_CONFIG.SIMILARITY_THRESHOLD,
        reword_threshold: float = CACHE_CONFIG.REWORD_THRESHOLD,
        max_entries: int = CACHE_CONFIG.MAX_SEMANTIC_ENTRIES,
        similarity: Callable[[Sequence[float], Sequence[float]], float] = cosine_similarity,
        clock: Clock = time.monotonic,
    ):
        self.ttl = ttl
        self.threshold = threshold
        self.reword_threshold = reword_threshold
        self.max_entries = max_entries
        self._similarity = similarity
        self._clock = clock
        self._entries: List[CacheEntry] = []
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: CacheConfig, **kwargs) -> "SemanticStore":
        return cls(
            ttl=config.SEMANTIC_TTL_SECONDS,
            threshold=config.SIMILARITY_THRESHOLD,
            reword_threshold=config.REWORD_THRESHOLD,
            max_entries=config.MAX_SEMANTIC_ENTRIES,
            **kwargs,
        )

    def __len__(self) -> int:
        return len(self._entries)

    async def _live_snapshot(self) -> List[CacheEntry]:
        async with self._lock:
            now = self._clock()
            return [e for e in self._entries if not e.is_expired(now)]

    async def search(self, embedding: Sequence[float]) -> Tuple[Optional[CacheEntry], float]:
        """Best live match and its similarity, or ``(None, best_similarity)``."""
        if not embedding:
            return None, 0.0
        snapshot = await self._live_snapshot()
        entry, similarity = most_similar(
            embedding, [(e.embedding, e) for e in snapshot], self._similarity
        )
        if entry is not None and similarity >= self.threshold:
            return entry, similarity
        return None, similarity

    async def put(self, key: str, embedding: Sequence[float], payload: Dict[str, Any]) -> CacheEntry:
        entry = CacheEntry(
            key=key,
            payload=payload,
            ttl=self.ttl,
            created_at=self._clock(),
            embedding=list(embedding),
        )
        async with self._lock:
            now = self._clock()
            nearest, similarity = most_similar(
                embedding,
                [(e.embedding, e) for e in self._entries if not e.is_expired(now)],
                self._similarity,
            )
            index = self._index_of(nearest) if similarity > self.reword_threshold else None
            if index is not None:
                self._entries[index] = entry
                logger.debug(
                    "Semantic cache entry updated in place",
                    extra={"similarity": round(similarity, 4), "fingerprint": key[:12]}
                )
            else:
                self._entries.append(entry)
            self._evict_locked()
        return entry

    async def clear(self) -> int:
        async with self._lock:
            count = len(self._entries)
            self._entries = []
        return count

    async def sweep(self) -> int:
        async with self._lock:
            now = self._clock()
            before = len(self._entries)
            self._entries = [e for e in self._entries if not e.is_expired(now)]
            return before - len(self._entries)

    def _evict_locked(self):
        if len(self._entries) <= self.max_entries:
            return
        self._entries.sort(key=lambda e: e.created_at)
        del self._entries[: len(self._entries) - self.max_entries]

    def _index_of(self, entry: Optional[CacheEntry]) -> Optional[int]:
        for i, candidate in enumerate(self._entries):
            if candidate is entry:
                return i
        return None
