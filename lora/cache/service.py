import asyncio
from typing import Any, Dict, Optional, Sequence

from lora.config import CACHE_CONFIG, logger
from lora.config.constants import CacheConfig
from lora.exceptions import CacheException
from lora.models.cache import CacheLookup
from .stores import ExactStore, SemanticStore


class TwoTierCache:
    """
    Exact and semantic result caches, plus a short-lived citation store
    keyed by the same fingerprint, with their own lifecycle.

    Construct once per process, ``await start()`` to launch the periodic
    sweep, and ``await stop()`` on shutdown. Also usable as an async
    context manager.
    """

    def __init__(
        self,
        config: CacheConfig = CACHE_CONFIG,
        exact: Optional[ExactStore] = None,
        semantic: Optional[SemanticStore] = None,
        sources: Optional[ExactStore] = None,
    ):
        self.config = config
        self.exact = exact or ExactStore(
            ttl=config.EXACT_TTL_SECONDS, max_entries=config.MAX_EXACT_ENTRIES
        )
        self.semantic = semantic or SemanticStore.from_config(config)
        self.sources = sources or ExactStore(
            ttl=config.SOURCE_TTL_SECONDS, max_entries=config.MAX_SOURCE_ENTRIES
        )
        self._sweep_task: Optional[asyncio.Task] = None

    async def __aenter__(self) -> "TwoTierCache":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    @property
    def running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    async def start(self):
        if self.running:
            return
        self._sweep_task = asyncio.create_task(self._sweep_loop(), name="lora-cache-sweep")
        logger.info(
            "Cache sweep started",
            extra={"interval_s": self.config.SWEEP_INTERVAL_SECONDS}
        )

    async def stop(self):
        if self._sweep_task is None:
            return
        self._sweep_task.cancel()
        try:
            await self._sweep_task
        except asyncio.CancelledError:
            pass
        self._sweep_task = None
        logger.info("Cache sweep stopped")

    async def _sweep_loop(self):
        while True:
            await asyncio.sleep(self.config.SWEEP_INTERVAL_SECONDS)
            try:
                await self.sweep_expired()
            except Exception:
                logger.exception("Cache sweep failed")

    async def sweep_expired(self) -> Dict[str, int]:
        removed = {
            "exact": await self.exact.sweep(),
            "semantic": await self.semantic.sweep(),
            "sources": await self.sources.sweep(),
        }
        if any(removed.values()):
            logger.info(
                f"Swept {removed['exact']} exact, {removed['semantic']} semantic "
                f"and {removed['sources']} source cache entries",
                extra=removed
            )
        return removed

    async def get_exact(self, key: str) -> Optional[CacheLookup]:
        entry = await self.exact.get(key)
        if entry is None:
            return None
        return CacheLookup(cache_type="exact", payload=self._checked(entry.payload, "exact"))

    async def get_semantic(self, embedding: Optional[Sequence[float]]) -> Optional[CacheLookup]:
        if not embedding:
            return None
        entry, similarity = await self.semantic.search(embedding)
        if entry is None:
            return None
        return CacheLookup(
            cache_type="semantic",
            payload=self._checked(entry.payload, "semantic"),
            similarity=round(similarity, 4),
        )

    async def store(self, key: str, payload: Dict[str, Any], embedding: Optional[Sequence[float]] = None):
        """Exact store always; semantic store only when an embedding exists."""
        await self.exact.put(key, payload)
        await self.store_semantic(key, payload, embedding)

    async def store_semantic(self, key: str, payload: Dict[str, Any], embedding: Optional[Sequence[float]]):
        if embedding:
            await self.semantic.put(key, embedding, payload)

    async def get_sources(self, key: str) -> Optional[Dict[str, Any]]:
        entry = await self.sources.get(key)
        return None if entry is None else self._checked(entry.payload, "sources")

    async def store_sources(self, key: str, payload: Dict[str, Any]):
        await self.sources.put(key, payload)

    async def invalidate(self, key: str):
        await self.exact.delete(key)

    async def clear(self) -> Dict[str, int]:
        cleared = {
            "exact": await self.exact.clear(),
            "semantic": await self.semantic.clear(),
            "sources": await self.sources.clear(),
        }
        logger.info("Caches cleared", extra=cleared)
        return cleared

    def stats(self) -> Dict[str, int]:
        return {
            "exact_entries": len(self.exact),
            "semantic_entries": len(self.semantic),
            "source_entries": len(self.sources),
        }

    @staticmethod
    def _checked(payload: Any, cache_type: str) -> Dict[str, Any]:
        if not isinstance(payload, dict):
            raise CacheException(cache_type, f"payload is {type(payload).__name__}, expected dict")
        return dict(payload)
