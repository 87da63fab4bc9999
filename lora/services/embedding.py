import asyncio
from collections import OrderedDict
from typing import List, Optional, Protocol

from lora.config import CACHE_CONFIG, logger


class EmbeddingProvider(Protocol):
    async def embed(self, text: str) -> Optional[List[float]]: ...


class EmbeddingService:
    """
    Memoises embeddings by content fingerprint. Returns ``None`` whenever the
    provider cannot produce a vector, which disables the semantic cache for
    that request.

    ``start`` launches one provider call per request; ``wait`` bounds how long
    the semantic lookup holds up verification. A call that misses the deadline
    keeps running and its vector is still memoised and written later.
    """

    def __init__(
        self,
        provider: Optional[EmbeddingProvider],
        max_entries: int = CACHE_CONFIG.MAX_EMBEDDING_MEMO,
        deadline: float = CACHE_CONFIG.EMBEDDING_DEADLINE_SECONDS,
    ):
        self.provider = provider
        self.max_entries = max_entries
        self.deadline = deadline
        self._memo: "OrderedDict[str, List[float]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._memo)

    async def get(self, key: str, text: str) -> Optional[List[float]]:
        cached = self._memo.get(key)
        if cached is not None:
            self._memo.move_to_end(key)
            return cached
        if self.provider is None:
            return None
        try:
            vector = await self.provider.embed(text)
        except Exception as e:
            logger.warning(f"Embedding provider raised, continuing without embedding: {e}")
            return None
        if not vector:
            return None
        self._memo[key] = vector
        while len(self._memo) > self.max_entries:
            self._memo.popitem(last=False)
        return vector

    def start(self, key: str, text: str) -> "asyncio.Task[Optional[List[float]]]":
        return asyncio.create_task(self.get(key, text), name=f"lora-embed-{key[:12]}")

    async def wait(self, task: "asyncio.Task[Optional[List[float]]]") -> Optional[List[float]]:
        """The task's vector if it lands within ``deadline``, else ``None``. Never cancels the task."""
        done, _ = await asyncio.wait({task}, timeout=self.deadline)
        if task in done:
            return task.result()
        logger.info(
            f"Embedding not ready after {self.deadline}s, skipping semantic lookup",
            extra={"deadline_s": self.deadline}
        )
        return None

    def clear(self) -> int:
        count = len(self._memo)
        self._memo.clear()
        return count
