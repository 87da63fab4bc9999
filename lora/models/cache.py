import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, TypedDict

CacheType = Literal["exact", "semantic"]


@dataclass
class CacheEntry:
    """
    A stored pipeline result. ``key`` is the content fingerprint; semantic
    entries also carry the embedding they are matched on.
    """
    key: str
    payload: Dict[str, Any]
    ttl: float
    created_at: float = field(default_factory=time.monotonic)
    embedding: Optional[List[float]] = None

    def age(self, now: Optional[float] = None) -> float:
        return (time.monotonic() if now is None else now) - self.created_at

    def is_expired(self, now: Optional[float] = None) -> bool:
        return self.age(now) >= self.ttl


@dataclass(frozen=True)
class CacheLookup:
    cache_type: CacheType
    payload: Dict[str, Any]
    similarity: Optional[float] = None


class CacheStats(TypedDict):
    exact_entries: int
    semantic_entries: int
    source_entries: int
    embedding_memo_entries: int
