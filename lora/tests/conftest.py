import asyncio
import pytest
from typing import Dict, List, Optional, Sequence
from unittest.mock import AsyncMock, MagicMock

from lora.api.search import SearchProvider
from lora.cache import TwoTierCache
from lora.models.tiers import Tier, TierName, VerifierDescriptor
from lora.services.embedding import EmbeddingService
from lora.services.pipeline import VerificationPipeline
from lora.services.scheduler import TierScheduler
from lora.services.sources import SourceSearchService


class FakeVerifier:
    """Stands in for an external verifier and counts how often it is called."""

    def __init__(self, verdict: str = "true", confidence: int = 90, delay: float = 0.0, error: Exception = None):
        self.verdict = verdict
        self.confidence = confidence
        self.delay = delay
        self.error = error
        self.calls = 0

    async def __call__(self, claim: str):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return {"verdict": self.verdict, "confidence": self.confidence, "explanation": "fake"}


class FakeEmbeddingProvider:
    def __init__(
        self,
        vectors: Optional[Dict[str, List[float]]] = None,
        default: Optional[List[float]] = None,
        delay: float = 0.0,
    ):
        self.vectors = vectors or {}
        self.default = default
        self.delay = delay
        self.calls = 0

    async def embed(self, text: str):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.vectors.get(text, self.default)


class FakeSearchProvider(SearchProvider):
    def __init__(self, name: str, sources=None, error: Exception = None, delay: float = 0.0, configured: bool = True):
        self.name = name
        self.sources = sources or []
        self.error = error
        self.delay = delay
        self._configured = configured
        self.calls = 0

    @property
    def configured(self) -> bool:
        return self._configured

    async def search(self, query: str, max_results: int = 5):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.sources[:max_results]


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def build_tiers(
    fast: Sequence[FakeVerifier],
    mid: Sequence[FakeVerifier] = (),
    full: Sequence[FakeVerifier] = (),
    timeouts=(1.0, 1.0, 1.0),
) -> Dict[TierName, Tier]:
    def tier(name: TierName, verifiers, timeout):
        return Tier(name, timeout, tuple(
            VerifierDescriptor(f"{name.name.lower()}-{i}", v) for i, v in enumerate(verifiers)
        ))
    return {
        TierName.FAST: tier(TierName.FAST, fast, timeouts[0]),
        TierName.MID: tier(TierName.MID, mid, timeouts[1]),
        TierName.FULL: tier(TierName.FULL, full, timeouts[2]),
    }


@pytest.fixture
def fake_verifier():
    return FakeVerifier


@pytest.fixture
def make_tiers():
    return build_tiers


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def make_pipeline():
    """Factory for a pipeline wired to fakes only; no network access."""
    def factory(
        fast: Sequence[FakeVerifier],
        mid: Sequence[FakeVerifier] = (),
        full: Sequence[FakeVerifier] = (),
        embedder: Optional[FakeEmbeddingProvider] = None,
        search_providers: Optional[List[SearchProvider]] = None,
        cache: Optional[TwoTierCache] = None,
        timeouts=(1.0, 1.0, 1.0),
        embedding_deadline: float = 0.75,
    ) -> VerificationPipeline:
        return VerificationPipeline(
            scheduler=TierScheduler(build_tiers(fast, mid, full, timeouts)),
            cache=cache or TwoTierCache(),
            embeddings=EmbeddingService(embedder, deadline=embedding_deadline),
            sources=SourceSearchService(search_providers) if search_providers is not None else None,
        )
    return factory


@pytest.fixture
def sample_result_payload():
    return {
        "mode": "fact_check",
        "claim": "Water boils at 100 degrees Celsius at sea level",
        "score": 95,
        "confidence": 0.92,
        "verdict": "TRUE",
        "agreement": True,
    }


@pytest.fixture
def mock_httpx_client():
    """Mock httpx.AsyncClient used as an async context manager."""
    mock_client = MagicMock()
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


@pytest.fixture
def openai_completion():
    def build(content: str):
        return {"choices": [{"message": {"role": "assistant", "content": content}}]}
    return build
