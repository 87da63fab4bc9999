import asyncio
import time
from typing import Any, Dict, List, Optional, Set, Tuple

from pydantic import ValidationError

from lora.config import LABEL_THRESHOLDS, logger
from lora.config.constants import LabelThresholds
from lora.cache import TwoTierCache
from lora.exceptions import CacheException, ValidationException
from lora.models.cache import CacheLookup, CacheStats
from lora.models.claims import Claim
from lora.models.results import (
    LatencyBreakdown,
    PipelineInfo,
    PipelineResult,
    SourceSearchResult,
    UsedVerifiers,
)
from lora.api import BingSearch, GeminiEmbeddingProvider, GoogleSearch, PerplexitySearch
from .embedding import EmbeddingService
from .labeling import verdict_label
from .merger import ResultMerger
from .personal_filter import PersonalStatementFilter
from .scheduler import ScheduleOutcome, TierScheduler
from .sources import SourceSearchService
from .tiers import build_default_tiers


def _ms(since: float) -> float:
    return round((time.perf_counter() - since) * 1000, 2)


class VerificationPipeline:
    """
    ``check(text)`` is the single entry point:

    personal filter -> exact cache -> semantic cache -> (embedding and
    source search in the background) -> FAST [-> MID [-> FULL]] -> merge
    -> label -> cache write.

    Anticipated failures never escape; they show up as lower confidence,
    fewer sources or an ``UNKNOWN`` verdict. Empty or non-text input raises
    :class:`ValidationException`.
    """

    def __init__(
        self,
        scheduler: TierScheduler,
        cache: TwoTierCache,
        embeddings: EmbeddingService,
        sources: Optional[SourceSearchService] = None,
        personal_filter: Optional[PersonalStatementFilter] = None,
        merger: Optional[ResultMerger] = None,
        labels: LabelThresholds = LABEL_THRESHOLDS,
    ):
        self.scheduler = scheduler
        self.cache = cache
        self.embeddings = embeddings
        self.sources = sources
        self.personal_filter = personal_filter or PersonalStatementFilter()
        self.merger = merger or ResultMerger()
        self.labels = labels
        self._pending_writes: Set[asyncio.Task] = set()

    async def check(self, text: str) -> PipelineResult:
        if not isinstance(text, str) or not text.strip():
            raise ValidationException("text", "Claim cannot be empty")

        started = time.perf_counter()
        personal = self.personal_filter.check(text)
        filter_ms = _ms(started)
        if personal.is_personal:
            logger.info(f"Personal statement, skipping verification ({personal.reason})")
            return PipelineResult(
                mode="personal",
                claim=text,
                reason=personal.reason,
                detection_confidence=personal.confidence,
                latency=LatencyBreakdown(personal_filter_ms=filter_ms, total_ms=filter_ms),
            )

        claim = Claim.from_text(text)
        lookup_started = time.perf_counter()

        embedding_task = None
        hit = await self._lookup_exact(claim)
        if hit is None:
            embedding_task = self.embeddings.start(claim.fingerprint, claim.normalized)
            hit = await self._lookup_semantic(await self.embeddings.wait(embedding_task))
        if hit is not None:
            return self._served_from_cache(text, *hit, filter_ms, _ms(lookup_started), started)
        lookup_ms = _ms(lookup_started)

        search_task = asyncio.create_task(self._search_sources(claim)) if self.sources else None
        try:
            outcome = await self.scheduler.run(claim.text.strip())
        except BaseException:
            for task in (search_task, embedding_task):
                if task is not None:
                    task.cancel()
            raise

        merged = self.merger.merge(outcome.fast, outcome.mid, outcome.full)
        label = verdict_label(merged.score, self.labels)

        found = await search_task if search_task is not None else SourceSearchResult(provider="disabled")

        result = PipelineResult(
            mode="fact_check",
            claim=text,
            score=merged.score,
            confidence=merged.confidence,
            verdict=label,
            agreement=merged.agreement,
            latency=LatencyBreakdown(
                personal_filter_ms=filter_ms,
                cache_lookup_ms=lookup_ms,
                fast_phase_ms=round(outcome.fast.latency_ms, 2),
                mid_phase_ms=round(outcome.mid.latency_ms, 2) if outcome.mid else 0.0,
                full_phase_ms=round(outcome.full.latency_ms, 2) if outcome.full else 0.0,
                total_ms=_ms(started),
            ),
            used_verifiers=UsedVerifiers(**outcome.used),
            breakdown=[s for tier in (outcome.fast, outcome.mid, outcome.full) if tier for s in tier.breakdown],
            sources=found.sources,
            source_provider=found.provider,
            pipeline_info=self._pipeline_info(outcome, merged.source_tier),
        )

        logger.info(
            f"Claim scored {result.score} ({result.verdict}) via {merged.source_tier or 'no tier'} "
            f"in {result.latency.total_ms}ms",
            extra={"fingerprint": claim.fingerprint[:12], "total_ms": result.latency.total_ms}
        )

        await self._write_cache(claim.fingerprint, result.model_dump(mode="json"), embedding_task)
        return result

    async def _write_cache(self, key: str, payload: Dict[str, Any], embedding_task: "asyncio.Task"):
        """Exact write now; the semantic write waits for the embedding off the request path."""
        if embedding_task.done():
            await self.cache.store(key, payload, embedding_task.result())
            return
        await self.cache.store(key, payload)
        write = asyncio.create_task(self._write_semantic_when_ready(key, payload, embedding_task))
        self._pending_writes.add(write)
        write.add_done_callback(self._pending_writes.discard)

    async def _write_semantic_when_ready(self, key: str, payload: Dict[str, Any], embedding_task: "asyncio.Task"):
        embedding = await embedding_task
        await self.cache.store_semantic(key, payload, embedding)

    async def _lookup_exact(self, claim: Claim) -> Optional[Tuple[CacheLookup, PipelineResult]]:
        try:
            hit = await self.cache.get_exact(claim.fingerprint)
            if hit is None:
                return None
            return hit, PipelineResult.model_validate(hit.payload)
        except (CacheException, ValidationError) as e:
            logger.warning(f"Discarding unusable exact cache entry: {e}")
            await self.cache.invalidate(claim.fingerprint)
            return None

    async def _lookup_semantic(self, embedding: Optional[List[float]]) -> Optional[Tuple[CacheLookup, PipelineResult]]:
        if embedding is None:
            return None
        try:
            hit = await self.cache.get_semantic(embedding)
            if hit is None:
                return None
            return hit, PipelineResult.model_validate(hit.payload)
        except (CacheException, ValidationError) as e:
            logger.warning(f"Ignoring unusable semantic cache entry: {e}")
            return None

    def _served_from_cache(
        self,
        text: str,
        hit: CacheLookup,
        cached: PipelineResult,
        filter_ms: float,
        lookup_ms: float,
        started: float,
    ) -> PipelineResult:
        logger.info(
            f"{hit.cache_type} cache hit" + (f" (similarity {hit.similarity})" if hit.similarity is not None else ""),
            extra={"cache_type": hit.cache_type, "similarity": hit.similarity}
        )
        return cached.model_copy(update={
            "claim": text,
            "matched_claim": cached.claim if hit.cache_type == "semantic" else None,
            "from_cache": True,
            "cache_type": hit.cache_type,
            "similarity": hit.similarity,
            "latency": LatencyBreakdown(
                personal_filter_ms=filter_ms, cache_lookup_ms=lookup_ms, total_ms=_ms(started)
            ),
            "pipeline_info": cached.pipeline_info.model_copy(update={"cache_hit": True}),
        })

    async def _search_sources(self, claim: Claim) -> SourceSearchResult:
        try:
            cached = await self.cache.get_sources(claim.fingerprint)
            if cached is not None:
                logger.info("Sources served from cache", extra={"fingerprint": claim.fingerprint[:12]})
                return SourceSearchResult.model_validate(cached).model_copy(update={"search_time_ms": 0.0})
        except (CacheException, ValidationError) as e:
            logger.warning(f"Ignoring unusable source cache entry: {e}")

        found = await self.sources.search(claim.text)
        if found.sources:
            await self.cache.store_sources(claim.fingerprint, found.model_dump(mode="json"))
        return found

    @staticmethod
    def _pipeline_info(outcome: ScheduleOutcome, source_tier: Optional[str]) -> PipelineInfo:
        return PipelineInfo(
            skipped_mid=outcome.mid is None,
            skipped_full=outcome.full is None,
            mid_reason=outcome.mid_decision.reason if outcome.mid_decision else None,
            full_reason=(
                outcome.full_decision.reason if outcome.full_decision else "MID tier did not run"
            ),
            source_tier=source_tier,
            tier_scores={
                "fast": outcome.fast.score,
                "mid": outcome.mid.score if outcome.mid else None,
                "full": outcome.full.score if outcome.full else None,
            },
            dropped_verifiers=outcome.dropped,
        )

    def cache_stats(self) -> CacheStats:
        stats = self.cache.stats()
        return CacheStats(
            exact_entries=stats["exact_entries"],
            semantic_entries=stats["semantic_entries"],
            source_entries=stats["source_entries"],
            embedding_memo_entries=len(self.embeddings),
        )

    async def clear_caches(self) -> Dict[str, int]:
        for write in list(self._pending_writes):
            write.cancel()
        cleared = await self.cache.clear()
        cleared["embeddings"] = self.embeddings.clear()
        return cleared


def build_pipeline(cache: Optional[TwoTierCache] = None) -> VerificationPipeline:
    """Wire the production verifiers, embedding and search providers."""
    return VerificationPipeline(
        scheduler=TierScheduler(build_default_tiers()),
        cache=cache or TwoTierCache(),
        embeddings=EmbeddingService(GeminiEmbeddingProvider()),
        sources=SourceSearchService([PerplexitySearch(), GoogleSearch(), BingSearch()]),
    )
