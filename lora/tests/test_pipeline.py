import asyncio
import pytest
from lora.cache import TwoTierCache
from lora.config.constants import SearchConfig
from lora.exceptions import ValidationException
from lora.utils.fingerprint import fingerprint
from conftest import FakeEmbeddingProvider, FakeSearchProvider


@pytest.mark.asyncio
class TestPipelineScenarios:
    """End-to-end behaviour of check() with fake verifiers."""

    async def test_unanimous_true(self, make_pipeline, fake_verifier):
        mid, full = [fake_verifier()], [fake_verifier()]
        pipeline = make_pipeline([fake_verifier("true", 90) for _ in range(3)], mid, full)

        result = await pipeline.check("The Pacific is the largest ocean on Earth")

        assert result.mode == "fact_check"
        assert result.score == 100
        assert result.agreement is True
        assert result.verdict == "TRUE"
        assert result.pipeline_info.skipped_mid is True
        assert result.pipeline_info.skipped_full is True
        assert result.pipeline_info.source_tier == "fast"
        assert mid[0].calls == 0 and full[0].calls == 0

    async def test_split_fast_escalates_to_mid(self, make_pipeline, fake_verifier):
        mid = [fake_verifier("false", 90), fake_verifier("false", 90)]
        fast = [fake_verifier("true", 90), fake_verifier("false", 90), fake_verifier("unverifiable", 50)]
        pipeline = make_pipeline(fast, mid, [fake_verifier("false", 90)])

        result = await pipeline.check("The Great Wall is visible from space")

        assert all(v.calls == 1 for v in mid)
        assert result.pipeline_info.skipped_mid is False
        assert result.used_verifiers.mid == ["mid-0", "mid-1"]

    async def test_all_verifiers_drop(self, make_pipeline, fake_verifier):
        broken = fake_verifier(error=ConnectionError("offline"))
        pipeline = make_pipeline([broken] * 3, [broken] * 2, [broken] * 4)

        result = await pipeline.check("Mount Everest is the tallest mountain")

        assert result.score is None
        assert result.verdict == "UNKNOWN"
        assert result.pipeline_info.source_tier is None
        assert result.breakdown == []
        assert result.used_verifiers.model_dump() == {"fast": [], "mid": [], "full": []}
        assert result.pipeline_info.dropped_verifiers == {
            "fast": ["fast-0", "fast-1", "fast-2"],
            "mid": ["mid-0", "mid-1"],
            "full": ["full-0", "full-1", "full-2", "full-3"],
        }

    async def test_used_verifiers_lists_only_responders(self, make_pipeline, fake_verifier):
        fast = [fake_verifier("true", 90), fake_verifier(error=ConnectionError("offline")), fake_verifier(delay=5.0)]
        pipeline = make_pipeline(fast, timeouts=(0.05, 1.0, 1.0))

        result = await pipeline.check("Mount Everest is the tallest mountain")

        assert result.used_verifiers.fast == ["fast-0", "fast-2"]
        assert result.pipeline_info.dropped_verifiers["fast"] == ["fast-1"]

    async def test_personal_statement_short_circuits(self, make_pipeline, fake_verifier):
        fast = [fake_verifier(), fake_verifier(), fake_verifier()]
        embedder = FakeEmbeddingProvider(default=[1.0, 0.0])
        pipeline = make_pipeline(fast, embedder=embedder)

        result = await pipeline.check("I'm so happy today, my friend got me coffee")

        assert result.mode == "personal"
        assert result.score is None
        assert result.verdict == "UNKNOWN"
        assert result.reason == "emotional expression"
        assert sum(v.calls for v in fast) == 0
        assert embedder.calls == 0
        assert result.latency.total_ms == result.latency.personal_filter_ms

    async def test_full_tier_overrides_lower_tiers(self, make_pipeline, fake_verifier):
        fast = [fake_verifier("true", 95), fake_verifier("true", 95), fake_verifier("false", 20)]
        mid = [fake_verifier("false", 90), fake_verifier("false", 90)]
        full = [fake_verifier("false", 90), fake_verifier("true", 10)]
        pipeline = make_pipeline(fast, mid, full)

        result = await pipeline.check("The Moon landing happened in 1969")

        assert result.pipeline_info.tier_scores == {"fast": 90, "mid": 0, "full": 10}
        assert result.score == 10
        assert result.pipeline_info.source_tier == "full"
        assert result.verdict == "FALSE"

    async def test_equally_confident_contradiction_is_mixed(self, make_pipeline, fake_verifier):
        split = [fake_verifier("true", 95), fake_verifier("false", 95)]
        pipeline = make_pipeline(split, split, split)

        result = await pipeline.check("Coffee stunts your growth")

        assert result.score == 50
        assert result.verdict == "MIXED"
        assert result.agreement is False

    async def test_timeouts_contribute_low_confidence_votes(self, make_pipeline, fake_verifier):
        fast = [fake_verifier("true", 90), fake_verifier("true", 90), fake_verifier(delay=1.0)]
        pipeline = make_pipeline(fast, [fake_verifier("true", 90)], [fake_verifier("true", 90)], timeouts=(0.05, 0.5, 0.5))

        result = await pipeline.check("Honey never spoils")

        timed_out = [row for row in result.breakdown if row.timed_out]
        assert len(timed_out) == 1
        assert timed_out[0].verdict == "unverifiable"
        assert timed_out[0].confidence == 25

    async def test_empty_input_is_rejected(self, make_pipeline, fake_verifier):
        pipeline = make_pipeline([fake_verifier()])
        with pytest.raises(ValidationException):
            await pipeline.check("   ")
        with pytest.raises(ValidationException):
            await pipeline.check(None)


@pytest.mark.asyncio
class TestPipelineCaching:
    """Cache behaviour through check()."""

    async def test_exact_hit_skips_verifiers(self, make_pipeline, fake_verifier):
        verifier = fake_verifier("true", 90)
        pipeline = make_pipeline([verifier] * 3)

        first = await pipeline.check("Octopuses have three hearts")
        second = await pipeline.check("  octopuses   HAVE three hearts ")

        assert verifier.calls == 3
        assert second.from_cache is True
        assert second.cache_type == "exact"
        assert second.pipeline_info.cache_hit is True
        assert second.score == first.score
        assert second.claim == "  octopuses   HAVE three hearts "

    async def test_semantic_hit_at_threshold(self, make_pipeline, fake_verifier):
        verifier = fake_verifier("false", 90)
        embedder = FakeEmbeddingProvider({
            "the eiffel tower is in berlin": [1.0, 0.0, 0.0, 0.0, 0.0],
            "berlin is home to the eiffel tower": [93.0, 35.0, 11.0, 2.0, 1.0],
        })
        pipeline = make_pipeline([verifier] * 3, embedder=embedder)

        await pipeline.check("The Eiffel Tower is in Berlin")
        result = await pipeline.check("Berlin is home to the Eiffel Tower")

        assert verifier.calls == 3
        assert result.from_cache is True
        assert result.cache_type == "semantic"
        assert result.similarity == pytest.approx(0.93)
        assert result.matched_claim == "The Eiffel Tower is in Berlin"

    async def test_semantic_miss_below_threshold(self, make_pipeline, fake_verifier):
        verifier = fake_verifier("false", 90)
        embedder = FakeEmbeddingProvider({
            "the eiffel tower is in berlin": [1.0, 0.0, 0.0, 0.0, 0.0],
            "the eiffel tower is in rome": [92.0, 32.0, 16.0, 16.0, 0.0],
        })
        pipeline = make_pipeline([verifier] * 3, embedder=embedder)

        await pipeline.check("The Eiffel Tower is in Berlin")
        result = await pipeline.check("The Eiffel Tower is in Rome")

        assert verifier.calls == 6
        assert result.from_cache is False

    async def test_missing_embedding_still_caches_exactly(self, make_pipeline, fake_verifier):
        cache = TwoTierCache()
        pipeline = make_pipeline([fake_verifier()] * 3, embedder=FakeEmbeddingProvider(), cache=cache)

        await pipeline.check("Bananas are berries")

        assert cache.stats() == {"exact_entries": 1, "semantic_entries": 0, "source_entries": 0}

    async def test_corrupted_entry_is_treated_as_miss(self, make_pipeline, fake_verifier):
        cache = TwoTierCache()
        verifier = fake_verifier("true", 90)
        pipeline = make_pipeline([verifier] * 3, cache=cache)
        await cache.exact.put(fingerprint("Bananas are berries"), {"mode": "nonsense"})

        result = await pipeline.check("Bananas are berries")

        assert result.from_cache is False
        assert verifier.calls == 3
        hit = await cache.get_exact(fingerprint("Bananas are berries"))
        assert hit.payload["score"] == 100

    async def test_no_signal_result_is_cached(self, make_pipeline, fake_verifier):
        broken = fake_verifier(error=ConnectionError("offline"))
        cache = TwoTierCache()
        pipeline = make_pipeline([broken], [broken], [broken], cache=cache)

        await pipeline.check("Lightning never strikes twice")
        assert cache.stats()["exact_entries"] == 1

    async def test_stats_and_clear(self, make_pipeline, fake_verifier):
        pipeline = make_pipeline([fake_verifier()] * 3, embedder=FakeEmbeddingProvider(default=[1.0, 0.0]))
        await pipeline.check("Bananas are berries")

        assert pipeline.cache_stats() == {
            "exact_entries": 1, "semantic_entries": 1, "source_entries": 0, "embedding_memo_entries": 1
        }
        cleared = await pipeline.clear_caches()
        assert cleared == {"exact": 1, "semantic": 1, "sources": 0, "embeddings": 1}


@pytest.mark.asyncio
class TestPipelineSources:
    """Source search runs alongside the tiers."""

    async def test_sources_are_attached(self, make_pipeline, fake_verifier):
        provider = FakeSearchProvider("google", [{"title": "NASA", "url": "https://nasa.gov", "snippet": "..."}])
        pipeline = make_pipeline([fake_verifier()] * 3, search_providers=[provider])

        result = await pipeline.check("The Sun is a star")

        assert result.source_provider == "google"
        assert result.sources[0].url == "https://nasa.gov"

    async def test_slow_search_times_out_without_failing(self, make_pipeline, fake_verifier):
        provider = FakeSearchProvider("google", [{"url": "https://x"}], delay=5.0)
        pipeline = make_pipeline([fake_verifier()] * 3, search_providers=[provider])
        pipeline.sources.config = SearchConfig(DEADLINE_SECONDS=0.05)

        result = await pipeline.check("The Sun is a star")

        assert result.source_provider == "timeout"
        assert result.sources == []
        assert result.score == 100

    async def test_repeat_claim_reuses_cached_sources(self, make_pipeline, fake_verifier):
        provider = FakeSearchProvider("google", [{"title": "NASA", "url": "https://nasa.gov", "snippet": "..."}])
        cache = TwoTierCache()
        pipeline = make_pipeline([fake_verifier()] * 3, search_providers=[provider], cache=cache)

        await pipeline.check("The Sun is a star")
        await cache.exact.clear()
        result = await pipeline.check("The Sun is a star")

        assert provider.calls == 1
        assert result.from_cache is False
        assert result.source_provider == "google"
        assert result.sources[0].url == "https://nasa.gov"
        assert pipeline.cache_stats()["source_entries"] == 1

    async def test_empty_search_is_not_cached(self, make_pipeline, fake_verifier):
        provider = FakeSearchProvider("google", [])
        cache = TwoTierCache()
        pipeline = make_pipeline([fake_verifier()] * 3, search_providers=[provider], cache=cache)

        await pipeline.check("The Sun is a star")

        assert cache.stats()["source_entries"] == 0


@pytest.mark.asyncio
class TestPipelineEmbeddingLatency:
    """A slow or failing embedder never holds up verification or the response."""

    async def test_slow_null_embedder_is_called_once_and_bounded(self, make_pipeline, fake_verifier):
        embedder = FakeEmbeddingProvider(default=None, delay=1.0)
        pipeline = make_pipeline([fake_verifier()] * 3, embedder=embedder, embedding_deadline=0.05)

        result = await pipeline.check("Bananas are berries")

        assert embedder.calls == 1
        assert result.score == 100
        assert result.latency.cache_lookup_ms < 500
        assert result.latency.total_ms < 500
        await pipeline.clear_caches()

    async def test_late_embedding_is_written_to_semantic_cache(self, make_pipeline, fake_verifier):
        embedder = FakeEmbeddingProvider(default=[1.0, 0.0], delay=0.2)
        cache = TwoTierCache()
        pipeline = make_pipeline([fake_verifier()] * 3, embedder=embedder, cache=cache, embedding_deadline=0.01)

        result = await pipeline.check("Bananas are berries")
        assert result.latency.total_ms < 200
        assert cache.stats()["semantic_entries"] == 0

        await asyncio.gather(*pipeline._pending_writes)
        assert embedder.calls == 1
        assert cache.stats()["semantic_entries"] == 1

    async def test_clear_discards_pending_semantic_writes(self, make_pipeline, fake_verifier):
        embedder = FakeEmbeddingProvider(default=[1.0, 0.0], delay=0.2)
        cache = TwoTierCache()
        pipeline = make_pipeline([fake_verifier()] * 3, embedder=embedder, cache=cache, embedding_deadline=0.01)

        await pipeline.check("Bananas are berries")
        await pipeline.clear_caches()
        await asyncio.sleep(0.3)

        assert cache.stats()["semantic_entries"] == 0
