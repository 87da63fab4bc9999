import asyncio
import time
from typing import List, Optional

from lora.config import SEARCH_CONFIG, logger
from lora.config.constants import SearchConfig
from lora.exceptions import APIException
from lora.models.results import Source, SourceSearchResult
from lora.api.search import SearchProvider


class SourceSearchService:
    """
    Tries each configured provider in order and keeps the first non-empty
    answer. The whole chain races one deadline; losing the race yields an
    empty result tagged ``provider="timeout"``. Never raises.
    """

    def __init__(self, providers: List[SearchProvider], config: SearchConfig = SEARCH_CONFIG):
        self.providers = providers
        self.config = config

    async def _search_chain(self, claim: str) -> SourceSearchResult:
        started = time.perf_counter()
        errors = []
        for provider in self.providers:
            if not provider.configured:
                continue
            try:
                found = await provider.search(claim, self.config.MAX_SOURCES)
            except APIException as e:
                logger.warning(f"Source search via {provider.name} failed: {e.message}")
                errors.append(provider.name)
                continue
            if found:
                return SourceSearchResult(
                    sources=[Source(**s) for s in found[: self.config.MAX_SOURCES]],
                    provider=provider.name,
                    search_time_ms=round((time.perf_counter() - started) * 1000, 1),
                )
        return SourceSearchResult(
            provider="none",
            search_time_ms=round((time.perf_counter() - started) * 1000, 1),
            error="All search providers failed" if errors else "No search provider returned sources",
        )

    async def search(self, claim: str, deadline: Optional[float] = None) -> SourceSearchResult:
        deadline = self.config.DEADLINE_SECONDS if deadline is None else deadline
        try:
            return await asyncio.wait_for(self._search_chain(claim), timeout=deadline)
        except asyncio.TimeoutError:
            logger.info(f"Source search exceeded {deadline}s deadline")
            return SourceSearchResult(provider="timeout", search_time_ms=deadline * 1000)
        except Exception:
            logger.exception("Unexpected error in source search")
            return SourceSearchResult(provider="none", error="search failed")
