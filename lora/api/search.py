from typing import Any, Dict, List, Optional
import re
import httpx

from lora.config import RATE_LIMITS_PER_SECOND, SEARCH_CONFIG, logger, settings
from lora.exceptions import RateLimitException, SearchException
from lora.api.base import chat_completion_text, post_json
from lora.api.prompts import SEARCH_SYSTEM_PROMPT, search_user_prompt
from lora.utils.parsing import extract_json_block
from lora.utils.rate_limiter import get_rate_limiter
from lora.utils.retry import async_retry

_URL_PATTERN = re.compile(r"https?://[^\s\])\"']+")


def _source(title: Any, url: Any, snippet: Any) -> Dict[str, str]:
    return {"title": str(title or url or ""), "url": str(url or ""), "snippet": str(snippet or "")}


async def _get_json(provider: str, url: str, params: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    try:
        async with httpx.AsyncClient(timeout=SEARCH_CONFIG.REQUEST_TIMEOUT) as client:
            r = await client.get(url, params=params, headers=headers or {})
            r.raise_for_status()
            return r.json()
    except httpx.HTTPStatusError as e:
        if e.response.status_code == 429:
            raise RateLimitException(provider, 1.0)
        logger.error("%s search HTTP error %s", provider, e.response.status_code)
        raise SearchException(provider, f"HTTP {e.response.status_code}")
    except httpx.RequestError as e:
        logger.error("%s search request error: %s", provider, str(e))
        raise SearchException(provider, f"Request failed: {str(e)}")
    except ValueError:
        raise SearchException(provider, "invalid JSON body")


class SearchProvider:
    name = "base"

    @property
    def configured(self) -> bool:
        return True

    async def search(self, query: str, max_results: int = SEARCH_CONFIG.MAX_SOURCES) -> List[Dict[str, str]]:
        raise NotImplementedError


class PerplexitySearch(SearchProvider):
    name = "perplexity"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.PERPLEXITY_API_KEY
        self.model = model or settings.PERPLEXITY_FAST_MODEL
        self._limiter = get_rate_limiter("PERPLEXITY", RATE_LIMITS_PER_SECOND.PERPLEXITY)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @async_retry(max_attempts=2, exceptions=(SearchException,), give_up_on=(RateLimitException,))
    async def search(self, query: str, max_results: int = SEARCH_CONFIG.MAX_SOURCES) -> List[Dict[str, str]]:
        await self._limiter.acquire()
        data = await post_json(
            self.name,
            f"{settings.PERPLEXITY_BASE_URL}/chat/completions",
            {"Content-Type": "application/json", "Authorization": f"Bearer {self.api_key}"},
            {
                "model": self.model,
                "messages": [
                    {"role": "system", "content": SEARCH_SYSTEM_PROMPT},
                    {"role": "user", "content": search_user_prompt(query)},
                ],
                "max_tokens": 1000,
                "temperature": 0.1,
            },
            SEARCH_CONFIG.REQUEST_TIMEOUT,
            error_cls=SearchException,
        )
        content = chat_completion_text(data)
        parsed = extract_json_block(content)
        if isinstance(parsed, dict) and isinstance(parsed.get("sources"), list):
            sources = [
                _source(s.get("title"), s.get("url"), s.get("snippet"))
                for s in parsed["sources"] if isinstance(s, dict) and s.get("url")
            ]
        else:
            urls = _URL_PATTERN.findall(content) or [c for c in data.get("citations", []) if isinstance(c, str)]
            sources = [_source(None, u, "") for u in urls]
        return sources[:max_results]


class GoogleSearch(SearchProvider):
    name = "google"
    endpoint = "https://www.googleapis.com/customsearch/v1"

    def __init__(self, api_key: Optional[str] = None, engine_id: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_SEARCH_API_KEY
        self.engine_id = engine_id if engine_id is not None else settings.GOOGLE_SEARCH_ENGINE_ID
        self._limiter = get_rate_limiter("GOOGLE_SEARCH", RATE_LIMITS_PER_SECOND.GOOGLE_SEARCH)

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.engine_id)

    @async_retry(max_attempts=2, exceptions=(SearchException,), give_up_on=(RateLimitException,))
    async def search(self, query: str, max_results: int = SEARCH_CONFIG.MAX_SOURCES) -> List[Dict[str, str]]:
        await self._limiter.acquire()
        data = await _get_json(
            self.name,
            self.endpoint,
            {"key": self.api_key, "cx": self.engine_id, "q": query, "num": max_results},
        )
        items = data.get("items", []) if isinstance(data, dict) else []
        return [_source(i.get("title"), i.get("link"), i.get("snippet")) for i in items[:max_results]]


class BingSearch(SearchProvider):
    name = "bing"
    endpoint = "https://api.bing.microsoft.com/v7.0/search"

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.BING_SEARCH_API_KEY
        self._limiter = get_rate_limiter("BING_SEARCH", RATE_LIMITS_PER_SECOND.BING_SEARCH)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @async_retry(max_attempts=2, exceptions=(SearchException,), give_up_on=(RateLimitException,))
    async def search(self, query: str, max_results: int = SEARCH_CONFIG.MAX_SOURCES) -> List[Dict[str, str]]:
        await self._limiter.acquire()
        data = await _get_json(
            self.name,
            self.endpoint,
            {"q": query, "count": max_results},
            headers={"Ocp-Apim-Subscription-Key": self.api_key},
        )
        pages = (data.get("webPages") or {}).get("value", []) if isinstance(data, dict) else []
        return [_source(p.get("name"), p.get("url"), p.get("snippet")) for p in pages[:max_results]]
