from typing import List, Optional

from lora.config import API_TIMEOUTS, RATE_LIMITS_PER_SECOND, logger, settings
from lora.exceptions import EmbeddingException, RateLimitException
from lora.api.base import post_json
from lora.utils.rate_limiter import get_rate_limiter
from lora.utils.retry import async_retry

_gemini_limiter = get_rate_limiter("GEMINI", RATE_LIMITS_PER_SECOND.GEMINI)


def _embedding_error(service: str, reason: str) -> EmbeddingException:
    return EmbeddingException(f"{service}: {reason}")


class GeminiEmbeddingProvider:
    """Gemini ``embedContent``. ``embed`` never raises: failures return ``None``."""

    def __init__(self, api_key: Optional[str] = None, endpoint: Optional[str] = None, timeout: float = API_TIMEOUTS.EMBEDDING):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.endpoint = endpoint or settings.GEMINI_EMBED_ENDPOINT
        self.model = settings.EMBEDDING_MODEL_NAME
        self.timeout = timeout

    async def embed(self, text: str) -> Optional[List[float]]:
        if not self.api_key:
            logger.warning("GOOGLE_API_KEY not configured. Semantic cache disabled for this request.")
            return None
        if not text or not text.strip():
            return None
        try:
            return await self._request(text)
        except (EmbeddingException, RateLimitException) as e:
            logger.warning("Embedding unavailable: %s", e.message)
            return None

    @async_retry(max_attempts=2, exceptions=(EmbeddingException,), give_up_on=(RateLimitException,))
    async def _request(self, text: str) -> List[float]:
        await _gemini_limiter.acquire()
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}
        body = {
            "model": f"models/{self.model}",
            "content": {"parts": [{"text": text}]},
        }
        data = await post_json(
            "gemini_embed", self.endpoint, headers, body, self.timeout, error_cls=_embedding_error
        )
        values = (data.get("embedding") or {}).get("values") if isinstance(data, dict) else None
        if not values or not isinstance(values, list):
            raise EmbeddingException("response contained no embedding values")
        return [float(v) for v in values]
