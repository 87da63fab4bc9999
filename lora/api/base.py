from typing import Any, Dict, Optional
import httpx

from lora.config import API_TIMEOUTS, logger
from lora.exceptions import RateLimitException, VerifierException
from lora.models.verdicts import RawVerdict
from lora.utils.circuit_breaker import CircuitBreaker
from lora.utils.parsing import coerce_confidence, extract_json_block, normalize_verdict, parse_numeric_value
from lora.utils.rate_limiter import RateLimiter, get_rate_limiter


def parse_verdict(text: str, verifier: str) -> RawVerdict:
    """Pull ``{verdict, confidence, explanation}`` out of a model's reply."""
    data = extract_json_block(text)
    if not isinstance(data, dict) or "verdict" not in data:
        raise VerifierException(verifier, "response did not contain a verdict object")
    return RawVerdict(
        verdict=normalize_verdict(data.get("verdict")),
        confidence=coerce_confidence(data.get("confidence")),
        explanation=str(data.get("explanation") or ""),
    )


async def post_json(
    service: str,
    url: str,
    headers: Dict[str, str],
    body: Dict[str, Any],
    timeout: float,
    error_cls=VerifierException,
) -> Dict[str, Any]:
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            r = await client.post(url, headers=headers, json=body)
            r.raise_for_status()
            return r.json()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        if status == 429:
            retry_after = parse_numeric_value(e.response.headers.get("retry-after")) or 1.0
            raise RateLimitException(service, retry_after)
        logger.error("%s HTTP error %s: %s", service, status, e.response.text[:200])
        raise error_cls(service, f"HTTP {status}")
    except httpx.RequestError as e:
        logger.error("%s request error: %s", service, str(e))
        raise error_cls(service, f"Request failed: {str(e)}")
    except ValueError:
        raise error_cls(service, "invalid JSON body")


class BaseVerifier:
    """
    One external verification service. Instances are the pluggable
    ``check(claim) -> {verdict, confidence, explanation}`` callables the
    tier scheduler races against tier timeouts.

    A verifier never retries; repeated failures open its circuit breaker.
    """

    provider = "base"
    rate_limit_per_second = 10.0

    def __init__(
        self,
        name: str,
        model: str,
        api_key: Optional[str],
        timeout: float = API_TIMEOUTS.VERIFIER,
        breaker: Optional[CircuitBreaker] = None,
        limiter: Optional[RateLimiter] = None,
    ):
        self.name = name
        self.model = model
        self.api_key = api_key
        self.timeout = timeout
        self.breaker = breaker or CircuitBreaker(name=name)
        self.limiter = limiter or get_rate_limiter(self.provider.upper(), self.rate_limit_per_second)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, model={self.model!r})"

    async def __call__(self, claim: str) -> RawVerdict:
        if not self.api_key:
            raise VerifierException(self.name, "API key not configured", recoverable=False)
        return await self.breaker.call(self._check, claim)

    async def _check(self, claim: str) -> RawVerdict:
        await self.limiter.acquire()
        data = await post_json(self.name, self.endpoint(), self.headers(), self.body(claim), self.timeout)
        text = self.extract_text(data)
        if not text:
            raise VerifierException(self.name, "empty completion")
        return parse_verdict(text, self.name)

    def endpoint(self) -> str:
        raise NotImplementedError

    def headers(self) -> Dict[str, str]:
        raise NotImplementedError

    def body(self, claim: str) -> Dict[str, Any]:
        raise NotImplementedError

    def extract_text(self, data: Dict[str, Any]) -> str:
        raise NotImplementedError


def chat_completion_text(data: Dict[str, Any]) -> str:
    """Text of the first choice of an OpenAI-compatible chat completion."""
    try:
        return data["choices"][0]["message"]["content"] or ""
    except (KeyError, IndexError, TypeError):
        return ""
