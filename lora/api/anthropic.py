from typing import Any, Dict, Optional

from lora.config import RATE_LIMITS_PER_SECOND, settings
from lora.api.base import BaseVerifier
from lora.api.prompts import VERIFIER_SYSTEM_PROMPT, verifier_user_prompt


class AnthropicVerifier(BaseVerifier):
    provider = "anthropic"
    rate_limit_per_second = RATE_LIMITS_PER_SECOND.ANTHROPIC

    def __init__(self, name: str, model: Optional[str] = None, api_key: Optional[str] = None, **kwargs):
        super().__init__(
            name,
            model or settings.ANTHROPIC_MODEL,
            api_key if api_key is not None else settings.ANTHROPIC_API_KEY,
            **kwargs
        )

    def endpoint(self) -> str:
        return f"{settings.ANTHROPIC_BASE_URL}/messages"

    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": settings.ANTHROPIC_VERSION,
        }

    def body(self, claim: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": 300,
            "temperature": 0,
            "system": VERIFIER_SYSTEM_PROMPT,
            "messages": [{"role": "user", "content": verifier_user_prompt(claim)}],
        }

    def extract_text(self, data: Dict[str, Any]) -> str:
        blocks = data.get("content") if isinstance(data, dict) else None
        if not isinstance(blocks, list):
            return ""
        return "".join(b.get("text", "") for b in blocks if isinstance(b, dict) and b.get("type") == "text")
