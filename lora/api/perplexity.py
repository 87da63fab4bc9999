from typing import Any, Dict, Optional

from lora.config import RATE_LIMITS_PER_SECOND, settings
from lora.api.base import BaseVerifier, chat_completion_text
from lora.api.prompts import VERIFIER_SYSTEM_PROMPT, verifier_user_prompt


class PerplexityVerifier(BaseVerifier):
    """Search-grounded verifier speaking the OpenAI chat completion protocol."""

    provider = "perplexity"
    rate_limit_per_second = RATE_LIMITS_PER_SECOND.PERPLEXITY

    def __init__(self, name: str, model: str, api_key: Optional[str] = None, **kwargs):
        super().__init__(name, model, api_key if api_key is not None else settings.PERPLEXITY_API_KEY, **kwargs)

    def endpoint(self) -> str:
        return f"{settings.PERPLEXITY_BASE_URL}/chat/completions"

    def headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "Authorization": f"Bearer {self.api_key}"}

    def body(self, claim: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": VERIFIER_SYSTEM_PROMPT},
                {"role": "user", "content": verifier_user_prompt(claim)},
            ],
            "temperature": 0.1,
            "max_tokens": 300,
        }

    def extract_text(self, data: Dict[str, Any]) -> str:
        return chat_completion_text(data)
