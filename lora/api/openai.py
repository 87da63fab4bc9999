from typing import Any, Dict, Optional

from lora.config import RATE_LIMITS_PER_SECOND, settings
from lora.api.base import BaseVerifier, chat_completion_text
from lora.api.prompts import VERIFIER_SYSTEM_PROMPT, verifier_user_prompt


class OpenAIVerifier(BaseVerifier):
    provider = "openai"
    rate_limit_per_second = RATE_LIMITS_PER_SECOND.OPENAI

    def __init__(self, name: str, model: str, api_key: Optional[str] = None, base_url: Optional[str] = None, **kwargs):
        super().__init__(name, model, api_key if api_key is not None else settings.OPENAI_API_KEY, **kwargs)
        self.base_url = base_url or settings.OPENAI_BASE_URL

    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "Authorization": f"Bearer {self.api_key}"}

    def body(self, claim: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": VERIFIER_SYSTEM_PROMPT},
                {"role": "user", "content": verifier_user_prompt(claim)},
            ],
            "temperature": 0,
            "max_tokens": 300,
            "response_format": {"type": "json_object"},
        }

    def extract_text(self, data: Dict[str, Any]) -> str:
        return chat_completion_text(data)
