from typing import Any, Dict, Optional

from lora.config import RATE_LIMITS_PER_SECOND, logger, settings
from lora.api.base import BaseVerifier
from lora.api.prompts import VERIFIER_SYSTEM_PROMPT, verifier_user_prompt


def gemini_text(data: Dict[str, Any]) -> str:
    text = ""
    try:
        if isinstance(data, dict):
            candidates = data.get("candidates", [])
            if isinstance(candidates, list) and candidates:
                content = candidates[0].get("content", {})
                parts = content.get("parts", [])
                if isinstance(parts, list) and parts:
                    text = parts[0].get("text", "")
    except (AttributeError, IndexError, TypeError) as e:
        logger.error("Error parsing Gemini response structure: %s. Response: %s", e, data)
    return text or ""


class GeminiVerifier(BaseVerifier):
    provider = "gemini"
    rate_limit_per_second = RATE_LIMITS_PER_SECOND.GEMINI

    def __init__(self, name: str, model: str, api_key: Optional[str] = None, **kwargs):
        super().__init__(name, model, api_key if api_key is not None else settings.GOOGLE_API_KEY, **kwargs)

    def endpoint(self) -> str:
        return settings.gemini_endpoint(self.model)

    def headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "x-goog-api-key": self.api_key}

    def body(self, claim: str) -> Dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": VERIFIER_SYSTEM_PROMPT}]},
            "contents": [{"role": "user", "parts": [{"text": verifier_user_prompt(claim)}]}],
            "generationConfig": {"temperature": 0, "responseMimeType": "application/json"},
        }

    def extract_text(self, data: Dict[str, Any]) -> str:
        return gemini_text(data)
