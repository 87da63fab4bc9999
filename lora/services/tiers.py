from typing import Dict, Optional

from lora.config import TIER_TIMEOUTS, settings
from lora.config.constants import TierTimeouts
from lora.config.settings import Settings
from lora.api import AnthropicVerifier, GeminiVerifier, OpenAIVerifier, PerplexityVerifier
from lora.models.tiers import Tier, TierName, VerifierDescriptor


def build_default_tiers(
    timeouts: TierTimeouts = TIER_TIMEOUTS,
    current: Optional[Settings] = None,
) -> Dict[TierName, Tier]:
    """The production roster: cheap models first, strongest models last."""
    s = current or settings
    return {
        TierName.FAST: Tier(TierName.FAST, timeouts.FAST, (
            VerifierDescriptor("OpenAI-Fast", OpenAIVerifier("OpenAI-Fast", s.OPENAI_FAST_MODEL, s.OPENAI_API_KEY), 1.0),
            VerifierDescriptor("Google-Flash", GeminiVerifier("Google-Flash", s.GEMINI_FAST_MODEL, s.GOOGLE_API_KEY), 1.0),
            VerifierDescriptor("Perplexity-Light", PerplexityVerifier("Perplexity-Light", s.PERPLEXITY_FAST_MODEL, s.PERPLEXITY_API_KEY), 0.9),
        )),
        TierName.MID: Tier(TierName.MID, timeouts.MID, (
            VerifierDescriptor("OpenAI-Mid", OpenAIVerifier("OpenAI-Mid", s.OPENAI_MID_MODEL, s.OPENAI_API_KEY), 1.0),
            VerifierDescriptor("Google-Pro", GeminiVerifier("Google-Pro", s.GEMINI_MID_MODEL, s.GOOGLE_API_KEY), 1.0),
        )),
        TierName.FULL: Tier(TierName.FULL, timeouts.FULL, (
            VerifierDescriptor("OpenAI-Full", OpenAIVerifier("OpenAI-Full", s.OPENAI_FULL_MODEL, s.OPENAI_API_KEY), 1.2),
            VerifierDescriptor("Anthropic-Claude", AnthropicVerifier("Anthropic-Claude", s.ANTHROPIC_MODEL, s.ANTHROPIC_API_KEY), 1.3),
            VerifierDescriptor("Google-Full", GeminiVerifier("Google-Full", s.GEMINI_FULL_MODEL, s.GOOGLE_API_KEY), 1.1),
            VerifierDescriptor("Perplexity-Full", PerplexityVerifier("Perplexity-Full", s.PERPLEXITY_FULL_MODEL, s.PERPLEXITY_API_KEY), 1.0),
        )),
    }
