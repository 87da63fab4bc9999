import logging

from .settings import Settings, settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("lora")

from .constants import (
    TIER_TIMEOUTS,
    ESCALATION_CONFIG,
    SCORING_CONFIG,
    MERGE_CONFIG,
    LABEL_THRESHOLDS,
    CACHE_CONFIG,
    SEARCH_CONFIG,
    PERSONAL_FILTER_CONFIG,
    API_TIMEOUTS,
    RATE_LIMITS_PER_SECOND,
)

PROVIDER_KEYS = [
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GOOGLE_API_KEY",
    "PERPLEXITY_API_KEY",
    "GOOGLE_SEARCH_API_KEY",
    "BING_SEARCH_API_KEY",
]

def check_api_keys_on_startup(current: Settings = None):
    """Log which provider keys are missing. Missing keys never block startup."""
    current = current or settings
    missing_keys = [key_name for key_name in PROVIDER_KEYS if not getattr(current, key_name, None)]

    if missing_keys:
        logger.warning(
            f"Missing API keys: {', '.join(missing_keys)}. Verifiers relying on them will be dropped."
        )
    else:
        logger.info("All provider API keys are configured.")
    return missing_keys

__all__ = [
    "logger",
    "settings",
    "Settings",
    "check_api_keys_on_startup",
    "TIER_TIMEOUTS",
    "ESCALATION_CONFIG",
    "SCORING_CONFIG",
    "MERGE_CONFIG",
    "LABEL_THRESHOLDS",
    "CACHE_CONFIG",
    "SEARCH_CONFIG",
    "PERSONAL_FILTER_CONFIG",
    "API_TIMEOUTS",
    "RATE_LIMITS_PER_SECOND",
]
