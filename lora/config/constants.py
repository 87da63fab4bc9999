from dataclasses import dataclass, field
from typing import Dict


def _default_verdict_scores() -> Dict[str, float]:
    return {
        "true": 1.0,
        "mostly_true": 0.8,
        "partially_true": 0.5,
        "mixed": 0.5,
        "unverifiable": 0.35,
        "mostly_false": 0.2,
        "false": 0.0,
    }


@dataclass(frozen=True)
class TierTimeouts:
    """Per-tier ceilings, in seconds, for every verifier call in the tier."""
    FAST: float = 1.5
    MID: float = 3.5
    FULL: float = 10.0


@dataclass(frozen=True)
class EscalationConfig:
    SKIP_MID_THRESHOLD: float = 0.88
    SKIP_FULL_THRESHOLD: float = 0.90
    FAST_CONFIDENCE_WEIGHT: float = 0.4
    MID_CONFIDENCE_WEIGHT: float = 0.6
    MAX_TIER_DIVERGENCE: int = 20


@dataclass(frozen=True)
class ScoringConfig:
    VERDICT_SCORES: Dict[str, float] = field(default_factory=_default_verdict_scores)
    DEFAULT_VERDICT_SCORE: float = 0.35
    AGREEMENT_SPREAD: int = 30
    AGREED_CONFIDENCE: float = 0.92
    DISAGREED_CONFIDENCE: float = 0.75
    FULL_SAMPLE_SIZE: int = 3
    TIMEOUT_VERDICT: str = "unverifiable"
    TIMEOUT_CONFIDENCE: int = 25
    APPLY_VERIFIER_WEIGHTS: bool = False


@dataclass(frozen=True)
class MergeConfig:
    FAST_WEIGHT: float = 0.3
    MID_WEIGHT: float = 0.7
    FULL_DEVIATION_LOG_THRESHOLD: int = 15


@dataclass(frozen=True)
class LabelThresholds:
    TRUE: int = 70
    MIXED: int = 40


@dataclass(frozen=True)
class CacheConfig:
    EXACT_TTL_SECONDS: float = 600.0
    SEMANTIC_TTL_SECONDS: float = 86400.0
    SIMILARITY_THRESHOLD: float = 0.93
    REWORD_THRESHOLD: float = 0.98
    MAX_SEMANTIC_ENTRIES: int = 1000
    MAX_EXACT_ENTRIES: int = 5000
    SWEEP_INTERVAL_SECONDS: float = 300.0
    MAX_EMBEDDING_MEMO: int = 5000
    EMBEDDING_DEADLINE_SECONDS: float = 0.75
    SOURCE_TTL_SECONDS: float = 900.0
    MAX_SOURCE_ENTRIES: int = 5000


@dataclass(frozen=True)
class SearchConfig:
    DEADLINE_SECONDS: float = 3.0
    MAX_SOURCES: int = 5
    REQUEST_TIMEOUT: float = 5.0


@dataclass(frozen=True)
class PersonalFilterConfig:
    MIN_CLAIM_LENGTH: int = 10


@dataclass(frozen=True)
class APITimeouts:
    """Transport-level timeouts for external calls; tier timeouts still apply on top."""
    VERIFIER: float = 15.0
    EMBEDDING: float = 10.0


@dataclass(frozen=True)
class RateLimitsPerSecond:
    OPENAI: float = 20.0
    ANTHROPIC: float = 10.0
    GEMINI: float = 20.0
    PERPLEXITY: float = 10.0
    GOOGLE_SEARCH: float = 5.0
    BING_SEARCH: float = 5.0


TIER_TIMEOUTS = TierTimeouts()
ESCALATION_CONFIG = EscalationConfig()
SCORING_CONFIG = ScoringConfig()
MERGE_CONFIG = MergeConfig()
LABEL_THRESHOLDS = LabelThresholds()
CACHE_CONFIG = CacheConfig()
SEARCH_CONFIG = SearchConfig()
PERSONAL_FILTER_CONFIG = PersonalFilterConfig()
API_TIMEOUTS = APITimeouts()
RATE_LIMITS_PER_SECOND = RateLimitsPerSecond()
