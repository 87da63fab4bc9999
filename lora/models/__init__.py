from .claims import Claim, PersonalCheck, CheckRequest
from .verdicts import Verdict, VerdictLabel, RawVerdict, VerifierResponse
from .tiers import TierName, VerifierDescriptor, VerifierFn, Tier, TierResult
from .results import (
    Source,
    SourceSearchResult,
    ModelScore,
    LatencyBreakdown,
    UsedVerifiers,
    PipelineInfo,
    PipelineResult,
)
from .cache import CacheEntry, CacheLookup, CacheStats, CacheType

__all__ = [
    "Claim",
    "PersonalCheck",
    "CheckRequest",

    "Verdict",
    "VerdictLabel",
    "RawVerdict",
    "VerifierResponse",

    "TierName",
    "VerifierDescriptor",
    "VerifierFn",
    "Tier",
    "TierResult",

    "Source",
    "SourceSearchResult",
    "ModelScore",
    "LatencyBreakdown",
    "UsedVerifiers",
    "PipelineInfo",
    "PipelineResult",

    "CacheEntry",
    "CacheLookup",
    "CacheStats",
    "CacheType",
]
