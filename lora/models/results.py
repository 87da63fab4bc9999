from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from .verdicts import VerdictLabel


class Source(BaseModel):
    title: str = ""
    url: str = ""
    snippet: str = ""


class SourceSearchResult(BaseModel):
    sources: List[Source] = Field(default_factory=list)
    provider: str = "none"
    search_time_ms: float = 0.0
    error: Optional[str] = None


class ModelScore(BaseModel):
    model: str
    tier: str
    verdict: str
    confidence: int
    base_score: float
    weighted_score: float
    weight: float = 1.0
    timed_out: bool = False
    latency_ms: float = 0.0


class LatencyBreakdown(BaseModel):
    personal_filter_ms: float = 0.0
    cache_lookup_ms: float = 0.0
    fast_phase_ms: float = 0.0
    mid_phase_ms: float = 0.0
    full_phase_ms: float = 0.0
    total_ms: float = 0.0


class UsedVerifiers(BaseModel):
    fast: List[str] = Field(default_factory=list)
    mid: List[str] = Field(default_factory=list)
    full: List[str] = Field(default_factory=list)


class PipelineInfo(BaseModel):
    skipped_mid: bool = False
    skipped_full: bool = False
    mid_reason: Optional[str] = None
    full_reason: Optional[str] = None
    source_tier: Optional[Literal["fast", "mid", "full"]] = None
    tier_scores: Dict[str, Optional[int]] = Field(default_factory=dict)
    dropped_verifiers: Dict[str, List[str]] = Field(default_factory=dict)
    cache_hit: bool = False


class PipelineResult(BaseModel):
    """The only type that leaves the pipeline and the only type that is cached."""
    mode: Literal["personal", "fact_check"]
    claim: str
    score: Optional[int] = None
    confidence: Optional[float] = None
    verdict: VerdictLabel = "UNKNOWN"
    agreement: Optional[bool] = None
    reason: Optional[str] = None
    detection_confidence: Optional[int] = None
    latency: LatencyBreakdown = Field(default_factory=LatencyBreakdown)
    used_verifiers: UsedVerifiers = Field(default_factory=UsedVerifiers)
    breakdown: List[ModelScore] = Field(default_factory=list)
    sources: List[Source] = Field(default_factory=list)
    source_provider: Optional[str] = None
    pipeline_info: PipelineInfo = Field(default_factory=PipelineInfo)
    from_cache: bool = False
    cache_type: Optional[Literal["exact", "semantic"]] = None
    similarity: Optional[float] = None
    matched_claim: Optional[str] = None
