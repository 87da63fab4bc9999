from dataclasses import dataclass
from typing import Optional

from lora.config import MERGE_CONFIG, logger
from lora.config.constants import MergeConfig
from lora.models.tiers import TierResult
from .consensus import round_half_up


@dataclass(frozen=True)
class MergedScore:
    score: Optional[int]
    confidence: Optional[float]
    agreement: Optional[bool]
    source_tier: Optional[str]


class ResultMerger:
    """FULL beats MID beats FAST. Lower tiers only fill in when higher ones have no score."""

    def __init__(self, config: MergeConfig = MERGE_CONFIG):
        self.config = config

    def merge(
        self,
        fast: Optional[TierResult],
        mid: Optional[TierResult] = None,
        full: Optional[TierResult] = None,
    ) -> MergedScore:
        fast_score = fast.score if fast is not None else None

        if full is not None and full.score is not None:
            if fast_score is not None:
                deviation = abs(full.score - fast_score)
                if deviation > self.config.FULL_DEVIATION_LOG_THRESHOLD:
                    logger.info(
                        f"FULL tier overrides FAST by {deviation} points ({fast_score} -> {full.score})",
                        extra={"fast_score": fast_score, "full_score": full.score, "deviation": deviation}
                    )
            return MergedScore(full.score, full.confidence, full.agreement, "full")

        if mid is not None and mid.score is not None:
            if fast_score is None:
                return MergedScore(mid.score, mid.confidence, mid.agreement, "mid")
            score = round_half_up(self.config.FAST_WEIGHT * fast_score + self.config.MID_WEIGHT * mid.score)
            confidence = round(
                self.config.FAST_WEIGHT * fast.confidence + self.config.MID_WEIGHT * mid.confidence, 2
            )
            return MergedScore(score, confidence, fast.agreement and mid.agreement, "mid")

        if fast_score is not None:
            return MergedScore(fast_score, fast.confidence, fast.agreement, "fast")

        return MergedScore(None, None, None, None)
