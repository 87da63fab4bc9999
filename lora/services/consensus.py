import math
from typing import List, Optional

from lora.config import SCORING_CONFIG
from lora.config.constants import ScoringConfig
from lora.models.results import ModelScore
from lora.models.tiers import TierName, TierResult
from lora.models.verdicts import VerifierResponse

TRUE_VERDICTS = frozenset({"true", "mostly_true"})
FALSE_VERDICTS = frozenset({"false", "mostly_false"})


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ConsensusScorer:
    """
    Folds one tier's verifier responses into a 0-100 truthfulness score.

    Each response contributes ``verdict_score * confidence/100`` weighted by
    ``confidence/100``. Responses with zero confidence carry no weight; a
    tier with no weight has no score. Two equally confident, opposite
    verdicts land near 50 with ``agreement`` false: the tier does not know.
    """

    def __init__(self, config: ScoringConfig = SCORING_CONFIG):
        self.config = config

    def verdict_score(self, verdict: Optional[str]) -> float:
        if not verdict:
            return self.config.DEFAULT_VERDICT_SCORE
        return self.config.VERDICT_SCORES.get(verdict, self.config.DEFAULT_VERDICT_SCORE)

    @staticmethod
    def coarse_bucket(verdict: Optional[str]) -> int:
        if verdict in TRUE_VERDICTS:
            return 100
        if verdict in FALSE_VERDICTS:
            return 0
        return 50

    def agreement(self, responses: List[VerifierResponse]) -> bool:
        if not responses:
            return False
        buckets = [self.coarse_bucket(r.verdict) for r in responses]
        return max(buckets) - min(buckets) <= self.config.AGREEMENT_SPREAD

    def confidence(self, agreement: bool, count: int) -> float:
        if count == 0:
            return 0.0
        base = self.config.AGREED_CONFIDENCE if agreement else self.config.DISAGREED_CONFIDENCE
        sample = min(1.0, count / self.config.FULL_SAMPLE_SIZE)
        return round(min(1.0, base * sample), 2)

    def score(self, tier: TierName, responses: List[VerifierResponse], latency_ms: float = 0.0) -> TierResult:
        weighted_sum = 0.0
        weight_total = 0.0
        breakdown = []

        for r in responses:
            base = self.verdict_score(r.verdict)
            certainty = max(0, min(100, r.confidence)) / 100
            weight = certainty * (r.weight if self.config.APPLY_VERIFIER_WEIGHTS else 1.0)
            weighted_sum += base * weight
            weight_total += weight
            breakdown.append(ModelScore(
                model=r.verifier,
                tier=tier.key,
                verdict=r.verdict,
                confidence=r.confidence,
                base_score=base,
                weighted_score=round(base * certainty, 4),
                weight=r.weight,
                timed_out=r.timed_out,
                latency_ms=round(r.latency_ms, 1),
            ))

        score = round_half_up(100 * weighted_sum / weight_total) if weight_total > 0 else None
        agreement = self.agreement(responses)
        return TierResult(
            tier=tier,
            score=score,
            confidence=self.confidence(agreement, len(responses)) if score is not None else 0.0,
            agreement=agreement,
            responses=list(responses),
            breakdown=breakdown,
            latency_ms=latency_ms,
        )
