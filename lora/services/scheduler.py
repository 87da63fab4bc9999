import asyncio
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

from lora.config import ESCALATION_CONFIG, SCORING_CONFIG, logger
from lora.config.constants import EscalationConfig, ScoringConfig
from lora.models.tiers import Tier, TierName, TierResult, VerifierDescriptor
from lora.models.verdicts import VerifierResponse
from lora.utils.parsing import coerce_confidence, normalize_verdict
from .consensus import ConsensusScorer


@dataclass(frozen=True)
class EscalationDecision:
    escalate: bool
    reason: str


@dataclass
class ScheduleOutcome:
    """Per-tier results of one delta-verification run. Skipped tiers are ``None``."""
    fast: TierResult
    mid: Optional[TierResult] = None
    full: Optional[TierResult] = None
    mid_decision: Optional[EscalationDecision] = None
    full_decision: Optional[EscalationDecision] = None

    def _by_tier(self, pick) -> Dict[str, List[str]]:
        tiers = {"fast": self.fast, "mid": self.mid, "full": self.full}
        return {key: pick(result) if result else [] for key, result in tiers.items()}

    @property
    def used(self) -> Dict[str, List[str]]:
        """Verifiers that answered, timed-out ones included."""
        return self._by_tier(lambda result: [r.verifier for r in result.responses])

    @property
    def dropped(self) -> Dict[str, List[str]]:
        return self._by_tier(lambda result: list(result.dropped))


class TierScheduler:
    """
    Runs FAST, then MID and FULL only when the escalation gates ask for them.

    Every verifier in a tier starts at once and races the tier timeout on
    its own. A late verifier becomes a low-confidence ``unverifiable``
    vote; a verifier that raises is dropped from the tier.
    """

    def __init__(
        self,
        tiers: Dict[TierName, Tier],
        scorer: Optional[ConsensusScorer] = None,
        escalation: EscalationConfig = ESCALATION_CONFIG,
        scoring: ScoringConfig = SCORING_CONFIG,
    ):
        missing = [t.name for t in TierName if t not in tiers]
        if missing:
            raise ValueError(f"Tier roster is missing: {', '.join(missing)}")
        self.tiers = tiers
        self.scorer = scorer or ConsensusScorer(scoring)
        self.escalation = escalation
        self.scoring = scoring

    async def _call_verifier(self, descriptor: VerifierDescriptor, claim: str, timeout: float) -> VerifierResponse:
        started = time.perf_counter()
        try:
            raw = await asyncio.wait_for(descriptor.check(claim), timeout=timeout)
        except asyncio.TimeoutError:
            elapsed = (time.perf_counter() - started) * 1000
            logger.warning(
                f"Verifier {descriptor.name} timed out after {timeout}s",
                extra={"verifier": descriptor.name, "timeout_s": timeout}
            )
            return VerifierResponse.timed_out_for(
                descriptor.name,
                elapsed,
                weight=descriptor.weight,
                verdict=self.scoring.TIMEOUT_VERDICT,
                confidence=self.scoring.TIMEOUT_CONFIDENCE,
            )
        elapsed = (time.perf_counter() - started) * 1000
        raw = raw or {}
        return VerifierResponse(
            verifier=descriptor.name,
            verdict=normalize_verdict(raw.get("verdict")),
            confidence=coerce_confidence(raw.get("confidence"), default=0),
            explanation=str(raw.get("explanation") or ""),
            latency_ms=elapsed,
            weight=descriptor.weight,
        )

    async def run_tier(self, tier: Tier, claim: str) -> TierResult:
        started = time.perf_counter()
        results = await asyncio.gather(
            *(self._call_verifier(d, claim, tier.timeout) for d in tier.verifiers),
            return_exceptions=True,
        )

        responses: List[VerifierResponse] = []
        dropped: List[str] = []
        for descriptor, res in zip(tier.verifiers, results):
            if isinstance(res, asyncio.CancelledError):
                raise res
            if isinstance(res, Exception):
                logger.error(
                    f"Verifier {descriptor.name} failed, dropping from {tier.name.name}: {res}",
                    extra={"verifier": descriptor.name, "tier": tier.name.name, "error": type(res).__name__}
                )
                dropped.append(descriptor.name)
            else:
                responses.append(res)

        latency_ms = (time.perf_counter() - started) * 1000
        result = self.scorer.score(tier.name, responses, latency_ms)
        result.dropped = dropped
        logger.info(
            f"{tier.name.name} tier: score={result.score} agreement={result.agreement} "
            f"confidence={result.confidence} responses={len(responses)} dropped={len(dropped)}",
            extra={"tier": tier.name.name, "latency_ms": round(latency_ms, 1)}
        )
        return result

    def should_run_mid(self, fast: TierResult) -> EscalationDecision:
        if fast.confidence >= self.escalation.SKIP_MID_THRESHOLD and fast.agreement:
            return EscalationDecision(False, f"FAST confident ({fast.confidence}) and in agreement")
        if not fast.agreement:
            return EscalationDecision(True, "FAST verifiers disagree")
        return EscalationDecision(True, f"FAST confidence {fast.confidence} below {self.escalation.SKIP_MID_THRESHOLD}")

    def should_run_full(self, fast: TierResult, mid: TierResult) -> EscalationDecision:
        combined = round(
            self.escalation.FAST_CONFIDENCE_WEIGHT * fast.confidence
            + self.escalation.MID_CONFIDENCE_WEIGHT * mid.confidence,
            4,
        )
        if combined < self.escalation.SKIP_FULL_THRESHOLD:
            return EscalationDecision(True, f"combined confidence {combined} below {self.escalation.SKIP_FULL_THRESHOLD}")
        if not fast.agreement or not mid.agreement:
            return EscalationDecision(True, "verifiers disagree within FAST or MID")
        if fast.score is not None and mid.score is not None:
            divergence = abs(fast.score - mid.score)
            if divergence > self.escalation.MAX_TIER_DIVERGENCE:
                return EscalationDecision(True, f"FAST and MID diverge by {divergence} points")
        return EscalationDecision(False, f"combined confidence {combined} with FAST and MID in agreement")

    async def run(self, claim: str) -> ScheduleOutcome:
        fast_tier = self.tiers[TierName.FAST]
        outcome = ScheduleOutcome(fast=await self.run_tier(fast_tier, claim))

        outcome.mid_decision = self.should_run_mid(outcome.fast)
        logger.info(
            f"Escalation to MID: {outcome.mid_decision.escalate} ({outcome.mid_decision.reason})",
            extra={"tier": "MID", "escalate": outcome.mid_decision.escalate}
        )
        if not outcome.mid_decision.escalate:
            return outcome

        mid_tier = self.tiers[TierName.MID]
        outcome.mid = await self.run_tier(mid_tier, claim)

        outcome.full_decision = self.should_run_full(outcome.fast, outcome.mid)
        logger.info(
            f"Escalation to FULL: {outcome.full_decision.escalate} ({outcome.full_decision.reason})",
            extra={"tier": "FULL", "escalate": outcome.full_decision.escalate}
        )
        if not outcome.full_decision.escalate:
            return outcome

        full_tier = self.tiers[TierName.FULL]
        outcome.full = await self.run_tier(full_tier, claim)
        return outcome
