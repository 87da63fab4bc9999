from dataclasses import dataclass
from typing import Literal, TypedDict

Verdict = Literal[
    "true",
    "mostly_true",
    "partially_true",
    "mixed",
    "unverifiable",
    "mostly_false",
    "false",
]

VerdictLabel = Literal["TRUE", "MIXED", "FALSE", "UNKNOWN"]


class RawVerdict(TypedDict, total=False):
    """What a pluggable verifier returns before it is stamped with latency."""
    verdict: str
    confidence: int
    explanation: str


@dataclass(frozen=True)
class VerifierResponse:
    verifier: str
    verdict: str
    confidence: int
    explanation: str = ""
    latency_ms: float = 0.0
    timed_out: bool = False
    weight: float = 1.0

    @classmethod
    def timed_out_for(
        cls,
        verifier: str,
        latency_ms: float,
        weight: float = 1.0,
        verdict: str = "unverifiable",
        confidence: int = 25,
    ) -> "VerifierResponse":
        return cls(
            verifier=verifier,
            verdict=verdict,
            confidence=confidence,
            explanation="Verifier did not answer before the tier timeout.",
            latency_ms=latency_ms,
            timed_out=True,
            weight=weight,
        )
