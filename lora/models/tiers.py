from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from .results import ModelScore
from .verdicts import VerifierResponse

VerifierFn = Callable[[str], Awaitable[Dict[str, Any]]]


class TierName(IntEnum):
    """Escalation order: FAST < MID < FULL."""
    FAST = 1
    MID = 2
    FULL = 3

    @property
    def key(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class VerifierDescriptor:
    name: str
    check: VerifierFn
    weight: float = 1.0


@dataclass(frozen=True)
class Tier:
    name: TierName
    timeout: float
    verifiers: Tuple[VerifierDescriptor, ...] = ()


@dataclass
class TierResult:
    tier: TierName
    score: Optional[int]
    confidence: float
    agreement: bool
    responses: List[VerifierResponse] = field(default_factory=list)
    breakdown: List[ModelScore] = field(default_factory=list)
    dropped: List[str] = field(default_factory=list)
    latency_ms: float = 0.0
