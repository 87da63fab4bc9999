from .personal_filter import PersonalStatementFilter, detect_personal_statement
from .consensus import ConsensusScorer
from .scheduler import TierScheduler, ScheduleOutcome, EscalationDecision
from .merger import ResultMerger, MergedScore
from .labeling import verdict_label
from .embedding import EmbeddingService
from .sources import SourceSearchService
from .tiers import build_default_tiers
from .pipeline import VerificationPipeline, build_pipeline

__all__ = [
    "PersonalStatementFilter",
    "detect_personal_statement",
    "ConsensusScorer",
    "TierScheduler",
    "ScheduleOutcome",
    "EscalationDecision",
    "ResultMerger",
    "MergedScore",
    "verdict_label",
    "EmbeddingService",
    "SourceSearchService",
    "build_default_tiers",
    "VerificationPipeline",
    "build_pipeline",
]
