from typing import Optional

from lora.config import LABEL_THRESHOLDS
from lora.config.constants import LabelThresholds
from lora.models.verdicts import VerdictLabel


def verdict_label(score: Optional[int], thresholds: LabelThresholds = LABEL_THRESHOLDS) -> VerdictLabel:
    """Presentation label for a final score."""
    if score is None:
        return "UNKNOWN"
    if score >= thresholds.TRUE:
        return "TRUE"
    if score >= thresholds.MIXED:
        return "MIXED"
    return "FALSE"
