from .parsing import extract_json_block, parse_numeric_value, coerce_confidence, normalize_verdict
from .similarity import cosine_similarity, most_similar
from .fingerprint import normalize_text, fingerprint

__all__ = [
    "extract_json_block",
    "parse_numeric_value",
    "coerce_confidence",
    "normalize_verdict",
    "cosine_similarity",
    "most_similar",
    "normalize_text",
    "fingerprint",
]
