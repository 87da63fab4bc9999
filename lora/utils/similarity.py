from typing import List, Optional, Sequence, Tuple, TypeVar
from math import sqrt

T = TypeVar("T")

def cosine_similarity(vec1: Optional[Sequence[float]], vec2: Optional[Sequence[float]]) -> float:
    """Normalized dot product; missing, mismatched or zero-norm vectors score 0.0."""
    if not vec1 or not vec2 or len(vec1) != len(vec2):
        return 0.0

    dot_product = 0.0
    mag_vec1_sq = 0.0
    mag_vec2_sq = 0.0

    for v1, v2 in zip(vec1, vec2):
        dot_product += v1 * v2
        mag_vec1_sq += v1**2
        mag_vec2_sq += v2**2

    if mag_vec1_sq == 0 or mag_vec2_sq == 0:
        return 0.0

    return dot_product / (sqrt(mag_vec1_sq) * sqrt(mag_vec2_sq))


def most_similar(
    query: Sequence[float],
    candidates: List[Tuple[Sequence[float], T]],
    similarity=cosine_similarity,
) -> Tuple[Optional[T], float]:
    """
    Return the candidate whose vector is closest to ``query`` and its similarity.

    Ties keep the first candidate seen; ordering is by similarity only.
    """
    best_item: Optional[T] = None
    best_score = float("-inf")
    for vector, item in candidates:
        score = similarity(query, vector)
        if score > best_score:
            best_item, best_score = item, score
    if best_item is None:
        return None, 0.0
    return best_item, best_score
