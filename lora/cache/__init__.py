from .stores import ExactStore, SemanticStore
from .service import TwoTierCache

__all__ = [
    "ExactStore",
    "SemanticStore",
    "TwoTierCache",
]
