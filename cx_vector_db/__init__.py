"""cx-vector-db — similarity search over user behavior vectors.

Loads a delimited table of per-user service metrics and answers
"most similar user" and "users above a similarity threshold" queries
with a cosine similarity that ignores missing observations.

Public API::

    from cx_vector_db import load, SimilarityEngine, similarity
"""

from .errors import CxVectorDBError, DimensionMismatch, FormatError, InsufficientData
from .types import MISSING, Entity, MatchResult, MatchSet, Population, SearchResult
from .similarity import similarity, similarity_to_all
from .loader import load, loads
from .engine import (
    SimilarityEngine,
    find_similar,
    matches_above_threshold,
    nearest_neighbor,
)

__version__ = "0.1.0"
__all__ = [
    "MISSING",
    "CxVectorDBError",
    "DimensionMismatch",
    "Entity",
    "FormatError",
    "InsufficientData",
    "MatchResult",
    "MatchSet",
    "Population",
    "SearchResult",
    "SimilarityEngine",
    "find_similar",
    "load",
    "loads",
    "matches_above_threshold",
    "nearest_neighbor",
    "similarity",
    "similarity_to_all",
]
