"""SimilarityEngine — brute-force neighbour queries over a Population.

Every query scans the whole Population against one target in a single
O(n·D) pass; nothing is pre-indexed.  The target is addressed by its
index in Population order and is always excluded from its own results,
even when another entity shares its identifier or vector.

Public API
----------
SimilarityEngine
    .scores()                  — raw score per entity (NaN at the target)
    .nearest_neighbor()        — best match, first-seen wins ties
    .matches_above_threshold() — every match with score >= threshold
    .find_similar()            — both of the above from one scan
    .index_of()                — first index carrying an identifier
    .stats()                   — session statistics dict

The module-level functions wrap a one-shot engine for callers that only
hold a Population.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import numpy as np

from .errors import InsufficientData
from .similarity import similarity_to_all
from .types import MISSING, MatchResult, MatchSet, Population, SearchResult

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD: float = 0.8


class SimilarityEngine:
    """Query session over one read-only Population.

    Parameters
    ----------
    population : the loaded Population; never mutated by the engine.
    """

    def __init__(self, population: Population) -> None:
        self.population: Population = population
        logger.info(
            "SimilarityEngine ready: %d entities, dim=%d",
            len(population),
            population.dim,
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _check_target(self, target: int) -> int:
        n = len(self.population)
        if not 0 <= target < n:
            raise IndexError(f"target index {target} out of range [0, {n}).")
        return target

    def _require_pair(self) -> None:
        if len(self.population) < 2:
            raise InsufficientData(len(self.population))

    def _best(self, scores: np.ndarray, target: int) -> MatchResult:
        # argmax returns the lowest index among equal maxima.
        masked = scores.copy()
        masked[target] = -np.inf
        idx = int(np.argmax(masked))
        return MatchResult(self.population[idx].entity_id, float(scores[idx]))

    def _above(self, scores: np.ndarray, target: int, threshold: float) -> MatchSet:
        ids = self.population.ids
        return [
            MatchResult(ids[i], float(scores[i]))
            for i in np.flatnonzero(scores >= threshold)
            if i != target
        ]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def scores(self, target: int) -> np.ndarray:
        """Similarity of every entity to ``target``; the target's own slot is NaN."""
        self._check_target(target)
        matrix = self.population.matrix
        out = similarity_to_all(matrix[target], matrix)
        out[target] = np.nan
        return out

    def nearest_neighbor(self, target: int) -> MatchResult:
        """Most similar other entity to ``target``.

        Raises
        ------
        InsufficientData — fewer than two entities.
        IndexError       — ``target`` outside the Population.
        """
        self._require_pair()
        scores = self.scores(target)
        best = self._best(scores, target)
        logger.debug("nearest_neighbor(%d) -> %s", target, best)
        return best

    def matches_above_threshold(self, target: int, threshold: float) -> MatchSet:
        """Every other entity whose score to ``target`` is >= ``threshold``, in scan order."""
        scores = self.scores(target)
        matches = self._above(scores, target, threshold)
        logger.debug(
            "matches_above_threshold(%d, %.4f) -> %d matches",
            target,
            threshold,
            len(matches),
        )
        return matches

    def find_similar(self, target: int, threshold: float) -> SearchResult:
        """Best match and threshold matches from a single scan."""
        self._require_pair()
        scores = self.scores(target)
        return SearchResult(
            best=self._best(scores, target),
            matches=self._above(scores, target, threshold),
            threshold=threshold,
        )

    # ------------------------------------------------------------------
    # Lookup / stats
    # ------------------------------------------------------------------

    def index_of(self, entity_id: str) -> int:
        """Index of the first entity carrying ``entity_id``."""
        for pos, ent in enumerate(self.population):
            if ent.entity_id == entity_id:
                return pos
        raise KeyError(f"Entity {entity_id!r} not found.")

    def stats(self) -> Dict[str, Any]:
        matrix = self.population.matrix
        missing = int(np.count_nonzero(matrix == MISSING)) if matrix.size else 0
        return {
            "entity_count": len(self.population),
            "dim": self.population.dim,
            "unique_ids": len(set(self.population.ids)),
            "missing_values": missing,
            "missing_ratio": missing / matrix.size if matrix.size else 0.0,
        }

    def __repr__(self) -> str:
        s = self.stats()
        return f"SimilarityEngine(entities={s['entity_count']} dim={s['dim']})"


# ---------------------------------------------------------------------------
# Functional API
# ---------------------------------------------------------------------------


def nearest_neighbor(population: Population, target: int) -> MatchResult:
    return SimilarityEngine(population).nearest_neighbor(target)


def matches_above_threshold(
    population: Population, target: int, threshold: float
) -> MatchSet:
    return SimilarityEngine(population).matches_above_threshold(target, threshold)


def find_similar(
    population: Population, target: int, threshold: Optional[float] = None
) -> SearchResult:
    """Combined best-match and threshold query.

    ``threshold`` defaults to 0.8, the reference workflow's cut-off.
    """
    if threshold is None:
        threshold = DEFAULT_THRESHOLD
    return SimilarityEngine(population).find_similar(target, threshold)

