"""Core record types for cx-vector-db.

Entity      — one row of the population: an identifier and its feature vector.
Population  — the ordered, immutable set of Entities plus the column header.
MatchResult — an identifier paired with a similarity score.
SearchResult — best match and threshold matches from a single scan.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np

from .errors import FormatError

MISSING: float = -1.0
"""In-band sentinel meaning "no observation for this feature"."""

MISSING_TOKEN: str = "-1"


def as_vector(values: Sequence[float]) -> np.ndarray:
    """Return ``values`` as a 1-D float64 feature vector."""
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError("Feature vector must be a 1-D array.")
    return arr


# ---------------------------------------------------------------------------
# Entity
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Entity:
    """One identifier and its feature vector.

    Schema
    ------
    entity_id : identifier taken verbatim from the first table column
    vector    : 1-D float64 array; MISSING marks absent observations
    """

    entity_id: str
    vector: np.ndarray

    def missing_count(self) -> int:
        return int(np.count_nonzero(self.vector == MISSING))

    def to_dict(self) -> Dict[str, Any]:
        return {"entity_id": self.entity_id, "vector": self.vector.tolist()}


# ---------------------------------------------------------------------------
# Population
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class Population:
    """Ordered collection of Entities sharing one header.

    Entity order is input order and defines index-based addressing for
    queries.  Identifiers are not required to be unique.

    Schema
    ------
    id_column : name of the identifier column
    header    : the D feature column names, in table order
    entities  : the Entities, in table order
    """

    id_column: str
    header: Tuple[str, ...]
    entities: Tuple[Entity, ...]
    _matrix: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "header", tuple(self.header))
        object.__setattr__(self, "entities", tuple(self.entities))
        dim = len(self.header)
        for pos, ent in enumerate(self.entities):
            if len(ent.vector) != dim:
                raise FormatError(
                    f"entity {ent.entity_id!r} at index {pos} has "
                    f"{len(ent.vector)} features, expected {dim}"
                )
        if self.entities:
            matrix = np.vstack([ent.vector for ent in self.entities])
        else:
            matrix = np.empty((0, dim), dtype=np.float64)
        matrix = matrix.astype(np.float64, copy=True)
        matrix.setflags(write=False)
        object.__setattr__(self, "_matrix", matrix)
        # Entities view rows of the frozen matrix.
        object.__setattr__(
            self,
            "entities",
            tuple(Entity(ent.entity_id, matrix[pos]) for pos, ent in enumerate(self.entities)),
        )

    # ------------------------------------------------------------------

    @classmethod
    def from_rows(
        cls,
        header: Sequence[str],
        rows: Sequence[Tuple[str, Sequence[float]]],
        id_column: str = "user_id",
    ) -> "Population":
        """Factory: build a Population from ``(entity_id, values)`` pairs."""
        return cls(
            id_column=id_column,
            header=tuple(header),
            entities=tuple(Entity(eid, as_vector(vals)) for eid, vals in rows),
        )

    @property
    def dim(self) -> int:
        return len(self.header)

    @property
    def ids(self) -> List[str]:
        return [ent.entity_id for ent in self.entities]

    @property
    def matrix(self) -> np.ndarray:
        """Read-only (n, D) array of all vectors, one row per entity."""
        return self._matrix

    def __len__(self) -> int:
        return len(self.entities)

    def __getitem__(self, index: int) -> Entity:
        return self.entities[index]

    def __iter__(self):
        return iter(self.entities)


# ---------------------------------------------------------------------------
# Query results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MatchResult:
    """An identifier and its similarity to the query target."""

    entity_id: str
    score: float

    def __str__(self) -> str:
        return f"{self.entity_id} ({self.score:.4f})"


MatchSet = List[MatchResult]


@dataclass(frozen=True)
class SearchResult:
    """Best match plus every match at or above the threshold."""

    best: MatchResult
    matches: MatchSet
    threshold: float
