"""Typed failures raised by cx-vector-db.

CxVectorDBError   — base class; a ValueError so callers can treat all bad
                    input uniformly.
FormatError       — malformed input table (header, row length, number parse).
DimensionMismatch — two vectors of unequal length were compared.
InsufficientData  — a neighbour query needs at least two entities.
"""

from __future__ import annotations

from typing import Optional


class CxVectorDBError(ValueError):
    """Base class for every error raised by this package."""


class FormatError(CxVectorDBError):
    """The input table could not be parsed into a Population."""

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class DimensionMismatch(CxVectorDBError):
    def __init__(self, len_a: int, len_b: int) -> None:
        self.len_a = len_a
        self.len_b = len_b
        super().__init__(f"Vector dim mismatch: {len_a} != {len_b}.")


class InsufficientData(CxVectorDBError):
    def __init__(self, size: int) -> None:
        self.size = size
        super().__init__(
            f"Neighbour query needs at least 2 entities, population has {size}."
        )
