"""Vector store loader — delimited table to Population.

Table layout
------------
row 1      : identifier column name, then D feature column names
rows 2..N  : identifier, then D numeric fields; the sentinel token
             (``"-1"`` by default) marks a missing observation

The load is atomic: any malformed row raises FormatError and no
Population is returned.
"""

from __future__ import annotations

import csv
import io
import logging
import math
import os
from typing import IO, Iterable, List, Sequence, Tuple, Union

import numpy as np

from .errors import FormatError
from .types import MISSING, MISSING_TOKEN, Population

logger = logging.getLogger(__name__)

Source = Union[str, "os.PathLike[str]", IO[str]]


def parse_value(token: str, missing_token: str = MISSING_TOKEN) -> float:
    """Parse one feature field.

    The sentinel must match exactly after trimming whitespace; anything
    else is parsed as a float or rejected with ValueError.
    """
    stripped = token.strip()
    if stripped == missing_token:
        return MISSING
    if "_" in stripped:
        raise ValueError(f"digit separators not allowed in {token!r}")
    value = float(stripped)
    if not math.isfinite(value):
        raise ValueError(f"non-finite value {token!r}")
    return value


def _parse_rows(
    rows: Iterable[Sequence[str]],
    missing_token: str,
) -> Population:
    it = iter(enumerate(rows, start=1))

    header: List[str] = []
    for line, row in it:
        header = [h.strip() for h in row]
        break
    if not header or not any(header):
        raise FormatError("missing or empty header row", line=1)
    if len(header) < 2:
        raise FormatError("header names no feature columns", line=1)

    width = len(header)
    logger.debug("Table header contains %d feature columns", width - 1)

    records: List[Tuple[str, np.ndarray]] = []
    for line, row in it:
        if not row or (len(row) == 1 and not row[0].strip()):
            continue
        if len(row) != width:
            raise FormatError(
                f"expected {width} fields, got {len(row)}", line=line
            )
        values = np.empty(width - 1, dtype=np.float64)
        for col, token in enumerate(row[1:]):
            try:
                values[col] = parse_value(token, missing_token)
            except ValueError:
                raise FormatError(
                    f"invalid number {token!r} in column {header[col + 1]!r}",
                    line=line,
                ) from None
        records.append((row[0], values))

    population = Population.from_rows(header[1:], records, id_column=header[0])
    logger.info(
        "Loaded population: %d entities x %d features",
        len(population),
        population.dim,
    )
    return population


def load(
    source: Source,
    *,
    delimiter: str = ",",
    missing_token: str = MISSING_TOKEN,
) -> Population:
    """Load a Population from a delimited table.

    Parameters
    ----------
    source        : filesystem path or an open text stream.
    delimiter     : field separator (default ``","``).
    missing_token : token read as MISSING (default ``"-1"``).

    Returns
    -------
    Population in table order.

    Raises
    ------
    FormatError — header absent or empty, a row of the wrong width, or a
    feature field that is neither the sentinel nor a finite float literal.
    """
    try:
        if isinstance(source, (str, os.PathLike)):
            with open(source, newline="", encoding="utf-8") as fh:
                return _parse_rows(csv.reader(fh, delimiter=delimiter), missing_token)
        return _parse_rows(csv.reader(source, delimiter=delimiter), missing_token)
    except (UnicodeDecodeError, csv.Error) as exc:
        raise FormatError(f"unreadable table: {exc}") from exc


def loads(
    text: str,
    *,
    delimiter: str = ",",
    missing_token: str = MISSING_TOKEN,
) -> Population:
    """Load a Population from an in-memory table string."""
    return load(io.StringIO(text), delimiter=delimiter, missing_token=missing_token)
