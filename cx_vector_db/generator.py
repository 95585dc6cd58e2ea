"""Synthetic service-metrics populations for cx-vector-db.

Each user touches ``n_services`` microservices.  Every service slot has a
type drawn once per population from SERVICE_DISTRIBUTION, and each type
contributes three metrics with their own uniform value ranges.  Column
names follow ``s{slot}_{metric}`` so the header reads the same for every
row.

All randomness flows through an explicit ``numpy.random.Generator``;
pass one built with a seed for reproducible output.
"""

from __future__ import annotations

import csv
import logging
import os
from enum import Enum
from typing import IO, List, Sequence, Tuple, Union

import numpy as np

from .types import MISSING, MISSING_TOKEN, Entity, Population

logger = logging.getLogger(__name__)


class ServiceType(Enum):
    """Service profiles; each value holds ``(label, ((metric, low, span), ...))``."""

    API_SERVER = (
        "API Server",
        (("http_resp", 50.0, 100.0), ("http_rate", 10.0, 50.0), ("http_err", 0.0, 5.0)),
    )
    API_WITH_DATABASE = (
        "API with Database",
        (("db_lat", 100.0, 150.0), ("db_rate", 5.0, 30.0), ("db_err", 0.0, 10.0)),
    )
    KAFKA_PRODUCER = (
        "Kafka Producer",
        (("msg_prod", 500.0, 1000.0), ("pub_lat", 50.0, 100.0), ("pub_fail", 0.0, 1.0)),
    )
    KAFKA_CONSUMER = (
        "Kafka Consumer",
        (("msg_cons", 600.0, 1200.0), ("proc_lat", 20.0, 80.0), ("cons_err", 0.0, 2.0)),
    )

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def metrics(self) -> List[str]:
        return [name for name, _, _ in self.value[1]]

    @property
    def ranges(self) -> List[Tuple[float, float]]:
        """``(low, high)`` per metric; values are drawn from ``[low, high)``."""
        return [(low, low + span) for _, low, span in self.value[1]]


SERVICE_DISTRIBUTION: Tuple[Tuple[ServiceType, float], ...] = (
    (ServiceType.API_SERVER, 0.4),
    (ServiceType.API_WITH_DATABASE, 0.4),
    (ServiceType.KAFKA_PRODUCER, 0.1),
    (ServiceType.KAFKA_CONSUMER, 0.1),
)

_TYPES = [t for t, _ in SERVICE_DISTRIBUTION]
_WEIGHTS = np.array([p for _, p in SERVICE_DISTRIBUTION], dtype=np.float64)

PathOrStream = Union[str, "os.PathLike[str]", IO[str]]


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------


def pick_service_type(rng: np.random.Generator) -> ServiceType:
    """Weighted draw from SERVICE_DISTRIBUTION."""
    return _TYPES[int(rng.choice(len(_TYPES), p=_WEIGHTS))]


def service_metrics(service_type: ServiceType, rng: np.random.Generator) -> np.ndarray:
    """One uniform draw per metric of ``service_type``."""
    bounds = np.array(service_type.ranges, dtype=np.float64)
    return rng.uniform(bounds[:, 0], bounds[:, 1])


def build_layout(n_services: int, rng: np.random.Generator) -> List[ServiceType]:
    """Service type per slot, shared by every user of a population."""
    if n_services < 1:
        raise ValueError(f"n_services must be >= 1, got {n_services}")
    return [pick_service_type(rng) for _ in range(n_services)]


def column_names(layout: Sequence[ServiceType]) -> List[str]:
    return [
        f"s{slot}_{metric}"
        for slot, service_type in enumerate(layout, start=1)
        for metric in service_type.metrics
    ]


def generate(
    n_users: int,
    n_services: int,
    rng: np.random.Generator,
    missing_rate: float = 0.0,
) -> Population:
    """Generate a synthetic Population.

    Parameters
    ----------
    n_users      : number of users, named ``user_1`` .. ``user_{n_users}``.
    n_services   : service slots per user (three features each).
    rng          : random source; all draws come from it.
    missing_rate : probability in [0, 1] that a user made no use of a
                   service, in which case all its metrics are MISSING.

    Returns
    -------
    Population with ``user_id`` as identifier column.
    """
    if n_users < 0:
        raise ValueError(f"n_users must be >= 0, got {n_users}")
    if not 0.0 <= missing_rate <= 1.0:
        raise ValueError(f"missing_rate {missing_rate} out of range [0, 1]")

    layout = build_layout(n_services, rng)
    header = column_names(layout)

    entities: List[Entity] = []
    for user in range(1, n_users + 1):
        parts = []
        for service_type in layout:
            if missing_rate and rng.random() < missing_rate:
                parts.append(np.full(len(service_type.metrics), MISSING))
            else:
                parts.append(service_metrics(service_type, rng))
        entities.append(Entity(f"user_{user}", np.concatenate(parts)))

    logger.info(
        "Generated %d users x %d services (%d features)",
        n_users,
        n_services,
        len(header),
    )
    return Population(id_column="user_id", header=tuple(header), entities=tuple(entities))


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def _format_value(value: float) -> str:
    if value == MISSING:
        return MISSING_TOKEN
    return f"{value:.4f}"


def _write(population: Population, fh: IO[str], delimiter: str) -> None:
    writer = csv.writer(fh, delimiter=delimiter, lineterminator="\n")
    writer.writerow([population.id_column, *population.header])
    for ent in population:
        writer.writerow([ent.entity_id, *(_format_value(v) for v in ent.vector)])


def write_table(
    population: Population,
    dest: PathOrStream,
    delimiter: str = ",",
) -> None:
    """Write ``population`` as a delimited table readable by ``loader.load``."""
    if isinstance(dest, (str, os.PathLike)):
        with open(dest, "w", newline="", encoding="utf-8") as fh:
            _write(population, fh, delimiter)
        logger.info("Wrote %d rows to %s", len(population), dest)
    else:
        _write(population, dest, delimiter)
