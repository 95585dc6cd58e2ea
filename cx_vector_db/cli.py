#!/usr/bin/env python3
"""
Command-line interface for cx-vector-db.

Usage:
    cx-vector-db generate --users 1000 --services 100 --seed 42
    cx-vector-db generate --missing-rate 0.2 --output vectors.csv
    cx-vector-db search                        # best match for the first user
    cx-vector-db search --id user_17 --threshold 0.9
    cx-vector-db stats --data vectors.csv

Defaults come from ``cx_vector_db.config.Settings`` (``CXVDB_*`` variables).
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import numpy as np

from .config import get_settings
from .engine import SimilarityEngine
from .errors import CxVectorDBError
from .generator import generate, write_table
from .loader import load

logger = logging.getLogger("cx_vector_db.cli")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def cmd_generate(args: argparse.Namespace) -> int:
    """Write a synthetic service-metrics table."""
    settings = get_settings()
    n_users = args.users if args.users is not None else settings.n_users
    n_services = args.services if args.services is not None else settings.n_services
    missing_rate = (
        args.missing_rate if args.missing_rate is not None else settings.missing_rate
    )
    seed = args.seed if args.seed is not None else settings.seed
    output = args.output or settings.data_path

    logger.info("Generating user behavior vectors with service metrics...")
    rng = np.random.default_rng(seed)
    try:
        population = generate(n_users, n_services, rng, missing_rate=missing_rate)
    except ValueError as exc:
        logger.error("Generation failed: %s", exc)
        return 1
    write_table(population, output)

    print(f"Data generation complete. File saved at {output}")
    return 0


def cmd_search(args: argparse.Namespace) -> int:
    """Load a table and report the best match and threshold matches for one user."""
    settings = get_settings()
    data_path = args.data or settings.data_path
    threshold = (
        args.threshold if args.threshold is not None else settings.similarity_threshold
    )

    logger.info("Loading data from %s", data_path)
    try:
        population = load(data_path)
        engine = SimilarityEngine(population)
        target = engine.index_of(args.id) if args.id is not None else args.target
        result = engine.find_similar(target, threshold)
    except FileNotFoundError:
        logger.error("Data file not found: %s", data_path)
        return 1
    except (CxVectorDBError, KeyError, IndexError) as exc:
        logger.error("Search failed: %s", exc)
        return 1

    target_id = population[target].entity_id
    print(f"File contains {population.dim} Service+Metrics")
    print(f"Sample Size = {len(population)}")
    print(
        f"The most similar user to {target_id} is {result.best.entity_id} "
        f"with a similarity score of {result.best.score:.4f}"
    )
    print(f"Top matches above threshold({threshold:.2f}):")
    for match in result.matches:
        print(match)
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    """Print population statistics."""
    data_path = args.data or get_settings().data_path
    try:
        engine = SimilarityEngine(load(data_path))
    except FileNotFoundError:
        logger.error("Data file not found: %s", data_path)
        return 1
    except CxVectorDBError as exc:
        logger.error("Load failed: %s", exc)
        return 1

    print("\nPopulation Statistics")
    print("=" * 40)
    for key, value in engine.stats().items():
        if isinstance(value, float):
            print(f"{key}: {value:.4f}")
        else:
            print(f"{key}: {value}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cx-vector-db",
        description="Similarity search over user behavior vectors",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    gen_parser = subparsers.add_parser("generate", help="Write a synthetic data table")
    gen_parser.add_argument("--users", type=int, help="Number of users")
    gen_parser.add_argument("--services", type=int, help="Service slots per user")
    gen_parser.add_argument(
        "--missing-rate", type=float, help="Probability a user skips a service"
    )
    gen_parser.add_argument("--seed", type=int, help="Random seed")
    gen_parser.add_argument("--output", help="Output table path")

    search_parser = subparsers.add_parser("search", help="Find similar users")
    search_parser.add_argument("--data", help="Input table path")
    target_group = search_parser.add_mutually_exclusive_group()
    target_group.add_argument(
        "--target", type=int, default=0, help="Target row index (default: 0)"
    )
    target_group.add_argument("--id", help="Target user identifier")
    search_parser.add_argument("--threshold", type=float, help="Similarity threshold")

    stats_parser = subparsers.add_parser("stats", help="Show population statistics")
    stats_parser.add_argument("--data", help="Input table path")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging("DEBUG" if args.verbose else get_settings().log_level)

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "generate": cmd_generate,
        "search": cmd_search,
        "stats": cmd_stats,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        return cmd_func(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
