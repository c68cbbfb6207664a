"""Structured logging helpers.

The package never configures handlers itself; ``ethozones/__init__.py`` only
attaches a :class:`logging.NullHandler`. Enable output with, e.g.::

    logging.getLogger("ethozones").setLevel(logging.DEBUG)
"""

from __future__ import annotations

import logging

logger = logging.getLogger("ethozones")


def log_zones_resolved(
    *,
    arena_name: str | None,
    n_zones: int,
    n_proportional: int,
    resolution_order: list[str],
) -> None:
    """Log a completed zone resolution."""
    logger.info(
        "Resolved %d zone(s) for arena %r (%d proportional)",
        n_zones,
        arena_name,
        n_proportional,
    )
    logger.debug("Zone resolution order: %s", resolution_order)


def log_classification(
    *,
    n_samples: int,
    n_valid: int,
    n_records: int,
    n_unclassified: int,
) -> None:
    """Log the outcome of a classification run."""
    n_dropped = n_samples - n_valid
    if n_dropped:
        logger.debug(
            "Dropped %d of %d sample(s) with missing or low-confidence coordinates",
            n_dropped,
            n_samples,
        )
    logger.debug(
        "Classified %d sample(s) into %d record(s), %d unclassified",
        n_valid,
        n_records,
        n_unclassified,
    )
