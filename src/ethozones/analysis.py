"""Zone analysis of one arena with fixed parameters.

:class:`ZoneAnalysis` binds an :class:`~ethozones.arena.Arena` to an
:class:`AnalysisConfig` so that many subjects recorded in the same arena can
be analyzed with identical settings. The classifier and the containment test
are plain callables passed in at construction; nothing is looked up at
runtime.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from ethozones._errors import InputError, validate_fps, validate_min_duration
from ethozones.arena.core import Arena
from ethozones.classification import (
    ContainmentTest,
    classify,
    validate_classification,
)
from ethozones.metrics.occupancy import zone_occupancy
from ethozones.metrics.transitions import transition_matrix, zone_transitions
from ethozones.metrics.visits import (
    VisitSummary,
    zone_entries,
    zone_exits,
    zone_latency,
    zone_visits,
)
from ethozones.ops.containment import point_in_zone
from ethozones.tracking import TrackingInput

logger = logging.getLogger(__name__)

Classifier = Callable[..., pd.DataFrame]


@dataclass(frozen=True)
class AnalysisConfig:
    """Parameters shared by every metric of a zone analysis.

    Parameters
    ----------
    fps : float
        Recording frame rate (frames per second).
    min_duration : float
        Minimum visit or stay length in seconds. Shorter visits are not
        counted as entries and shorter stays do not produce transitions.
        Default 0 (keep everything).
    min_confidence : float or None
        Tracker confidence below which samples are treated as missing.
        Default None (no confidence filter).
    include_unclassified : bool
        Report time outside every zone in the occupancy table. Default False.

    Raises
    ------
    InputError
        If ``fps`` is not positive or a threshold is negative.

    Examples
    --------
    >>> config = AnalysisConfig(fps=30, min_duration=0.5)
    >>> config.fps
    30.0
    """

    fps: float
    min_duration: float = 0.0
    min_confidence: float | None = None
    include_unclassified: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "fps", validate_fps(self.fps))
        object.__setattr__(
            self, "min_duration", validate_min_duration(self.min_duration)
        )
        if self.min_confidence is not None:
            try:
                min_confidence = float(self.min_confidence)
            except (TypeError, ValueError):
                min_confidence = float("nan")
            if not min_confidence >= 0:
                raise InputError(
                    f"min_confidence must be a non-negative number, got {self.min_confidence!r}.",
                    code="E2103",
                )
            object.__setattr__(self, "min_confidence", min_confidence)


@dataclass(frozen=True)
class ZoneAnalysisResult:
    """All zone tables of one subject.

    Attributes
    ----------
    classifications : pd.DataFrame
        Classification records the tables were computed from.
    occupancy, entries, exits, latency, transitions : pd.DataFrame
        Outputs of the corresponding :class:`ZoneAnalysis` methods.
    config : AnalysisConfig
        Parameters used.
    """

    classifications: pd.DataFrame = field(repr=False)
    occupancy: pd.DataFrame
    entries: pd.DataFrame
    exits: pd.DataFrame
    latency: pd.DataFrame
    transitions: pd.DataFrame
    config: AnalysisConfig

    def to_dict(self) -> dict[str, pd.DataFrame]:
        """Tables keyed by name, e.g. for writing one sheet per table."""
        return {
            "occupancy": self.occupancy,
            "entries": self.entries,
            "exits": self.exits,
            "latency": self.latency,
            "transitions": self.transitions,
        }


class ZoneAnalysis:
    """Classify tracking data in an arena and compute zone metrics.

    Parameters
    ----------
    arena : Arena
        Arena with resolved zones.
    config : AnalysisConfig
        Frame rate and thresholds.
    classifier : callable, default=ethozones.classify
        ``classifier(samples, arena, *, min_confidence, containment)``
        returning classification records.
    containment : callable, default=point_in_zone
        Containment test handed to the classifier.
    zone_order : sequence of str, optional
        Priority of overlapping zones for transitions. Default: declaration
        order.

    Examples
    --------
    >>> from ethozones.arena import RectangleZone
    >>> arena = Arena(zones=[
    ...     RectangleZone("left", bounds=(0, 0, 50, 100)),
    ...     RectangleZone("right", bounds=(50, 0, 100, 100)),
    ... ])
    >>> samples = pd.DataFrame({
    ...     "frame": range(4),
    ...     "body_part": "center",
    ...     "x": [10.0, 20.0, 70.0, 80.0],
    ...     "y": [10.0, 10.0, 10.0, 10.0],
    ... })
    >>> analysis = ZoneAnalysis(arena, AnalysisConfig(fps=2))
    >>> result = analysis.summarize(samples)
    >>> result.occupancy["time_seconds"].tolist()
    [1.0, 1.0]
    >>> result.transitions[["from_zone", "to_zone"]].values.tolist()
    [['left', 'right']]
    """

    def __init__(
        self,
        arena: Arena,
        config: AnalysisConfig,
        *,
        classifier: Classifier = classify,
        containment: ContainmentTest = point_in_zone,
        zone_order: Sequence[str] | None = None,
    ) -> None:
        if not isinstance(arena, Arena):
            raise TypeError(f"arena must be an Arena, got {type(arena).__name__}.")
        if not isinstance(config, AnalysisConfig):
            raise TypeError(
                f"config must be an AnalysisConfig, got {type(config).__name__}."
            )
        if zone_order is not None:
            for zone_id in zone_order:
                arena.geometry(zone_id)
        self.arena = arena
        self.config = config
        self.classifier = classifier
        self.containment = containment
        self.zone_order = tuple(zone_order) if zone_order is not None else None

    def __repr__(self) -> str:
        return (
            f"ZoneAnalysis(arena={self.arena.name!r}, "
            f"n_zones={self.arena.n_zones}, config={self.config!r})"
        )

    def classify(
        self, samples: TrackingInput, *, body_part: str | None = None
    ) -> pd.DataFrame:
        """Classification records of ``samples`` in this arena."""
        kwargs: dict[str, Any] = {
            "min_confidence": self.config.min_confidence,
            "containment": self.containment,
        }
        if body_part is not None:
            kwargs["body_part"] = body_part
        return validate_classification(self.classifier(samples, self.arena, **kwargs))

    def occupancy(self, classifications: pd.DataFrame) -> pd.DataFrame:
        """Time and percentage per zone; see :func:`~ethozones.metrics.zone_occupancy`."""
        return zone_occupancy(
            classifications,
            self.config.fps,
            include_unclassified=self.config.include_unclassified,
        )

    def visits(
        self,
        classifications: pd.DataFrame,
        zone_id: str,
        *,
        body_part: str | None = None,
    ) -> VisitSummary:
        """Entries, durations and latency of one zone.

        Raises
        ------
        InputError
            If ``zone_id`` is not a zone of the arena.
        """
        return zone_visits(
            classifications,
            zone_id,
            self.config.fps,
            min_duration=self.config.min_duration,
            body_part=body_part,
            zone_ids=self.arena.zone_ids,
        )

    def entries(self, classifications: pd.DataFrame) -> pd.DataFrame:
        return zone_entries(
            classifications,
            self.config.fps,
            min_duration=self.config.min_duration,
            zone_ids=self.arena.zone_ids,
        )

    def exits(self, classifications: pd.DataFrame) -> pd.DataFrame:
        return zone_exits(classifications, zone_ids=self.arena.zone_ids)

    def latency(self, classifications: pd.DataFrame) -> pd.DataFrame:
        """Latency to every arena zone, NaN for zones never entered."""
        return zone_latency(
            classifications, self.config.fps, zone_ids=self.arena.zone_ids
        )

    def transitions(self, classifications: pd.DataFrame) -> pd.DataFrame:
        return zone_transitions(
            classifications,
            self.config.fps,
            min_duration=self.config.min_duration,
            zone_order=self.zone_order,
        )

    def transition_matrix(
        self, classifications: pd.DataFrame, *, body_part: str | None = None
    ) -> pd.DataFrame:
        return transition_matrix(self.transitions(classifications), body_part)

    def summarize(
        self, samples: TrackingInput, *, body_part: str | None = None
    ) -> ZoneAnalysisResult:
        """Classify ``samples`` and compute every table.

        Parameters
        ----------
        samples : DataFrame or iterable of TrackingSample
            Tracking stream of one subject.
        body_part : str, optional
            Restrict the analysis to one body part.

        Returns
        -------
        ZoneAnalysisResult
        """
        classifications = self.classify(samples, body_part=body_part)
        logger.info(
            "Summarizing %d classification record(s) in arena %r",
            len(classifications),
            self.arena.name,
        )
        return ZoneAnalysisResult(
            classifications=classifications,
            occupancy=self.occupancy(classifications),
            entries=self.entries(classifications),
            exits=self.exits(classifications),
            latency=self.latency(classifications),
            transitions=self.transitions(classifications),
            config=self.config,
        )
