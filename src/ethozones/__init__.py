"""Zone-based behavioral analysis of tracked animals.

**ethozones** classifies tracked body-part positions against named zones of
an experimental arena and turns the classification into per-zone metrics:
time spent, entries and exits, latency to first entry and zone-to-zone
transitions.

Core Classes (Top-Level Exports)
--------------------------------
Arena : Immutable arena with reference points and resolved zones
    Zones are rectangles, circles, polygons, or boxes proportional to
    another zone. Build from code or with ``Arena.from_dict``.
ZoneAnalysis : Arena + analysis parameters
    Classifies tracking data and computes every zone table for a subject.
AnalysisConfig : Frozen analysis parameters (fps, thresholds)
classify : Classify tracking samples against zones
ConfigurationError, InputError : Exceptions

Submodule Organization
----------------------
arena : Zone definitions, geometry and resolution

    >>> from ethozones.arena import RectangleZone, ProportionalZone

metrics : Occupancy, visits, latency and transitions from classifications

    >>> from ethozones.metrics import zone_occupancy, zone_visits

ops : Containment tests and run-length helpers

Examples
--------
>>> import pandas as pd
>>> from ethozones.arena import ProportionalZone, RectangleZone
>>> arena = Arena(zones=[
...     RectangleZone("arena", bounds=(0, 0, 100, 100)),
...     ProportionalZone("center", parent="arena", proportion=0.5),
... ])
>>> samples = pd.DataFrame({
...     "frame": [0, 1, 2],
...     "body_part": "nose",
...     "x": [5.0, 50.0, 95.0],
...     "y": [5.0, 50.0, 95.0],
... })
>>> result = ZoneAnalysis(arena, AnalysisConfig(fps=1)).summarize(samples)
>>> result.latency["latency_seconds"].tolist()
[0.0, 1.0]
"""

import logging

from ethozones._errors import ConfigurationError, InputError
from ethozones.analysis import AnalysisConfig, ZoneAnalysis, ZoneAnalysisResult
from ethozones.arena import Arena
from ethozones.classification import UNCLASSIFIED, classify
from ethozones.tracking import TrackingSample

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "UNCLASSIFIED",
    "AnalysisConfig",
    "Arena",
    "ConfigurationError",
    "InputError",
    "TrackingSample",
    "ZoneAnalysis",
    "ZoneAnalysisResult",
    "classify",
]

__version__ = "0.1.0"
