"""Shared test fixtures for the ethozones test suite.

Fixture Naming Convention
=========================

- Arenas: ``{layout}_arena`` (e.g. ``open_field_arena``, ``split_arena``).
- Tracking data: ``{what}_samples`` DataFrames with ``frame``,
  ``body_part``, ``x`` and ``y`` columns.
- Classification tables: ``{what}_records``.
"""

import os

import numpy as np
import pandas as pd
import pytest
from hypothesis import Phase, Verbosity, settings

from ethozones.arena import (
    Arena,
    CircleZone,
    PolygonZone,
    ProportionalZone,
    RectangleZone,
)

# =============================================================================
# Hypothesis Configuration
# =============================================================================
# - "ci": Fast profile for CI pipelines (fewer examples, no deadline)
# - "dev": Standard development profile (moderate examples)
# - "thorough": Full property testing (many examples, for pre-release)

settings.register_profile(
    "ci",
    max_examples=10,
    deadline=None,
    suppress_health_check=[],
    phases=[Phase.explicit, Phase.reuse, Phase.generate],
    verbosity=Verbosity.quiet,
)

settings.register_profile(
    "dev",
    max_examples=25,
    deadline=5000,
    verbosity=Verbosity.normal,
)

settings.register_profile(
    "thorough",
    max_examples=100,
    deadline=None,
    verbosity=Verbosity.verbose,
)

# Set HYPOTHESIS_PROFILE=ci in CI environments for faster tests
_profile = os.environ.get("HYPOTHESIS_PROFILE", "dev")
settings.load_profile(_profile)


# =============================================================================
# Helpers
# =============================================================================


def _records_from_labels(labels, body_part="nose", start_frame=0):
    return pd.DataFrame(
        {
            "frame": np.arange(start_frame, start_frame + len(labels), dtype=np.int64),
            "body_part": body_part,
            "zone_id": list(labels),
        }
    )


@pytest.fixture
def make_records():
    """Factory: single-zone-per-frame classification table from labels."""
    return _records_from_labels


# =============================================================================
# Arena Fixtures
# =============================================================================


@pytest.fixture
def open_field_arena():
    """100 x 100 open field with a proportional centre and a corner object."""
    return Arena(
        zones=[
            RectangleZone("arena", bounds=(0, 0, 100, 100)),
            ProportionalZone("center", parent="arena", proportion=0.5),
            CircleZone("object", radius=10, center=(85, 85)),
        ],
        units="cm",
        name="open_field",
    )


@pytest.fixture
def split_arena():
    """Two non-overlapping halves that together cover [0, 100) x [0, 100]."""
    return Arena(
        zones=[
            PolygonZone("left", vertices=[(0, 0), (50, 0), (50, 100), (0, 100)]),
            PolygonZone("right", vertices=[(50, 0), (100, 0), (100, 100), (50, 100)]),
        ],
        name="split",
    )


@pytest.fixture
def pixel_arena_config():
    """Arena configuration mapping in pixel units with reference points."""
    return {
        "id": "open_field_px",
        "units": "pixels",
        "scale": 2.0,
        "points": {
            "top_left": [0, 0],
            "bottom_right": [200, 200],
            "object": [150, 150],
        },
        "zones": [
            {"id": "arena", "type": "rectangle", "point_names": ["top_left", "bottom_right"]},
            {"id": "center", "type": "proportional", "parent": "arena", "proportion": 0.5},
            {"id": "object", "type": "circle", "center_point": "object", "radius_cm": 10},
            {
                "id": "wall",
                "type": "proportion",
                "parent_zone": "arena",
                "proportion": [0.0, 0.0, 1.0, 0.1],
            },
        ],
    }


# =============================================================================
# Tracking Fixtures
# =============================================================================


@pytest.fixture
def diagonal_samples():
    """Nose moving along the diagonal of the open field, one frame per step."""
    coords = np.array([5.0, 30.0, 50.0, 70.0, 85.0, 95.0, np.nan, 40.0])
    return pd.DataFrame(
        {
            "frame": np.arange(len(coords)),
            "timestamp": np.arange(len(coords)) / 25.0,
            "body_part": "nose",
            "x": coords,
            "y": coords,
        }
    )
