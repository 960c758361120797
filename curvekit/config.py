"""Default sampling knobs and slider defaults.

Every public sampler/analyzer function takes these as keyword defaults, so a
caller only needs this module to read (or bundle) the engine's tuning knobs.
They are latency knobs, not safety limits: every call stays bounded by them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

__all__ = [
    "STANDARD_SAMPLES",
    "POLAR_SAMPLES",
    "POLAR_THETA_RANGE",
    "PARAMETRIC_SAMPLES",
    "PARAMETRIC_T_RANGE",
    "IMPLICIT_RESOLUTION",
    "DERIVATIVE_STEP",
    "LERP_EPSILON",
    "ROOT_SAMPLES",
    "ROOT_TOLERANCE",
    "BISECTION_MAX_ITERATIONS",
    "TABLE_ROWS",
    "INTERSECTION_MAX_CURVES",
    "SLIDER_DEFAULT_VALUE",
    "SLIDER_DEFAULT_MIN",
    "SLIDER_DEFAULT_MAX",
    "SLIDER_DEFAULT_STEP",
    "SLIDER_DEFAULT_SPEED",
    "SceneConfig",
]

# 1-D sampling
STANDARD_SAMPLES = 2000
POLAR_SAMPLES = 3000
POLAR_THETA_RANGE = (0.0, 4.0 * math.pi)
PARAMETRIC_SAMPLES = 2000
PARAMETRIC_T_RANGE = (-10.0, 10.0)
DERIVATIVE_STEP = 1e-7

# marching squares
IMPLICIT_RESOLUTION = 160
LERP_EPSILON = 1e-12

# bisection
ROOT_SAMPLES = 400
ROOT_TOLERANCE = 1e-10
BISECTION_MAX_ITERATIONS = 50

# value table / scene
TABLE_ROWS = 20
INTERSECTION_MAX_CURVES = 6

# fresh slider
SLIDER_DEFAULT_VALUE = 1.0
SLIDER_DEFAULT_MIN = -10.0
SLIDER_DEFAULT_MAX = 10.0
SLIDER_DEFAULT_STEP = 0.1
SLIDER_DEFAULT_SPEED = 1.0


@dataclass(frozen=True)
class SceneConfig:
    """Bundle of the knobs :func:`curvekit.scene.build_scene` passes down."""

    standard_samples: int = STANDARD_SAMPLES
    polar_samples: int = POLAR_SAMPLES
    theta_range: tuple[float, float] = POLAR_THETA_RANGE
    parametric_samples: int = PARAMETRIC_SAMPLES
    t_range: tuple[float, float] = PARAMETRIC_T_RANGE
    implicit_resolution: int = IMPLICIT_RESOLUTION
    root_samples: int = ROOT_SAMPLES
    root_tolerance: float = ROOT_TOLERANCE
    max_intersection_curves: int = INTERSECTION_MAX_CURVES
