# MIT License (see LICENSE)
"""
Numeric constants used throughout the simulation.

Units are screen units (pixels) for lengths and seconds for time. The y axis
points up: the bottom wall sits at y = radius and the top wall at
y = height - radius.
"""
from __future__ import annotations

# Adaptive step size limits for the RKF45 integrator.
DT_MIN: float = 0.0001
DT_MAX: float = 0.5

# Default fixed timestep. Also used for any tick in which no live spring
# exists, whatever the configured timestep.
DEF_TSTEP: float = 0.025

# Stickiness calibration: with STICK_MAG = 1.0 a mass of 1.0 under a gravity
# of 1.0 stays stuck on a wall for every stickiness value above 1.0.
STICK_MAG: float = 1.0

# Distance from a wall (in screen units) within which a resting mass is
# considered to be touching it.
WALL_CONTACT: float = 0.5

# Collision radius of a fixed ("nailed") mass.
NAIL_SIZE: int = 4

# Hit-test proximity for masses (squared against d^2 - r^2) and springs
# (perpendicular distance and bounding box margin).
MPROXIMITY: float = 8.0
SPROXIMITY: float = 8.0

# Mass-only hit tests accept candidates this many times further away.
MASS_ONLY_SCALE: float = 36.0

# Nominal radius of the point attraction reference.
CENTER_RADIUS: float = 1.0

# Floor for the normalized adaptive error before the precision divisor.
MIN_ERROR: float = 1e-5

# Horizontal separation substituted for zero in pairwise collisions.
COLLIDE_EPS: float = 1e-10

# Redraw cadence: report a redraw after this much simulated time or this
# many ticks, whichever comes first.
REDRAW_TIME: float = 0.05
REDRAW_TICKS: int = 8
