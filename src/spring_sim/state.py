# MIT License (see LICENSE)
"""
Shared simulation settings.

The State holds the "current" parameters that new masses and springs are
created with, the configuration of every applied force, and the integrator
and wall settings. It is read by the force accumulator, the integrator and
the collision resolver, and written by the host between ticks and by
System.eval_selection().
"""
from __future__ import annotations
from dataclasses import dataclass, field, fields
from enum import IntEnum

from .constants import DEF_TSTEP


class Force(IntEnum):
    """Indices of the applied forces in the State force tables."""
    GRAVITY = 0
    CENTER_OF_MASS = 1
    POINT_ATTRACT = 2
    WALL = 3


# Per force: (value, misc). The meaning of each pair:
#   GRAVITY:        magnitude, direction in degrees (0 = down)
#   CENTER_OF_MASS: gain on centroid offset, damping on centroid velocity
#   POINT_ATTRACT:  gain, exponent of distance
#   WALL:           gain (positive repels), exponent of distance
DEFAULT_FORCE_VALUES = (10.0, 5.0, 10.0, 10000.0)
DEFAULT_FORCE_MISC = (0.0, 2.0, 0.0, 1.0)


@dataclass
class State:
    """
    Simulation settings.

    Attributes:
        mass: Mass given to new masses.
        elasticity: Elasticity given to new masses.
        ks: Stiffness given to new springs.
        kd: Damping given to new springs.
        fix_mass: Whether new masses are created fixed.
        show_spring: Display flag, persisted only.
        center_id: Index of the mass used as the centering reference, or -1
            for the viewport center.
        force_enabled: Enabled flag per Force.
        force_value: First parameter per Force.
        force_misc: Second parameter per Force.
        viscosity: Linear drag coefficient.
        stickiness: Wall stickiness.
        dt: Timestep. In adaptive mode this is the step size carried over
            from the previous tick.
        precision: Divisor applied to the adaptive error estimate. Larger
            values accept larger errors.
        adaptive_step: Use the adaptive RKF45 integrator.
        grid_snap, grid_size: Input snapping, persisted only.
        wall_top, wall_left, wall_right, wall_bottom: Enabled walls.
        collide: Enable pairwise collisions between masses.
    """
    mass: float = 1.0
    elasticity: float = 1.0
    ks: float = 1.0
    kd: float = 1.0
    fix_mass: bool = False
    show_spring: bool = True
    center_id: int = -1
    force_enabled: list[bool] = field(default_factory=lambda: [False] * len(Force))
    force_value: list[float] = field(default_factory=lambda: list(DEFAULT_FORCE_VALUES))
    force_misc: list[float] = field(default_factory=lambda: list(DEFAULT_FORCE_MISC))
    viscosity: float = 0.0
    stickiness: float = 0.0
    dt: float = DEF_TSTEP
    precision: float = 1.0
    adaptive_step: bool = False
    grid_snap: bool = False
    grid_size: float = 20.0
    wall_top: bool = True
    wall_left: bool = True
    wall_right: bool = True
    wall_bottom: bool = True
    collide: bool = False

    def reset(self) -> None:
        """Restore every setting to its default."""
        self.assign(State())

    def assign(self, other: State) -> None:
        """Copy every setting from other, keeping this object in place."""
        for f in fields(self):
            value = getattr(other, f.name)
            if isinstance(value, list):
                value = list(value)
            setattr(self, f.name, value)

    def enable(self, force: Force, value: float | None = None, misc: float | None = None) -> None:
        """Enable a force, optionally setting its two parameters."""
        self.force_enabled[force] = True
        if value is not None:
            self.force_value[force] = float(value)
        if misc is not None:
            self.force_misc[force] = float(misc)

    def disable(self, force: Force) -> None:
        self.force_enabled[force] = False

    def set_walls(self, top: bool, left: bool, right: bool, bottom: bool) -> None:
        self.wall_top = top
        self.wall_left = left
        self.wall_right = right
        self.wall_bottom = bottom
