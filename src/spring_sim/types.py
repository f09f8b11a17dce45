# MIT License (see LICENSE)
"""
Core type definitions for the spring network.

Defines the two entity records held by the System store:
- Mass: a point mass with kinematic state, elasticity and status flags.
- Spring: a damped spring between two masses, referenced by index.

The equations of motion for a mass are the plain Newtonian ones:
  dx/dt = v
  dv/dt = a   (a accumulated from forces, already divided by mass)
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntFlag

import numpy as np

from .util import f64, mass_radius, screen_radius


class Status(IntFlag):
    """Status bits shared by masses and springs."""
    NONE = 0
    ALIVE = 0x01
    SELECTED = 0x02
    FIXED = 0x04
    TEMPFIXED = 0x08


def _flag(bit: Status, doc: str) -> property:
    def getter(self) -> bool:
        return bool(self.status & bit)

    def setter(self, on: bool) -> None:
        if on:
            self.status |= bit
        else:
            self.status &= ~bit

    return property(getter, setter, doc=doc)


def _zeros() -> np.ndarray:
    return np.zeros(2, dtype=np.float64)


# =============================================================================
# Mass
# =============================================================================

@dataclass
class Mass:
    """
    A point mass.

    Attributes:
        position: Position [x, y] in screen units.
        velocity: Velocity [vx, vy].
        accel: Acceleration [ax, ay] from the latest force evaluation.
        mass: Scalar mass. The physical radius follows from it.
        elastic: Coefficient of restitution used for walls and collisions.
        status: Status bits (alive, selected, fixed, temp-fixed).
        parents: Indices of the live springs attached to this mass. Only
            the System mutators may change it.

    The remaining fields are integrator scratch space and are meaningless
    outside of a single call to Physics.advance().
    """
    position: np.ndarray | tuple[float, float] = (0.0, 0.0)
    velocity: np.ndarray | tuple[float, float] = (0.0, 0.0)
    accel: np.ndarray | tuple[float, float] = (0.0, 0.0)
    mass: float = 0.0
    elastic: float = 0.0
    status: Status = Status.ALIVE
    parents: list[int] = field(default_factory=list)

    # Pre-step snapshot, taken once per tick
    old_position: np.ndarray = field(default_factory=_zeros, repr=False)
    old_velocity: np.ndarray = field(default_factory=_zeros, repr=False)
    # Start of the current RK attempt
    cur_position: np.ndarray = field(default_factory=_zeros, repr=False)
    cur_velocity: np.ndarray = field(default_factory=_zeros, repr=False)
    # Stage derivatives (dx*h, dv*h) of the current RK attempt
    stages: list[tuple[np.ndarray, np.ndarray]] = field(default_factory=list, repr=False)

    alive = _flag(Status.ALIVE, "Not deleted.")
    selected = _flag(Status.SELECTED, "Part of the current selection.")
    fixed = _flag(Status.FIXED, "Immovable: never integrated.")
    temp_fixed = _flag(Status.TEMPFIXED, "Fixed only for the duration of a drag.")

    def __post_init__(self) -> None:
        """Convert kinematic state to float64 arrays for consistent numerics."""
        self.position = f64(self.position)
        self.velocity = f64(self.velocity)
        self.accel = f64(self.accel)
        self.status = Status(self.status)

    @property
    def movable(self) -> bool:
        """Alive and not fixed: the masses that forces and integration touch."""
        return self.status & (Status.ALIVE | Status.FIXED) == Status.ALIVE

    @property
    def radius(self) -> int:
        """Physical radius, derived from the mass."""
        return mass_radius(self.mass)

    @property
    def screen_radius(self) -> int:
        """Radius used against walls and for hit-testing."""
        return screen_radius(self.radius)

    @property
    def inv_mass(self) -> float:
        """Inverse mass (1/m). Returns 0 for mass <= 0."""
        return 0.0 if self.mass <= 0 else 1.0 / self.mass

    def duplicate(self) -> Mass:
        """Copy of this mass with no selection and no parents."""
        twin = Mass(
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            accel=self.accel.copy(),
            mass=self.mass,
            elastic=self.elastic,
            status=self.status,
        )
        twin.selected = False
        return twin


# =============================================================================
# Spring
# =============================================================================

@dataclass
class Spring:
    """
    A damped spring between masses m1 and m2.

    Attributes:
        ks: Stiffness (Hooke constant).
        kd: Damping along the spring axis.
        restlen: Rest length in screen units.
        m1, m2: Endpoint mass indices. Weak references: the spring does not
            own the masses and they may be dead.
        status: Status bits (alive, selected).
    """
    ks: float = 0.0
    kd: float = 0.0
    restlen: float = 0.0
    m1: int = 0
    m2: int = 0
    status: Status = Status.ALIVE

    alive = _flag(Status.ALIVE, "Not deleted.")
    selected = _flag(Status.SELECTED, "Part of the current selection.")

    def __post_init__(self) -> None:
        self.status = Status(self.status)

    def duplicate(self) -> Spring:
        """Copy of this spring with no selection."""
        twin = Spring(
            ks=self.ks, kd=self.kd, restlen=self.restlen,
            m1=self.m1, m2=self.m2, status=self.status,
        )
        twin.selected = False
        return twin
