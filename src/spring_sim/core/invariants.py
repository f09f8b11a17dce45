# MIT License (see LICENSE)
"""
Utilities for calculating physical invariants of a spring network.

Used for verifying simulation correctness and debugging stability issues.
With no drag, no spring damping, no walls hit and no applied forces, the
total energy and the linear momentum should remain constant (within
integration error).
"""
from __future__ import annotations
import numpy as np

from ..util import norm, norm2


def kinetic_energy(system) -> float:
    """
    Total kinetic energy of the movable masses.

    T = sum(0.5 * m * v^2)
    """
    ke = 0.0
    for m in system.masses:
        if m.movable:
            ke += 0.5 * m.mass * norm2(m.velocity)
    return ke


def spring_energy(system) -> float:
    """
    Total elastic potential energy stored in the live springs.

    U = sum(0.5 * ks * (L - L0)^2)
    """
    pe = 0.0
    for _, s in system.live_springs():
        length = norm(system.masses[s.m1].position - system.masses[s.m2].position)
        stretch = length - s.restlen
        pe += 0.5 * s.ks * stretch * stretch
    return pe


def linear_momentum(system) -> np.ndarray:
    """
    Total linear momentum of the movable masses.

    P = sum(m * v)
    """
    p = np.zeros(2, dtype=np.float64)
    for m in system.masses:
        if m.movable:
            p += m.mass * m.velocity
    return p


def centroid(system) -> np.ndarray | None:
    """Mass-weighted center of the movable masses, or None if there are none."""
    total = 0.0
    acc = np.zeros(2, dtype=np.float64)
    for m in system.masses:
        if m.movable:
            total += m.mass
            acc += m.mass * m.position
    if total == 0.0:
        return None
    return acc / total
