# MIT License (see LICENSE)
"""
Utility functions for vector math and radius mappings.

Masses carry a physical radius derived from their mass and an on-screen
radius derived from the physical one. The physical radius drives point
attraction and pairwise collisions; the on-screen radius drives walls and
hit-testing.
"""
from __future__ import annotations
import math

import numpy as np


def f64(x) -> np.ndarray:
    """
    Convert any array-like to a float64 numpy array.

    Used throughout the codebase to ensure consistent numeric precision
    and allow tuple/list inputs for positions and velocities.
    """
    return np.array(x, dtype=np.float64)


def norm2(v: np.ndarray) -> float:
    """Squared magnitude of a 2D vector. Avoids sqrt for performance."""
    return float(v[0] * v[0] + v[1] * v[1])


def norm(v: np.ndarray) -> float:
    """Magnitude (length) of a 2D vector."""
    return float(np.sqrt(norm2(v)))


def square(x: float) -> float:
    return x * x


def is_nan(v: np.ndarray) -> bool:
    """True if any component fails the self-equality test."""
    return bool(np.any(v != v))


def mass_radius(m: float) -> int:
    """
    Physical radius of a mass: int(2 ln(4m + 1)), clamped to [1, 64].

    Monotonic in m, so heavier masses are never smaller.
    """
    rad = int(2 * math.log(4.0 * m + 1.0)) if m > -0.25 else 1
    return max(1, min(64, rad))


def sphere_size(rad: int) -> int:
    """Index (0..4) of the sphere sprite used to draw a mass of radius rad."""
    rad = max(15, (25 + 2 * rad) // 2)
    size = (rad * 2 - 30) // 10
    return min(size, 4)


def sphere_radius(size: int) -> int:
    """Radius in screen units of the sphere sprite with the given index."""
    return (size * 10 + 30) // 2


def screen_radius(radius: int) -> int:
    """On-screen radius for a physical radius."""
    return sphere_radius(sphere_size(radius))
