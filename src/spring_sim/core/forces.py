# MIT License (see LICENSE)
"""
Force generators for the spring network.

Each function adds its contribution to Mass.accel of every movable (alive,
not fixed) mass. Contributions are accelerations, i.e. already divided by
mass where the force depends on it. accumulate_accel() resets and composes
them in a fixed order:

  1. gravity and the center-of-mass pseudo-force (these reset accel)
  2. viscous drag
  3. point attraction toward the reference point
  4. wall attraction/repulsion
  5. springs

The order only matters for floating-point rounding.
"""
from __future__ import annotations
import math

import numpy as np

from ..constants import CENTER_RADIUS
from ..state import Force, State
from ..types import Mass
from ..util import f64, norm


def reference_point(system, width: float, height: float) -> np.ndarray:
    """
    Point used by the centering and point attraction forces.

    This is the center mass when one is set, else the viewport center. A
    center reference that points at a dead mass is cleared.
    """
    st = system.state
    if st.center_id >= 0:
        m = system.get_mass(st.center_id)
        if m.alive:
            return m.position.copy()
        st.center_id = -1
    return f64((width / 2.0, height / 2.0))


def gravity_vector(state: State) -> np.ndarray:
    """
    Uniform gravity acceleration.

    The direction is in degrees, 0 pointing down and 90 pointing right.
    """
    if not state.force_enabled[Force.GRAVITY]:
        return np.zeros(2, dtype=np.float64)
    g = state.force_value[Force.GRAVITY]
    theta = math.radians(state.force_misc[Force.GRAVITY])
    return f64((g * math.sin(theta), -g * math.cos(theta)))


def center_of_mass_accel(system, center: np.ndarray) -> np.ndarray:
    """
    Pseudo-force pulling the centroid of the movable masses to center.

    Implements a = -(gain * (x_cm - center) + damping * v_cm) / M, where
    x_cm and v_cm are the mass-weighted centroid position and velocity and M
    the total mass. The center mass itself is left out of the sums.
    """
    st = system.state
    if not st.force_enabled[Force.CENTER_OF_MASS]:
        return np.zeros(2, dtype=np.float64)

    gain = st.force_value[Force.CENTER_OF_MASS]
    damping = st.force_misc[Force.CENTER_OF_MASS]

    msum = 0.0
    mx = np.zeros(2, dtype=np.float64)
    mv = np.zeros(2, dtype=np.float64)
    for i, m in enumerate(system.masses):
        if i != st.center_id and m.movable:
            msum += m.mass
            mx += m.mass * m.position
            mv += m.mass * m.velocity

    if msum == 0.0:
        return np.zeros(2, dtype=np.float64)

    mx = mx / msum - center
    mv = mv / msum
    return -(gain * mx + damping * mv) / msum


def apply_gravity_and_drag(system, g: np.ndarray, og: np.ndarray) -> None:
    """
    Reset every movable mass's acceleration to gravity, centering and drag.

    Drag is linear: a = -c * v with c the State viscosity. The center mass
    does not receive the centering pseudo-force.
    """
    st = system.state
    visc = st.viscosity
    with_center = g + og
    for i, m in enumerate(system.masses):
        if m.movable:
            base = g if i == st.center_id else with_center
            m.accel = base - visc * m.velocity


def apply_point_attraction(system, center: np.ndarray) -> None:
    """
    Inverse power law attraction toward center.

    a = gain / d^exponent along the direction to center. When a mass is
    closer than its radius plus CENTER_RADIUS, both the distance and the
    direction vector are scaled up to that floor.
    """
    st = system.state
    if not st.force_enabled[Force.POINT_ATTRACT]:
        return
    gain = st.force_value[Force.POINT_ATTRACT]
    exponent = st.force_misc[Force.POINT_ATTRACT]

    for m in system.masses:
        if not m.movable:
            continue
        d = center - m.position
        mag = norm(d)
        floor = m.radius + CENTER_RADIUS
        if mag < floor:
            d = d * (mag / floor)
            mag = floor

        fmag = gain / mag ** exponent
        m.accel += fmag * d / mag


def _wall_term(dist: float, exponent: float) -> float:
    if dist < 1.0:
        dist = 1.0
    return dist ** exponent


def apply_wall_forces(system, width: float, height: float) -> None:
    """
    Inverse power law force from every enabled wall.

    Distances are measured from the wall to the mass surface and floored at
    1. A positive gain repels; a mass beyond a wall feels nothing from it.
    """
    st = system.state
    if not st.force_enabled[Force.WALL]:
        return
    gval = -st.force_value[Force.WALL]
    exponent = st.force_misc[Force.WALL]

    for m in system.masses:
        if not m.movable:
            continue
        rad = m.screen_radius
        x, y = m.position
        dax = day = 0.0

        left = x - rad
        right = width - rad - x
        top = height - rad - y
        bottom = y - rad

        if st.wall_left and left >= 0:
            dax -= gval / _wall_term(left, exponent)
        if st.wall_right and right >= 0:
            dax += gval / _wall_term(right, exponent)
        if st.wall_top and top >= 0:
            day += gval / _wall_term(top, exponent)
        if st.wall_bottom and bottom >= 0:
            day -= gval / _wall_term(bottom, exponent)

        m.accel[0] += dax
        m.accel[1] += day


def spring_force(s, m1: Mass, m2: Mass) -> np.ndarray | None:
    """
    Force on m1 from spring s (m2 receives the opposite).

    Implements f = ks (L0 - L) - kd ((v1 - v2) . (x1 - x2)) / L along the
    unit vector from m2 to m1. Returns None for coincident endpoints.
    """
    d = m1.position - m2.position
    if d[0] == 0.0 and d[1] == 0.0:
        return None
    mag = norm(d)

    force = s.ks * (s.restlen - mag)
    if s.kd:
        damp = float(np.dot(m1.velocity - m2.velocity, d)) / mag
        force -= s.kd * damp

    return (force / mag) * d


def apply_spring_forces(system) -> None:
    """
    Apply every live spring to its endpoints (Newton's third law).

    An endpoint that is dead or fixed takes no force, but its position and
    velocity still shape the force on the other end.
    """
    masses = system.masses
    for s in system.springs:
        if not s.alive:
            continue
        m1 = masses[s.m1]
        m2 = masses[s.m2]
        f = spring_force(s, m1, m2)
        if f is None:
            continue

        if m1.movable:
            m1.accel += f * m1.inv_mass
        if m2.movable:
            m2.accel -= f * m2.inv_mass


def accumulate_accel(system, width: float, height: float) -> None:
    """
    Recompute the acceleration of every movable mass from scratch.

    Args:
        system: The System holding masses, springs and State.
        width: Viewport width (right wall position).
        height: Viewport height (top wall position).
    """
    center = reference_point(system, width, height)
    g = gravity_vector(system.state)
    og = center_of_mass_accel(system, center)

    apply_gravity_and_drag(system, g, og)
    apply_point_attraction(system, center)
    apply_wall_forces(system, width, height)
    apply_spring_forces(system)
