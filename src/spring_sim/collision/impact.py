# MIT License (see LICENSE)
"""
Oblique impact between pairs of masses.

Every unordered pair of live masses is tested (O(N^2)). Two masses collide
when their disks overlap and they approach each other along at least one
axis. The velocity change is resolved along the line of centers: the normal
component of the relative velocity is reversed with restitution

    ratio = 1 + (e1 + e2) / 2

which, when both masses are movable, is shared in proportion to the masses:

    ratio_1 = (1 + (e1 + e2) / 2) / (1 + m1 / m2)

A fixed mass is an immovable wall of radius NAIL_SIZE.
"""
from __future__ import annotations

from ..constants import COLLIDE_EPS, NAIL_SIZE
from ..types import Mass


def collision_radius(m: Mass) -> float:
    return NAIL_SIZE if m.fixed else m.radius


def _restitution(m: Mass, other: Mass) -> float:
    ratio = 1 + (m.elastic + other.elastic) / 2
    if other.fixed:
        return ratio
    return ratio / (1 + m.mass * other.inv_mass)


def _exchange(
    m: Mass,
    other: Mass,
    vx: float, vy: float,
    ox: float, oy: float,
    dx: float, dy: float,
) -> None:
    """
    New velocity of m after hitting other.

    (vx, vy) and (ox, oy) are the pre-impact velocities of m and other and
    (dx, dy) the separation. The tangential component of m's velocity is
    kept; the normal one is exchanged.
    """
    dxq = dx * dx
    dyq = dy * dy
    sumxyq = dxq + dyq
    ratio = _restitution(m, other)

    new_vx = ((vx - (vx - ox) * ratio) * (dxq / sumxyq)
              + vx * (dyq / sumxyq)
              - (vy - oy) * ratio * (dx * dy / sumxyq))
    m.velocity[0] = new_vx
    m.velocity[1] = (new_vx - vx) * (dy / dx) + vy


def collide_pair(m1: Mass, m2: Mass) -> bool:
    """
    Resolve a collision between two live masses, if any.

    Returns:
        True if the masses were overlapping and approaching.
    """
    dx = float(m2.position[0] - m1.position[0])
    dy = float(m2.position[1] - m1.position[1])
    mag = (dx * dx + dy * dy) ** 0.5

    if mag >= collision_radius(m1) + collision_radius(m2):
        return False

    v1x, v1y = float(m1.velocity[0]), float(m1.velocity[1])
    v2x, v2y = float(m2.velocity[0]), float(m2.velocity[1])

    if not ((v1x - v2x) * dx > 0 or (v1y - v2y) * dy > 0):
        return False

    if dx == 0:
        dx = COLLIDE_EPS

    if not m1.fixed:
        _exchange(m1, m2, v1x, v1y, v2x, v2y, dx, dy)
    if not m2.fixed:
        _exchange(m2, m1, v2x, v2y, v1x, v1y, dx, dy)
    return True


def resolve_impacts(system) -> int:
    """
    Collide every overlapping, approaching pair of live masses.

    Pairs are visited in index order, so a mass's velocity already reflects
    its earlier collisions in the same tick.

    Returns:
        Number of collisions resolved.
    """
    masses = system.masses
    n = len(masses)
    hits = 0
    for i in range(n):
        m1 = masses[i]
        if not m1.alive:
            continue
        for j in range(i + 1, n):
            m2 = masses[j]
            if m2.alive and collide_pair(m1, m2):
                hits += 1
    return hits
