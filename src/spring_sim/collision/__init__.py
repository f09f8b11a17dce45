# MIT License (see LICENSE)
"""
Collision resolution for point masses.

This subpackage provides:
    - Walls: Blow-up guard, sticking and bouncing off the viewport edges.
    - Impacts: Pairwise elastic collisions between masses.

Typical usage:
    from spring_sim.collision import resolve_walls, resolve_impacts

    resolve_walls(system, width, height, dt)
    if system.state.collide:
        resolve_impacts(system)
"""
from .impact import collide_pair, collision_radius, resolve_impacts
from .walls import blown_up, resolve_walls

__all__ = [
    # Walls
    "blown_up",
    "resolve_walls",
    # Impacts
    "collide_pair",
    "collision_radius",
    "resolve_impacts",
]
