# MIT License (see LICENSE)
"""
Wall resolution, run once per tick after integration.

Walls are the four edges of the viewport, each independently enabled in the
State. A mass touches a wall when its on-screen radius reaches it:
    left:   x = r            right: x = width - r
    bottom: y = r            top:   y = height - r

For every movable mass, using its pre-step (old) and post-step state:

1. Blow-up guard: a mass whose acceleration, velocity or position is NaN
   is deleted, which also deletes its springs.
2. Sticking: a mass that was at rest against a wall stays there if the step
   would only pull it off slower than the stick threshold.
3. Bouncing: a mass that crossed a wall is put back on it with the normal
   velocity reflected and both components scaled by its elasticity. A
   rebound slower than the stick threshold leaves it at rest.

The stick threshold is STICK_MAG * dt * stickiness / mass.
"""
from __future__ import annotations
import logging

from ..constants import STICK_MAG, WALL_CONTACT
from ..types import Mass
from ..util import is_nan

logger = logging.getLogger(__name__)


def blown_up(m: Mass) -> bool:
    """True if any part of the kinematic state is NaN."""
    return is_nan(m.accel) or is_nan(m.velocity) or is_nan(m.position)


def _stick(m: Mass, state, width: float, height: float, rad: int, threshold: float) -> bool:
    """
    Keep a resting mass stuck to a wall it was touching.

    Left/right walls take precedence; top/bottom are only checked when the
    mass was not touching a side wall. Returns True if the mass stuck.
    """
    if m.old_velocity[0] != 0.0 or m.old_velocity[1] != 0.0:
        return False

    ox, oy = m.old_position
    if ((state.wall_left and abs(ox - rad) < WALL_CONTACT)
            or (state.wall_right and abs(ox - width + rad) < WALL_CONTACT)):
        stuck = abs(m.velocity[0]) < threshold
    elif ((state.wall_bottom and abs(oy - rad) < WALL_CONTACT)
            or (state.wall_top and abs(oy - height + rad) < WALL_CONTACT)):
        stuck = abs(m.velocity[1]) < threshold
    else:
        return False

    if stuck:
        m.velocity[:] = 0.0
        m.position = m.old_position.copy()
    return stuck


def _bounce(m: Mass, axis: int, wall: float, toward: float, threshold: float) -> None:
    """
    Put m on a wall it crossed along axis and reflect its velocity.

    toward is +1 for the right/top walls and -1 for left/bottom: the sign of
    the normal velocity that moves the mass into the wall.
    """
    other = 1 - axis
    m.position[axis] = wall

    v = m.velocity
    if v[axis] * toward > 0:
        v[axis] = -v[axis] * m.elastic
        v[other] *= m.elastic

        # Too slow to leave the wall
        if -v[axis] * toward < threshold:
            v[:] = 0.0


def resolve_walls(system, width: float, height: float, dt: float) -> int:
    """
    Apply the blow-up guard, sticking and bouncing to every movable mass.

    Args:
        system: The System after integration.
        width, height: Viewport size.
        dt: The step that was just taken.

    Returns:
        Number of masses deleted by the blow-up guard.
    """
    st = system.state
    stick_mag = STICK_MAG * dt * st.stickiness
    deleted = 0

    for i, m in enumerate(system.masses):
        if not m.movable:
            continue

        if blown_up(m):
            logger.warning("mass %d blew up (non-finite state); deleting it", i)
            system.delete_mass(i)
            deleted += 1
            continue

        rad = m.screen_radius
        threshold = stick_mag * m.inv_mass

        if _stick(m, st, width, height, rad, threshold):
            continue

        x, y = m.position
        ox, oy = m.old_position

        if st.wall_left and x < rad and ox >= rad:
            _bounce(m, 0, rad, -1.0, threshold)
        elif st.wall_right and x > width - rad and ox <= width - rad:
            _bounce(m, 0, width - rad, 1.0, threshold)

        if st.wall_bottom and y < rad and oy >= rad:
            _bounce(m, 1, rad, -1.0, threshold)
        elif st.wall_top and y > height - rad and oy <= height - rad:
            _bounce(m, 1, height - rad, 1.0, threshold)

    return deleted
