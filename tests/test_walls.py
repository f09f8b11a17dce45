# MIT License (see LICENSE)
import math

import numpy as np
from spring_sim.collision.walls import resolve_walls
from spring_sim.constants import DEF_TSTEP
from spring_sim.core.integrators import save_snapshot
from spring_sim.physics import Physics
from spring_sim.state import Force
from spring_sim.system import System


def test_unit_mass_screen_radius():
    system = System()
    m = system.get_mass(system.add_mass(100.0, 100.0, mass=1.0))
    assert m.radius == 3
    assert m.screen_radius == 15


def test_bounce_off_left_wall():
    """
    A unit mass (screen radius 15) at x = 20 moving left at 400 crosses the
    wall in one default tick, is put back at x = 15 and rebounds at
    400 * elasticity.
    """
    system = System()
    a = system.add_mass(20.0, 240.0, elastic=0.8, velocity=(-400.0, 0.0))
    physics = Physics(system, width=640.0, height=480.0)

    physics.advance()

    m = system.get_mass(a)
    print("after bounce", m.position, m.velocity)
    assert m.position[0] == 15.0
    assert math.isclose(m.velocity[0], 320.0)
    assert m.velocity[1] == 0.0


def test_bounce_scales_tangential_velocity():
    system = System()
    a = system.add_mass(320.0, 460.0, elastic=0.5, velocity=(10.0, 400.0))
    Physics(system).advance()

    m = system.get_mass(a)
    assert m.position[1] == 480.0 - 15.0
    assert np.allclose(m.velocity, [5.0, -200.0])


def test_disabled_wall_lets_mass_through():
    system = System()
    a = system.add_mass(20.0, 240.0, velocity=(-400.0, 0.0))
    system.state.wall_left = False
    Physics(system).advance()
    assert system.get_mass(a).position[0] < 15.0


def test_sticky_floor_holds_resting_mass():
    """
    A mass resting on the floor under gravity stays put when the pull of one
    tick is below the stick threshold STICK_MAG * dt * stickiness / m.
    """
    system = System()
    a = system.add_mass(320.0, 15.0)
    system.state.enable(Force.GRAVITY, 10.0, 0.0)
    system.state.stickiness = 100.0
    physics = Physics(system)

    for _ in range(5):
        physics.advance()

    m = system.get_mass(a)
    assert np.array_equal(m.position, [320.0, 15.0])
    assert np.array_equal(m.velocity, [0.0, 0.0])


def test_slow_rebound_comes_to_rest():
    system = System()
    a = system.add_mass(320.0, 15.0)
    system.state.enable(Force.GRAVITY, 10.0, 0.0)
    system.state.stickiness = 100.0
    # Not at rest, so sticking does not apply; the rebound is below threshold
    system.get_mass(a).velocity[1] = -1.0

    Physics(system).advance()

    m = system.get_mass(a)
    threshold = 1.0 * DEF_TSTEP * 100.0
    print("rebound", m.velocity, "threshold", threshold)
    assert m.position[1] == 15.0
    assert np.array_equal(m.velocity, [0.0, 0.0])


def test_non_sticky_floor_bounces():
    system = System()
    a = system.add_mass(320.0, 15.0)
    system.state.enable(Force.GRAVITY, 10.0, 0.0)
    Physics(system).advance()

    m = system.get_mass(a)
    assert m.position[1] == 15.0
    assert m.velocity[1] > 0.0


def test_nan_mass_deleted_with_springs():
    system = System()
    a = system.add_mass(100.0, 100.0)
    b = system.add_mass(200.0, 100.0)
    s = system.add_spring(a, b)
    save_snapshot(system)
    system.get_mass(a).velocity[0] = float("nan")

    deleted = resolve_walls(system, 640.0, 480.0, DEF_TSTEP)

    assert deleted == 1
    assert not system.get_mass(a).alive
    assert not system.get_spring(s).alive
    assert system.get_mass(b).alive
    assert system.get_mass(b).parents == []


def test_fixed_mass_ignores_walls():
    system = System()
    a = system.add_mass(5.0, 5.0, fixed=True)
    save_snapshot(system)
    resolve_walls(system, 640.0, 480.0, DEF_TSTEP)
    assert np.array_equal(system.get_mass(a).position, [5.0, 5.0])
