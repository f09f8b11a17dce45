# MIT License (see LICENSE)
import math

import numpy as np
from spring_sim.constants import DT_MAX, DT_MIN
from spring_sim.core.forces import accumulate_accel
from spring_sim.core.integrators import (
    CK_A, CK_B4, CK_B5, rk4_step, rkf45_attempt, rkf45_step,
)
from spring_sim.core.invariants import kinetic_energy, spring_energy, linear_momentum
from spring_sim.state import Force
from spring_sim.system import System

W, H = 640.0, 480.0


def _acc(system):
    return lambda: accumulate_accel(system, W, H)


def _oscillator(ks=1.0, stretch=10.0):
    """Two unit masses joined by an undamped spring, stretched along x."""
    system = System()
    a = system.add_mass(270.0 - stretch / 2, 240.0)
    b = system.add_mass(370.0 + stretch / 2, 240.0)
    system.add_spring(a, b, ks=ks, kd=0.0, restlen=100.0)
    return system, a, b


def _separation(system, a, b):
    return float(system.get_mass(b).position[0] - system.get_mass(a).position[0])


def test_cash_karp_tableau_rows_are_consistent():
    """Each row sums to its node, and both weight sets sum to one."""
    nodes = (1 / 5, 3 / 10, 3 / 5, 1.0, 7 / 8)
    for row, c in zip(CK_A, nodes):
        assert math.isclose(sum(row), c, rel_tol=1e-12)
    assert math.isclose(sum(CK_B5), 1.0, rel_tol=1e-12)
    assert math.isclose(sum(CK_B4), 1.0, rel_tol=1e-12)


def test_rk4_resting_free_mass_unchanged():
    system = System()
    a = system.add_mass(100.0, 100.0)

    rk4_step(system, 0.025, _acc(system))

    m = system.get_mass(a)
    assert np.allclose(m.position, [100.0, 100.0])
    assert np.allclose(m.velocity, [0.0, 0.0])


def test_rk4_free_mass_moves_in_straight_line():
    system = System()
    a = system.add_mass(100.0, 100.0, velocity=(10.0, -4.0))

    rk4_step(system, 0.1, _acc(system))

    m = system.get_mass(a)
    assert np.allclose(m.position, [101.0, 99.6])
    assert np.allclose(m.velocity, [10.0, -4.0])


def test_rk4_constant_gravity_is_exact():
    """
    Analytic (constant g):
      y(t) = y0 + 1/2 g t^2
    RK4 integrates a quadratic exactly.
    """
    system = System()
    a = system.add_mass(100.0, 300.0)
    system.state.enable(Force.GRAVITY, 10.0, 0.0)

    for _ in range(10):
        rk4_step(system, 0.05, _acc(system))

    m = system.get_mass(a)
    print("freefall y", m.position[1], "v", m.velocity[1])
    assert math.isclose(m.position[1], 300.0 - 0.5 * 10.0 * 0.25, rel_tol=1e-12)
    assert math.isclose(m.velocity[1], -5.0, rel_tol=1e-12)


def test_rk4_fixed_mass_untouched():
    system = System()
    a = system.add_mass(100.0, 100.0, fixed=True, velocity=(5.0, 0.0))
    system.state.enable(Force.GRAVITY)
    rk4_step(system, 0.1, _acc(system))
    assert np.array_equal(system.get_mass(a).position, [100.0, 100.0])


def test_rk4_harmonic_period():
    """
    Two unit masses, ks = 1: the separation oscillates with
    omega = sqrt(2 ks / m), so after one period T = 2 pi / sqrt(2) the
    stretch is back to its initial value.
    """
    system, a, b = _oscillator()
    T = 2 * math.pi / math.sqrt(2.0)
    n = 440
    h = T / n

    half = None
    for k in range(n):
        rk4_step(system, h, _acc(system))
        if k == n // 2 - 1:
            half = _separation(system, a, b)

    final = _separation(system, a, b)
    print("separation at T/2", half, "at T", final)
    assert abs(half - 90.0) < 1e-3
    assert abs(final - 110.0) < 1e-3
    assert np.allclose(linear_momentum(system), [0.0, 0.0], atol=1e-9)


def test_rk4_energy_conserved_without_damping():
    system, a, b = _oscillator()
    e0 = kinetic_energy(system) + spring_energy(system)
    for _ in range(500):
        rk4_step(system, 0.01, _acc(system))
    e1 = kinetic_energy(system) + spring_energy(system)
    print("energy", e0, e1)
    assert abs(e1 - e0) / e0 < 1e-6


def test_rkf45_accepts_smooth_step_and_grows_dt():
    system, a, b = _oscillator()
    result = rkf45_attempt(system, _acc(system), 0.01)
    print("rkf45", result)
    assert result.accepted
    assert result.h == 0.01
    assert result.next_dt > result.h


def test_rkf45_clamps_step():
    system, a, b = _oscillator()
    result = rkf45_attempt(system, _acc(system), 10.0)
    assert result.h == DT_MAX


def test_rkf45_rejection_restores_state_exactly():
    """A stiff spring with a huge step is rejected and leaves no trace."""
    system, a, b = _oscillator(ks=1e6)
    before = [(m.position.copy(), m.velocity.copy()) for m in system.masses]

    result = rkf45_attempt(system, _acc(system), 0.5)

    assert not result.accepted
    assert result.next_dt < result.h
    for (p, v), m in zip(before, system.masses):
        assert np.array_equal(p, m.position)
        assert np.array_equal(v, m.velocity)


def test_rkf45_step_eventually_accepts():
    system, a, b = _oscillator(ks=1e6)
    result = rkf45_step(system, _acc(system), 0.5)
    print("accepted", result)
    assert result.accepted
    assert DT_MIN <= result.h < 0.5
    assert result.error < 1.0 or result.h == DT_MIN
    assert _separation(system, a, b) < 110.0


def test_rkf45_precision_loosens_tolerance():
    strict, _, _ = _oscillator(ks=50.0)
    loose, _, _ = _oscillator(ks=50.0)
    r1 = rkf45_attempt(strict, _acc(strict), 0.2, precision=1.0)
    r2 = rkf45_attempt(loose, _acc(loose), 0.2, precision=1e6)
    assert math.isclose(r2.error * 1e6, r1.error, rel_tol=1e-9)


def test_rkf45_retries_shrink_and_restore_every_time():
    """
    Drive the retry loop by hand under a stiff spring: each rejected
    attempt leaves the masses exactly as they were, and each retry uses a
    strictly smaller step than the one before.
    """
    system, a, b = _oscillator(ks=1e6)
    before = [(m.position.copy(), m.velocity.copy()) for m in system.masses]

    steps = []
    dt = 0.5
    while True:
        result = rkf45_attempt(system, _acc(system), dt)
        steps.append(result.h)
        if result.accepted:
            break
        for (p, v), m in zip(before, system.masses):
            assert np.array_equal(p, m.position)
            assert np.array_equal(v, m.velocity)
        dt = result.next_dt

    print("attempted steps", steps)
    assert len(steps) > 1
    assert all(h1 < h0 for h0, h1 in zip(steps, steps[1:]))


def test_rkf45_zero_precision_falls_to_min_step():
    """With no error tolerance every attempt fails until the step reaches DT_MIN."""
    system, a, b = _oscillator()

    rejected = rkf45_attempt(system, _acc(system), 0.01, precision=0.0)
    assert not rejected.accepted
    assert rejected.error == math.inf

    result = rkf45_step(system, _acc(system), 0.01, precision=0.0)
    assert result.accepted
    assert result.h == DT_MIN
    assert result.next_dt == DT_MIN
