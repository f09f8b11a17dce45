# MIT License (see LICENSE)
"""
Core physics simulation components.

This subpackage provides:
    - Force generators: Gravity, drag, center of mass, point, wall and
      spring forces, composed by accumulate_accel().
    - Integrators: Fixed-step RK4 and adaptive RKF45 (Cash-Karp).
    - Invariants: Energy and momentum diagnostics.

Typical usage:
    from spring_sim.core import accumulate_accel, rk4_step

    rk4_step(system, 0.025, lambda: accumulate_accel(system, 640, 480))
"""
from .forces import (
    accumulate_accel,
    apply_gravity_and_drag,
    apply_point_attraction,
    apply_spring_forces,
    apply_wall_forces,
    center_of_mass_accel,
    gravity_vector,
    reference_point,
    spring_force,
)
from .integrators import StepResult, rk4_step, rkf45_attempt, rkf45_step, save_snapshot
from .invariants import centroid, kinetic_energy, linear_momentum, spring_energy

__all__ = [
    # Forces
    "accumulate_accel",
    "apply_gravity_and_drag",
    "apply_point_attraction",
    "apply_spring_forces",
    "apply_wall_forces",
    "center_of_mass_accel",
    "gravity_vector",
    "reference_point",
    "spring_force",
    # Integrators
    "StepResult",
    "rk4_step",
    "rkf45_attempt",
    "rkf45_step",
    "save_snapshot",
    # Invariants
    "centroid",
    "kinetic_energy",
    "linear_momentum",
    "spring_energy",
]
