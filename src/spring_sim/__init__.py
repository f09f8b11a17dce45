# MIT License (see LICENSE)
"""
spring_sim - A planar mass-spring simulation engine.

This package provides the simulation core of an XSpringies-style editor:
an indexed store of point masses and damped springs, a force accumulator,
RK4 and adaptive RKF45 integration, wall and pairwise collision handling,
and redraw batching for a host timer.

Main entry points:
    - System: The mass/spring store plus the shared settings.
    - State: Current parameters, applied forces, walls and integrator mode.
    - Physics: Advances a System once per host timer tick.
    - Mass, Spring: The entity records.

Submodules:
    - core: Force generators, integrators and invariants.
    - collision: Wall and mass-mass collision resolution.
    - io: .xsp and JSON load/save.
    - profiler: Optional per-phase timing.

Example:
    from spring_sim import System, Physics, Force

    system = System()
    system.state.enable(Force.GRAVITY)
    a = system.add_mass(300, 400, fixed=True)
    b = system.add_mass(340, 400)
    system.add_spring(a, b)

    physics = Physics(system, width=640, height=480)
    if physics.advance():
        ...  # redraw
"""
from .logging_config import setup_logging
from .physics import Physics
from .profiler import Profiler
from .state import Force, State
from .system import Hit, System
from .types import Mass, Spring, Status

__all__ = [
    # Core simulation
    "System",
    "Physics",
    "State",
    "Force",
    # Entities
    "Mass",
    "Spring",
    "Status",
    "Hit",
    # Tooling
    "Profiler",
    "setup_logging",
]
