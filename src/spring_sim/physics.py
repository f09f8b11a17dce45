# MIT License (see LICENSE)
"""
The per-tick simulation driver.

Physics binds a System to a viewport and advances it once per host timer
tick. Each advance():
    1. Snapshots the movable masses (pre-step state for walls).
    2. Integrates: fixed-step RK4, or adaptive RKF45 when enabled. Without
       any live spring the tick always uses RK4 at DEF_TSTEP.
    3. Resolves walls (blow-up guard, sticking, bouncing).
    4. Resolves pairwise impacts, when enabled.
    5. Reports whether the host should redraw.

Structure:
    - Host creates a System and fills it (directly or through spring_sim.io).
    - Host creates Physics(system, width, height).
    - Host calls physics.advance() from its timer and redraws on True.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field

from .constants import DEF_TSTEP, REDRAW_TICKS, REDRAW_TIME
from .core.forces import accumulate_accel
from .core.integrators import rk4_step, rkf45_step, save_snapshot
from .collision.impact import resolve_impacts
from .collision.walls import resolve_walls
from .profiler import Profiler, section
from .system import System

logger = logging.getLogger(__name__)


@dataclass
class Physics:
    """
    Simulation driver for one System.

    Attributes:
        system: The store to advance. Settings are read from system.state.
        width: Viewport width; the right wall is at x = width - r.
        height: Viewport height; the top wall is at y = height - r.
        profiler: Optional Profiler for per-phase timing.
        time: Total simulated time.
    """
    system: System
    width: float = 640.0
    height: float = 480.0
    profiler: Profiler | None = None
    time: float = 0.0

    # Redraw batching
    _elapsed: float = field(default=0.0, init=False, repr=False)
    _ticks_since: int = field(default=0, init=False, repr=False)

    def accumulate(self) -> None:
        """Recompute the acceleration of every movable mass."""
        accumulate_accel(self.system, self.width, self.height)

    def _integrate(self) -> float:
        """
        Take one integration step.

        Returns:
            The step size actually used.
        """
        st = self.system.state

        if not self.system.any_live_spring():
            rk4_step(self.system, DEF_TSTEP, self.accumulate)
            return DEF_TSTEP

        if st.adaptive_step:
            result = rkf45_step(self.system, self.accumulate, st.dt, st.precision)
            st.dt = result.next_dt
            return result.h

        rk4_step(self.system, st.dt, self.accumulate)
        return st.dt

    def advance(self) -> bool:
        """
        Advance the simulation by one tick.

        Returns:
            True when the host should redraw: once at least REDRAW_TIME of
            simulated time has built up, or after REDRAW_TICKS ticks.
        """
        prof = self.profiler

        save_snapshot(self.system)

        with section(prof, "integrate"):
            h = self._integrate()

        with section(prof, "walls"):
            resolve_walls(self.system, self.width, self.height, h)

        if self.system.state.collide:
            with section(prof, "impacts"):
                resolve_impacts(self.system)

        self.time += h
        return self._redraw_due(h)

    def _redraw_due(self, h: float) -> bool:
        self._elapsed += h
        self._ticks_since += 1

        if self._elapsed >= REDRAW_TIME or self._ticks_since >= REDRAW_TICKS:
            self._elapsed = 0.0
            self._ticks_since = 0
            return True
        return False

    def run(self, seconds: float) -> int:
        """
        Advance until at least `seconds` of simulated time have passed.

        Returns:
            Number of ticks taken.
        """
        end = self.time + seconds
        ticks = 0
        while self.time < end:
            self.advance()
            ticks += 1
        return ticks
