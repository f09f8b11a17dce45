# MIT License (see LICENSE)
"""
Numerical integrators for the spring network.

All integrators advance every movable mass of a System together, since the
spring forces couple them. They solve:
    dx/dt = v,         dv/dt = a(x, v)
where a is recomputed by an `accumulate` callback before every stage.

Available integrators:
- rk4_step: Fixed-step classical 4th-order Runge-Kutta.
- rkf45_attempt / rkf45_step: Embedded Runge-Kutta 4(5) with the Cash-Karp
  coefficients and step-size control.

Stage derivatives are stored pre-multiplied by h, so a stage is the pair
(h*v, h*a) evaluated at a trial state.

Reference:
    Runge-Kutta methods: https://en.wikipedia.org/wiki/Runge-Kutta_methods
    Cash-Karp tableau: https://en.wikipedia.org/wiki/Cash%E2%80%93Karp_method
"""
from __future__ import annotations
import logging
import math
from typing import Callable, NamedTuple, Sequence

import numpy as np

from ..constants import DT_MAX, DT_MIN, MIN_ERROR
from ..types import Mass

logger = logging.getLogger(__name__)

Accumulate = Callable[[], None]

# Classical RK4
RK4_A: tuple[tuple[float, ...], ...] = (
    (0.5,),
    (0.0, 0.5),
    (0.0, 0.0, 1.0),
)
RK4_B: tuple[float, ...] = (1 / 6, 1 / 3, 1 / 3, 1 / 6)

# Cash-Karp embedded 4(5)
CK_A: tuple[tuple[float, ...], ...] = (
    (1 / 5,),
    (3 / 40, 9 / 40),
    (3 / 10, -9 / 10, 6 / 5),
    (-11 / 54, 5 / 2, -70 / 27, 35 / 27),
    (1631 / 55296, 175 / 512, 575 / 13824, 44275 / 110592, 253 / 4096),
)
# 5th order weights (committed) and 4th order weights (error estimate)
CK_B5: tuple[float, ...] = (37 / 378, 0.0, 250 / 621, 125 / 594, 0.0, 512 / 1771)
CK_B4: tuple[float, ...] = (
    2825 / 27648, 0.0, 18575 / 48384, 13525 / 55296, 277 / 14336, 1 / 4,
)
CK_E: tuple[float, ...] = tuple(b5 - b4 for b5, b4 in zip(CK_B5, CK_B4))


class StepResult(NamedTuple):
    """
    Outcome of one adaptive attempt.

    Attributes:
        accepted: Whether the state was advanced.
        h: Step size the attempt used (after clamping).
        error: Normalized error estimate.
        next_dt: Step size to use for the next attempt or tick.
    """
    accepted: bool
    h: float
    error: float
    next_dt: float


def movers(system) -> list[Mass]:
    """The masses integrators advance: alive and not fixed."""
    return [m for m in system.masses if m.movable]


def save_snapshot(system) -> None:
    """Record the pre-step state used by the wall and collision checks."""
    for m in movers(system):
        m.old_position = m.position.copy()
        m.old_velocity = m.velocity.copy()


def _combine(m: Mass, weights: Sequence[float]) -> tuple[np.ndarray, np.ndarray]:
    """Weighted sum of the stored stages of m: (sum w*k_x, sum w*k_v)."""
    dx = np.zeros(2, dtype=np.float64)
    dv = np.zeros(2, dtype=np.float64)
    for w, (kx, kv) in zip(weights, m.stages):
        if w:
            dx += w * kx
            dv += w * kv
    return dx, dv


def _run_stages(
    ms: list[Mass],
    accumulate: Accumulate,
    h: float,
    rows: Sequence[Sequence[float]],
) -> None:
    """
    Evaluate the len(rows) + 1 stages of an explicit Runge-Kutta tableau.

    On return every mass holds its stages and is left at the last trial
    state; cur_position/cur_velocity hold the state the attempt started from.
    """
    accumulate()
    for m in ms:
        m.cur_position = m.position.copy()
        m.cur_velocity = m.velocity.copy()
        m.stages = [(m.velocity * h, m.accel * h)]

    for row in rows:
        for m in ms:
            dx, dv = _combine(m, row)
            m.position = m.cur_position + dx
            m.velocity = m.cur_velocity + dv

        accumulate()
        for m in ms:
            m.stages.append((m.velocity * h, m.accel * h))


def _commit(ms: list[Mass], weights: Sequence[float]) -> None:
    for m in ms:
        dx, dv = _combine(m, weights)
        m.position = m.cur_position + dx
        m.velocity = m.cur_velocity + dv


def _revert(ms: list[Mass]) -> None:
    for m in ms:
        m.position = m.cur_position.copy()
        m.velocity = m.cur_velocity.copy()


def rk4_step(system, h: float, accumulate: Accumulate) -> None:
    """
    Advance every movable mass by h using classical 4th-order Runge-Kutta.

    RK4 evaluates derivatives at 4 points within the timestep and combines
    them with weights (1, 2, 2, 1)/6 to achieve O(h^5) local error.
    Accelerations are recomputed before each stage.

    Args:
        system: The System to advance (modified in-place).
        h: Timestep in seconds.
        accumulate: Recomputes Mass.accel for the current positions.
    """
    ms = movers(system)
    _run_stages(ms, accumulate, h, RK4_A)
    _commit(ms, RK4_B)


def _estimate_error(ms: list[Mass], precision: float) -> float:
    """
    Largest per-mass error of the 4th order estimate, over precision.

    The per-mass error is the sum of absolute x, y, vx and vy discrepancies
    between the two embedded estimates, floored at MIN_ERROR.
    """
    maxerr = MIN_ERROR
    for m in ms:
        ex, ev = _combine(m, CK_E)
        err = float(np.sum(np.abs(ex)) + np.sum(np.abs(ev)))
        if err > maxerr or err != err:
            maxerr = err
    if precision <= 0.0:
        return math.inf
    maxerr /= precision
    if maxerr != maxerr:
        maxerr = math.inf
    return maxerr


def rkf45_attempt(system, accumulate: Accumulate, dt: float, precision: float = 1.0) -> StepResult:
    """
    One adaptive attempt with the Cash-Karp embedded 4(5) pair.

    The step is clamped to [DT_MIN, DT_MAX]. The attempt is accepted if the
    normalized error is below 1, or if the step is already at DT_MIN. On
    acceptance the 5th order estimate is committed; otherwise every movable
    mass is put back exactly where the attempt started.

    Step size update:
        accepted with error < 1:  dt_next = h * 0.9 * err^(-1/8)
        rejected:                 dt_next = h * 0.9 * err^(-1/4)
        accepted at DT_MIN:       dt_next = h

    Args:
        system: The System to advance.
        accumulate: Recomputes Mass.accel for the current positions.
        dt: Proposed step size.
        precision: Error divisor. Larger values tolerate more error.

    Returns:
        StepResult with the acceptance flag, the step used, the normalized
        error and the suggested next step.
    """
    h = max(DT_MIN, min(DT_MAX, dt))
    ms = movers(system)

    _run_stages(ms, accumulate, h, CK_A)
    err = _estimate_error(ms, precision)

    if err < 1.0:
        _commit(ms, CK_B5)
        return StepResult(True, h, err, h * 0.9 * math.exp(-math.log(err) / 8.0))

    if h > DT_MIN:
        _revert(ms)
        return StepResult(False, h, err, h * 0.9 * math.exp(-math.log(err) / 4.0))

    _commit(ms, CK_B5)
    return StepResult(True, h, err, h)


def rkf45_step(system, accumulate: Accumulate, dt: float, precision: float = 1.0) -> StepResult:
    """
    Advance the system by one accepted adaptive step.

    Attempts are repeated with shrinking step sizes until one is accepted.
    The loop is bounded: every rejection shrinks the step by at least a
    factor 0.9, and an attempt at DT_MIN is always accepted.

    Returns:
        The StepResult of the accepted attempt.
    """
    rejected = 0
    while True:
        result = rkf45_attempt(system, accumulate, dt, precision)
        if result.accepted:
            if rejected:
                logger.debug(
                    "adaptive step accepted at h=%g after %d rejections", result.h, rejected
                )
            return result
        rejected += 1
        dt = result.next_dt
