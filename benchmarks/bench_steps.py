"""
Microbenchmark: time per tick vs number of masses.
Run:
  python benchmarks/bench_steps.py
"""
import time
import numpy as np
from spring_sim import Force, Physics, System
from spring_sim.profiler import Profiler

def run(n: int, ticks: int = 200, adaptive: bool = False):
    prof = Profiler()
    system = System()
    system.state.enable(Force.GRAVITY, 10.0, 0.0)
    system.state.adaptive_step = adaptive
    system.state.collide = True

    rng = np.random.default_rng(12345)  # determinism (no randomness elsewhere)

    # spawn a grid of masses with small random jitter, joined to their
    # right and upper neighbours
    side = int(np.ceil(np.sqrt(n)))
    grid = {}
    k = 0
    for iy in range(side):
        for ix in range(side):
            if k >= n:
                break
            x = 100.0 + 20.0 * ix + 0.5 * float(rng.normal())
            y = 100.0 + 20.0 * iy + 0.5 * float(rng.normal())
            grid[ix, iy] = system.add_mass(x, y, mass=1.0, elastic=0.5)
            k += 1
    for (ix, iy), i in grid.items():
        for nb in ((ix + 1, iy), (ix, iy + 1)):
            if nb in grid:
                system.add_spring(i, grid[nb], ks=20.0, kd=0.5)

    physics = Physics(system, width=1024, height=768, profiler=prof)

    # warmup
    for _ in range(10):
        physics.advance()
    prof.stats.clear()

    t0 = time.perf_counter()
    for _ in range(ticks):
        physics.advance()
    t1 = time.perf_counter()

    total = t1 - t0
    per_tick = total / ticks
    return per_tick, prof.stats.summary()

if __name__ == "__main__":
    for adaptive in (False, True):
        print("adaptive" if adaptive else "fixed-step RK4")
        for n in [10, 50, 100, 250]:
            per_tick, summary = run(n, adaptive=adaptive)
            print(f"N={n:4d}  tick={1e3*per_tick:8.3f} ms  ticks/s={1/per_tick:8.1f}")
            # print sections
            for k in ["integrate", "walls", "impacts"]:
                if k in summary:
                    print(" ", k, summary[k])
            print()
