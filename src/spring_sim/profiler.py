# MIT License (see LICENSE)
"""
Section timing for the phases of Physics.advance().

The driver times the "integrate", "walls" and "impacts" phases when a Profiler
is attached; without one, timing costs nothing.

Example:
    profiler = Profiler()
    physics = Physics(system, profiler=profiler)
    for _ in range(100):
        physics.advance()
    print(profiler.stats.summary())
"""
from __future__ import annotations
import time
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass, field
from typing import Iterator


@dataclass
class ProfileStats:
    """
    Accumulates timing samples per section name.

    Provides summary statistics (count, mean, max, total).
    """
    samples: dict[str, list[float]] = field(default_factory=dict)

    def add(self, name: str, dt: float) -> None:
        """Record a timing sample (in seconds) for a named section."""
        self.samples.setdefault(name, []).append(dt)

    def clear(self) -> None:
        self.samples.clear()

    def summary(self) -> dict[str, dict[str, float]]:
        """
        Compute summary statistics for all recorded sections.

        Returns:
            Dict mapping section name to a dict with keys 'n', 'mean_ms',
            'max_ms' and 'total_ms'.
        """
        out = {}
        for name, times in self.samples.items():
            n = len(times)
            total = sum(times)
            out[name] = {
                "n": n,
                "mean_ms": 1e3 * total / n,
                "max_ms": 1e3 * max(times),
                "total_ms": 1e3 * total,
            }
        return out


class Profiler:
    """Context-manager based profiler for timing code sections."""

    def __init__(self) -> None:
        self.stats = ProfileStats()

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Time the enclosed block under `name`."""
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self.stats.add(name, time.perf_counter() - t0)


def section(profiler: Profiler | None, name: str):
    """profiler.section(name), or a no-op context when profiler is None."""
    if profiler is None:
        return nullcontext()
    return profiler.section(name)
