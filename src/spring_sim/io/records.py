# MIT License (see LICENSE)
"""
Format-independent part of loading a spring network.

Both file formats are parsed into MassRecord/SpringRecord lists, which are
then merged into a System here. File mass indices are only labels: each
loaded mass gets a fresh store index and springs are rewired through the
resulting mapping.

Conventions shared by the formats:
- A negative mass means a fixed mass of the same magnitude.
- A mass of 0 is read as 1.0.
- A spring is dropped if neither endpoint refers to a loaded mass, or if an
  endpoint refers to no mass at all.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass

from ..system import System
from ..util import f64

logger = logging.getLogger(__name__)


@dataclass
class MassRecord:
    index: int
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    mass: float = 1.0
    elastic: float = 1.0


@dataclass
class SpringRecord:
    index: int
    m1: int
    m2: int
    ks: float = 1.0
    kd: float = 1.0
    restlen: float = 0.0


def merge_records(
    system: System,
    masses: list[MassRecord],
    springs: list[SpringRecord],
    select_new: bool = False,
    center_id: int | None = None,
) -> dict[int, int]:
    """
    Append loaded masses and springs to a System.

    Args:
        system: Target store.
        masses: Loaded masses, in file order.
        springs: Loaded springs, in file order.
        select_new: Select every appended entity.
        center_id: File index of the center mass, if the file sets one.

    Returns:
        Mapping from file mass index to store index.
    """
    mapping: dict[int, int] = {}

    for rec in masses:
        i = system.create_mass()
        m = system.get_mass(i)
        m.position = f64((rec.x, rec.y))
        m.velocity = f64((rec.vx, rec.vy))
        m.mass = rec.mass
        m.elastic = rec.elastic
        if m.mass < 0:
            m.mass = -m.mass
            m.fixed = True
        if m.mass == 0:
            m.mass = 1.0
        mapping.setdefault(rec.index, i)
        if select_new:
            system.select_object(i, True)

    count = system.mass_count()
    for rec in springs:
        if rec.m1 not in mapping and rec.m2 not in mapping:
            logger.warning("spring %d not connected to a loaded mass; dropped", rec.index)
            continue
        m1 = mapping.get(rec.m1, rec.m1)
        m2 = mapping.get(rec.m2, rec.m2)
        if not (0 <= m1 < count and 0 <= m2 < count):
            logger.warning("spring %d refers to a missing mass; dropped", rec.index)
            continue

        j = system.create_spring()
        s = system.get_spring(j)
        s.m1 = m1
        s.m2 = m2
        s.ks = rec.ks
        s.kd = rec.kd
        s.restlen = rec.restlen
        if select_new:
            system.select_object(j, False)

    system.reconnect_masses()

    if center_id is not None:
        system.state.center_id = mapping.get(center_id, -1)

    return mapping
