# MIT License (see LICENSE)
"""
The entity store: masses, springs and their connectivity.

The System owns two append-only lists. Indices handed out by create_mass()
and create_spring() stay valid for the life of the system: deletion only
clears the alive flag, and only delete_all()/reset() invalidate indices.

Springs refer to masses by index, and every mass keeps the indices of the
live springs attached to it in `parents`. Both sides must only be changed
through the mutators below so that the back-references stay consistent.

Two sentinel entities live at reserved indices from construction: a fixed,
non-alive mass whose position the host moves with the pointer, and a spring
from that mass that is switched on while the user drags a new spring out of
an existing mass.
"""
from __future__ import annotations
import copy
import logging
import math
from dataclasses import dataclass, field
from typing import NamedTuple

import numpy as np

from .constants import MASS_ONLY_SCALE, MPROXIMITY, SPROXIMITY
from .state import State
from .types import Mass, Spring, Status
from .util import f64, norm, square

logger = logging.getLogger(__name__)


class Hit(NamedTuple):
    """Result of a nearest_object() query."""
    index: int
    is_mass: bool


@dataclass
class System:
    """
    Mass/spring store plus the shared State.

    Attributes:
        state: Shared settings (current parameters, forces, walls).
        masses: Mass records, indexed by mass id.
        springs: Spring records, indexed by spring id.
    """
    state: State = field(default_factory=State)
    masses: list[Mass] = field(default_factory=list)
    springs: list[Spring] = field(default_factory=list)
    fake_mass: int = field(init=False, default=-1)
    fake_spring: int = field(init=False, default=-1)

    def __post_init__(self) -> None:
        self._init_sentinels()

    def _init_sentinels(self) -> None:
        self.fake_mass = self.create_mass()
        self.masses[self.fake_mass].status = Status.FIXED
        self.fake_spring = self.create_spring()
        self.springs[self.fake_spring].status = Status.NONE

        self.add_mass_parent(self.fake_mass, self.fake_spring)
        self.springs[self.fake_spring].m1 = self.fake_mass

    # -------------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------------

    def mass_count(self) -> int:
        return len(self.masses)

    def spring_count(self) -> int:
        return len(self.springs)

    def get_mass(self, i: int) -> Mass:
        """Unchecked access; i must come from create_mass() or iteration."""
        return self.masses[i]

    def get_spring(self, i: int) -> Spring:
        """Unchecked access; i must come from create_spring() or iteration."""
        return self.springs[i]

    def find_mass(self, i: int) -> Mass | None:
        """Checked access: None when i is not a mass index."""
        if 0 <= i < len(self.masses):
            return self.masses[i]
        return None

    def find_spring(self, i: int) -> Spring | None:
        """Checked access: None when i is not a spring index."""
        if 0 <= i < len(self.springs):
            return self.springs[i]
        return None

    def is_fake_mass(self, i: int) -> bool:
        return i == self.fake_mass

    def is_fake_spring(self, i: int) -> bool:
        return i == self.fake_spring

    def live_masses(self):
        """Yield (index, mass) for every live mass."""
        for i, m in enumerate(self.masses):
            if m.alive:
                yield i, m

    def live_springs(self):
        """Yield (index, spring) for every live spring."""
        for i, s in enumerate(self.springs):
            if s.alive:
                yield i, s

    def any_live_spring(self) -> bool:
        return any(s.alive for s in self.springs)

    # -------------------------------------------------------------------------
    # Creation and deletion
    # -------------------------------------------------------------------------

    def create_mass(self) -> int:
        """Append a default mass and return its index."""
        self.masses.append(Mass())
        return len(self.masses) - 1

    def create_spring(self) -> int:
        """Append a default spring and return its index."""
        self.springs.append(Spring())
        return len(self.springs) - 1

    def add_mass(
        self,
        x: float,
        y: float,
        mass: float | None = None,
        elastic: float | None = None,
        fixed: bool | None = None,
        velocity: tuple[float, float] = (0.0, 0.0),
    ) -> int:
        """
        Create a mass at (x, y).

        Parameters left as None are taken from the current State.

        Returns:
            The new mass index.
        """
        st = self.state
        i = self.create_mass()
        m = self.masses[i]
        m.position = f64((x, y))
        m.velocity = f64(velocity)
        m.mass = st.mass if mass is None else float(mass)
        m.elastic = st.elasticity if elastic is None else float(elastic)
        m.fixed = st.fix_mass if fixed is None else fixed
        return i

    def add_spring(
        self,
        m1: int,
        m2: int,
        ks: float | None = None,
        kd: float | None = None,
        restlen: float | None = None,
    ) -> int:
        """
        Create a spring between masses m1 and m2 and register it with both.

        ks and kd default to the current State; the rest length defaults to
        the current distance between the two masses.

        Returns:
            The new spring index.
        """
        st = self.state
        i = self.create_spring()
        s = self.springs[i]
        s.m1 = m1
        s.m2 = m2
        s.ks = st.ks if ks is None else float(ks)
        s.kd = st.kd if kd is None else float(kd)
        if restlen is None:
            restlen = norm(self.masses[m1].position - self.masses[m2].position)
        s.restlen = float(restlen)

        self.add_mass_parent(m1, i)
        self.add_mass_parent(m2, i)
        return i

    def add_mass_parent(self, which: int, parent: int) -> None:
        parents = self.masses[which].parents
        if parent not in parents:
            parents.append(parent)

    def delete_mass_parent(self, which: int, parent: int) -> None:
        m = self.masses[which]
        if m.alive and parent in m.parents:
            m.parents.remove(parent)

    def delete_spring(self, which: int) -> None:
        """Mark a spring dead and detach it from its endpoints."""
        s = self.springs[which]
        if s.alive:
            s.status = Status.NONE
            self.delete_mass_parent(s.m1, which)
            self.delete_mass_parent(s.m2, which)

    def delete_mass(self, which: int) -> None:
        """Mark a mass dead and delete every spring attached to it."""
        m = self.masses[which]
        if m.alive:
            m.status = Status.NONE
            for parent in list(m.parents):
                self.delete_spring(parent)
            if which == self.state.center_id:
                self.state.center_id = -1

    def delete_selected(self) -> None:
        """Delete every selected mass, then every selected spring."""
        for i, m in enumerate(self.masses):
            if m.selected:
                self.delete_mass(i)
        for i, s in enumerate(self.springs):
            if s.selected:
                self.delete_spring(i)

    def delete_all(self) -> None:
        """
        Remove every mass and spring. Invalidates all indices.

        The sentinel entities are recreated at their reserved indices.
        """
        self.masses.clear()
        self.springs.clear()
        self.state.center_id = -1
        self._init_sentinels()

    def reset(self) -> None:
        """Remove every entity and restore the default settings."""
        self.delete_all()
        self.state.reset()

    def reconnect_masses(self) -> None:
        """Rebuild every parents list from the live springs."""
        for m in self.masses:
            m.parents.clear()

        for i, s in self.live_springs():
            self.add_mass_parent(s.m1, i)
            self.add_mass_parent(s.m2, i)
        self.add_mass_parent(self.fake_mass, self.fake_spring)

    def copy(self) -> System:
        """Independent deep copy, for saving and restoring a snapshot."""
        return copy.deepcopy(self)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def nearest_object(self, x: float, y: float, mass_only: bool = False) -> Hit | None:
        """
        Find the mass or spring nearest to (x, y).

        Masses are always preferred: springs are only searched when no mass
        is close enough and mass_only is False.

        Returns:
            Hit(index, is_mass), or None if nothing is close.
        """
        closest = -1
        min_dist = MPROXIMITY * MPROXIMITY
        min_rating = math.inf
        if mass_only:
            min_dist *= MASS_ONLY_SCALE

        for i, m in self.live_masses():
            rating = square(m.position[0] - x) + square(m.position[1] - y)
            dist = rating - square(m.screen_radius)
            if dist < min_dist and rating < min_rating:
                min_dist = dist
                min_rating = rating
                closest = i

        if closest != -1:
            return Hit(closest, True)
        if mass_only:
            return None

        min_dist = SPROXIMITY
        for i, s in self.live_springs():
            x1, y1 = self.masses[s.m1].position
            x2, y2 = self.masses[s.m2].position

            if not (min(x1, x2) - SPROXIMITY < x < max(x1, x2) + SPROXIMITY
                    and min(y1, y2) - SPROXIMITY < y < max(y1, y2) + SPROXIMITY):
                continue

            # Distance from the line a*x + b*y + c = 0 through both endpoints
            a = y2 - y1
            b = x1 - x2
            c = y1 * x2 - y2 * x1
            length = math.hypot(a, b)
            if length == 0.0:
                continue
            dist = abs(x * a + y * b + c) / length

            if dist < min_dist:
                min_dist = dist
                closest = i

        if closest != -1:
            return Hit(closest, False)
        return None

    def anything_selected(self) -> bool:
        return any(m.selected for m in self.masses) or any(s.selected for s in self.springs)

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def select_object(self, i: int, is_mass: bool, shifted: bool = False) -> None:
        """Select one entity; with shifted, toggle its selection instead."""
        obj = self.masses[i] if is_mass else self.springs[i]
        if shifted:
            obj.selected = not obj.selected
        else:
            obj.selected = True

    def select_objects(self, x0: float, y0: float, x1: float, y1: float) -> None:
        """
        Select the live masses strictly inside the rectangle, and the live
        springs with both endpoints strictly inside it.

        The rectangle is given as its lower corner (x0, y0) and upper corner
        (x1, y1) in world coordinates, y up.
        """
        def inside(p: np.ndarray) -> bool:
            return x0 < p[0] < x1 and y0 < p[1] < y1

        for i, m in self.live_masses():
            if inside(m.position):
                self.select_object(i, True)

        for i, s in self.live_springs():
            if inside(self.masses[s.m1].position) and inside(self.masses[s.m2].position):
                self.select_object(i, False)

    def unselect_all(self) -> None:
        for m in self.masses:
            m.selected = False
        for s in self.springs:
            s.selected = False

    def select_all(self) -> None:
        for _, m in self.live_masses():
            m.selected = True
        for _, s in self.live_springs():
            s.selected = True

    def eval_selection(self) -> bool:
        """
        Copy parameters shared by the whole selection into the State.

        A mass value, elasticity, stiffness or damping is copied when every
        selected entity has the same value. The fixed flag of the first
        selected mass is copied unless some later selected mass is fixed.

        Returns:
            True if any State parameter changed.
        """
        st = self.state
        changed = False

        selected = [m for m in self.masses if m.selected]
        if selected:
            first = selected[0]
            mass_same = all(m.mass == first.mass for m in selected)
            elas_same = all(m.elastic == first.elastic for m in selected)
            fix_same = not any(m.fixed for m in selected[1:])

            if mass_same and first.mass != st.mass:
                st.mass = first.mass
                changed = True
            if elas_same and first.elastic != st.elasticity:
                st.elasticity = first.elastic
                changed = True
            if fix_same and first.fixed != st.fix_mass:
                st.fix_mass = first.fixed
                changed = True

        chosen = [s for s in self.springs if s.selected]
        if chosen:
            first_s = chosen[0]
            ks_same = all(s.ks == first_s.ks for s in chosen)
            kd_same = all(s.kd == first_s.kd for s in chosen)

            if ks_same and first_s.ks != st.ks:
                st.ks = first_s.ks
                changed = True
            if kd_same and first_s.kd != st.kd:
                st.kd = first_s.kd
                changed = True

        return changed

    def duplicate_selected(self) -> None:
        """
        Duplicate the selected masses and the springs among them.

        A duplicated spring is rewired to the duplicates of its endpoints.
        If neither endpoint was duplicated the copy is deleted again; if only
        one was, the copy keeps the other original endpoint.
        """
        spring_start = len(self.springs)
        mapping: dict[int, int] = {}

        for i in range(len(self.masses)):
            m = self.masses[i]
            if m.selected:
                self.masses.append(m.duplicate())
                mapping[i] = len(self.masses) - 1

        for i in range(spring_start):
            s = self.springs[i]
            if not s.selected:
                continue

            which = self.create_spring()
            twin = s.duplicate()
            self.springs[which] = twin

            m1_done = twin.m1 in mapping
            m2_done = twin.m2 in mapping
            if not m1_done and not m2_done:
                # The copy would not be connected to anything new
                self.delete_spring(which)
                continue

            twin.m1 = mapping.get(twin.m1, twin.m1)
            twin.m2 = mapping.get(twin.m2, twin.m2)
            self.add_mass_parent(twin.m1, which)
            self.add_mass_parent(twin.m2, which)

        logger.debug("duplicated %d masses", len(mapping))

    # -------------------------------------------------------------------------
    # Bulk edits on the selection
    # -------------------------------------------------------------------------

    def move_selected_masses(self, dx: float, dy: float) -> None:
        delta = f64((dx, dy))
        for m in self.masses:
            if m.selected:
                m.position += delta

    def set_mass_velocity(self, vx: float, vy: float, relative: bool = False) -> None:
        """Set (or with relative, add to) the velocity of the selected masses."""
        v = f64((vx, vy))
        for m in self.masses:
            if m.selected:
                if relative:
                    m.velocity += v
                else:
                    m.velocity = v.copy()

    def set_temp_fixed(self, store: bool) -> None:
        """
        Temporarily fix the selected masses while they are dragged.

        With store, every selected mass that is not already fixed is fixed and
        tagged temp-fixed. Without, the tagged masses are released.
        """
        for m in self.masses:
            if not m.selected:
                continue
            if store:
                m.temp_fixed = False
                if not m.fixed:
                    m.temp_fixed = True
                    m.fixed = True
            elif m.temp_fixed:
                m.fixed = False

    def set_rest_length(self) -> None:
        """Set each selected spring's rest length to its current length."""
        for s in self.springs:
            if s.selected:
                s.restlen = norm(self.masses[s.m1].position - self.masses[s.m2].position)

    def set_center(self) -> None:
        """Make the single selected mass the centering reference."""
        selected = [i for i, m in enumerate(self.masses) if m.selected]
        if len(selected) == 1:
            self.state.center_id = selected[0]

    def clear_center(self) -> None:
        self.state.center_id = -1

    def set_selected_mass(self, value: float) -> None:
        """Set the current mass and apply it to every selected mass."""
        self.state.mass = value
        for m in self.masses:
            if m.selected:
                m.mass = value

    def set_selected_elasticity(self, value: float) -> None:
        self.state.elasticity = value
        for m in self.masses:
            if m.selected:
                m.elastic = value

    def set_selected_fixed(self, fixed: bool) -> None:
        self.state.fix_mass = fixed
        for m in self.masses:
            if m.selected:
                m.fixed = fixed
                m.temp_fixed = False

    def set_selected_ks(self, value: float) -> None:
        self.state.ks = value
        for s in self.springs:
            if s.selected:
                s.ks = value

    def set_selected_kd(self, value: float) -> None:
        self.state.kd = value
        for s in self.springs:
            if s.selected:
                s.kd = value

    # -------------------------------------------------------------------------
    # Drag sentinels
    # -------------------------------------------------------------------------

    def attach_fake_spring(self, to_mass: int) -> None:
        """Switch on the drag spring between the pointer and a mass."""
        self.add_mass_parent(self.fake_mass, self.fake_spring)
        s = self.springs[self.fake_spring]
        s.m2 = to_mass
        s.alive = True
        s.ks = self.state.ks
        s.kd = self.state.kd

    def kill_fake_spring(self) -> None:
        self.springs[self.fake_spring].alive = False

    def move_fake_mass(self, x: float, y: float) -> None:
        self.masses[self.fake_mass].position = f64((x, y))
