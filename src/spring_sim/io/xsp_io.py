# MIT License (see LICENSE)
"""
XSpringies text format (.xsp).

A file starts with the magic line "#1.0" followed by one command per line,
each a keyword and whitespace separated values:

    cmas <mass>                     current mass
    elas <elasticity>               current elasticity
    kspr <ks>                       current spring stiffness
    kdmp <kd>                       current spring damping
    fixm <0|1>                      new masses fixed
    shws <0|1>                      show springs
    cent <mass index>               center mass (-1 for none)
    frce <0-3> <0|1> <value> <misc> applied force settings
    frce 4 <0|1> 0 0                pairwise collisions
    visc <viscosity>
    stck <stickiness>
    step <dt>
    prec <precision>
    adpt <0|1>                      adaptive timestep
    gsnp <size> <0|1>               grid snap
    wall <top> <left> <right> <bottom>
    mass <index> <x> <y> <vx> <vy> <mass> <elasticity>
    spng <index> <m1> <m2> <ks> <kd> <restlen>

A negative mass is a fixed mass. In insert mode only "mass" and "spng"
lines are read.
"""
from __future__ import annotations
import logging
import os

from ..state import Force, State
from ..system import System
from .records import MassRecord, SpringRecord, merge_records

logger = logging.getLogger(__name__)

MAGIC = "#1.0"
FILE_EXT = ".xsp"


def extend_path(path: str) -> str:
    """Append the .xsp extension if missing."""
    return path if path.endswith(FILE_EXT) else path + FILE_EXT


def _flag(v: str) -> bool:
    return int(v) != 0


def _apply_setting(state: State, cmd: str, args: list[str]) -> bool:
    """
    Apply a settings command to state.

    Returns:
        False if the command is unknown.
    """
    if cmd == "cmas":
        state.mass = float(args[0])
    elif cmd == "elas":
        state.elasticity = float(args[0])
    elif cmd == "kspr":
        state.ks = float(args[0])
    elif cmd == "kdmp":
        state.kd = float(args[0])
    elif cmd == "fixm":
        state.fix_mass = _flag(args[0])
    elif cmd == "shws":
        state.show_spring = _flag(args[0])
    elif cmd == "frce":
        which = int(args[0])
        if 0 <= which < len(Force):
            state.force_enabled[which] = _flag(args[1])
            state.force_value[which] = float(args[2])
            state.force_misc[which] = float(args[3])
        elif which == len(Force):
            state.collide = _flag(args[1])
    elif cmd == "visc":
        state.viscosity = float(args[0])
    elif cmd == "stck":
        state.stickiness = float(args[0])
    elif cmd == "step":
        state.dt = float(args[0])
    elif cmd == "prec":
        state.precision = float(args[0])
    elif cmd == "adpt":
        state.adaptive_step = _flag(args[0])
    elif cmd == "gsnp":
        state.grid_size = float(args[0])
        state.grid_snap = _flag(args[1])
    elif cmd == "wall":
        state.set_walls(*(_flag(a) for a in args[:4]))
    else:
        return False
    return True


def read_xsp(lines, system: System, insert: bool = False) -> dict[int, int]:
    """
    Read .xsp content into a System.

    Args:
        lines: Iterable of text lines, magic line first.
        system: Target store. Reset unless insert is True, and only once
            every line has parsed.
        insert: Merge into the existing network. Settings are ignored and,
            if nothing is selected, the inserted entities are selected.

    Returns:
        Mapping from file mass index to store index.

    Raises:
        ValueError: If the magic line is missing or a line is malformed.
    """
    it = iter(lines)
    first = next(it, None)
    if first is None or not first.startswith(MAGIC):
        raise ValueError(f"Not an XSpringies file (expected '{MAGIC}' header)")

    # Settings go to a scratch State so a malformed line leaves system intact
    loaded = State()
    masses: list[MassRecord] = []
    springs: list[SpringRecord] = []
    center_id: int | None = None

    for lineno, line in enumerate(it, start=2):
        parts = line.split()
        if not parts:
            continue
        cmd, args = parts[0], parts[1:]
        try:
            if cmd == "mass":
                masses.append(MassRecord(
                    index=int(args[0]),
                    x=float(args[1]), y=float(args[2]),
                    vx=float(args[3]), vy=float(args[4]),
                    mass=float(args[5]), elastic=float(args[6]),
                ))
            elif cmd == "spng":
                springs.append(SpringRecord(
                    index=int(args[0]),
                    m1=int(args[1]), m2=int(args[2]),
                    ks=float(args[3]), kd=float(args[4]), restlen=float(args[5]),
                ))
            elif insert:
                continue
            elif cmd == "cent":
                center_id = int(args[0])
            elif not _apply_setting(loaded, cmd, args):
                logger.warning("line %d: unknown command '%s'", lineno, cmd)
        except (IndexError, ValueError) as exc:
            raise ValueError(f"line {lineno}: malformed '{cmd}' command") from exc

    if insert:
        select_new = not system.anything_selected()
    else:
        system.reset()
        system.state.assign(loaded)
        select_new = False
    return merge_records(system, masses, springs, select_new, center_id)


def load_xsp(path: str, system: System, insert: bool = False) -> dict[int, int]:
    """
    Load (or with insert, merge) an .xsp file into a System.

    The .xsp extension is added to path if missing.

    Raises:
        FileNotFoundError: If the file cannot be found.
        ValueError: If the content is not a valid .xsp file.
    """
    path = extend_path(path)
    with open(path, "r", encoding="utf-8") as f:
        mapping = read_xsp(f, system, insert)
    logger.info("%s %s: %d masses", "inserted" if insert else "loaded",
                os.path.basename(path), len(mapping))
    return mapping


def _num(v: float) -> str:
    return f"{v:.12g}"


def _bit(b: bool) -> str:
    return "1" if b else "0"


def format_xsp(system: System) -> str:
    """Serialize the settings and every live mass and spring to .xsp text."""
    st = system.state
    out = [
        f"{MAGIC} *** XSpringies data file",
        f"cmas {_num(st.mass)}",
        f"elas {_num(st.elasticity)}",
        f"kspr {_num(st.ks)}",
        f"kdmp {_num(st.kd)}",
        f"fixm {_bit(st.fix_mass)}",
        f"shws {_bit(st.show_spring)}",
        f"cent {st.center_id}",
    ]
    for force in Force:
        out.append(
            f"frce {int(force)} {_bit(st.force_enabled[force])} "
            f"{_num(st.force_value[force])} {_num(st.force_misc[force])}"
        )
    out += [
        f"frce {len(Force)} {_bit(st.collide)} 0 0",
        f"visc {_num(st.viscosity)}",
        f"stck {_num(st.stickiness)}",
        f"step {_num(st.dt)}",
        f"prec {_num(st.precision)}",
        f"adpt {_bit(st.adaptive_step)}",
        f"gsnp {_num(st.grid_size)} {_bit(st.grid_snap)}",
        f"wall {_bit(st.wall_top)} {_bit(st.wall_left)} "
        f"{_bit(st.wall_right)} {_bit(st.wall_bottom)}",
    ]

    for i, m in system.live_masses():
        mass = -m.mass if m.fixed else m.mass
        x, y = m.position
        vx, vy = m.velocity
        out.append(
            f"mass {i} {_num(x)} {_num(y)} {_num(vx)} {_num(vy)} "
            f"{_num(mass)} {_num(m.elastic)}"
        )
    for i, s in system.live_springs():
        if system.is_fake_spring(i):
            continue
        out.append(
            f"spng {i} {s.m1} {s.m2} {_num(s.ks)} {_num(s.kd)} {_num(s.restlen)}"
        )
    return "\n".join(out) + "\n"


def save_xsp(system: System, path: str) -> str:
    """
    Save a System to an .xsp file.

    Returns:
        The path written (with the .xsp extension).
    """
    path = extend_path(path)
    with open(path, "w", encoding="utf-8") as f:
        f.write(format_xsp(system))
    logger.info("saved %s", os.path.basename(path))
    return path
