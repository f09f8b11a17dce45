# MIT License (see LICENSE)
"""
JSON serialization and deserialization for spring networks.

The JSON format carries the same content as the .xsp text format in a form
that is easier to produce from other tools.

JSON Schema Overview:
---------------------
{
  "state": {                       # Optional; any State field, e.g.
    "mass": float,                 # Current mass, default: 1.0
    "dt": float,                   # Timestep, default: 0.025
    "adaptive_step": bool,
    "force_enabled": [bool] * 4,   # gravity, center of mass, point, wall
    "force_value": [float] * 4,
    "force_misc": [float] * 4,
    "center_id": int,              # File mass id, or -1
    ...
  },
  "masses": [
    {
      "id": int,                   # Required, referenced by springs
      "position": [x, y],          # Required
      "velocity": [vx, vy],        # Default: [0, 0]
      "mass": float,               # Default: 1.0 (negative = fixed)
      "elastic": float,            # Default: 1.0
      "fixed": bool                # Default: false
    }
  ],
  "springs": [
    {
      "id": int,
      "m1": int, "m2": int,        # Required, mass ids
      "ks": float,                 # Default: 1.0
      "kd": float,                 # Default: 1.0
      "restlen": float             # Default: 0.0
    }
  ]
}
"""
from __future__ import annotations
import json
import logging
from dataclasses import fields
from typing import Any

import numpy as np

from ..state import State
from ..system import System
from ..types import Mass, Spring
from .records import MassRecord, SpringRecord, merge_records

logger = logging.getLogger(__name__)

_STATE_FIELDS = {f.name for f in fields(State)}


def load_json_raw(path: str) -> dict[str, Any]:
    """
    Load raw JSON data from a network file without touching any System.

    Args:
        path: Absolute or relative path to the JSON file.

    Returns:
        Dictionary containing the raw JSON data.
    """
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_json(path: str, system: System, insert: bool = False) -> dict[int, int]:
    """
    Load (or with insert, merge) a JSON network file into a System.

    Args:
        path: Path to the JSON file.
        system: Target store. Reset first unless insert is True.
        insert: Keep the existing network and settings. If nothing is
            selected, the inserted entities are selected.

    Returns:
        Mapping from file mass id to store index.

    Raises:
        FileNotFoundError: If the file cannot be found.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If a mass or spring misses a required field.
    """
    data = load_json_raw(path)
    mapping = system_from_json(data, system, insert)
    logger.info("%s %s: %d masses", "inserted" if insert else "loaded", path, len(mapping))
    return mapping


def system_from_json(data: dict[str, Any], system: System, insert: bool = False) -> dict[int, int]:
    """Merge a parsed JSON document into a System. See load_json()."""
    masses = [mass_from_json(d) for d in data.get("masses", [])]
    springs = [spring_from_json(d) for d in data.get("springs", [])]

    center_id = None
    loaded = State()
    if not insert:
        state_data = dict(data.get("state", {}))
        if "center_id" in state_data:
            center_id = int(state_data.pop("center_id"))
        state_from_json(state_data, loaded)

    if insert:
        select_new = not system.anything_selected()
    else:
        system.reset()
        system.state.assign(loaded)
        select_new = False
    return merge_records(system, masses, springs, select_new, center_id)


def state_from_json(d: dict[str, Any], state: State) -> None:
    """
    Apply a settings dictionary to a State.

    Unknown keys are ignored with a warning so that newer files stay
    loadable.
    """
    for key, value in d.items():
        if key not in _STATE_FIELDS:
            logger.warning("unknown state field '%s' ignored", key)
            continue
        current = getattr(state, key)
        if isinstance(current, list):
            # Keep the per-force tables at full length
            items = list(value)[:len(current)]
            current[:len(items)] = [type(current[0])(v) for v in items]
        else:
            setattr(state, key, type(current)(value))


def mass_from_json(d: dict[str, Any]) -> MassRecord:
    """Parse a single mass definition."""
    if "id" not in d or "position" not in d:
        raise ValueError("Mass definition missing required 'id' or 'position' field.")

    x, y = d["position"]
    vx, vy = d.get("velocity", [0.0, 0.0])
    mass = float(d.get("mass", 1.0))
    if d.get("fixed", False):
        mass = -abs(mass)

    return MassRecord(
        index=int(d["id"]),
        x=float(x), y=float(y),
        vx=float(vx), vy=float(vy),
        mass=mass,
        elastic=float(d.get("elastic", 1.0)),
    )


def spring_from_json(d: dict[str, Any]) -> SpringRecord:
    """Parse a single spring definition."""
    if "m1" not in d or "m2" not in d:
        raise ValueError("Spring definition missing required 'm1' or 'm2' field.")

    return SpringRecord(
        index=int(d.get("id", -1)),
        m1=int(d["m1"]),
        m2=int(d["m2"]),
        ks=float(d.get("ks", 1.0)),
        kd=float(d.get("kd", 1.0)),
        restlen=float(d.get("restlen", 0.0)),
    )


def mass_to_json(index: int, m: Mass) -> dict[str, Any]:
    """
    Serialize a Mass to a dictionary (round-trip compatible).

    Zero velocity and a false fixed flag are left out.
    """
    result = {
        "id": index,
        "position": _to_list(m.position),
        "mass": m.mass,
        "elastic": m.elastic,
    }
    if np.any(m.velocity != 0.0):
        result["velocity"] = _to_list(m.velocity)
    if m.fixed:
        result["fixed"] = True
    return result


def spring_to_json(index: int, s: Spring) -> dict[str, Any]:
    """Serialize a Spring to a dictionary."""
    return {
        "id": index,
        "m1": s.m1,
        "m2": s.m2,
        "ks": s.ks,
        "kd": s.kd,
        "restlen": s.restlen,
    }


def state_to_json(state: State) -> dict[str, Any]:
    """Serialize every State field."""
    return {f.name: _plain(getattr(state, f.name)) for f in fields(state)}


def system_to_json(system: System) -> dict[str, Any]:
    """
    Serialize a System to a dictionary.

    Captured: the settings, every live mass and every live spring except
    the drag sentinel.
    """
    return {
        "state": state_to_json(system.state),
        "masses": [mass_to_json(i, m) for i, m in system.live_masses()],
        "springs": [
            spring_to_json(i, s)
            for i, s in system.live_springs()
            if not system.is_fake_spring(i)
        ],
    }


def save_json(system: System, path: str, indent: int = 2) -> None:
    """Save a System to a JSON file on disk."""
    data = system_to_json(system)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent)
    logger.info("saved %s", path)


def _plain(value: Any) -> Any:
    """Helper: Convert enum members and lists to plain JSON values."""
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return int(value)
    return value


def _to_list(arr: Any) -> list[float]:
    """Helper: Convert numpy array or tuple to a clean list of floats."""
    if isinstance(arr, np.ndarray):
        return arr.tolist()
    return list(arr)
