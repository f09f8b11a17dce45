# MIT License (see LICENSE)
"""
Input/Output utilities for spring networks.

This subpackage provides:
    - XSpringies text format (.xsp): the native save format.
    - JSON serialization: the same content as a JSON document.
    - Insert mode: merge a file into an existing network, remapping indices.

Typical usage:
    from spring_sim import System
    from spring_sim.io import load_xsp, save_xsp

    system = System()
    load_xsp("demo.xsp", system)            # replace network and settings
    load_xsp("part.xsp", system, insert=True)  # add to the current network
    save_xsp(system, "out.xsp")
"""
from .json_io import (
    load_json,
    load_json_raw,
    save_json,
    system_to_json,
    system_from_json,
)
from .records import MassRecord, SpringRecord, merge_records
from .xsp_io import format_xsp, load_xsp, read_xsp, save_xsp

__all__ = [
    # Loading
    "load_xsp",
    "read_xsp",
    "load_json",
    "load_json_raw",
    # Saving
    "save_xsp",
    "format_xsp",
    "save_json",
    # Serialization
    "system_to_json",
    "system_from_json",
    "MassRecord",
    "SpringRecord",
    "merge_records",
]
