"""Validation shared by the per-type material tables.

Every material kind keeps its parameters in fixed-capacity Taichi fields plus
a scalar counter. The helpers here check colors before they are written and
hand out the next free slot of a table.
"""

from collections.abc import Sequence

import taichi as ti


def check_reflectance(color: Sequence[float], label: str = "Albedo") -> None:
    """Reject reflectance colors that would add energy to a path.

    Raises:
        ValueError: If ``color`` does not have three channels, or a channel
            lies outside [0, 1].
    """
    if len(color) != 3:
        raise ValueError(f"{label} needs 3 channels, got {len(color)}")
    for channel, value in zip("RGB", color):
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"{label} {channel} channel {value} is outside [0, 1]")


def next_slot(counter: ti.Field, capacity: int, kind: str) -> int:
    """Return the index the next ``kind`` material will occupy.

    The counter is not advanced; callers bump it once the slot is filled.

    Raises:
        RuntimeError: If the table already holds ``capacity`` entries.
    """
    idx = int(counter[None])
    if idx >= capacity:
        raise RuntimeError(f"Maximum of {capacity} {kind} materials reached")
    return idx
