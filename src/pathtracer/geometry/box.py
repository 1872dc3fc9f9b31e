"""Axis-aligned box primitive built from six rectangles.

A box is stored as its two opposite corners. Its faces are generated on the
fly as AxisAlignedRect values (two per axis, at the min and max coordinate),
and a ray hits the box wherever it hits the closest of the six faces.

Example:
    >>> import src.pathtracer as pt
    >>> pt.init()
    >>> from src.pathtracer.geometry.box import Box, hit_box, vec3
    >>> box = Box(box_min=vec3(130, 0, 65), box_max=vec3(295, 165, 230))
    >>> # Use hit_box within a Taichi kernel
"""

import taichi as ti

from src.pathtracer.core.ray import vec3
from src.pathtracer.geometry.rect import AxisAlignedRect, RectAxis, hit_rect
from src.pathtracer.geometry.sphere import HitRecord, miss_record

BOX_SIDE_COUNT = 6


@ti.dataclass
class Box:
    """An axis-aligned box.

    Attributes:
        box_min: Corner with the smallest coordinates.
        box_max: Corner with the largest coordinates.
    """

    box_min: vec3
    box_max: vec3


@ti.func
def box_side(box: Box, side: ti.i32) -> AxisAlignedRect:
    """Build one face of a box.

    Sides 0 and 1 are the XY faces at max and min z, 2 and 3 the XZ faces at
    max and min y, 4 and 5 the YZ faces at max and min x.
    """
    p0 = box.box_min
    p1 = box.box_max

    rect = AxisAlignedRect(a0=p0.x, a1=p1.x, b0=p0.y, b1=p1.y, k=p1.z, axis=int(RectAxis.XY))
    if side == 1:
        rect = AxisAlignedRect(a0=p0.x, a1=p1.x, b0=p0.y, b1=p1.y, k=p0.z, axis=int(RectAxis.XY))
    elif side == 2:
        rect = AxisAlignedRect(a0=p0.x, a1=p1.x, b0=p0.z, b1=p1.z, k=p1.y, axis=int(RectAxis.XZ))
    elif side == 3:
        rect = AxisAlignedRect(a0=p0.x, a1=p1.x, b0=p0.z, b1=p1.z, k=p0.y, axis=int(RectAxis.XZ))
    elif side == 4:
        rect = AxisAlignedRect(a0=p0.y, a1=p1.y, b0=p0.z, b1=p1.z, k=p1.x, axis=int(RectAxis.YZ))
    elif side == 5:
        rect = AxisAlignedRect(a0=p0.y, a1=p1.y, b0=p0.z, b1=p1.z, k=p0.x, axis=int(RectAxis.YZ))
    return rect


@ti.func
def hit_box(
    ray_origin: vec3,
    ray_direction: vec3,
    box: Box,
    t_min: ti.f64,
    t_max: ti.f64,
) -> HitRecord:
    """Test for ray-box intersection.

    Scans the six faces, narrowing the accepted range to the closest hit
    found so far.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        box: The box to test against.
        t_min: Lower bound (exclusive) of accepted ray parameters.
        t_max: Upper bound (exclusive) of accepted ray parameters.

    Returns:
        HitRecord of the closest face hit; check its hit field.
    """
    result = miss_record()
    closest_t = t_max

    for side in ti.static(range(BOX_SIDE_COUNT)):
        rec = hit_rect(ray_origin, ray_direction, box_side(box, side), t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = rec

    return result


def validate_box_corners(p0, p1) -> None:
    """Reject boxes whose min corner exceeds the max corner on any axis.

    Raises:
        ValueError: If any component of p0 is greater than p1.
    """
    if any(a > b for a, b in zip(p0, p1)):
        raise ValueError(f"Box min corner {tuple(p0)} must not exceed max corner {tuple(p1)}")
