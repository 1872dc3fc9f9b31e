"""Axis-aligned rectangle primitive with ray-rectangle intersection.

A rectangle lies in a plane perpendicular to one coordinate axis at the fixed
coordinate ``k`` and is bounded by ``[a0, a1] x [b0, b1]`` in the two
remaining axes:

    XY: bounds on (x, y), plane z = k, outward normal +z
    XZ: bounds on (x, z), plane y = k, outward normal +y
    YZ: bounds on (y, z), plane x = k, outward normal +x

These are the walls, the ceiling light and the box faces of the Cornell box.

Intersection solves the ray/plane equation along the fixed axis,

    t = (k - origin_c) / direction_c,

then checks the hit point against the (inclusive) rectangle bounds. Rays
parallel to the plane never hit.

Example:
    >>> import src.pathtracer as pt
    >>> pt.init()
    >>> from src.pathtracer.geometry.rect import AxisAlignedRect, RectAxis, hit_rect
    >>> light = AxisAlignedRect(
    ...     a0=213.0, a1=343.0, b0=227.0, b1=332.0, k=554.0, axis=int(RectAxis.XZ)
    ... )
    >>> # Use hit_rect within a Taichi kernel
"""

from enum import IntEnum

import taichi as ti

from src.pathtracer.core.ray import vec3
from src.pathtracer.geometry.sphere import HitRecord, face_normal, miss_record

# Direction components smaller than this are treated as parallel to the plane
PARALLEL_EPSILON = 1e-12


class RectAxis(IntEnum):
    """Plane tag of an axis-aligned rectangle (the two bounded axes)."""

    XY = 0
    XZ = 1
    YZ = 2


@ti.dataclass
class AxisAlignedRect:
    """An axis-aligned rectangle.

    Attributes:
        a0: Lower bound on the first bounded axis.
        a1: Upper bound on the first bounded axis.
        b0: Lower bound on the second bounded axis.
        b1: Upper bound on the second bounded axis.
        k: Coordinate of the plane along the fixed axis.
        axis: RectAxis value as an integer.
    """

    a0: ti.f64
    a1: ti.f64
    b0: ti.f64
    b1: ti.f64
    k: ti.f64
    axis: ti.i32


@ti.func
def plane_components(axis: ti.i32, v: vec3):
    """Split a vector into (first bounded, second bounded, fixed) components."""
    a = v.x
    b = v.y
    c = v.z
    if axis == int(RectAxis.XZ):
        a = v.x
        b = v.z
        c = v.y
    elif axis == int(RectAxis.YZ):
        a = v.y
        b = v.z
        c = v.x
    return a, b, c


@ti.func
def rect_outward_normal(axis: ti.i32) -> vec3:
    """Unit vector along the fixed axis of the plane."""
    n = vec3(0.0, 0.0, 1.0)
    if axis == int(RectAxis.XZ):
        n = vec3(0.0, 1.0, 0.0)
    elif axis == int(RectAxis.YZ):
        n = vec3(1.0, 0.0, 0.0)
    return n


@ti.func
def hit_rect(
    ray_origin: vec3,
    ray_direction: vec3,
    rect: AxisAlignedRect,
    t_min: ti.f64,
    t_max: ti.f64,
) -> HitRecord:
    """Test for ray-rectangle intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (need not be normalized).
        rect: The rectangle to test against.
        t_min: Lower bound (exclusive) of accepted ray parameters.
        t_max: Upper bound (exclusive) of accepted ray parameters.

    Returns:
        A HitRecord; check its hit field.
    """
    o_a, o_b, o_c = plane_components(rect.axis, ray_origin)
    d_a, d_b, d_c = plane_components(rect.axis, ray_direction)

    result = miss_record()

    if ti.abs(d_c) > PARALLEL_EPSILON:
        t = (rect.k - o_c) / d_c
        if t > t_min and t < t_max:
            a = o_a + t * d_a
            b = o_b + t * d_b
            if a >= rect.a0 and a <= rect.a1 and b >= rect.b0 and b <= rect.b1:
                front_face, normal = face_normal(ray_direction, rect_outward_normal(rect.axis))
                result = HitRecord(
                    hit=1,
                    t=t,
                    point=ray_origin + t * ray_direction,
                    normal=normal,
                    front_face=front_face,
                )

    return result


def validate_rect_bounds(a0: float, a1: float, b0: float, b1: float) -> None:
    """Reject rectangles with inverted bounds.

    Raises:
        ValueError: If a0 > a1 or b0 > b1.
    """
    if a0 > a1 or b0 > b1:
        raise ValueError(
            f"Rectangle bounds must satisfy a0 <= a1 and b0 <= b1, "
            f"got [{a0}, {a1}] x [{b0}, {b1}]"
        )
