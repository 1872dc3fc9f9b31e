"""Primitive tables and the closest-hit query over them.

Spheres, rectangles and boxes live in fixed-capacity Taichi fields, one
column per attribute, each row tagged with a material id. ``intersect_scene``
scans every table and shrinks ``t_max`` to the nearest hit as it goes, so the
record it returns is the closest surface along the ray.

Example:
    >>> import src.pathtracer as pt
    >>> pt.init()
    >>> from src.pathtracer.geometry.rect import RectAxis
    >>> from src.pathtracer.scene.intersection import add_rect, add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((190.0, 90.0, 190.0), 90.0, material_id=0)
    >>> add_rect(0.0, 555.0, 0.0, 555.0, 0.0, RectAxis.XZ, material_id=1)
"""

import taichi as ti

from src.pathtracer.core.ray import vec3
from src.pathtracer.geometry.box import Box, hit_box, validate_box_corners
from src.pathtracer.geometry.rect import AxisAlignedRect, RectAxis, hit_rect, validate_rect_bounds
from src.pathtracer.geometry.sphere import HitRecord, Sphere, hit_sphere


@ti.dataclass
class SceneHitRecord:
    """A primitive ``HitRecord`` plus the material id of what was hit.

    ``material_id`` is -1 when ``hit`` is 0.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


MAX_SPHERES = 64
MAX_RECTS = 64
MAX_BOXES = 16

sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# (a0, a1, b0, b1) per rectangle
rect_bounds = ti.Vector.field(4, dtype=ti.f64, shape=MAX_RECTS)
rect_offsets = ti.field(dtype=ti.f64, shape=MAX_RECTS)
rect_axes = ti.field(dtype=ti.i32, shape=MAX_RECTS)
rect_material_ids = ti.field(dtype=ti.i32, shape=MAX_RECTS)
num_rects = ti.field(dtype=ti.i32, shape=())

box_mins = ti.Vector.field(3, dtype=ti.f64, shape=MAX_BOXES)
box_maxs = ti.Vector.field(3, dtype=ti.f64, shape=MAX_BOXES)
box_material_ids = ti.field(dtype=ti.i32, shape=MAX_BOXES)
num_boxes = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Drop every primitive. Stale rows are overwritten by later adds."""
    for counter in (num_spheres, num_rects, num_boxes):
        counter[None] = 0


def _append_slot(counter, capacity: int, noun: str) -> int:
    idx = int(counter[None])
    if idx >= capacity:
        raise RuntimeError(f"Maximum of {capacity} {noun} already in the scene")
    counter[None] = idx + 1
    return idx


def add_sphere(center, radius: float, material_id: int = 0) -> int:
    """Append a sphere and return its row.

    Raises:
        ValueError: If ``radius`` is not positive.
        RuntimeError: If the sphere table is full.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")

    idx = _append_slot(num_spheres, MAX_SPHERES, "spheres")
    sphere_centers[idx] = vec3(*center)
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    return idx


def add_rect(
    a0: float,
    a1: float,
    b0: float,
    b1: float,
    k: float,
    axis: RectAxis,
    material_id: int = 0,
) -> int:
    """Append the rectangle ``[a0, a1] x [b0, b1]`` at offset ``k`` in plane ``axis``.

    Raises:
        ValueError: If a bound pair is reversed.
        RuntimeError: If the rectangle table is full.
    """
    validate_rect_bounds(a0, a1, b0, b1)
    axis = RectAxis(axis)

    idx = _append_slot(num_rects, MAX_RECTS, "rectangles")
    rect_bounds[idx] = [a0, a1, b0, b1]
    rect_offsets[idx] = k
    rect_axes[idx] = int(axis)
    rect_material_ids[idx] = material_id
    return idx


def add_box(p0, p1, material_id: int = 0) -> int:
    """Append the box with minimum corner ``p0`` and maximum corner ``p1``.

    Raises:
        ValueError: If ``p0`` is above ``p1`` on some axis.
        RuntimeError: If the box table is full.
    """
    validate_box_corners(p0, p1)

    idx = _append_slot(num_boxes, MAX_BOXES, "boxes")
    box_mins[idx] = vec3(*p0)
    box_maxs[idx] = vec3(*p1)
    box_material_ids[idx] = material_id
    return idx


def get_sphere_count() -> int:
    return int(num_spheres[None])


def get_rect_count() -> int:
    return int(num_rects[None])


def get_box_count() -> int:
    return int(num_boxes[None])


@ti.func
def _tagged(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    zero = vec3(0.0, 0.0, 0.0)
    return SceneHitRecord(hit=0, t=0.0, point=zero, normal=zero, front_face=0, material_id=-1)


@ti.func
def _rect_at(i: ti.i32) -> AxisAlignedRect:
    bounds = rect_bounds[i]
    return AxisAlignedRect(
        a0=bounds[0],
        a1=bounds[1],
        b0=bounds[2],
        b1=bounds[3],
        k=rect_offsets[i],
        axis=rect_axes[i],
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f64,
    t_max: ti.f64,
) -> SceneHitRecord:
    """Closest primitive hit with ``t`` strictly inside ``(t_min, t_max)``."""
    nearest = t_max
    closest = _make_miss_record()

    for i in range(num_spheres[None]):
        rec = hit_sphere(
            ray_origin,
            ray_direction,
            Sphere(center=sphere_centers[i], radius=sphere_radii[i]),
            t_min,
            nearest,
        )
        if rec.hit == 1:
            nearest = rec.t
            closest = _tagged(rec, sphere_material_ids[i])

    for i in range(num_rects[None]):
        rec = hit_rect(ray_origin, ray_direction, _rect_at(i), t_min, nearest)
        if rec.hit == 1:
            nearest = rec.t
            closest = _tagged(rec, rect_material_ids[i])

    for i in range(num_boxes[None]):
        box = Box(box_min=box_mins[i], box_max=box_maxs[i])
        rec = hit_box(ray_origin, ray_direction, box, t_min, nearest)
        if rec.hit == 1:
            nearest = rec.t
            closest = _tagged(rec, box_material_ids[i])

    return closest
