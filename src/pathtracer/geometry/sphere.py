"""Spheres and the hit record every primitive fills in.

Ray/sphere intersection reduces to ``a*t^2 + 2*h*t + c = 0`` with

    a = |d|^2,  h = d . (o - center),  c = |o - center|^2 - r^2

The roots are taken as ``q / a`` and ``c / q`` with
``q = -(h + sign(h) * sqrt(h^2 - a*c))``, which avoids subtracting two
nearly equal numbers for far-away or grazing rays.

Example:
    >>> import src.pathtracer as pt
    >>> pt.init()
    >>> from src.pathtracer.geometry.sphere import Sphere, vec3
    >>> ball = Sphere(center=vec3(0.0, 0.0, -1.0), radius=0.5)
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import vec3


@ti.dataclass
class Sphere:
    center: vec3
    radius: ti.f64


@ti.dataclass
class HitRecord:
    """Outcome of testing one ray against one primitive.

    Only ``hit`` is meaningful on a miss. On a hit, ``normal`` is unit length
    and points back toward the ray origin, and ``front_face`` tells whether
    the ray struck the outward side.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def face_normal(ray_direction: vec3, outward_normal: vec3):
    """Return ``(front_face, normal)`` with the normal turned to face the ray."""
    front_face = 1
    normal = outward_normal
    if tm.dot(ray_direction, outward_normal) >= 0.0:
        front_face, normal = 0, -outward_normal
    return front_face, normal


@ti.func
def miss_record() -> HitRecord:
    zero = vec3(0.0, 0.0, 0.0)
    return HitRecord(hit=0, t=0.0, point=zero, normal=zero, front_face=0)


@ti.func
def _roots(a: ti.f64, h: ti.f64, c: ti.f64, sqrt_d: ti.f64):
    q = -(h + ti.select(h < 0.0, -1.0, 1.0) * sqrt_d)
    near = (-h - sqrt_d) / a
    far = (-h + sqrt_d) / a
    # q vanishes only when h and the discriminant are both ~0
    if ti.abs(q) >= 1e-12:
        near = q / a
        far = c / q
    return ti.min(near, far), ti.max(near, far)


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f64,
    t_max: ti.f64,
) -> HitRecord:
    """Nearest intersection with ``sphere`` strictly inside ``(t_min, t_max)``.

    ``ray_direction`` need not be normalized. The near root is preferred and
    the far root is used when the near one falls outside the interval, as it
    does for rays starting inside the sphere.
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    record = miss_record()
    if a > 0.0 and discriminant >= 0.0:
        near, far = _roots(a, h, c, ti.sqrt(discriminant))
        t = near
        if not (t_min < t < t_max):
            t = far
        if t_min < t < t_max:
            point = ray_origin + t * ray_direction
            front_face, normal = face_normal(ray_direction, (point - sphere.center) / sphere.radius)
            record = HitRecord(hit=1, t=t, point=point, normal=normal, front_face=front_face)

    return record


@ti.func
def make_sphere(center: vec3, radius: ti.f64) -> Sphere:
    return Sphere(center=center, radius=radius)
