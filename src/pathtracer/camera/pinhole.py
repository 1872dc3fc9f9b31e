"""Look-at pinhole camera.

The camera is described on the Python side by a ``PinholeCamera`` and then
baked into a handful of scalar Taichi fields by ``setup_camera``. Kernels read
those fields through ``get_ray`` and ``get_ray_jittered``.

Frame conventions:
    w   unit vector from the target back toward the eye
    u   unit "right" vector, ``vup x w``
    v   unit "up" vector, ``w x u``

The image plane sits one unit in front of the eye. Its height is
``2 * tan(vfov / 2)`` and its width is that times the aspect ratio. Primary
ray directions are not normalized.

Example:
    >>> import src.pathtracer as pt
    >>> pt.init()
    >>> from src.pathtracer.camera.pinhole import PinholeCamera, setup_camera
    >>> setup_camera(
    ...     PinholeCamera(
    ...         lookfrom=(278.0, 278.0, -750.0),
    ...         lookat=(278.0, 278.0, 0.0),
    ...         vup=(0.0, 1.0, 0.0),
    ...         vfov=40.0,
    ...         aspect_ratio=1.0,
    ...     )
    ... )
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from src.pathtracer.core.ray import Ray, make_ray, vec3


@dataclass
class PinholeCamera:
    """Eye placement and lens of a pinhole camera.

    Attributes:
        lookfrom: Eye position.
        lookat: Point the camera aims at.
        vup: Approximate up direction; only its component orthogonal to the
            view direction matters.
        vfov: Vertical field of view in degrees, strictly inside (0, 180).
        aspect_ratio: Image width over image height.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float


_eye = ti.Vector.field(3, dtype=ti.f64, shape=())
_basis_u = ti.Vector.field(3, dtype=ti.f64, shape=())
_basis_v = ti.Vector.field(3, dtype=ti.f64, shape=())
_basis_w = ti.Vector.field(3, dtype=ti.f64, shape=())
_span_x = ti.Vector.field(3, dtype=ti.f64, shape=())
_span_y = ti.Vector.field(3, dtype=ti.f64, shape=())
_corner = ti.Vector.field(3, dtype=ti.f64, shape=())

_INFO_FIELDS = {
    "origin": _eye,
    "u": _basis_u,
    "v": _basis_v,
    "w": _basis_w,
    "horizontal": _span_x,
    "vertical": _span_y,
    "lower_left": _corner,
}


def _unit(vector: np.ndarray, message: str) -> np.ndarray:
    length = np.linalg.norm(vector)
    if length == 0.0:
        raise ValueError(message)
    return vector / length


def setup_camera(camera: PinholeCamera) -> None:
    """Bake ``camera`` into the fields read by the ray generators.

    Must run before any kernel that calls ``get_ray``.

    Raises:
        ValueError: For a field of view outside (0, 180), a non-positive
            aspect ratio, coincident eye and target, or an up vector parallel
            to the view direction.
    """
    if not 0.0 < camera.vfov < 180.0:
        raise ValueError(f"vfov must be in (0, 180) degrees, got {camera.vfov}")
    if camera.aspect_ratio <= 0.0:
        raise ValueError(f"aspect_ratio must be positive, got {camera.aspect_ratio}")

    eye = np.asarray(camera.lookfrom, dtype=np.float64)
    target = np.asarray(camera.lookat, dtype=np.float64)
    up = np.asarray(camera.vup, dtype=np.float64)

    w = _unit(eye - target, "lookfrom and lookat must be distinct points")
    u = _unit(np.cross(up, w), "vup must not be parallel to the view direction")
    v = np.cross(w, u)

    plane_height = 2.0 * math.tan(math.radians(camera.vfov) / 2.0)
    span_x = camera.aspect_ratio * plane_height * u
    span_y = plane_height * v
    corner = eye - w - 0.5 * span_x - 0.5 * span_y

    for field, value in zip(
        (_eye, _basis_u, _basis_v, _basis_w, _span_x, _span_y, _corner),
        (eye, u, v, w, span_x, span_y, corner),
    ):
        field[None] = value.tolist()


@ti.func
def get_ray(s: ti.f64, t: ti.f64) -> Ray:
    """Primary ray through image-plane coordinates ``(s, t)``.

    ``s`` runs 0 to 1 from left to right and ``t`` runs 0 to 1 from bottom
    to top.
    """
    eye = _eye[None]
    target = _corner[None] + s * _span_x[None] + t * _span_y[None]
    return make_ray(eye, target - eye)


@ti.func
def get_ray_jittered(pixel_x: ti.i32, row: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Primary ray through a random point of pixel ``(pixel_x, row)``.

    Rows are numbered from the top of the image:

        s = (x + xi_1) / (width - 1)
        t = (height - 1 - row + xi_2) / (height - 1)

    A one-pixel-wide or one-pixel-tall image divides by 1 instead of 0.
    """
    s_den = ti.cast(ti.max(width - 1, 1), ti.f64)
    t_den = ti.cast(ti.max(height - 1, 1), ti.f64)
    s = (ti.cast(pixel_x, ti.f64) + ti.random(ti.f64)) / s_den
    t = (ti.cast(height - 1 - row, ti.f64) + ti.random(ti.f64)) / t_den
    return get_ray(s, t)


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Snapshot of the baked camera frame as plain tuples."""
    info = {}
    for name, field in _INFO_FIELDS.items():
        value = field[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
