"""Monte Carlo radiance estimation and the frame buffer it fills.

``ray_color`` follows one path through the scene:

    L(ray, depth) = 0                                   if depth <= 0
                  = 0                                   if the ray misses
                  = Le                                  if the hit surface emits
                  = attenuation * L(scattered, depth-1) if the surface scatters
                  = 0                                   if the ray is absorbed

Taichi functions cannot recurse, so the recursion is unrolled into a bounce
loop that carries the running product of attenuations. Nothing is lit by the
background.

Per pixel the frame buffer keeps the radiance summed over every sample so
far, how many samples that is, and the current RGBA8 value. Buffers are
allocated once at MAX_IMAGE_HEIGHT x MAX_IMAGE_WIDTH, indexed ``[row, x]``
with row 0 at the top; only the active ``width x height`` corner is used.

Example:
    >>> import src.pathtracer as pt
    >>> pt.init()
    >>> from src.pathtracer.camera.pinhole import setup_camera
    >>> from src.pathtracer.core.integrator import get_rgba_numpy, render_rows, setup_render_target
    >>> from src.pathtracer.scene.cornell_box import SceneConfig, build_scene, cornell_camera
    >>> scene = build_scene(SceneConfig())
    >>> setup_camera(cornell_camera(aspect_ratio=1.0))
    >>> setup_render_target(64, 64)
    >>> render_rows(0, 64, samples_per_pixel=10, max_depth=5)
    >>> rgba = get_rgba_numpy()
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.pinhole import get_ray_jittered
from src.pathtracer.core.ray import vec3
from src.pathtracer.materials.dielectric import scatter_dielectric_by_id
from src.pathtracer.materials.diffuse_light import get_diffuse_light_emission_by_id
from src.pathtracer.materials.lambertian import scatter_lambertian_by_id
from src.pathtracer.materials.metal import scatter_metal_by_id
from src.pathtracer.scene.intersection import intersect_scene
from src.pathtracer.scene.manager import MaterialType, get_material_type, get_material_type_index

# Hits nearer than T_MIN are ignored so a bounce cannot re-hit its own surface
T_MIN = 0.001
T_MAX = 1e30

# Averaged channels are clamped to [0, TONEMAP_CLAMP] before scaling by 256
TONEMAP_CLAMP = 0.999

MAX_IMAGE_WIDTH = 1024
MAX_IMAGE_HEIGHT = 1024

_LAMBERTIAN = int(MaterialType.LAMBERTIAN)
_METAL = int(MaterialType.METAL)
_DIELECTRIC = int(MaterialType.DIELECTRIC)
_DIFFUSE_LIGHT = int(MaterialType.DIFFUSE_LIGHT)

# Active (width, height); (0, 0) until setup_render_target runs
_active_size = ti.field(dtype=ti.i32, shape=2)
_radiance_sum = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))
_rgba8 = ti.Vector.field(4, dtype=ti.u8, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))


def setup_render_target(width: int, height: int) -> None:
    """Make ``width x height`` the active frame size and clear the buffers.

    Raises:
        ValueError: If either side is not positive or the frame would exceed
            MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Frame size must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Frame size {width}x{height} would exceed the "
            f"{MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT} buffers"
        )
    _active_size[0] = width
    _active_size[1] = height
    clear_render_target()


@ti.kernel
def _paint_black():
    for row, x in _rgba8:
        _rgba8[row, x] = ti.Vector([0, 0, 0, 255], dt=ti.u8)


def clear_render_target() -> None:
    """Forget every sample and paint the output opaque black."""
    _radiance_sum.fill(0.0)
    _sample_count.fill(0)
    _paint_black()


def get_image_dimensions() -> tuple[int, int]:
    return int(_active_size[0]), int(_active_size[1])


def _require_target() -> tuple[int, int]:
    width, height = get_image_dimensions()
    if width == 0:
        raise RuntimeError("No render target; call setup_render_target(width, height) first")
    return width, height


@ti.func
def _scatter(material_id: ti.i32, incident_direction: vec3, normal: vec3, front_face: ti.i32):
    """Bounce off the surface of ``material_id``.

    Lights and unknown ids absorb, which shows up as ``did_scatter == 0``.
    """
    kind = get_material_type(material_id)
    slot = get_material_type_index(material_id)

    direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    if kind == _LAMBERTIAN:
        direction, attenuation, did_scatter = scatter_lambertian_by_id(slot, normal)
    elif kind == _METAL:
        direction, attenuation, did_scatter = scatter_metal_by_id(slot, incident_direction, normal)
    elif kind == _DIELECTRIC:
        direction, attenuation, did_scatter = scatter_dielectric_by_id(
            slot, incident_direction, normal, front_face
        )
    return direction, attenuation, did_scatter


@ti.func
def _emitted(material_id: ti.i32):
    """Return ``(radiance, is_emitter)``; lights emit from both faces."""
    radiance = vec3(0.0, 0.0, 0.0)
    is_emitter = 0
    if get_material_type(material_id) == _DIFFUSE_LIGHT:
        radiance = get_diffuse_light_emission_by_id(get_material_type_index(material_id))
        is_emitter = 1
    return radiance, is_emitter


@ti.func
def ray_color(ray_origin: vec3, ray_direction: vec3, max_depth: ti.i32) -> vec3:
    """Radiance estimate along one path of at most ``max_depth`` hits."""
    origin = ray_origin
    direction = ray_direction
    weight = vec3(1.0, 1.0, 1.0)
    radiance = vec3(0.0, 0.0, 0.0)

    # Taichi cannot break out of this loop; finished paths just idle
    alive = 1
    for _ in range(max_depth):
        if alive == 1:
            rec = intersect_scene(origin, direction, T_MIN, T_MAX)
            if rec.hit == 0:
                alive = 0
            else:
                light, is_emitter = _emitted(rec.material_id)
                if is_emitter == 1:
                    radiance = weight * light
                    alive = 0
                else:
                    bounce, attenuation, did_scatter = _scatter(
                        rec.material_id, direction, rec.normal, rec.front_face
                    )
                    if did_scatter == 0:
                        alive = 0
                    else:
                        weight *= attenuation
                        origin = rec.point
                        direction = bounce

    return radiance


@ti.func
def tonemap_channel(channel_sum: ti.f64, count: ti.i32) -> ti.i32:
    """8-bit value of one channel: mean, sqrt, clamp to TONEMAP_CLAMP, times 256.

    NaN, negative means and pixels without samples all come out as 0.
    """
    mean = 0.0
    if count > 0:
        mean = channel_sum / ti.cast(count, ti.f64)
    if tm.isnan(mean) or mean < 0.0:
        mean = 0.0
    encoded = tm.clamp(ti.sqrt(mean), 0.0, TONEMAP_CLAMP)
    return ti.min(255, ti.cast(256.0 * encoded, ti.i32))


@ti.func
def _finite(sample: vec3) -> vec3:
    clean = sample
    for c in ti.static(range(3)):
        if tm.isnan(clean[c]) or tm.isinf(clean[c]):
            clean[c] = 0.0
    return clean


@ti.kernel
def _render_rows(
    y_start: ti.i32,
    y_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    for row, x in ti.ndrange((y_start, y_end), (0, width)):
        batch = vec3(0.0, 0.0, 0.0)
        for _ in range(samples_per_pixel):
            ray = get_ray_jittered(x, row, width, height)
            batch += _finite(ray_color(ray.origin, ray.direction, max_depth))

        _radiance_sum[row, x] += batch
        _sample_count[row, x] += samples_per_pixel

        total = _radiance_sum[row, x]
        n = _sample_count[row, x]
        _rgba8[row, x] = ti.Vector(
            [tonemap_channel(total.x, n), tonemap_channel(total.y, n), tonemap_channel(total.z, n), 255],
            dt=ti.u8,
        )


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    return ray_color(origin, direction, max_depth)


def render_rows(y_start: int, y_end: int, samples_per_pixel: int, max_depth: int) -> None:
    """Add ``samples_per_pixel`` samples to every pixel of rows ``[y_start, y_end)``.

    The row range is clipped to the frame, and an empty range does nothing.
    RGBA8 values of the touched rows are refreshed from the new averages.

    Raises:
        RuntimeError: If no render target has been set up.
        ValueError: If ``samples_per_pixel < 1`` or ``max_depth < 0``.
    """
    width, height = _require_target()
    if samples_per_pixel < 1:
        raise ValueError(f"samples_per_pixel must be >= 1, got {samples_per_pixel}")
    if max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")

    y_start = max(0, y_start)
    y_end = min(y_end, height)
    if y_start < y_end:
        _render_rows(y_start, y_end, width, height, samples_per_pixel, max_depth)


def render_image(samples_per_pixel: int, max_depth: int) -> None:
    _, height = _require_target()
    render_rows(0, height, samples_per_pixel, max_depth)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int,
) -> tuple[float, float, float]:
    """Run ``ray_color`` on a single ray against the loaded scene."""
    color = _trace_single_ray(vec3(*origin), vec3(*direction), depth)
    return (float(color[0]), float(color[1]), float(color[2]))


def get_total_samples() -> int:
    """Samples accumulated so far at the top-left pixel."""
    _require_target()
    return int(_sample_count[0, 0])


def get_rgba_numpy() -> npt.NDArray[np.uint8]:
    """Current frame as a contiguous ``(height, width, 4)`` uint8 array, row 0 on top."""
    width, height = _require_target()
    return np.ascontiguousarray(_rgba8.to_numpy()[:height, :width])


def get_rgba_bytes() -> bytes:
    """Current frame as ``width * height * 4`` bytes in RGBA order."""
    return get_rgba_numpy().tobytes()


def get_image_numpy() -> npt.NDArray[np.float64]:
    """Mean linear radiance per pixel, ``(height, width, 3)``; unsampled pixels are 0."""
    width, height = _require_target()
    sums = _radiance_sum.to_numpy()[:height, :width]
    counts = _sample_count.to_numpy()[:height, :width, None].astype(np.float64)

    image = np.zeros_like(sums)
    np.divide(sums, counts, out=image, where=counts > 0)
    return image
