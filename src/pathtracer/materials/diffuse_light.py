"""Diffuse area light material implementation.

A diffuse light emits constant radiance

    emission = color * intensity

from every point and in every direction, and never scatters incoming light.
The integrator queries emission separately from scattering; every other
material emits nothing.

Example:
    >>> import src.pathtracer as pt
    >>> pt.init()
    >>> from src.pathtracer.materials.diffuse_light import add_diffuse_light_material
    >>> light_idx = add_diffuse_light_material(color=(1.0, 1.0, 1.0), intensity=15.0)
"""

import taichi as ti

from src.pathtracer.core.ray import vec3
from src.pathtracer.materials.registry import next_slot


@ti.func
def get_diffuse_light_emission(color: vec3, intensity: ti.f64) -> vec3:
    return color * intensity


@ti.func
def scatter_diffuse_light():
    """Lights absorb every incoming ray.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) with
        did_scatter always 0.
    """
    did_scatter = 0
    return vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, 0.0), did_scatter


MAX_DIFFUSE_LIGHT_MATERIALS = 16

diffuse_light_colors = ti.Vector.field(3, dtype=ti.f64, shape=MAX_DIFFUSE_LIGHT_MATERIALS)
diffuse_light_intensities = ti.field(dtype=ti.f64, shape=MAX_DIFFUSE_LIGHT_MATERIALS)
num_diffuse_light_materials = ti.field(dtype=ti.i32, shape=())


def clear_diffuse_light_materials() -> None:
    num_diffuse_light_materials[None] = 0


def add_diffuse_light_material(
    color: tuple[float, float, float],
    intensity: float = 1.0,
) -> int:
    """Store an emitter and return its slot in the light table.

    Raises:
        ValueError: If a color channel or the intensity is negative.
        RuntimeError: If the table is full.
    """
    if min(color) < 0.0:
        raise ValueError(f"Light color {tuple(color)} has a negative channel")
    if intensity < 0.0:
        raise ValueError(f"Light intensity {intensity} is negative")

    idx = next_slot(num_diffuse_light_materials, MAX_DIFFUSE_LIGHT_MATERIALS, "diffuse light")
    diffuse_light_colors[idx] = vec3(*color)
    diffuse_light_intensities[idx] = intensity
    num_diffuse_light_materials[None] = idx + 1
    return idx


def get_diffuse_light_material_count() -> int:
    return int(num_diffuse_light_materials[None])


@ti.func
def get_diffuse_light_color(material_idx: ti.i32) -> vec3:
    return diffuse_light_colors[material_idx]


@ti.func
def get_diffuse_light_intensity(material_idx: ti.i32) -> ti.f64:
    return diffuse_light_intensities[material_idx]


@ti.func
def get_diffuse_light_emission_by_id(material_idx: ti.i32) -> vec3:
    return get_diffuse_light_emission(
        get_diffuse_light_color(material_idx),
        get_diffuse_light_intensity(material_idx),
    )
