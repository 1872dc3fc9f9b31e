"""Polished and brushed metal.

A metal bounce mirrors the incoming direction about the normal and then
jitters the mirrored vector by ``fuzz`` times a random point in the unit
ball. ``fuzz == 0`` gives a perfect mirror. Jitter that pushes the bounce
below the surface kills the path.

Example:
    >>> import src.pathtracer as pt
    >>> pt.init()
    >>> from src.pathtracer.materials.metal import add_metal_material
    >>> brushed = add_metal_material((0.8, 0.85, 0.88), fuzz=0.2)
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import normalize, random_in_unit_sphere, reflect, vec3
from src.pathtracer.materials.registry import check_reflectance, next_slot


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f64,
    incident_direction: vec3,
    normal: vec3,
):
    """Reflect ``incident_direction`` off a metal surface.

    Returns:
        ``(direction, attenuation, did_scatter)``. ``did_scatter`` is 0 when
        the jittered direction does not leave the surface.
    """
    mirrored = reflect(normalize(incident_direction), normal)
    direction = mirrored + fuzz * random_in_unit_sphere()
    did_scatter = 1 if tm.dot(direction, normal) > 0.0 else 0
    return direction, albedo, did_scatter


MAX_METAL_MATERIALS = 64

metal_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f64, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    num_metal_materials[None] = 0


def add_metal_material(albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
    """Store a metal and return its slot in the metal table.

    ``fuzz`` is clamped into [0, 1] rather than rejected.

    Raises:
        ValueError: If a channel of ``albedo`` is outside [0, 1].
        RuntimeError: If the table is full.
    """
    check_reflectance(albedo)
    idx = next_slot(num_metal_materials, MAX_METAL_MATERIALS, "metal")
    metal_albedos[idx] = vec3(*albedo)
    metal_fuzzes[idx] = min(max(float(fuzz), 0.0), 1.0)
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f64:
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(material_idx: ti.i32, incident_direction: vec3, normal: vec3):
    return scatter_metal(
        get_metal_albedo(material_idx),
        get_metal_fuzz(material_idx),
        incident_direction,
        normal,
    )
