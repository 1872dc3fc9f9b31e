"""Matte surfaces.

Bounce directions are drawn as ``normal + random_unit_vector()``, a
cosine-weighted lobe over the hemisphere. With that sampling the cosine term
and the pdf cancel, so the throughput of a bounce is just the albedo.

Example:
    >>> import src.pathtracer as pt
    >>> pt.init()
    >>> from src.pathtracer.materials.lambertian import add_lambertian_material
    >>> red_wall = add_lambertian_material((0.65, 0.05, 0.05))
"""

import taichi as ti

from src.pathtracer.core.ray import near_zero, random_unit_vector, vec3
from src.pathtracer.materials.registry import check_reflectance, next_slot


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3):
    """Bounce off a matte surface.

    Returns:
        ``(direction, attenuation, did_scatter)``. The direction is left
        unnormalized and ``did_scatter`` is always 1.
    """
    direction = normal + random_unit_vector()

    # Degenerate when the random vector lands opposite the normal
    if near_zero(direction):
        direction = normal

    return direction, albedo, 1


MAX_LAMBERTIAN_MATERIALS = 64

lambertian_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Store a matte material and return its slot in the Lambertian table.

    Raises:
        ValueError: If a channel of ``albedo`` is outside [0, 1].
        RuntimeError: If the table is full.
    """
    check_reflectance(albedo)
    idx = next_slot(num_lambertian_materials, MAX_LAMBERTIAN_MATERIALS, "Lambertian")
    lambertian_albedos[idx] = vec3(*albedo)
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, normal: vec3):
    return scatter_lambertian(get_lambertian_albedo(material_idx), normal)
