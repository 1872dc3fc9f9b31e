"""Clear refractive media such as glass or water.

Each hit picks one of two outcomes. The ray mirrors when Snell's law has no
solution (total internal reflection) or when Schlick's estimate of the
Fresnel term wins a coin flip. Otherwise it bends through the interface.
Because reflectance climbs toward 1 at grazing angles, glass edges look
brighter than its middle.

The ratio of indices depends on which side the ray arrives from: ``1 / ior``
entering the medium and ``ior`` leaving it.

Example:
    >>> import src.pathtracer as pt
    >>> pt.init()
    >>> from src.pathtracer.materials.dielectric import add_dielectric_material
    >>> glass = add_dielectric_material(1.5)
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import normalize, random_double, reflect, refract, schlick_reflectance, vec3
from src.pathtracer.materials.registry import next_slot


@ti.func
def _eta_ratio(ior: ti.f64, front_face: ti.i32) -> ti.f64:
    eta = ior
    if front_face != 0:
        eta = 1.0 / ior
    return eta


@ti.func
def _cos_sin(unit_direction: vec3, normal: vec3):
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)
    return cos_theta, ti.sqrt(tm.max(1.0 - cos_theta * cos_theta, 0.0))


@ti.func
def scatter_dielectric(
    ior: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Reflect or refract at a dielectric boundary.

    Args:
        ior: Refractive index of the medium.
        incident_direction: Incoming direction, any length.
        normal: Unit normal on the side the ray arrives from.
        front_face: Nonzero when the ray enters the medium from outside.

    Returns:
        ``(direction, attenuation, did_scatter)``. Attenuation is white and
        ``did_scatter`` is always 1.
    """
    eta = _eta_ratio(ior, front_face)
    unit_direction = normalize(incident_direction)
    cos_theta, sin_theta = _cos_sin(unit_direction, normal)

    direction = vec3(0.0, 0.0, 0.0)
    if eta * sin_theta > 1.0 or schlick_reflectance(cos_theta, eta) > random_double():
        direction = reflect(unit_direction, normal)
    else:
        direction = refract(unit_direction, normal, eta)

    return direction, vec3(1.0, 1.0, 1.0), 1


@ti.func
def will_reflect(
    ior: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """1 when refraction is impossible at this incidence, else 0."""
    _, sin_theta = _cos_sin(normalize(incident_direction), normal)
    return 1 if _eta_ratio(ior, front_face) * sin_theta > 1.0 else 0


@ti.func
def fresnel_reflectance(
    ior: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f64:
    cos_theta, _ = _cos_sin(normalize(incident_direction), normal)
    return schlick_reflectance(cos_theta, _eta_ratio(ior, front_face))


MAX_DIELECTRIC_MATERIALS = 64

dielectric_iors = ti.field(dtype=ti.f64, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Store a clear medium and return its slot in the dielectric table.

    Raises:
        ValueError: If ``ior`` is less than 1.0.
        RuntimeError: If the table is full.
    """
    if ior < 1.0:
        raise ValueError(f"Refractive index {ior} is less than 1.0")

    idx = next_slot(num_dielectric_materials, MAX_DIELECTRIC_MATERIALS, "dielectric")
    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f64:
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    return scatter_dielectric(get_dielectric_ior(material_idx), incident_direction, normal, front_face)
