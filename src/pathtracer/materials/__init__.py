"""Materials module for light scattering and emission.

Components:
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like materials with refraction (Schlick Fresnel)
    diffuse_light: Emissive area lights that never scatter

Every scatter function returns ``(scattered_direction, attenuation,
did_scatter)``; did_scatter == 0 means the ray was absorbed. Emission is
queried separately and is non-zero only for diffuse lights.

Each material keeps its parameters in a fixed-capacity table of Taichi
fields (add_*_material / clear_*_materials / get_*), indexed per type.
The registry module holds the color and capacity checks the tables share.
"""

from .dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
    fresnel_reflectance,
    get_dielectric_ior,
    get_dielectric_material_count,
    scatter_dielectric,
    scatter_dielectric_by_id,
    will_reflect,
)
from .diffuse_light import (
    add_diffuse_light_material,
    clear_diffuse_light_materials,
    get_diffuse_light_color,
    get_diffuse_light_emission,
    get_diffuse_light_emission_by_id,
    get_diffuse_light_intensity,
    get_diffuse_light_material_count,
    scatter_diffuse_light,
)
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)

__all__ = [
    # Lambertian
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_ior",
    "fresnel_reflectance",
    "will_reflect",
    # Diffuse light
    "scatter_diffuse_light",
    "add_diffuse_light_material",
    "clear_diffuse_light_materials",
    "get_diffuse_light_material_count",
    "get_diffuse_light_color",
    "get_diffuse_light_intensity",
    "get_diffuse_light_emission",
    "get_diffuse_light_emission_by_id",
]
