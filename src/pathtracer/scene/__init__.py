"""Scene description: what is in the world and what it is made of.

Components:
    intersection: primitive tables and the closest-hit query
    manager: one material id space over the per-kind material tables
    cornell_box: the Cornell box layout, its options and its camera

Primitive attributes are stored column-wise in Taichi fields so kernels can
index them directly.
"""

from .cornell_box import (
    BOX_SIZE,
    BoxMaterial,
    SceneConfig,
    build_scene,
    cornell_camera,
    get_cornell_box_bounds,
)
from .intersection import (
    MAX_BOXES,
    MAX_RECTS,
    MAX_SPHERES,
    SceneHitRecord,
    add_box,
    add_rect,
    add_sphere,
    clear_scene,
    get_box_count,
    get_rect_count,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    BoxInfo,
    MaterialInfo,
    MaterialType,
    RectInfo,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
    material_type_indices,
    material_types,
    num_materials,
)

__all__ = [
    # intersection
    "SceneHitRecord",
    "add_sphere",
    "add_rect",
    "add_box",
    "clear_scene",
    "get_sphere_count",
    "get_rect_count",
    "get_box_count",
    "intersect_scene",
    "MAX_SPHERES",
    "MAX_RECTS",
    "MAX_BOXES",
    # manager
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "RectInfo",
    "BoxInfo",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "material_types",
    "material_type_indices",
    "num_materials",
    # cornell_box
    "BoxMaterial",
    "SceneConfig",
    "build_scene",
    "cornell_camera",
    "get_cornell_box_bounds",
    "BOX_SIZE",
]
