"""One material id space over the per-type material tables.

Each material kind stores its parameters in its own table (see
``src.pathtracer.materials``), so the same slot number means different
things for different kinds. ``SceneManager`` hands out a single running
``material_id`` instead and records, in two Taichi fields, which kind the id
belongs to and which slot of that kind's table holds its parameters. Kernels
resolve an id through ``get_material_type`` and ``get_material_type_index``.

Primitives are forwarded to ``scene.intersection`` after their material id is
checked. A Python-side record of everything added is kept for inspection.

Example:
    >>> import src.pathtracer as pt
    >>> pt.init()
    >>> from src.pathtracer.geometry.rect import RectAxis
    >>> from src.pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> white = scene.add_lambertian_material(albedo=(0.73, 0.73, 0.73))
    >>> scene.add_rect(0, 555, 0, 555, 0, RectAxis.XZ, white)
"""

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import taichi as ti

from src.pathtracer.geometry.rect import RectAxis
from src.pathtracer.materials import dielectric, diffuse_light, lambertian, metal
from src.pathtracer.scene import intersection

logger = logging.getLogger(__name__)


class MaterialType(IntEnum):
    """Kind tag stored per material id and switched on by the integrator."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2
    DIFFUSE_LIGHT = 3


# Sum of the per-kind table capacities
MAX_MATERIALS = (
    lambertian.MAX_LAMBERTIAN_MATERIALS
    + metal.MAX_METAL_MATERIALS
    + dielectric.MAX_DIELECTRIC_MATERIALS
    + diffuse_light.MAX_DIFFUSE_LIGHT_MATERIALS
)

material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """``MaterialType`` value of ``material_id``, or -1 if it is unassigned."""
    kind = -1
    if 0 <= material_id < num_materials[None]:
        kind = material_types[material_id]
    return kind


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Slot of ``material_id`` in its kind's table, or -1 if it is unassigned."""
    slot = -1
    if 0 <= material_id < num_materials[None]:
        slot = material_type_indices[material_id]
    return slot


@dataclass
class MaterialInfo:
    """Python-side copy of one registered material.

    ``params`` holds the keyword arguments the material was created with.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class RectInfo:
    rect_index: int
    bounds: tuple[float, float, float, float]
    k: float
    axis: RectAxis
    material_id: int


@dataclass
class BoxInfo:
    box_index: int
    box_min: tuple[float, float, float]
    box_max: tuple[float, float, float]
    material_id: int


class SceneManager:
    """Builds a scene and owns the global primitive and material tables.

    Those tables are module-level Taichi fields, so creating a manager wipes
    whatever scene was loaded before. Only one scene is live at a time.

    Example:
        >>> scene = SceneManager()
        >>> red = scene.add_lambertian_material(albedo=(0.65, 0.05, 0.05))
        >>> lamp = scene.add_diffuse_light_material(color=(1, 1, 1), intensity=15)
        >>> scene.add_rect(0, 555, 0, 555, 0, RectAxis.YZ, red)
        >>> scene.add_rect(213, 343, 227, 332, 554, RectAxis.XZ, lamp)
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.rects: list[RectInfo] = []
        self.boxes: list[BoxInfo] = []
        self.clear()

    def clear(self) -> None:
        """Empty every primitive and material table."""
        intersection.clear_scene()
        lambertian.clear_lambertian_materials()
        metal.clear_metal_materials()
        dielectric.clear_dielectric_materials()
        diffuse_light.clear_diffuse_light_materials()
        _clear_material_tracking()
        for records in (self.materials, self.spheres, self.rects, self.boxes):
            records.clear()

    # -- materials ----------------------------------------------------------

    def _register_material(self, material_type: MaterialType, type_index: int, **params: Any) -> int:
        material_id = int(num_materials[None])
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Scene already holds the maximum of {MAX_MATERIALS} materials")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1
        self.materials.append(MaterialInfo(material_id, material_type, type_index, params))
        logger.debug("Material %d: %s %s", material_id, material_type.name, params)
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Register a matte material and return its material id.

        Raises:
            ValueError: If a channel of ``albedo`` is outside [0, 1].
            RuntimeError: If a material table is full.
        """
        slot = lambertian.add_lambertian_material(albedo)
        return self._register_material(MaterialType.LAMBERTIAN, slot, albedo=albedo)

    def add_metal_material(self, albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
        """Register a metal and return its material id.

        ``fuzz`` is clamped into [0, 1]; 0 is a perfect mirror.

        Raises:
            ValueError: If a channel of ``albedo`` is outside [0, 1].
            RuntimeError: If a material table is full.
        """
        slot = metal.add_metal_material(albedo, fuzz)
        return self._register_material(MaterialType.METAL, slot, albedo=albedo, fuzz=fuzz)

    def add_dielectric_material(self, ior: float = 1.5) -> int:
        """Register a clear refractive medium and return its material id.

        Raises:
            ValueError: If ``ior`` is below 1.
            RuntimeError: If a material table is full.
        """
        slot = dielectric.add_dielectric_material(ior)
        return self._register_material(MaterialType.DIELECTRIC, slot, ior=ior)

    def add_diffuse_light_material(self, color: tuple[float, float, float], intensity: float = 1.0) -> int:
        """Register an emitter radiating ``color * intensity``.

        Raises:
            ValueError: If ``color`` or ``intensity`` is negative.
            RuntimeError: If a material table is full.
        """
        slot = diffuse_light.add_diffuse_light_material(color, intensity)
        return self._register_material(
            MaterialType.DIFFUSE_LIGHT, slot, color=color, intensity=intensity
        )

    def get_material_count(self) -> int:
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Host-side counterpart of ``get_material_type``; None when unknown."""
        info = self.get_material_info(material_id)
        return None if info is None else info.material_type

    def has_emitter(self) -> bool:
        return any(info.material_type is MaterialType.DIFFUSE_LIGHT for info in self.materials)

    def _check_material_id(self, material_id: int) -> None:
        if not 0 <= material_id < num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

    # -- primitives ---------------------------------------------------------

    def add_sphere(self, center: tuple[float, float, float], radius: float, material_id: int) -> int:
        """Place a sphere and return its slot in the sphere table.

        Raises:
            ValueError: For an unknown ``material_id`` or a bad radius.
            RuntimeError: If the sphere table is full.
        """
        self._check_material_id(material_id)
        index = intersection.add_sphere(center, radius, material_id)
        self.spheres.append(SphereInfo(index, tuple(center), radius, material_id))
        return index

    def add_rect(
        self,
        a0: float,
        a1: float,
        b0: float,
        b1: float,
        k: float,
        axis: RectAxis,
        material_id: int,
    ) -> int:
        """Place an axis-aligned rectangle and return its slot.

        ``[a0, a1] x [b0, b1]`` spans the two in-plane axes of ``axis`` and
        ``k`` is the plane's coordinate on the remaining one.

        Raises:
            ValueError: For an unknown ``material_id`` or reversed bounds.
            RuntimeError: If the rectangle table is full.
        """
        self._check_material_id(material_id)
        index = intersection.add_rect(a0, a1, b0, b1, k, axis, material_id)
        self.rects.append(RectInfo(index, (a0, a1, b0, b1), k, RectAxis(axis), material_id))
        return index

    def add_box(
        self,
        box_min: tuple[float, float, float],
        box_max: tuple[float, float, float],
        material_id: int,
    ) -> int:
        """Place an axis-aligned box whose six faces share ``material_id``.

        Raises:
            ValueError: For an unknown ``material_id`` or inverted corners.
            RuntimeError: If the box table is full.
        """
        self._check_material_id(material_id)
        index = intersection.add_box(box_min, box_max, material_id)
        self.boxes.append(BoxInfo(index, tuple(box_min), tuple(box_max), material_id))
        return index

    def get_sphere_count(self) -> int:
        return intersection.get_sphere_count()

    def get_rect_count(self) -> int:
        return intersection.get_rect_count()

    def get_box_count(self) -> int:
        return intersection.get_box_count()

    def get_primitive_count(self) -> int:
        return self.get_sphere_count() + self.get_rect_count() + self.get_box_count()

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly description of the scene."""
        return {
            "materials": [{"type": m.material_type.name.lower(), **m.params} for m in self.materials],
            "spheres": [
                {"center": list(s.center), "radius": s.radius, "material_id": s.material_id}
                for s in self.spheres
            ],
            "rects": [
                {"bounds": list(r.bounds), "k": r.k, "axis": r.axis.name, "material_id": r.material_id}
                for r in self.rects
            ],
            "boxes": [
                {"min": list(b.box_min), "max": list(b.box_max), "material_id": b.material_id}
                for b in self.boxes
            ],
        }

    def __repr__(self) -> str:
        return (
            f"SceneManager(materials={self.get_material_count()}, "
            f"spheres={self.get_sphere_count()}, rects={self.get_rect_count()}, "
            f"boxes={self.get_box_count()})"
        )
