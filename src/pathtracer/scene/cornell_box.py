"""Cornell box scene configuration.

This module builds the classic Cornell box, a standard test scene used in
computer graphics for evaluating global illumination algorithms.

The Cornell box spans 0 to 555 on every axis and consists of:
- Five axis-aligned walls: green at x = 555, red at x = 0, white floor,
  ceiling and back wall
- A rectangular area light just below the ceiling
- Two axis-aligned boxes (tall and short) whose materials are configurable

The camera sits in front of the open side (negative z) looking toward +z, so
the green wall appears on the left of the image and the red wall on the right.

Scene options live in an immutable SceneConfig passed to build_scene(), which
rebuilds the module-level scene registries from scratch.

Example:
    >>> import src.pathtracer as pt
    >>> pt.init()
    >>> from src.pathtracer.scene.cornell_box import SceneConfig, build_scene, cornell_camera
    >>> from src.pathtracer.camera.pinhole import setup_camera
    >>>
    >>> scene = build_scene(SceneConfig(left_box_material="metal"))
    >>> setup_camera(cornell_camera(vfov=40.0, distance_scale=15.0))
"""

import logging
from dataclasses import asdict, dataclass
from enum import Enum

from src.pathtracer.camera.pinhole import PinholeCamera
from src.pathtracer.geometry.rect import RectAxis
from src.pathtracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Cornell Box Constants
# =============================================================================

BOX_SIZE = 555.0

# Wall colors (normalized RGB values matching original Cornell box measurements)
RED_WALL_ALBEDO = (0.65, 0.05, 0.05)
GREEN_WALL_ALBEDO = (0.12, 0.45, 0.15)
WHITE_WALL_ALBEDO = (0.73, 0.73, 0.73)

# Ceiling light: x in [213, 343], z in [227, 332], one unit below the ceiling
LIGHT_COLOR = (1.0, 1.0, 1.0)
LIGHT_BOUNDS = (213.0, 343.0, 227.0, 332.0)
LIGHT_HEIGHT = 554.0

# Box corners (min, max)
TALL_BOX = ((130.0, 0.0, 65.0), (295.0, 330.0, 230.0))
SHORT_BOX = ((265.0, 0.0, 295.0), (430.0, 165.0, 460.0))

# Box materials
BOX_ALBEDO = (0.73, 0.73, 0.73)
BOX_METAL_FUZZ = 0.1
BOX_GLASS_IOR = 1.5

# Camera placement
CAMERA_TARGET = (278.0, 278.0, 0.0)
CAMERA_DISTANCE_UNIT = 50.0
DEFAULT_VFOV = 40.0
DEFAULT_DISTANCE_SCALE = 15.0
DEFAULT_LIGHT_INTENSITY = 15.0


class BoxMaterial(str, Enum):
    """Material choice for the two boxes."""

    LAMBERTIAN = "lambertian"
    METAL = "metal"
    GLASS = "glass"


@dataclass(frozen=True)
class SceneConfig:
    """Parameters for building the Cornell box scene.

    Attributes:
        show_boxes: Whether the two boxes are part of the scene.
        show_light: Whether the ceiling light is part of the scene. Without
            it nothing emits and the render is black.
        light_intensity: Multiplier on the white light color (> 0).
        left_box_material: Material of the tall box.
        right_box_material: Material of the short box.

    Example:
        >>> SceneConfig(right_box_material="glass").right_box_material
        <BoxMaterial.GLASS: 'glass'>
    """

    show_boxes: bool = True
    show_light: bool = True
    light_intensity: float = DEFAULT_LIGHT_INTENSITY
    left_box_material: BoxMaterial = BoxMaterial.LAMBERTIAN
    right_box_material: BoxMaterial = BoxMaterial.LAMBERTIAN

    def __post_init__(self) -> None:
        if self.light_intensity <= 0.0:
            raise ValueError(f"light_intensity must be positive, got {self.light_intensity}")

        for name in ("left_box_material", "right_box_material"):
            value = getattr(self, name)
            try:
                material = BoxMaterial(value.lower() if isinstance(value, str) else value)
            except ValueError:
                choices = ", ".join(m.value for m in BoxMaterial)
                raise ValueError(f"{name} must be one of {choices}, got {value!r}") from None
            object.__setattr__(self, name, material)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["left_box_material"] = self.left_box_material.value
        data["right_box_material"] = self.right_box_material.value
        return data


# =============================================================================
# Cornell Box Factory
# =============================================================================


def _add_box_material(scene: SceneManager, material: BoxMaterial) -> int:
    if material == BoxMaterial.METAL:
        return scene.add_metal_material(albedo=BOX_ALBEDO, fuzz=BOX_METAL_FUZZ)
    if material == BoxMaterial.GLASS:
        return scene.add_dielectric_material(ior=BOX_GLASS_IOR)
    return scene.add_lambertian_material(albedo=BOX_ALBEDO)


def build_scene(config: SceneConfig | None = None) -> SceneManager:
    """Build the Cornell box into the scene registries.

    Any previously built scene is discarded.

    Args:
        config: Scene options. Defaults to SceneConfig().

    Returns:
        The SceneManager describing the new scene.

    Example:
        >>> scene = build_scene()
        >>> scene.get_rect_count(), scene.get_box_count()
        (6, 2)
    """
    if config is None:
        config = SceneConfig()

    scene = SceneManager()

    red = scene.add_lambertian_material(albedo=RED_WALL_ALBEDO)
    white = scene.add_lambertian_material(albedo=WHITE_WALL_ALBEDO)
    green = scene.add_lambertian_material(albedo=GREEN_WALL_ALBEDO)

    # Side walls (YZ planes)
    scene.add_rect(0.0, BOX_SIZE, 0.0, BOX_SIZE, BOX_SIZE, RectAxis.YZ, green)
    scene.add_rect(0.0, BOX_SIZE, 0.0, BOX_SIZE, 0.0, RectAxis.YZ, red)

    if config.show_light:
        light = scene.add_diffuse_light_material(
            color=LIGHT_COLOR, intensity=config.light_intensity
        )
        scene.add_rect(*LIGHT_BOUNDS, LIGHT_HEIGHT, RectAxis.XZ, light)

    # Floor, ceiling and back wall
    scene.add_rect(0.0, BOX_SIZE, 0.0, BOX_SIZE, 0.0, RectAxis.XZ, white)
    scene.add_rect(0.0, BOX_SIZE, 0.0, BOX_SIZE, BOX_SIZE, RectAxis.XZ, white)
    scene.add_rect(0.0, BOX_SIZE, 0.0, BOX_SIZE, BOX_SIZE, RectAxis.XY, white)

    if config.show_boxes:
        left = _add_box_material(scene, config.left_box_material)
        right = _add_box_material(scene, config.right_box_material)
        scene.add_box(*TALL_BOX, left)
        scene.add_box(*SHORT_BOX, right)

    logger.debug("Built Cornell box %s: %r", config.to_dict(), scene)
    return scene


def cornell_camera(
    vfov: float = DEFAULT_VFOV,
    distance_scale: float = DEFAULT_DISTANCE_SCALE,
    aspect_ratio: float = 1.0,
) -> PinholeCamera:
    """Camera looking into the open side of the box.

    The camera sits at (278, 278, -distance_scale * 50) aimed at (278, 278, 0).

    Args:
        vfov: Vertical field of view in degrees.
        distance_scale: Camera distance in units of 50 scene units.
        aspect_ratio: Image width divided by height.

    Returns:
        A PinholeCamera; pass it to setup_camera() before rendering.
    """
    return PinholeCamera(
        lookfrom=(CAMERA_TARGET[0], CAMERA_TARGET[1], -distance_scale * CAMERA_DISTANCE_UNIT),
        lookat=CAMERA_TARGET,
        vup=(0.0, 1.0, 0.0),
        vfov=vfov,
        aspect_ratio=aspect_ratio,
    )


def get_cornell_box_bounds(box_size: float = BOX_SIZE) -> dict[str, tuple[float, float, float]]:
    """Get the bounding box of the Cornell box scene.

    Returns:
        A dictionary with 'min', 'max', 'center' and 'size' entries.
    """
    return {
        "min": (0.0, 0.0, 0.0),
        "max": (box_size, box_size, box_size),
        "center": (box_size / 2.0, box_size / 2.0, box_size / 2.0),
        "size": (box_size, box_size, box_size),
    }
