"""Render configuration and presets.

RenderConfig collects every user-facing render setting (sampling, depth,
resolution, camera and scene options) and validates it on construction.
Named presets reproduce the quick/balanced/quality settings of the demo UI.

Example:
    >>> from src.pathtracer.config import RenderConfig
    >>> config = RenderConfig.from_preset("fast")
    >>> config.samples_per_pixel, config.image_width
    (5, 300)
    >>> RenderConfig.from_dict({"samples_per_pixel": 20, "scene": {"show_boxes": False}})
"""

from dataclasses import asdict, dataclass, field, replace
from typing import Any

from src.pathtracer.core.integrator import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH
from src.pathtracer.scene.cornell_box import (
    DEFAULT_DISTANCE_SCALE,
    DEFAULT_VFOV,
    SceneConfig,
)

# Rows rendered per kernel launch between progress reports
DEFAULT_BATCH_ROWS = 5

# Preset name -> RenderConfig overrides
PRESETS: dict[str, dict[str, int]] = {
    "fast": {"samples_per_pixel": 5, "max_depth": 3, "image_width": 300, "image_height": 300},
    "balanced": {"samples_per_pixel": 10, "max_depth": 5, "image_width": 600, "image_height": 600},
    "quality": {"samples_per_pixel": 50, "max_depth": 10, "image_width": 800, "image_height": 800},
}


@dataclass
class RenderConfig:
    """Settings for one render.

    Attributes:
        samples_per_pixel: Jittered samples per pixel (>= 1).
        max_depth: Maximum path length (>= 0; 0 renders black).
        image_width: Output width in pixels.
        image_height: Output height in pixels.
        camera_vfov: Vertical field of view in degrees, in (0, 180).
        camera_distance_scale: Camera distance in units of 50 scene units (> 0).
        batch_rows: Rows per batch between progress reports (>= 1).
        scene: Cornell box scene options.
    """

    samples_per_pixel: int = 10
    max_depth: int = 5
    image_width: int = 600
    image_height: int = 600
    camera_vfov: float = DEFAULT_VFOV
    camera_distance_scale: float = DEFAULT_DISTANCE_SCALE
    batch_rows: int = DEFAULT_BATCH_ROWS
    scene: SceneConfig = field(default_factory=SceneConfig)

    def __post_init__(self) -> None:
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be >= 1, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if not 1 <= self.image_width <= MAX_IMAGE_WIDTH:
            raise ValueError(
                f"image_width must be in [1, {MAX_IMAGE_WIDTH}], got {self.image_width}"
            )
        if not 1 <= self.image_height <= MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"image_height must be in [1, {MAX_IMAGE_HEIGHT}], got {self.image_height}"
            )
        if not 0.0 < self.camera_vfov < 180.0:
            raise ValueError(f"camera_vfov must be in (0, 180), got {self.camera_vfov}")
        if self.camera_distance_scale <= 0.0:
            raise ValueError(
                f"camera_distance_scale must be positive, got {self.camera_distance_scale}"
            )
        if self.batch_rows < 1:
            raise ValueError(f"batch_rows must be >= 1, got {self.batch_rows}")
        if isinstance(self.scene, dict):
            try:
                self.scene = SceneConfig(**self.scene)
            except TypeError as exc:
                raise ValueError(f"Invalid scene config: {exc}") from exc

    @property
    def aspect_ratio(self) -> float:
        return self.image_width / self.image_height

    @classmethod
    def from_preset(cls, name: str, **overrides: Any) -> "RenderConfig":
        """Build a config from a named preset.

        Args:
            name: One of PRESETS ("fast", "balanced", "quality").
            **overrides: Fields that replace the preset values.

        Raises:
            ValueError: If the preset name is unknown.
        """
        try:
            preset = PRESETS[name]
        except KeyError:
            raise ValueError(
                f"Unknown preset {name!r}; choose from {', '.join(PRESETS)}"
            ) from None
        return cls(**{**preset, **overrides})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderConfig":
        """Build a config from a plain dictionary (e.g. parsed JSON).

        A "preset" key selects the base values; other keys override them.

        Raises:
            ValueError: If a key is unknown or a value is out of range.
        """
        data = dict(data)
        preset = data.pop("preset", None)
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown render config keys: {', '.join(sorted(unknown))}")

        if preset is not None:
            return cls.from_preset(preset, **data)
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["scene"] = self.scene.to_dict()
        return data

    def with_overrides(self, **overrides: Any) -> "RenderConfig":
        """Return a validated copy with some fields replaced."""
        return replace(self, **overrides)
