"""Live GGUI window for watching and steering a progressive render.

The window shows the Cornell box filling in one row batch per frame, next
to a panel of render settings.

Features:
    - One row batch rendered per window frame, so the UI stays responsive
    - Sliders for samples per pixel, max depth, light intensity and resolution
    - Toggles for the boxes and the light, buttons to cycle box materials
    - Render, Stop and Save PNG buttons, plus a progress status line

Control values live in a ControlState; build_config() turns them into a
validated RenderConfig, so the control logic can be exercised without a
window.

Example:
    >>> from src.pathtracer.preview.interactive import InteractivePreview
    >>> from src.pathtracer.config import RenderConfig
    >>>
    >>> preview = InteractivePreview(RenderConfig.from_preset("fast"))
    >>> preview.run()  # Blocks until the window is closed
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from src.pathtracer.config import DEFAULT_BATCH_ROWS, RenderConfig
from src.pathtracer.core.integrator import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH
from src.pathtracer.core.progressive import STATUS_RENDERING, ProgressiveRenderer, RenderProgress
from src.pathtracer.preview.display import rgba_to_float
from src.pathtracer.scene.cornell_box import (
    DEFAULT_DISTANCE_SCALE,
    DEFAULT_VFOV,
    BoxMaterial,
    SceneConfig,
)

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

# Slider ranges
MAX_SLIDER_SAMPLES = 100
MAX_SLIDER_DEPTH = 50
MAX_SLIDER_INTENSITY = 50.0
MIN_SLIDER_SIZE = 100

_MATERIAL_CYCLE = list(BoxMaterial)


def next_box_material(material: BoxMaterial) -> BoxMaterial:
    """The material after `material` in lambertian -> metal -> glass order."""
    index = _MATERIAL_CYCLE.index(material)
    return _MATERIAL_CYCLE[(index + 1) % len(_MATERIAL_CYCLE)]


@dataclass
class ControlState:
    """Current values of the control panel widgets."""

    samples_per_pixel: int = 10
    max_depth: int = 5
    image_width: int = 600
    image_height: int = 600
    show_boxes: bool = True
    show_light: bool = True
    light_intensity: float = 15.0
    left_box_material: BoxMaterial = BoxMaterial.LAMBERTIAN
    right_box_material: BoxMaterial = BoxMaterial.LAMBERTIAN
    camera_vfov: float = DEFAULT_VFOV
    camera_distance_scale: float = DEFAULT_DISTANCE_SCALE
    batch_rows: int = DEFAULT_BATCH_ROWS
    status: str = "Ready"

    @classmethod
    def from_config(cls, config: RenderConfig) -> ControlState:
        return cls(
            samples_per_pixel=config.samples_per_pixel,
            max_depth=config.max_depth,
            image_width=config.image_width,
            image_height=config.image_height,
            show_boxes=config.scene.show_boxes,
            show_light=config.scene.show_light,
            light_intensity=config.scene.light_intensity,
            left_box_material=config.scene.left_box_material,
            right_box_material=config.scene.right_box_material,
            camera_vfov=config.camera_vfov,
            camera_distance_scale=config.camera_distance_scale,
            batch_rows=config.batch_rows,
        )

    def build_config(self) -> RenderConfig:
        """Validated RenderConfig for the current control values.

        Raises:
            ValueError: If a control holds an out-of-range value.
        """
        scene = SceneConfig(
            show_boxes=self.show_boxes,
            show_light=self.show_light,
            light_intensity=self.light_intensity,
            left_box_material=self.left_box_material,
            right_box_material=self.right_box_material,
        )
        return RenderConfig(
            samples_per_pixel=self.samples_per_pixel,
            max_depth=self.max_depth,
            image_width=self.image_width,
            image_height=self.image_height,
            camera_vfov=self.camera_vfov,
            camera_distance_scale=self.camera_distance_scale,
            batch_rows=self.batch_rows,
            scene=scene,
        )


def format_status(progress: RenderProgress | None) -> str:
    """Status line text for a progress report."""
    if progress is None:
        return "Ready"
    return f"{progress.status} {progress.percent:.1f}% ({progress.elapsed_seconds:.1f}s)"


class InteractivePreview:
    """A Taichi GGUI window wrapped around a ProgressiveRenderer.

    The window resolution is fixed at creation; the render resolution can be
    changed from the panel and the canvas scales the frame to fit.

    Attributes:
        controls: Current control panel values.
        renderer: The progressive renderer driven by the window.
        display_image: Taichi field holding the displayed frame (RGB float).
    """

    def __init__(
        self,
        config: RenderConfig | None = None,
        *,
        title: str = "Cornell Box - Path Tracer",
    ) -> None:
        """Initialize the preview and its renderer.

        Args:
            config: Initial render settings. Defaults to RenderConfig().
            title: Window title.

        Note:
            Taichi must be initialized first. The window itself is created
            lazily by run().
        """
        if config is None:
            config = RenderConfig()

        self.controls = ControlState.from_config(config)
        self.renderer = ProgressiveRenderer(
            config.image_width,
            config.image_height,
            progress_callback=self._on_progress,
        )
        self.renderer.apply_config(config)

        self._title = title
        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None
        self._display_tree = None
        self._allocate_display(config.image_width, config.image_height)

    def _allocate_display(self, width: int, height: int) -> None:
        """Point `display_image` at a fresh `width x height` field.

        The field sits in its own SNode tree, and the tree of the previous
        size is destroyed, so resizing many times keeps one display buffer
        alive.
        """
        if self._display_tree is not None:
            self._display_tree.destroy()

        # Taichi fields use (x, y) indexing with the origin at the bottom-left
        builder = ti.FieldsBuilder()
        field = ti.Vector.field(3, dtype=ti.f32)
        builder.dense(ti.ij, (width, height)).place(field)
        self._display_tree = builder.finalize()
        self.display_image = field

    def _ensure_window(self) -> tuple[ti.ui.Window, ti.ui.Canvas]:
        # Created on first use so the preview can be driven headless
        if self._window is None:
            self._window = ti.ui.Window(
                name=self._title,
                res=(self.renderer.width, self.renderer.height),
                vsync=True,
            )
            self._canvas = self._window.get_canvas()
        return self._window, self._canvas

    def _on_progress(self, progress: RenderProgress) -> None:
        self.controls.status = format_status(progress)

    def update_image(self, image: npt.NDArray[np.uint8]) -> None:
        """Update the display image from an (H, W, 4) RGBA8 frame.

        Raises:
            ValueError: If the frame size doesn't match the display field.
        """
        width, height = self.display_image.shape
        if image.shape[:2] != (height, width):
            raise ValueError(
                f"Image shape {image.shape} doesn't match display size {(height, width)}"
            )

        # NumPy rows run top to bottom; the canvas origin is the bottom-left
        rgb = rgba_to_float(image)
        self.display_image.from_numpy(
            np.ascontiguousarray(np.transpose(np.flipud(rgb), (1, 0, 2)))
        )

    # =========================================================================
    # Actions
    # =========================================================================

    def start_render(self) -> None:
        """Apply the control values and start a new render.

        An invalid control value is reported on the status line instead of
        starting a render.
        """
        if self.renderer.is_rendering:
            self.renderer.stop()

        try:
            config = self.controls.build_config()
        except ValueError as exc:
            self.controls.status = f"Error: {exc}"
            logger.warning("Invalid render settings: %s", exc)
            return

        if (config.image_width, config.image_height) != self.display_image.shape:
            self._allocate_display(config.image_width, config.image_height)
        self.renderer.apply_config(config)
        self.renderer.start_render()
        self.controls.status = f"{STATUS_RENDERING} 0.0%"
        self.update_image(self.renderer.get_rgba_numpy())

    def stop_render(self) -> None:
        self.renderer.stop()

    def export_png(self, filename: str | None = None) -> str:
        """Save the current frame, by default to a timestamped PNG file.

        Returns:
            The path written.
        """
        if filename is None:
            filename = f"cornell_box_{datetime.now():%Y%m%d_%H%M%S}.png"
        self.renderer.save_image(filename)
        logger.info("Exported %s", filename)
        return filename

    def advance(self) -> None:
        """Render one row batch (if rendering) and refresh the display."""
        if self.renderer.is_rendering:
            self.renderer.step()
            self.update_image(self.renderer.get_rgba_numpy())

    # =========================================================================
    # Window
    # =========================================================================

    def _draw_gui_panel(self, window: ti.ui.Window) -> None:
        c = self.controls
        with window.GUI.sub_window("Render Settings", 0.02, 0.02, 0.32, 0.56) as gui:
            c.samples_per_pixel = gui.slider_int(
                "Samples", c.samples_per_pixel, minimum=1, maximum=MAX_SLIDER_SAMPLES
            )
            c.max_depth = gui.slider_int("Max depth", c.max_depth, minimum=0, maximum=MAX_SLIDER_DEPTH)
            c.image_width = gui.slider_int(
                "Width", c.image_width, minimum=MIN_SLIDER_SIZE, maximum=MAX_IMAGE_WIDTH
            )
            c.image_height = gui.slider_int(
                "Height", c.image_height, minimum=MIN_SLIDER_SIZE, maximum=MAX_IMAGE_HEIGHT
            )
            c.show_boxes = gui.checkbox("Show boxes", c.show_boxes)
            c.show_light = gui.checkbox("Show light", c.show_light)
            c.light_intensity = gui.slider_float(
                "Light intensity", c.light_intensity, minimum=1.0, maximum=MAX_SLIDER_INTENSITY
            )
            if gui.button(f"Left box: {c.left_box_material.value}"):
                c.left_box_material = next_box_material(c.left_box_material)
            if gui.button(f"Right box: {c.right_box_material.value}"):
                c.right_box_material = next_box_material(c.right_box_material)

            if gui.button("Render"):
                self.start_render()
            if gui.button("Stop"):
                self.stop_render()
            if gui.button("Save PNG"):
                self.controls.status = f"Saved {self.export_png()}"
            gui.text(c.status)

    def run(self, start: bool = True) -> None:
        """Open the window and pump frames until it is closed.

        Each frame renders at most one row batch before drawing, so the
        panel stays responsive during long renders.
        """
        window, canvas = self._ensure_window()
        if start:
            self.start_render()

        while window.running:
            self.advance()
            self._draw_gui_panel(window)
            canvas.set_image(self.display_image)
            window.show()

    @staticmethod
    def is_display_available() -> bool:
        """Whether a GUI window can be opened here (False when headless)."""
        if os.name == "nt":
            return True
        has_display = bool(os.environ.get("DISPLAY"))
        if sys.platform == "darwin":
            # Local macOS sessions always have a window server
            return has_display or not os.environ.get("SSH_CONNECTION")
        return has_display or bool(os.environ.get("WAYLAND_DISPLAY"))
