"""Progressive renderer: a row-batched render session with progress and stop.

This module wraps the integrator in a render session that:
- Renders the image a few rows at a time (one kernel launch per batch)
- Reports progress as (percent, elapsed seconds, status) after each batch
- Hands the RGBA8 frame to an optional pixel callback after each batch
- Can be stopped between batches, and resized or reconfigured while idle

The session is a small state machine, IDLE -> RENDERING -> COMPLETE or
STOPPED, and any finished state can start again. The only suspension point
is between batches, exposed three ways: step() for caller-driven loops such
as a GUI frame loop, the render_progressive() generator, and the
render_async() coroutine which yields to the event loop so another task can
call stop().

Example:
    >>> import src.pathtracer as pt
    >>> pt.init()
    >>> from src.pathtracer.config import RenderConfig
    >>> from src.pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> config = RenderConfig.from_preset("fast")
    >>> renderer = ProgressiveRenderer(config.image_width, config.image_height)
    >>> renderer.apply_config(config)
    >>> for progress in renderer.render_progressive():
    ...     print(f"{progress.percent}% {progress.elapsed_seconds}s {progress.status}")
    >>> renderer.save_image("cornell_box.png")
"""

import asyncio
import logging
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass
from enum import Enum

import numpy as np
import numpy.typing as npt

from src.pathtracer.camera.pinhole import setup_camera
from src.pathtracer.config import DEFAULT_BATCH_ROWS, RenderConfig
from src.pathtracer.core.integrator import (
    clear_render_target,
    get_image_numpy,
    get_rgba_bytes,
    get_rgba_numpy,
    get_total_samples,
    render_rows,
    setup_render_target,
)
from src.pathtracer.scene.cornell_box import build_scene, cornell_camera
from src.pathtracer.scene.manager import SceneManager

logger = logging.getLogger(__name__)

STATUS_RENDERING = "Rendering..."
STATUS_COMPLETE = "Complete"
STATUS_STOPPED = "Stopped"


class RenderState(Enum):
    """Lifecycle of a render session."""

    IDLE = "idle"
    RENDERING = "rendering"
    COMPLETE = "complete"
    STOPPED = "stopped"


@dataclass(frozen=True)
class RenderProgress:
    """A progress report.

    Attributes:
        percent: Share of rows finished, rounded to one decimal.
        elapsed_seconds: Seconds since the render started, rounded to one decimal.
        status: "Rendering...", "Complete" or "Stopped".
    """

    percent: float
    elapsed_seconds: float
    status: str


# Callback receives each RenderProgress as it is reported
ProgressCallback = Callable[[RenderProgress], None]

# Callback receives the (height, width, 4) uint8 frame after each batch
PixelCallback = Callable[[npt.NDArray[np.uint8]], None]


class ProgressiveRenderer:
    """A row-batched render session over the integrator frame buffer.

    The renderer delegates pixel storage to the module-level integrator
    buffers (Taichi fields), so only one renderer should be active at a time.
    The scene and camera are whatever is currently set up; apply_config()
    sets up both from a RenderConfig.

    Attributes:
        samples_per_pixel: Samples per pixel for the next render.
        max_depth: Maximum path length for the next render.
        batch_rows: Rows rendered per batch.
        progress_callback: Optional progress sink.
        pixel_callback: Optional pixel sink.
    """

    def __init__(
        self,
        width: int,
        height: int,
        samples_per_pixel: int = 10,
        max_depth: int = 5,
        batch_rows: int = DEFAULT_BATCH_ROWS,
        progress_callback: ProgressCallback | None = None,
        pixel_callback: PixelCallback | None = None,
        time_source: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the renderer and its frame buffer.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.
            samples_per_pixel: Samples per pixel.
            max_depth: Maximum path length.
            batch_rows: Rows per batch between progress reports.
            progress_callback: Called with every RenderProgress.
            pixel_callback: Called with the RGBA8 frame after each batch.
            time_source: Clock used for elapsed times.

        Raises:
            ValueError: If the dimensions are out of range.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height

        self.samples_per_pixel = samples_per_pixel
        self.max_depth = max_depth
        self.batch_rows = batch_rows
        self.progress_callback = progress_callback
        self.pixel_callback = pixel_callback
        self._time_source = time_source

        self._state = RenderState.IDLE
        self._current_row = 0
        self._start_time = 0.0
        self._last_progress: RenderProgress | None = None
        self._render_callback: ProgressCallback | None = None

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def state(self) -> RenderState:
        return self._state

    @property
    def is_rendering(self) -> bool:
        return self._state == RenderState.RENDERING

    @property
    def current_row(self) -> int:
        """Rows finished in the current (or last) render."""
        return self._current_row

    @property
    def last_progress(self) -> RenderProgress | None:
        return self._last_progress

    @property
    def sample_count(self) -> int:
        """Samples accumulated at the top-left pixel."""
        return get_total_samples()

    # =========================================================================
    # Configuration
    # =========================================================================

    def _require_idle(self, action: str) -> None:
        if self.is_rendering:
            raise RuntimeError(f"Cannot {action} while a render is in progress; call stop() first")

    def resize(self, width: int, height: int) -> None:
        """Resize the frame buffer, clearing it.

        Args:
            width: New image width in pixels.
            height: New image height in pixels.

        Raises:
            RuntimeError: If a render is in progress.
            ValueError: If the dimensions are out of range.
        """
        self._require_idle("resize")
        setup_render_target(width, height)
        self._width = width
        self._height = height
        self._current_row = 0
        self._state = RenderState.IDLE
        logger.debug("Resized frame buffer to %dx%d", width, height)

    def reset(self) -> None:
        """Clear the frame buffer without changing its size.

        Raises:
            RuntimeError: If a render is in progress.
        """
        self._require_idle("reset")
        clear_render_target()
        self._current_row = 0
        self._state = RenderState.IDLE

    def apply_config(self, config: RenderConfig) -> SceneManager:
        """Set up size, camera, scene and sampling from a RenderConfig.

        The frame buffer is resized (and cleared) only when the size changes.

        Returns:
            The SceneManager of the rebuilt scene.

        Raises:
            RuntimeError: If a render is in progress.
        """
        self._require_idle("reconfigure")
        if (config.image_width, config.image_height) != (self._width, self._height):
            self.resize(config.image_width, config.image_height)

        setup_camera(
            cornell_camera(
                vfov=config.camera_vfov,
                distance_scale=config.camera_distance_scale,
                aspect_ratio=config.aspect_ratio,
            )
        )
        scene = build_scene(config.scene)

        self.samples_per_pixel = config.samples_per_pixel
        self.max_depth = config.max_depth
        self.batch_rows = config.batch_rows
        return scene

    # =========================================================================
    # Render Session
    # =========================================================================

    def _elapsed(self) -> float:
        return round(self._time_source() - self._start_time, 1)

    def _percent(self) -> float:
        return round(self._current_row / self._height * 100.0, 1)

    def _report(self, percent: float, status: str) -> RenderProgress:
        progress = RenderProgress(percent=percent, elapsed_seconds=self._elapsed(), status=status)
        self._last_progress = progress
        if self.progress_callback is not None:
            self.progress_callback(progress)
        if self._render_callback is not None:
            self._render_callback(progress)
        return progress

    def start_render(self) -> None:
        """Begin a new render from the top row.

        The frame buffer is cleared first, so every pixel of the finished
        image holds exactly samples_per_pixel samples.

        Raises:
            RuntimeError: If a render is already in progress.
            ValueError: If the sampling settings are out of range.
        """
        self._require_idle("start a render")
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be >= 1, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.batch_rows < 1:
            raise ValueError(f"batch_rows must be >= 1, got {self.batch_rows}")

        clear_render_target()
        self._current_row = 0
        self._start_time = self._time_source()
        self._last_progress = None
        self._state = RenderState.RENDERING
        logger.info(
            "Render started: %dx%d, %d spp, max depth %d",
            self._width,
            self._height,
            self.samples_per_pixel,
            self.max_depth,
        )

    def step(self) -> RenderProgress | None:
        """Render the next batch of rows.

        Returns:
            The last progress reported by this step ("Complete" after the
            final batch), or None if no render is in progress.
        """
        if not self.is_rendering:
            return None

        y_end = min(self._current_row + self.batch_rows, self._height)
        render_rows(self._current_row, y_end, self.samples_per_pixel, self.max_depth)
        self._current_row = y_end

        if self.pixel_callback is not None:
            self.pixel_callback(get_rgba_numpy())

        progress = self._report(self._percent(), STATUS_RENDERING)

        if self._current_row >= self._height:
            self._state = RenderState.COMPLETE
            progress = self._report(100.0, STATUS_COMPLETE)
            logger.info("Render complete in %.1fs", progress.elapsed_seconds)

        return progress

    def stop(self) -> RenderProgress | None:
        """Stop the render at the current batch boundary.

        Reports "Stopped" with the share of rows finished so far. Calling
        stop() when no render is in progress does nothing.

        Returns:
            The "Stopped" progress report, or None if nothing was rendering.
        """
        if not self.is_rendering:
            return None
        self._state = RenderState.STOPPED
        progress = self._report(self._percent(), STATUS_STOPPED)
        logger.info("Render stopped at %.1f%%", progress.percent)
        return progress

    def render_progressive(self) -> Generator[RenderProgress, None, None]:
        """Render batch by batch, yielding progress after each batch.

        Starts a new render unless one is already in progress. The consumer
        may call stop() between iterations to end the render early.

        Yields:
            The RenderProgress of each batch; the last one is "Complete"
            unless the render was stopped.

        Example:
            >>> for progress in renderer.render_progressive():
            ...     if progress.percent > 50:
            ...         renderer.stop()
        """
        if not self.is_rendering:
            self.start_render()

        while self.is_rendering:
            progress = self.step()
            if progress is not None:
                yield progress

    def render(self, callback: ProgressCallback | None = None) -> RenderProgress | None:
        """Render the whole image synchronously.

        Args:
            callback: Optional extra progress sink for this render only.

        Returns:
            The final progress report.
        """
        self._render_callback = callback
        try:
            for _ in self.render_progressive():
                pass
        finally:
            self._render_callback = None
        return self._last_progress

    async def render_async(self) -> RenderProgress | None:
        """Render the whole image, yielding to the event loop between batches.

        Another task may call stop() while this coroutine is suspended; the
        render then ends at the next batch boundary.

        Returns:
            The final progress report ("Complete" or "Stopped").
        """
        if not self.is_rendering:
            self.start_render()

        while self.is_rendering:
            self.step()
            await asyncio.sleep(0)

        return self._last_progress

    # =========================================================================
    # Output
    # =========================================================================

    def get_rgba_numpy(self) -> npt.NDArray[np.uint8]:
        """The frame as a (height, width, 4) uint8 array, row 0 at the top."""
        return get_rgba_numpy()

    def get_rgba_bytes(self) -> bytes:
        """The frame as width * height * 4 RGBA bytes."""
        return get_rgba_bytes()

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """The averaged linear radiance as a (height, width, 3) array."""
        return get_image_numpy()

    def save_image(self, filepath: str) -> None:
        """Save the current frame as a PNG (or any format Pillow infers)."""
        from src.pathtracer.preview.export import save_png_from_array

        save_png_from_array(self.get_rgba_numpy(), filepath)

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"state={self._state.value}, row={self._current_row})"
        )
