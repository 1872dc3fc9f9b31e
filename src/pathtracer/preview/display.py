"""Static Matplotlib views of rendered frames.

These figures are for notebooks and scripts; the live window lives in
``preview.interactive``.

Example:
    >>> from src.pathtracer.core.progressive import ProgressiveRenderer
    >>> from src.pathtracer.preview.display import show_preview
    >>> renderer = ProgressiveRenderer(300, 300)
    >>> renderer.render()
    >>> show_preview(renderer)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from src.pathtracer.preview.export import compute_rmse

if TYPE_CHECKING:
    from src.pathtracer.core.progressive import ProgressiveRenderer


def rgba_to_float(image: npt.NDArray[np.uint8]) -> npt.NDArray[np.float32]:
    """Drop alpha and rescale an 8-bit frame into [0, 1] floats."""
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3) or (H, W, 4) image, got shape {image.shape}")
    return image[..., :3].astype(np.float32) / np.float32(255.0)


def _status_title(renderer: ProgressiveRenderer) -> str:
    title = f"Cornell Box - {renderer.samples_per_pixel} SPP, depth {renderer.max_depth}"
    progress = renderer.last_progress
    if progress is None:
        return title
    return f"{title} ({progress.status} {progress.percent}%, {progress.elapsed_seconds}s)"


def _panel(ax, image, label: str) -> None:
    ax.imshow(image)
    ax.set_title(label)
    ax.axis("off")


def show_preview(
    renderer: ProgressiveRenderer,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Plot whatever the renderer has produced so far.

    Without ``title`` the figure is labelled with the sampling settings and
    the most recent progress report.
    """
    import matplotlib.pyplot as plt

    _, ax = plt.subplots(1, 1, figsize=figsize)
    _panel(ax, rgba_to_float(renderer.get_rgba_numpy()), title or _status_title(renderer))
    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    image_a: npt.NDArray[np.uint8],
    image_b: npt.NDArray[np.uint8],
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Plot two frames next to their absolute difference.

    The difference panel is multiplied by ``diff_scale`` and clipped so that
    small noise differences stay visible.

    Returns:
        RMSE between the frames, measured on the [0, 1] scale.
    """
    import matplotlib.pyplot as plt

    a = rgba_to_float(image_a)
    b = rgba_to_float(image_b)
    rmse = compute_rmse(a, b)
    diff = np.clip(np.abs(a - b) * diff_scale, 0.0, 1.0)

    _, axes = plt.subplots(1, 3, figsize=figsize)
    _panel(axes[0], a, labels[0])
    _panel(axes[1], b, labels[1])
    _panel(axes[2], diff, f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}")
    plt.tight_layout()
    plt.show(block=block)

    return rmse
