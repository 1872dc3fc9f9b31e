"""Image export utilities for rendered frames.

The integrator already produces display-ready RGBA8 pixels, so export is
mostly a matter of handing the frame to Pillow. tonemap_to_rgba8() applies the
same sqrt-gamma mapping on the NumPy side for linear images that never went
through the kernel (e.g. averaged or reference images).

Example:
    >>> from src.pathtracer.preview.export import save_png
    >>> from src.pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(300, 300)
    >>> renderer.render()
    >>> save_png(renderer, "output.png")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from src.pathtracer.core.progressive import ProgressiveRenderer

# Upper clamp before quantization, so 256 * c never reaches 256
TONEMAP_CLAMP = 0.999


def tonemap_to_rgba8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear (H, W, 3) image to opaque RGBA8 with gamma 2.

    Non-finite values map to black.

    Args:
        image: Linear radiance, shape (H, W, 3).

    Returns:
        Array of shape (H, W, 4) with dtype uint8 and alpha 255.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    linear = np.nan_to_num(image.astype(np.float64), nan=0.0, posinf=0.0, neginf=0.0)
    encoded = np.clip(np.sqrt(np.maximum(linear, 0.0)), 0.0, TONEMAP_CLAMP)
    channels = np.minimum((256.0 * encoded).astype(np.int32), 255).astype(np.uint8)

    alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.concatenate([channels, alpha], axis=2)


def save_png_from_array(image: npt.NDArray[np.uint8], filepath: str) -> None:
    """Save an RGBA8 or RGB8 array as an image file.

    Args:
        image: Array of shape (H, W, 4) or (H, W, 3) with dtype uint8.
        filepath: Output file path; the format follows the extension.

    Raises:
        ValueError: If the array has the wrong shape or dtype.
    """
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got dtype {image.dtype}")
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3) or (H, W, 4) image, got shape {image.shape}")

    PILImage.fromarray(np.ascontiguousarray(image)).save(filepath)


def save_png(renderer: ProgressiveRenderer, filepath: str) -> None:
    """Save the renderer's current frame as a PNG file.

    Rows that have not been rendered yet are saved as opaque black.
    """
    save_png_from_array(renderer.get_rgba_numpy(), filepath)


def load_png(filepath: str) -> npt.NDArray[np.uint8]:
    """Load an image file as an (H, W, 4) RGBA8 array."""
    with PILImage.open(filepath) as img:
        return np.asarray(img.convert("RGBA"), dtype=np.uint8).copy()


def compute_rmse(
    image_a: npt.NDArray[np.number],
    image_b: npt.NDArray[np.number],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
