"""Preview module for output and visualization.

This module handles rendering output and interactive preview:

Components:
    display: Matplotlib-based preview display
    export: PNG export and NumPy-side tonemapping
    interactive: Taichi GGUI interactive demo window

The integrator writes display-ready RGBA8 pixels (gamma 2 tonemapping), so
preview and export work on those frames directly.

Example:
    >>> from src.pathtracer.preview import show_preview, save_png
    >>> from src.pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(300, 300)
    >>> renderer.render()
    >>> show_preview(renderer)
    >>> save_png(renderer, "output.png")

For the interactive demo:
    >>> from src.pathtracer.preview import InteractivePreview
    >>> InteractivePreview().run()
"""

from src.pathtracer.preview.display import (
    rgba_to_float,
    show_comparison,
    show_preview,
)
from src.pathtracer.preview.export import (
    compute_rmse,
    load_png,
    save_png,
    save_png_from_array,
    tonemap_to_rgba8,
)
from src.pathtracer.preview.interactive import (
    ControlState,
    InteractivePreview,
    format_status,
    next_box_material,
)

__all__ = [
    # Interactive preview
    "InteractivePreview",
    "ControlState",
    "format_status",
    "next_box_material",
    # Display functions
    "show_preview",
    "show_comparison",
    "rgba_to_float",
    # Export functions
    "save_png",
    "save_png_from_array",
    "load_png",
    "tonemap_to_rgba8",
    "compute_rmse",
]
