#!/usr/bin/env python3
"""Open the Cornell box in a live preview window.

Usage:
    python -m examples.interactive_cornell_box [--preset fast] [--arch gpu]

Panel:
    Samples, Max depth        sampling for the next render
    Width, Height             render resolution
    Show boxes, Show light    scene toggles
    Light intensity           1 to 50
    Left box, Right box       cycle lambertian -> metal -> glass
    Render, Stop              restart or halt the progressive render
    Save PNG                  write the current frame with a timestamp
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Allow `python examples/interactive_cornell_box.py` from a checkout
_ROOT = str(Path(__file__).resolve().parents[1])
if _ROOT not in sys.path:
    sys.path.insert(0, _ROOT)

import taichi as ti  # noqa: E402

import src.pathtracer as pt  # noqa: E402

# pt.init drops to cpu when the gpu backend lacks f64
_ARCHES = {"cpu": ti.cpu, "gpu": ti.gpu, "cuda": ti.cuda}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Interactive Cornell box path tracer.")
    parser.add_argument("--preset", choices=("fast", "balanced", "quality"), default="balanced")
    parser.add_argument(
        "--arch",
        choices=sorted(_ARCHES),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    args = parser.parse_args(argv)

    # Fields are declared on import, so Taichi has to be up first
    backend = pt.init(arch=_ARCHES[args.arch])
    print(f"Backend: {backend.name}")

    from src.pathtracer.config import RenderConfig
    from src.pathtracer.preview.interactive import InteractivePreview

    if not InteractivePreview.is_display_available():
        print("No display found; the preview needs a graphical session.", file=sys.stderr)
        return 1

    config = RenderConfig.from_preset(args.preset)
    preview = InteractivePreview(config)
    print(f"Window {config.image_width}x{config.image_height}; close it to quit.")

    try:
        preview.run()
    except KeyboardInterrupt:
        print()
    finally:
        preview.stop_render()

    return 0


if __name__ == "__main__":
    sys.exit(main())
