"""Taichi path tracer for the Cornell box demo scene.

This package renders the classic Cornell box with recursive Monte Carlo path
tracing, with support for:
- Lambertian, metal, dielectric and diffuse-light materials
- Spheres, axis-aligned rectangles and boxes
- Row-batched progressive rendering with progress reporting and cancellation
- Gamma-corrected RGBA8 output

Subpackages:
    core: Vector utilities, the integrator, and the progressive render loop
    geometry: Shape primitives and intersection routines
    materials: Scattering and emission models
    scene: Scene storage, material registry and the Cornell box builder
    camera: Pinhole camera ray generation
    preview: PNG export, matplotlib preview and the interactive window

Taichi must be initialized before importing any module that declares fields.
Use init() so the engine runs in double precision:

    >>> import src.pathtracer as pt
    >>> pt.init()
    >>> from src.pathtracer.core.progressive import ProgressiveRenderer
"""

import logging

import taichi as ti

__version__ = "0.2.0"

logger = logging.getLogger(__name__)

# Backends with double precision kernels; Metal, OpenGL and most Vulkan
# devices compile f32 only
F64_ARCHES = (ti.x64, ti.arm64, ti.cuda, ti.amdgpu)


def supports_f64(arch) -> bool:
    return arch in F64_ARCHES


def init(arch=None, random_seed: int = 0):
    """Initialize the Taichi runtime for rendering.

    ``ti.gpu`` resolves to whichever GPU backend is present. When that
    backend cannot run f64 kernels the runtime is restarted on the CPU.

    Args:
        arch: Taichi backend (default ti.cpu).
        random_seed: Seed for ti.random() so renders are reproducible.

    Returns:
        The backend actually in use.
    """
    ti.init(arch=arch if arch is not None else ti.cpu, default_fp=ti.f64, random_seed=random_seed)
    active = ti.lang.impl.current_cfg().arch
    if not supports_f64(active):
        logger.warning("%s backend has no f64 support, falling back to CPU", active.name)
        ti.reset()
        ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=random_seed)
        active = ti.lang.impl.current_cfg().arch
    return active
