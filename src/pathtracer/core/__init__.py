"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    ray: Ray data structure, vector helpers and random sampling
    integrator: Light transport (ray_color), frame buffer and tonemapping
    progressive: Row-batched render loop with progress and cancellation

The integrator evaluates the recursive rendering equation with a hard depth
cap. The progressive module drives it one batch of rows at a time so the
caller can repaint, report progress or cancel between batches.
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_double,
    random_in_range,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from src.pathtracer.core.integrator or src.pathtracer.core.progressive.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "dot",
    "cross",
    "length",
    "length_squared",
    "normalize",
    "near_zero",
    "reflect",
    "refract",
    "schlick_reflectance",
    "random_double",
    "random_in_range",
    "random_in_unit_sphere",
    "random_unit_vector",
]
