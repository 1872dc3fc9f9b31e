"""Ray data structure and vector utilities for Monte Carlo path tracing.

Vectors are 3-component double precision Taichi vectors used interchangeably
as points, directions and RGB colors (component-wise ``*`` blends colors).
Every helper returns a new vector; nothing here mutates its inputs.

All helpers are Taichi functions and must be called from inside a kernel.

Example:
    >>> import src.pathtracer as pt
    >>> pt.init()
    >>> from src.pathtracer.core.ray import Ray, ray_at, vec3
    >>> # inside a kernel:
    >>> # ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    >>> # point = ray_at(ray, 5.0)
"""

import taichi as ti
import taichi.math as tm

# Double precision 3D vector used for points, directions and colors
vec3 = ti.types.vector(3, ti.f64)

# Components below this magnitude count as zero in near_zero()
NEAR_ZERO_EPSILON = 1e-8

# Retry cap for rejection sampling (acceptance rate is ~52% per draw)
MAX_REJECTION_TRIES = 64


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction of the ray. Not required to be unit length;
            intersection code divides by its squared length where needed.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point ``origin + t * direction``."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f64:
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f64:
    return ti.sqrt(length_squared(v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    The result is undefined for zero-length input; callers guard degenerate
    vectors with near_zero() first.
    """
    return v / length(v)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if every component is below NEAR_ZERO_EPSILON in magnitude."""
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Mirror ``v`` about the unit normal ``n``: v - 2(v.n)n."""
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, eta_ratio: ti.f64) -> vec3:
    """Refract the unit direction ``uv`` through a surface with unit normal ``n``.

    Snell's law split into the components perpendicular and parallel to the
    normal. ``cos_theta`` is clamped to 1 so floating-point overshoot cannot
    produce a NaN.

    Args:
        uv: Unit incident direction.
        n: Unit normal facing against ``uv``.
        eta_ratio: Ratio of refractive indices (incident over transmitted).

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(-tm.dot(uv, n), 1.0)
    r_out_perp = eta_ratio * (uv + cos_theta * n)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * n
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: ti.f64, ref_idx: ti.f64) -> ti.f64:
    """Schlick's approximation of Fresnel reflectance.

    r0 = ((1 - ref_idx) / (1 + ref_idx))^2 is the same for ``ior`` and
    ``1 / ior``, so either the index or the refraction ratio may be passed.
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_double() -> ti.f64:
    """Uniform sample in [0, 1)."""
    return ti.random(ti.f64)


@ti.func
def random_in_range(lo: ti.f64, hi: ti.f64) -> vec3:
    """Vector with each component drawn uniformly from [lo, hi)."""
    return vec3(
        lo + (hi - lo) * ti.random(ti.f64),
        lo + (hi - lo) * ti.random(ti.f64),
        lo + (hi - lo) * ti.random(ti.f64),
    )


@ti.func
def random_in_unit_sphere() -> vec3:
    """Rejection-sample a point with squared length below 1.

    The loop is capped at MAX_REJECTION_TRIES; the chance of every draw
    failing is below 1e-20, and the origin is returned in that case.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            candidate = random_in_range(-1.0, 1.0)
            if length_squared(candidate) < 1.0:
                p = candidate
                found = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Random direction uniformly distributed on the unit sphere."""
    p = random_in_unit_sphere()
    result = vec3(0.0, 0.0, 1.0)
    if not near_zero(p):
        result = normalize(p)
    return result
