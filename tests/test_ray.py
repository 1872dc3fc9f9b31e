"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- Vector utility functions (dot, cross, normalize, length, reflect, refract)
- Schlick reflectance
- Random sampling functions for Monte Carlo
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from src.pathtracer.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert r[0] == pytest.approx(1.0)
        assert r[1] == pytest.approx(2.0)
        assert r[2] == pytest.approx(3.0)

    def test_ray_at_unnormalized_direction(self):
        """Test ray_at scales by the direction's length, not a unit vector."""
        from src.pathtracer.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(2.0, 0.0, 0.0))
            result[None] = ray_at(ray, 2.5)

        test_kernel()
        r = result[None]
        assert r[0] == pytest.approx(5.0)
        assert r[1] == pytest.approx(0.0)
        assert r[2] == pytest.approx(0.0)

    def test_ray_at_negative_t(self):
        """Test ray_at handles negative t (behind origin)."""
        from src.pathtracer.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 1.0, 0.0))
            result[None] = ray_at(ray, -3.0)

        test_kernel()
        assert result[None][1] == pytest.approx(-3.0)


class TestVectorUtilities:
    """Tests for vector helper functions."""

    def test_dot_and_cross(self):
        from src.pathtracer.core.ray import cross, dot, vec3

        dot_result = ti.field(dtype=ti.f64, shape=())
        cross_result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            dot_result[None] = dot(vec3(1.0, 2.0, 3.0), vec3(4.0, -5.0, 6.0))
            cross_result[None] = cross(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert dot_result[None] == pytest.approx(12.0)
        c = cross_result[None]
        assert (c[0], c[1], c[2]) == pytest.approx((0.0, 0.0, 1.0))

    def test_length_and_normalize(self):
        from src.pathtracer.core.ray import length, length_squared, normalize, vec3

        lengths = ti.field(dtype=ti.f64, shape=2)
        unit = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            v = vec3(3.0, 4.0, 0.0)
            lengths[0] = length_squared(v)
            lengths[1] = length(v)
            unit[None] = normalize(v)

        test_kernel()
        assert lengths[0] == pytest.approx(25.0)
        assert lengths[1] == pytest.approx(5.0)
        u = unit[None]
        assert (u[0], u[1], u[2]) == pytest.approx((0.6, 0.8, 0.0))

    def test_normalize_does_not_mutate_input(self):
        from src.pathtracer.core.ray import normalize, vec3

        original = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            v = vec3(0.0, 0.0, 10.0)
            _ = normalize(v)
            original[None] = v

        test_kernel()
        assert original[None][2] == pytest.approx(10.0)

    def test_near_zero(self):
        from src.pathtracer.core.ray import near_zero, vec3

        results = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel():
            results[0] = near_zero(vec3(1e-9, -1e-9, 0.0))
            results[1] = near_zero(vec3(1e-9, 1e-7, 0.0))
            results[2] = near_zero(vec3(0.0, 0.0, 0.0))

        test_kernel()
        assert results[0] == 1
        assert results[1] == 0
        assert results[2] == 1

    def test_identities_on_random_vectors(self):
        from src.pathtracer.core.ray import cross, length, normalize, vec3

        n = 64
        rng = np.random.default_rng(7)
        a = ti.field(dtype=vec3, shape=n)
        b = ti.field(dtype=vec3, shape=n)
        a.from_numpy(rng.uniform(-10.0, 10.0, size=(n, 3)))
        b.from_numpy(rng.uniform(-10.0, 10.0, size=(n, 3)))

        round_trip = ti.field(dtype=vec3, shape=n)
        cross_sum = ti.field(dtype=vec3, shape=n)
        unit_length = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                round_trip[i] = a[i] + b[i] - b[i]
                cross_sum[i] = cross(a[i], b[i]) + cross(b[i], a[i])
                unit_length[i] = length(normalize(a[i]))

        test_kernel()
        np.testing.assert_allclose(round_trip.to_numpy(), a.to_numpy(), atol=1e-12)
        np.testing.assert_allclose(cross_sum.to_numpy(), 0.0, atol=1e-12)
        np.testing.assert_allclose(unit_length.to_numpy(), 1.0, rtol=1e-12)

    def test_reflect(self):
        """Reflect a 45-degree ray off a horizontal surface."""
        from src.pathtracer.core.ray import reflect, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert (r[0], r[1], r[2]) == pytest.approx((1.0, 1.0, 0.0))

    def test_refract_normal_incidence_passes_straight(self):
        from src.pathtracer.core.ray import refract, vec3

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = refract(vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1.0 / 1.5)

        test_kernel()
        r = result[None]
        assert (r[0], r[1], r[2]) == pytest.approx((0.0, -1.0, 0.0), abs=1e-12)

    def test_refract_obeys_snell(self):
        """sin(theta_t) = eta * sin(theta_i) for a 30-degree incident ray."""
        from src.pathtracer.core.ray import refract, vec3

        eta = 1.0 / 1.5
        theta_i = math.radians(30.0)
        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            uv = vec3(ti.sin(theta_i), -ti.cos(theta_i), 0.0)
            result[None] = refract(uv, vec3(0.0, 1.0, 0.0), eta)

        test_kernel()
        r = result[None]
        assert math.hypot(r[0], r[1], r[2]) == pytest.approx(1.0)
        assert r[0] == pytest.approx(eta * math.sin(theta_i))
        assert r[1] < 0.0


class TestSchlickReflectance:
    """Tests for Schlick's Fresnel approximation."""

    def test_normal_incidence_gives_r0(self):
        from src.pathtracer.core.ray import schlick_reflectance

        results = ti.field(dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel():
            results[0] = schlick_reflectance(1.0, 1.5)
            results[1] = schlick_reflectance(1.0, 1.0 / 1.5)

        test_kernel()
        # r0 = ((1 - 1.5) / (1 + 1.5))^2 = 0.04, the same for the inverse ratio
        assert results[0] == pytest.approx(0.04)
        assert results[1] == pytest.approx(0.04)

    def test_grazing_incidence_gives_one(self):
        from src.pathtracer.core.ray import schlick_reflectance

        result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = schlick_reflectance(0.0, 1.5)

        test_kernel()
        assert result[None] == pytest.approx(1.0)


class TestRandomSampling:
    """Tests for Monte Carlo sampling helpers."""

    def test_random_double_range(self):
        from src.pathtracer.core.ray import random_double

        n = 10000
        samples = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_double()

        test_kernel()
        arr = samples.to_numpy()
        assert arr.min() >= 0.0
        assert arr.max() < 1.0
        assert arr.mean() == pytest.approx(0.5, abs=0.02)

    def test_random_in_unit_sphere_inside(self):
        from src.pathtracer.core.ray import length_squared, random_in_unit_sphere

        n = 10000
        lengths = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                lengths[i] = length_squared(random_in_unit_sphere())

        test_kernel()
        arr = lengths.to_numpy()
        assert arr.max() < 1.0

    def test_random_unit_vector_is_unit_and_unbiased(self):
        from src.pathtracer.core.ray import random_unit_vector, vec3

        n = 20000
        samples = ti.field(dtype=vec3, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                samples[i] = random_unit_vector()

        test_kernel()
        arr = samples.to_numpy()
        norms = (arr**2).sum(axis=1) ** 0.5
        assert norms == pytest.approx(1.0, abs=1e-9)
        # Uniform on the sphere: mean close to the origin
        assert abs(arr.mean(axis=0)).max() < 0.03
