"""Unit tests for the metal material.

Tests cover:
- Perfect mirror reflection
- Fuzzed reflection stays within the fuzz sphere
- Absorption of rays fuzzed below the surface
- Registry add/lookup and fuzz clamping
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestMetalScatter:
    def test_perfect_mirror(self):
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.materials.metal import scatter_metal

        direction = ti.field(dtype=vec3, shape=())
        attenuation = ti.field(dtype=vec3, shape=())
        scattered = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            d, a, s = scatter_metal(
                vec3(0.8, 0.6, 0.2), 0.0, vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0)
            )
            direction[None] = d
            attenuation[None] = a
            scattered[None] = s

        test_kernel()
        d = direction[None]
        inv_sqrt2 = 1.0 / math.sqrt(2.0)
        # The incident direction is normalized before reflecting
        assert (d[0], d[1], d[2]) == pytest.approx((inv_sqrt2, inv_sqrt2, 0.0))
        a = attenuation[None]
        assert (a[0], a[1], a[2]) == pytest.approx((0.8, 0.6, 0.2))
        assert scattered[None] == 1

    def test_fuzz_stays_near_mirror_direction(self):
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.materials.metal import scatter_metal

        n = 5000
        fuzz = 0.3
        offsets = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            for i in range(n):
                d, _, _ = scatter_metal(vec3(1.0, 1.0, 1.0), fuzz, vec3(0.0, -1.0, 0.0), normal)
                offsets[i] = (d - normal).norm()

        test_kernel()
        assert offsets.to_numpy().max() <= fuzz + 1e-12

    def test_grazing_fuzz_is_absorbed_sometimes(self):
        """Near-grazing incidence with full fuzz pushes some rays into the surface."""
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.materials.metal import scatter_metal

        n = 5000
        scattered = ti.field(dtype=ti.i32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                _, _, s = scatter_metal(
                    vec3(1.0, 1.0, 1.0), 1.0, vec3(1.0, -0.05, 0.0), vec3(0.0, 1.0, 0.0)
                )
                scattered[i] = s

        test_kernel()
        results = scattered.to_numpy()
        assert np.any(results == 0)
        assert np.any(results == 1)


class TestMetalRegistry:
    def test_add_and_lookup(self):
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.materials.metal import (
            add_metal_material,
            get_metal_albedo,
            get_metal_fuzz,
            get_metal_material_count,
        )

        idx = add_metal_material((0.73, 0.73, 0.73), fuzz=0.1)
        assert idx == 0
        assert get_metal_material_count() == 1

        albedo = ti.field(dtype=vec3, shape=())
        fuzz = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            albedo[None] = get_metal_albedo(idx)
            fuzz[None] = get_metal_fuzz(idx)

        test_kernel()
        assert albedo[None][1] == pytest.approx(0.73)
        assert fuzz[None] == pytest.approx(0.1)

    @pytest.mark.parametrize(("given", "stored"), [(-0.5, 0.0), (2.0, 1.0), (0.4, 0.4)])
    def test_fuzz_clamped(self, given, stored):
        from src.pathtracer.materials.metal import add_metal_material, metal_fuzzes

        idx = add_metal_material((0.5, 0.5, 0.5), fuzz=given)
        assert metal_fuzzes[idx] == pytest.approx(stored)

    def test_scatter_by_id(self):
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.materials.metal import add_metal_material, scatter_metal_by_id

        idx = add_metal_material((0.9, 0.9, 0.9))
        direction = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            d, _, _ = scatter_metal_by_id(idx, vec3(0.0, 0.0, 3.0), vec3(0.0, 0.0, -1.0))
            direction[None] = d

        test_kernel()
        d = direction[None]
        assert (d[0], d[1], d[2]) == pytest.approx((0.0, 0.0, -1.0))

    def test_albedo_out_of_range_rejected(self):
        from src.pathtracer.materials.metal import add_metal_material

        with pytest.raises(ValueError):
            add_metal_material((1.2, 0.5, 0.5))
