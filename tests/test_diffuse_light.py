"""Unit tests for the diffuse light material.

Tests cover:
- Emission is color times intensity
- Lights never scatter
- Registry add/lookup and validation
"""

import pytest
import taichi as ti


class TestDiffuseLight:
    def test_emission(self):
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.materials.diffuse_light import get_diffuse_light_emission

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = get_diffuse_light_emission(vec3(1.0, 0.5, 0.25), 15.0)

        test_kernel()
        e = result[None]
        assert (e[0], e[1], e[2]) == pytest.approx((15.0, 7.5, 3.75))

    def test_never_scatters(self):
        from src.pathtracer.materials.diffuse_light import scatter_diffuse_light

        scattered = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            _, _, s = scatter_diffuse_light()
            scattered[None] = s

        test_kernel()
        assert scattered[None] == 0


class TestDiffuseLightRegistry:
    def test_add_and_lookup(self):
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.materials.diffuse_light import (
            add_diffuse_light_material,
            get_diffuse_light_color,
            get_diffuse_light_emission_by_id,
            get_diffuse_light_intensity,
            get_diffuse_light_material_count,
        )

        idx = add_diffuse_light_material((1.0, 1.0, 1.0), intensity=15.0)
        assert idx == 0
        assert get_diffuse_light_material_count() == 1

        color = ti.field(dtype=vec3, shape=())
        intensity = ti.field(dtype=ti.f64, shape=())
        emission = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel():
            color[None] = get_diffuse_light_color(idx)
            intensity[None] = get_diffuse_light_intensity(idx)
            emission[None] = get_diffuse_light_emission_by_id(idx)

        test_kernel()
        assert color[None][0] == pytest.approx(1.0)
        assert intensity[None] == pytest.approx(15.0)
        assert emission[None][2] == pytest.approx(15.0)

    def test_negative_values_rejected(self):
        from src.pathtracer.materials.diffuse_light import add_diffuse_light_material

        with pytest.raises(ValueError, match="negative"):
            add_diffuse_light_material((1.0, -1.0, 1.0))
        with pytest.raises(ValueError, match="negative"):
            add_diffuse_light_material((1.0, 1.0, 1.0), intensity=-2.0)

    def test_clear(self):
        from src.pathtracer.materials.diffuse_light import (
            add_diffuse_light_material,
            clear_diffuse_light_materials,
            get_diffuse_light_material_count,
        )

        add_diffuse_light_material((1.0, 1.0, 1.0))
        clear_diffuse_light_materials()
        assert get_diffuse_light_material_count() == 0
