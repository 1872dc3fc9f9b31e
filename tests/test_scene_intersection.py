"""Unit tests for scene-level intersection.

Tests cover:
- SceneHitRecord with material_id
- Closest hit across spheres, rectangles and boxes
- Scene clearing, primitive counts and capacity limits
"""

import pytest
import taichi as ti


def _query(origin, direction, t_min=0.001, t_max=1e30):
    """Run intersect_scene for one ray and return (hit, t, material_id, normal)."""
    from src.pathtracer.core.ray import vec3
    from src.pathtracer.scene.intersection import intersect_scene

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f64, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())
    normal = ti.field(dtype=vec3, shape=())

    @ti.kernel
    def test_kernel():
        rec = intersect_scene(
            vec3(origin[0], origin[1], origin[2]),
            vec3(direction[0], direction[1], direction[2]),
            t_min,
            t_max,
        )
        hit[None] = rec.hit
        t_val[None] = rec.t
        material_id[None] = rec.material_id
        normal[None] = rec.normal

    test_kernel()
    n = normal[None]
    return hit[None], t_val[None], material_id[None], (n[0], n[1], n[2])


class TestSceneHitRecordBasics:
    def test_miss_record_has_negative_material_id(self):
        from src.pathtracer.scene.intersection import _make_miss_record

        result_hit = ti.field(dtype=ti.i32, shape=())
        result_material_id = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = _make_miss_record()
            result_hit[None] = rec.hit
            result_material_id[None] = rec.material_id

        test_kernel()
        assert result_hit[None] == 0
        assert result_material_id[None] == -1


class TestScenePrimitiveStorage:
    def test_counts_and_clear(self):
        from src.pathtracer.geometry.rect import RectAxis
        from src.pathtracer.scene.intersection import (
            add_box,
            add_rect,
            add_sphere,
            clear_scene,
            get_box_count,
            get_rect_count,
            get_sphere_count,
        )

        assert add_sphere((0.0, 0.0, 0.0), 1.0, 0) == 0
        assert add_sphere((2.0, 0.0, 0.0), 1.0, 0) == 1
        assert add_rect(0.0, 1.0, 0.0, 1.0, 0.0, RectAxis.XY, 0) == 0
        assert add_box((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), 0) == 0
        assert (get_sphere_count(), get_rect_count(), get_box_count()) == (2, 1, 1)

        clear_scene()
        assert (get_sphere_count(), get_rect_count(), get_box_count()) == (0, 0, 0)

    def test_invalid_primitives_rejected(self):
        from src.pathtracer.geometry.rect import RectAxis
        from src.pathtracer.scene.intersection import add_box, add_rect, add_sphere

        with pytest.raises(ValueError, match="radius"):
            add_sphere((0.0, 0.0, 0.0), 0.0, 0)
        with pytest.raises(ValueError):
            add_rect(1.0, 0.0, 0.0, 1.0, 0.0, RectAxis.XY, 0)
        with pytest.raises(ValueError):
            add_box((1.0, 0.0, 0.0), (0.0, 1.0, 1.0), 0)

    def test_unknown_axis_rejected(self):
        from src.pathtracer.scene.intersection import add_rect

        with pytest.raises(ValueError):
            add_rect(0.0, 1.0, 0.0, 1.0, 0.0, 7, 0)

    def test_box_capacity(self):
        from src.pathtracer.scene.intersection import MAX_BOXES, add_box

        for _ in range(MAX_BOXES):
            add_box((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), 0)
        with pytest.raises(RuntimeError, match="Maximum"):
            add_box((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), 0)


class TestSceneIntersection:
    def test_empty_scene_misses(self):
        hit, _, material_id, _ = _query((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 0
        assert material_id == -1

    def test_single_sphere(self):
        from src.pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 0.0), 1.0, 7)
        hit, t, material_id, normal = _query((0.0, 0.0, -5.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert t == pytest.approx(4.0)
        assert material_id == 7
        assert normal == pytest.approx((0.0, 0.0, -1.0))

    def test_closest_sphere_wins_regardless_of_order(self):
        from src.pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 10.0), 1.0, 1)
        add_sphere((0.0, 0.0, 5.0), 1.0, 2)
        hit, t, material_id, _ = _query((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert t == pytest.approx(4.0)
        assert material_id == 2

    def test_rect_in_front_of_sphere(self):
        from src.pathtracer.geometry.rect import RectAxis
        from src.pathtracer.scene.intersection import add_rect, add_sphere

        add_sphere((0.0, 0.0, 10.0), 1.0, 1)
        add_rect(-1.0, 1.0, -1.0, 1.0, 3.0, RectAxis.XY, 2)
        hit, t, material_id, _ = _query((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert t == pytest.approx(3.0)
        assert material_id == 2

    def test_box_in_front_of_wall(self):
        """Looking at the back wall through a box hits the box."""
        from src.pathtracer.geometry.rect import RectAxis
        from src.pathtracer.scene.intersection import add_box, add_rect

        add_rect(0.0, 555.0, 0.0, 555.0, 555.0, RectAxis.XY, 1)
        add_box((130.0, 0.0, 65.0), (295.0, 330.0, 230.0), 2)
        hit, t, material_id, _ = _query((200.0, 100.0, -800.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert t == pytest.approx(865.0)
        assert material_id == 2

        # Beside the box the wall is visible
        hit, t, material_id, _ = _query((400.0, 100.0, -800.0), (0.0, 0.0, 1.0))
        assert hit == 1
        assert t == pytest.approx(1355.0)
        assert material_id == 1

    def test_t_range_respected(self):
        from src.pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 5.0), 1.0, 1)
        hit, _, _, _ = _query((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), t_max=3.0)
        assert hit == 0
