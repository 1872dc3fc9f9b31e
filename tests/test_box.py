"""Unit tests for axis-aligned box intersection.

Tests cover:
- Closest-face hits from every axis
- Hits from inside the box
- Misses and corner validation
"""

import pytest
import taichi as ti

BOX_MIN = (130.0, 0.0, 65.0)
BOX_MAX = (295.0, 165.0, 230.0)


def _run_hit(origin, direction, box_min=BOX_MIN, box_max=BOX_MAX):
    from src.pathtracer.core.ray import vec3
    from src.pathtracer.geometry.box import Box, hit_box

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f64, shape=())
    normal = ti.field(dtype=vec3, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel():
        box = Box(
            box_min=vec3(box_min[0], box_min[1], box_min[2]),
            box_max=vec3(box_max[0], box_max[1], box_max[2]),
        )
        record = hit_box(
            vec3(origin[0], origin[1], origin[2]),
            vec3(direction[0], direction[1], direction[2]),
            box,
            0.001,
            1e30,
        )
        hit[None] = record.hit
        t_val[None] = record.t
        normal[None] = record.normal
        front_face[None] = record.front_face

    test_kernel()
    n = normal[None]
    return {
        "hit": hit[None],
        "t": t_val[None],
        "normal": (n[0], n[1], n[2]),
        "front_face": front_face[None],
    }


class TestBoxIntersection:
    def test_front_face_from_camera_side(self):
        """A ray along +z hits the min-z face first."""
        rec = _run_hit((200.0, 100.0, -800.0), (0.0, 0.0, 1.0))
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(865.0)
        assert rec["normal"] == pytest.approx((0.0, 0.0, -1.0))
        assert rec["front_face"] == 0

    def test_top_face_from_above(self):
        rec = _run_hit((200.0, 500.0, 100.0), (0.0, -1.0, 0.0))
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(335.0)
        assert rec["normal"] == pytest.approx((0.0, 1.0, 0.0))
        assert rec["front_face"] == 1

    def test_side_face_from_left(self):
        rec = _run_hit((0.0, 100.0, 100.0), (1.0, 0.0, 0.0))
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(130.0)
        assert rec["normal"] == pytest.approx((-1.0, 0.0, 0.0))

    def test_from_inside_hits_far_face(self):
        rec = _run_hit((200.0, 100.0, 100.0), (0.0, 0.0, 1.0))
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(130.0)
        # Facing the ray: the +z outward normal is flipped
        assert rec["normal"] == pytest.approx((0.0, 0.0, -1.0))

    def test_miss(self):
        rec = _run_hit((0.0, 300.0, -800.0), (0.0, 0.0, 1.0))
        assert rec["hit"] == 0

    def test_oblique_hit_is_closest(self):
        """A diagonal ray reports the nearer of the faces it crosses."""
        rec = _run_hit((100.0, 100.0, 40.0), (1.0, 0.0, 1.0))
        # Crosses x=130 at t=30 (z=70, inside) before z=65 would matter
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(30.0)
        assert rec["normal"] == pytest.approx((-1.0, 0.0, 0.0))


class TestBoxSides:
    def test_box_side_layout(self):
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.geometry.box import BOX_SIDE_COUNT, Box, box_side

        offsets = ti.field(dtype=ti.f64, shape=BOX_SIDE_COUNT)
        axes = ti.field(dtype=ti.i32, shape=BOX_SIDE_COUNT)

        @ti.kernel
        def test_kernel():
            box = Box(box_min=vec3(1.0, 2.0, 3.0), box_max=vec3(4.0, 5.0, 6.0))
            for side in ti.static(range(BOX_SIDE_COUNT)):
                rect = box_side(box, side)
                offsets[side] = rect.k
                axes[side] = rect.axis

        test_kernel()
        assert offsets.to_numpy().tolist() == pytest.approx([6.0, 3.0, 5.0, 2.0, 4.0, 1.0])
        assert axes.to_numpy().tolist() == [0, 0, 1, 1, 2, 2]


class TestBoxValidation:
    def test_valid_corners(self):
        from src.pathtracer.geometry.box import validate_box_corners

        validate_box_corners(BOX_MIN, BOX_MAX)

    def test_inverted_corners_rejected(self):
        from src.pathtracer.geometry.box import validate_box_corners

        with pytest.raises(ValueError, match="must not exceed"):
            validate_box_corners((0.0, 10.0, 0.0), (1.0, 5.0, 1.0))
