"""Geometry module for shape primitives.

This module provides geometric primitives and intersection algorithms:

Components:
    sphere: Sphere primitive, the shared HitRecord and face orientation
    rect: Axis-aligned rectangles (XY, XZ and YZ planes)
    box: Axis-aligned boxes made of six rectangles

All intersection routines are implemented as Taichi functions (@ti.func).
Ray-object intersection follows the pattern:
    rec = hit_shape(ray_origin, ray_direction, shape, t_min, t_max)
"""

from .box import Box, box_side, hit_box, validate_box_corners
from .rect import AxisAlignedRect, RectAxis, hit_rect, validate_rect_bounds
from .sphere import HitRecord, Sphere, face_normal, hit_sphere, make_sphere, miss_record

__all__ = [
    "Sphere",
    "HitRecord",
    "face_normal",
    "miss_record",
    "hit_sphere",
    "make_sphere",
    "AxisAlignedRect",
    "RectAxis",
    "hit_rect",
    "validate_rect_bounds",
    "Box",
    "box_side",
    "hit_box",
    "validate_box_corners",
]
