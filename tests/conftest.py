"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    import src.pathtracer as pt

    pt.init(random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized before fields are declared
    from src.pathtracer.core.integrator import clear_render_target
    from src.pathtracer.materials.dielectric import clear_dielectric_materials
    from src.pathtracer.materials.diffuse_light import clear_diffuse_light_materials
    from src.pathtracer.materials.lambertian import clear_lambertian_materials
    from src.pathtracer.materials.metal import clear_metal_materials
    from src.pathtracer.scene.intersection import clear_scene
    from src.pathtracer.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_diffuse_light_materials()
        _clear_material_tracking()
        clear_render_target()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def cornell_camera_setup():
    """Aim the default Cornell box camera for a square image."""
    from src.pathtracer.camera.pinhole import setup_camera
    from src.pathtracer.scene.cornell_box import cornell_camera

    camera = cornell_camera(aspect_ratio=1.0)
    setup_camera(camera)
    return camera
