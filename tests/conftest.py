"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate the module-level fields created by earlier imports.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so module-level fields are created after ti.init()
    from src.pathtrace.core.integrator import reset_render_target
    from src.pathtrace.materials.lambertian import clear_lambertian_materials
    from src.pathtrace.materials.metal import clear_metal_materials
    from src.pathtrace.scene.intersection import clear_scene
    from src.pathtrace.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        _clear_material_tracking()
        reset_render_target()

    _clear_all()

    yield

    _clear_all()
