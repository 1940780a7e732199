"""Pytest configuration for ray tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_scene_storage():
    """Clear the uploaded scene before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so the storage fields are created after ti.init()
    from src.rt.scene.scene import DEFAULT_BRIGHTNESS
    from src.rt.scene.storage import clear_scene, set_brightness

    def _clear_all():
        clear_scene()
        set_brightness(DEFAULT_BRIGHTNESS)

    _clear_all()

    yield

    _clear_all()
