"""Pytest configuration for moonmarch tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate fields allocated by modules imported in earlier tests.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def reset_render_state():
    """Mark camera and sun as not set up before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so fields are allocated after ti.init()
    from moonmarch.camera.pinhole import reset_camera
    from moonmarch.core.integrator import reset_sun

    reset_camera()
    reset_sun()

    yield

    reset_camera()
    reset_sun()
