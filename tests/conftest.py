"""Pytest configuration for path tracer tests.

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


@pytest.fixture(autouse=True)
def clear_scene_data():
    """Clear primitive storage and reseed stream 0 around each test."""
    # Import here so Taichi is initialized before fields are created
    from skytrace.core.sampler import seed_streams
    from skytrace.scene.intersection import clear_scene

    clear_scene()
    seed_streams(1, seed=0)
    yield
    clear_scene()


@pytest.fixture
def seeded_streams():
    """Seed a handful of random streams with a fixed seed."""
    from skytrace.core.sampler import seed_streams

    seed_streams(8, seed=1234)
