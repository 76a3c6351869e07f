"""Pytest configuration for phongtrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    ti.init() resets the runtime and drops every field declared before it,
    so it must run exactly once and before any phongtrace module is imported.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test."""
    # Imported here so the fields are declared after ti.init
    from phongtrace.core.integrator import clear_render_target
    from phongtrace.materials.dielectric import clear_dielectric_materials
    from phongtrace.materials.lambertian import clear_lambertian_materials
    from phongtrace.materials.metal import clear_metal_materials
    from phongtrace.materials.phong import clear_phong_materials
    from phongtrace.scene.lighting import clear_lighting
    from phongtrace.scene.registry import clear_material_registry
    from phongtrace.scene.world import clear_world

    def _clear_all():
        clear_world()
        clear_lighting()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_phong_materials()
        clear_material_registry()
        clear_render_target()

    _clear_all()
    yield
    _clear_all()
