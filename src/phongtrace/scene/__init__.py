"""Scene module: world container, lights, material ids and scene building.

Components:
    registry: Unified material id space (type tag, type index, occlusion)
    world: Sphere storage with nearest-hit and shadow queries
    lighting: Point lights and direct-light visibility
    manager: High-level SceneManager coordinating materials, spheres, lights
    presets: Ready-made demo scenes

Scene data lives in Taichi fields written from Python before rendering and
only read by kernels while rendering.
"""

from .lighting import (
    MAX_LIGHTS,
    add_light,
    clear_lighting,
    first_visible_light,
    get_light_count,
    light_visible,
)
from .registry import (
    MAX_MATERIALS,
    MaterialType,
    clear_material_registry,
    get_material_count,
    get_material_occlusion,
    get_material_type,
    get_material_type_index,
    register_material,
)
from .world import (
    MAX_SPHERES,
    add_sphere,
    clear_world,
    get_sphere_count,
    intersect_world,
    occluding_hit,
)

# Note: manager and presets are NOT imported here because they depend on
# phongtrace.materials, whose Phong model imports phongtrace.scene.lighting.
# Import them from phongtrace.scene.manager / phongtrace.scene.presets.

__all__ = [
    # Registry
    "MaterialType",
    "MAX_MATERIALS",
    "register_material",
    "clear_material_registry",
    "get_material_count",
    "get_material_type",
    "get_material_type_index",
    "get_material_occlusion",
    # World
    "MAX_SPHERES",
    "add_sphere",
    "clear_world",
    "get_sphere_count",
    "intersect_world",
    "occluding_hit",
    # Lighting
    "MAX_LIGHTS",
    "add_light",
    "clear_lighting",
    "get_light_count",
    "light_visible",
    "first_visible_light",
]
