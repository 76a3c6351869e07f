"""Brushed and polished metal.

The ray mirrors about the normal, ``R = I - 2 (I . N) N``, and the unit
mirror direction is then nudged by ``fuzz`` times a point inside the unit
sphere. A nudge that tips the ray below the surface absorbs it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.materials.metal import add_metal_material
    >>> gold = add_metal_material((0.8, 0.6, 0.2), fuzz=0.3)
"""

import taichi as ti
import taichi.math as tm

from phongtrace.core.ray import random_in_unit_sphere, reflect
from phongtrace.materials.lambertian import validate_albedo

vec3 = tm.vec3


@ti.dataclass
class MetalMaterial:
    """Reflective tint and blur of a metal surface.

    Attributes:
        albedo: Colour multiplied into every reflection.
        fuzz: Blur radius around the mirror direction; 0 is a clean mirror.
    """

    albedo: vec3
    fuzz: ti.f32


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
):
    """Mirror ``incident_direction`` about ``normal`` with a fuzzy offset.

    Returns:
        (direction, albedo, did_scatter), where did_scatter is 0 once the
        offset direction no longer leaves the surface.
    """
    mirror = tm.normalize(reflect(incident_direction, normal))
    direction = mirror + fuzz * random_in_unit_sphere()

    leaves_surface = 0
    if tm.dot(direction, normal) > 0.0:
        leaves_surface = 1

    return direction, albedo, leaves_surface


# =============================================================================
# Material Registry
# =============================================================================

MAX_METAL_MATERIALS = 1024

metal_materials = MetalMaterial.field(shape=MAX_METAL_MATERIALS)
metal_count = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    metal_count[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Store a metal and return its index among metal materials.

    A fuzz above 1 is accepted; most of its bounces are then absorbed.

    Raises:
        ValueError: On an albedo channel outside [0, 1] or a negative fuzz.
        RuntimeError: When the metal table is full.
    """
    validate_albedo(albedo)
    if fuzz < 0.0:
        raise ValueError(f"Metal fuzz must be non-negative, got {fuzz}")

    slot = metal_count[None]
    if slot >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Metal material table is full ({MAX_METAL_MATERIALS} entries)")

    metal_materials.albedo[slot] = vec3(albedo[0], albedo[1], albedo[2])
    metal_materials.fuzz[slot] = fuzz
    metal_count[None] = slot + 1
    return slot


def get_metal_material_count() -> int:
    return int(metal_count[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    return metal_materials[material_idx].albedo


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    return metal_materials[material_idx].fuzz


@ti.func
def scatter_metal_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
):
    material = metal_materials[material_idx]
    return scatter_metal(material.albedo, material.fuzz, incident_direction, normal)
