"""Matte (Lambertian) surfaces.

A bounce leaves along ``normal + random_unit_vector()``, which lands with
cosine density on the hemisphere above the hit. The albedo tints every
bounce. Lambertian spheres are opaque to shadow rays.
"""

import taichi as ti
import taichi.math as tm

from phongtrace.core.ray import near_zero, random_unit_vector

vec3 = tm.vec3


@ti.dataclass
class LambertianMaterial:
    albedo: vec3


@ti.func
def lambertian_direction(normal: vec3, offset: vec3) -> vec3:
    """``normal + offset``, or ``normal`` when the two cancel."""
    direction = normal + offset
    if near_zero(direction):
        direction = normal
    return direction


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3):
    """Diffuse bounce about ``normal``.

    Returns (direction, albedo, 1).
    """
    return lambertian_direction(normal, random_unit_vector()), albedo, 1


# =============================================================================
# Material Registry
# =============================================================================

MAX_LAMBERTIAN_MATERIALS = 1024

lambertian_materials = LambertianMaterial.field(shape=MAX_LAMBERTIAN_MATERIALS)
lambertian_count = ti.field(dtype=ti.i32, shape=())


def validate_albedo(albedo: tuple[float, float, float]) -> None:
    """Reject albedos that would add energy or go negative."""
    for channel, value in zip("rgb", albedo):
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Albedo channel {channel} = {value} must lie in [0, 1]")


def clear_lambertian_materials() -> None:
    lambertian_count[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Store a matte albedo and return its index among Lambertian materials.

    Raises:
        ValueError: On an albedo channel outside [0, 1].
        RuntimeError: When the Lambertian table is full.
    """
    validate_albedo(albedo)

    slot = lambertian_count[None]
    if slot >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Lambertian material table is full ({MAX_LAMBERTIAN_MATERIALS} entries)"
        )

    lambertian_materials.albedo[slot] = vec3(albedo[0], albedo[1], albedo[2])
    lambertian_count[None] = slot + 1
    return slot


def get_lambertian_material_count() -> int:
    return int(lambertian_count[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    return lambertian_materials[material_idx].albedo


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, normal: vec3):
    return scatter_lambertian(get_lambertian_albedo(material_idx), normal)
