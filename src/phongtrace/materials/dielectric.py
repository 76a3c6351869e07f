"""Dielectric material: clear glass or water.

A ray meeting the surface either reflects or refracts; dielectrics never
absorb and never tint, so the attenuation is always white.

- Entering (front face) the index ratio is ``1 / ior``, leaving it is ``ior``.
- When ``ratio * sin(theta) > 1`` no refracted ray exists and the ray
  reflects (total internal reflection).
- Otherwise it reflects with the Schlick probability and refracts by
  Snell's law the rest of the time.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.materials.dielectric import add_dielectric_material
    >>> glass = add_dielectric_material(1.5)
    >>> water = add_dielectric_material(1.33)
"""

import taichi as ti
import taichi.math as tm

from phongtrace.core.ray import reflect, refract, schlick_reflectance

vec3 = tm.vec3


@ti.dataclass
class DielectricMaterial:
    """Per-material dielectric parameters.

    Attributes:
        ior: Index of refraction relative to the surrounding air (1.33 for
            water, 1.5 for common glass).
    """

    ior: ti.f32


@ti.func
def refraction_ratio_for(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Index ratio (incident side / transmitted side) for the face that was hit."""
    ratio = ior
    if front_face == 1:
        ratio = 1.0 / ior
    return ratio


@ti.func
def _incidence(ior: ti.f32, incident_direction: vec3, normal: vec3, front_face: ti.i32):
    """Unit incident direction, index ratio, cos(theta) and the TIR flag."""
    unit_direction = tm.normalize(incident_direction)
    ratio = refraction_ratio_for(ior, front_face)
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)
    sin_theta = tm.sqrt(tm.max(1.0 - cos_theta * cos_theta, 0.0))
    total_internal = 0
    if ratio * sin_theta > 1.0:
        total_internal = 1
    return unit_direction, ratio, cos_theta, total_internal


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Reflect or refract at a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: Incoming ray direction, any length.
        normal: Unit normal facing the incoming ray.
        front_face: 1 when the ray enters the material, 0 when it leaves.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter); the
        attenuation is white and did_scatter is always 1.
    """
    unit_direction, ratio, cos_theta, total_internal = _incidence(
        ior, incident_direction, normal, front_face
    )

    scattered_direction = refract(unit_direction, normal, ratio)
    if total_internal == 1 or ti.random(ti.f32) < schlick_reflectance(cos_theta, ratio):
        scattered_direction = reflect(unit_direction, normal)

    return scattered_direction, vec3(1.0, 1.0, 1.0), 1


@ti.func
def will_reflect(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """1 when refraction is impossible at this angle, 0 otherwise."""
    unit_direction, ratio, cos_theta, total_internal = _incidence(
        ior, incident_direction, normal, front_face
    )
    return total_internal


@ti.func
def fresnel_reflectance(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f32:
    """Schlick probability of reflecting, ignoring total internal reflection."""
    unit_direction, ratio, cos_theta, total_internal = _incidence(
        ior, incident_direction, normal, front_face
    )
    return schlick_reflectance(cos_theta, ratio)


# =============================================================================
# Material Registry
# =============================================================================

MAX_DIELECTRIC_MATERIALS = 256

dielectric_materials = DielectricMaterial.field(shape=MAX_DIELECTRIC_MATERIALS)
dielectric_count = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    dielectric_count[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Store a dielectric and return its index among dielectric materials.

    Raises:
        ValueError: If ``ior`` is zero or negative.
        RuntimeError: When the dielectric table is full.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction must be positive, got {ior}")

    slot = dielectric_count[None]
    if slot >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Dielectric material table is full ({MAX_DIELECTRIC_MATERIALS} entries)"
        )

    dielectric_materials.ior[slot] = ior
    dielectric_count[None] = slot + 1
    return slot


def get_dielectric_material_count() -> int:
    return int(dielectric_count[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    return dielectric_materials[material_idx].ior


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """scatter_dielectric for the registered material at ``material_idx``."""
    return scatter_dielectric(
        get_dielectric_ior(material_idx), incident_direction, normal, front_face
    )
