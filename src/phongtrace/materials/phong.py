"""Phong material: direct Phong lighting combined with a stochastic bounce.

A Phong surface first sums direct illumination over every visible light:

    illumination = sum(d * (L . n) * I_diffuse
                       + s * max(0, 1 - B * (1 - R . V))^g * I_specular)

where ``L`` is the unit direction to the light, ``R = reflect(L, n)``,
``V`` the unit direction to the viewer and ``B = shine / g``. The base of the
specular power is clamped at zero before exponentiation.

It then picks a bounce: with probability ``d_s`` a Lambertian bounce,
otherwise a fuzzy metal bounce, both tinted by the material albedo. The
returned attenuation is the illumination times the bounce attenuation. When
the chosen bounce is absorbed the whole scatter is absorbed.
"""

import taichi as ti
import taichi.math as tm

from phongtrace.core.ray import reflect
from phongtrace.materials.lambertian import scatter_lambertian, validate_albedo
from phongtrace.materials.metal import scatter_metal
from phongtrace.scene.lighting import (
    light_diffuse,
    light_positions,
    light_specular,
    light_visible,
    num_lights,
)

vec3 = tm.vec3


@ti.dataclass
class PhongMaterial:
    """Phong material properties.

    Attributes:
        diffuse_coeff: Weight ``d`` of the diffuse term.
        specular_coeff: Weight ``s`` of the specular term.
        shine_factor: ``B = shine / g``, the highlight sharpness.
        exponent: Integer exponent ``g`` of the specular term. Powers of two
            (4 or 8) are typical.
        albedo: Tint applied by the stochastic bounce.
        fuzz: Perturbation radius of the specular bounce.
        diffuse_probability: Probability ``d_s`` of a Lambertian bounce.
    """

    diffuse_coeff: ti.f32
    specular_coeff: ti.f32
    shine_factor: ti.f32
    exponent: ti.i32
    albedo: vec3
    fuzz: ti.f32
    diffuse_probability: ti.f32


@ti.func
def phong_specular_term(shine_factor: ti.f32, exponent: ti.i32, r_dot_v: ti.f32) -> ti.f32:
    """``max(0, 1 - B * (1 - R . V))^g`` with the base clamped before the power."""
    base = 1.0 - shine_factor * (1.0 - r_dot_v)
    result = 0.0
    if base > 0.0:
        result = base ** exponent
    return result


@ti.func
def phong_illumination(mat: PhongMaterial, view_origin: vec3, point: vec3, normal: vec3) -> vec3:
    """Sum the Phong diffuse and specular terms over all visible lights.

    Args:
        mat: The Phong material parameters.
        view_origin: Position the surface is viewed from.
        point: The shaded point.
        normal: The surface normal at the point.

    Returns:
        The direct illumination color.
    """
    illumination = vec3(0.0, 0.0, 0.0)
    view_direction = tm.normalize(view_origin - point)

    for k in range(num_lights[None]):
        light_position = light_positions[k]
        if light_visible(point, normal, light_position) == 1:
            to_light = tm.normalize(light_position - point)
            diffuse = tm.dot(to_light, normal)

            mirrored = tm.normalize(reflect(to_light, normal))
            specular = phong_specular_term(
                mat.shine_factor, mat.exponent, tm.dot(mirrored, view_direction)
            )

            illumination += (
                mat.diffuse_coeff * diffuse * light_diffuse[k]
                + mat.specular_coeff * specular * light_specular[k]
            )

    return illumination


@ti.func
def scatter_phong(
    mat: PhongMaterial,
    view_origin: vec3,
    incident_direction: vec3,
    point: vec3,
    normal: vec3,
):
    """Scatter off a Phong surface.

    Args:
        mat: The Phong material parameters.
        view_origin: Position the surface is viewed from (the incoming ray's
            origin).
        incident_direction: The incoming ray direction.
        point: The hit point.
        normal: The surface normal (unit length, facing the incoming ray).

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    illumination = phong_illumination(mat, view_origin, point, normal)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    if ti.random(ti.f32) < mat.diffuse_probability:
        scattered_direction, attenuation, did_scatter = scatter_lambertian(mat.albedo, normal)
    else:
        scattered_direction, attenuation, did_scatter = scatter_metal(
            mat.albedo, mat.fuzz, incident_direction, normal
        )

    return scattered_direction, illumination * attenuation, did_scatter


# =============================================================================
# Material Registry
# =============================================================================

MAX_PHONG_MATERIALS = 256

phong_materials = PhongMaterial.field(shape=MAX_PHONG_MATERIALS)
num_phong_materials = ti.field(dtype=ti.i32, shape=())


def clear_phong_materials() -> None:
    """Clear all Phong materials."""
    num_phong_materials[None] = 0


def add_phong_material(
    diffuse_coeff: float,
    specular_coeff: float,
    shine: float,
    exponent: int,
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
    diffuse_probability: float = 1.0,
) -> int:
    """Add a Phong material to the material registry.

    Args:
        diffuse_coeff: Weight ``d`` of the diffuse term, non-negative.
        specular_coeff: Weight ``s`` of the specular term, non-negative.
        shine: Highlight sharpness; stored as ``shine / exponent``.
        exponent: Integer specular exponent ``g``, at least 1.
        albedo: Bounce tint as (R, G, B), each component in [0, 1].
        fuzz: Perturbation radius of the specular bounce, non-negative.
        diffuse_probability: Probability in [0, 1] of a Lambertian bounce.

    Returns:
        The index of the added material.

    Raises:
        ValueError: If any parameter is out of range.
        RuntimeError: If the maximum number of materials is exceeded.
    """
    validate_albedo(albedo)
    if diffuse_coeff < 0.0 or specular_coeff < 0.0:
        raise ValueError(
            f"Phong coefficients must be non-negative (d={diffuse_coeff}, s={specular_coeff})"
        )
    if int(exponent) != exponent or exponent < 1:
        raise ValueError(f"Phong exponent = {exponent} must be an integer >= 1")
    if fuzz < 0.0:
        raise ValueError(f"Fuzz = {fuzz} is negative")
    if diffuse_probability < 0.0 or diffuse_probability > 1.0:
        raise ValueError(f"Diffuse probability = {diffuse_probability} is outside [0, 1]")

    idx = num_phong_materials[None]
    if idx >= MAX_PHONG_MATERIALS:
        raise RuntimeError(f"Maximum number of Phong materials ({MAX_PHONG_MATERIALS}) exceeded")

    phong_materials.diffuse_coeff[idx] = diffuse_coeff
    phong_materials.specular_coeff[idx] = specular_coeff
    phong_materials.shine_factor[idx] = shine / exponent
    phong_materials.exponent[idx] = int(exponent)
    phong_materials.albedo[idx] = vec3(albedo[0], albedo[1], albedo[2])
    phong_materials.fuzz[idx] = fuzz
    phong_materials.diffuse_probability[idx] = diffuse_probability
    num_phong_materials[None] = idx + 1
    return idx


def get_phong_material_count() -> int:
    """Get the number of Phong materials in the registry."""
    return int(num_phong_materials[None])


@ti.func
def scatter_phong_by_id(
    material_idx: ti.i32,
    view_origin: vec3,
    incident_direction: vec3,
    point: vec3,
    normal: vec3,
):
    """Scatter off a registered Phong material.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    return scatter_phong(
        phong_materials[material_idx], view_origin, incident_direction, point, normal
    )
