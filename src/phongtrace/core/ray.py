"""Rays, vector helpers and random samplers used across the renderer.

Everything here is a Taichi function, inlined into the camera, geometry and
material code that calls it.

``ti.random`` keeps a separate stream per Taichi thread; the streams are
seeded once by ``ti.init(random_seed=...)``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.core.ray import make_ray, ray_at, vec3
    >>> @ti.kernel
    ... def tip() -> vec3:
    ...     return ray_at(make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -2.0)), 1.5)
    >>> tip()  # (0, 0, -3)
"""

import taichi as ti
import taichi.math as tm

# Points, directions and RGB colors share one type
vec3 = tm.vec3

# Components below this magnitude count as zero in near_zero()
NEAR_ZERO_EPSILON = 1e-8

# Rejection samplers give up after this many tries
MAX_REJECTION_TRIES = 64


@ti.dataclass
class Ray:
    """Half-line ``origin + t * direction``.

    The direction keeps whatever length it was built with. Camera rays end on
    the focus plane and diffuse bounces are ``normal + unit vector``, so most
    rays are not unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Point reached after travelling ``t`` direction-lengths along the ray."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Helpers
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    return tm.dot(v, v)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror ``incident`` about the plane with unit normal ``normal``.

    Length is preserved and the component along the normal changes sign.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta: ti.f32) -> vec3:
    """Bend a unit direction through an interface by Snell's law.

    Args:
        incident: Unit direction arriving at the surface.
        normal: Unit normal on the incident side (``dot(incident, normal) <= 0``).
        eta: Index ratio, incident side over transmitted side.

    Returns:
        The transmitted direction, or the zero vector when the angle is past
        the critical angle.
    """
    cos_in = tm.min(-tm.dot(incident, normal), 1.0)
    sin2_out = eta * eta * (1.0 - cos_in * cos_in)
    transmitted = vec3(0.0, 0.0, 0.0)
    if sin2_out <= 1.0:
        cos_out = ti.sqrt(1.0 - sin2_out)
        transmitted = eta * incident + (eta * cos_in - cos_out) * normal
    return transmitted


@ti.func
def schlick_reflectance(cosine: ti.f32, ref_idx: ti.f32) -> ti.f32:
    """Schlick's polynomial fit of the Fresnel reflectance.

    ``r0 = ((1 - ref_idx) / (1 + ref_idx))^2`` does not change when
    ``ref_idx`` is replaced by its reciprocal, so callers may pass either the
    index of refraction or the refraction ratio. For ``cosine`` in [0, 1] the
    result lies in [r0, 1] and equals r0 at normal incidence.
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """1 when every component of ``v`` is below NEAR_ZERO_EPSILON in magnitude."""
    eps = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < eps and ti.abs(v.y) < eps and ti.abs(v.z) < eps


# =============================================================================
# Random Samplers
# =============================================================================


@ti.func
def _random_signed() -> ti.f32:
    """Uniform in [-1, 1)."""
    return 2.0 * ti.random(ti.f32) - 1.0


@ti.func
def random_in_unit_sphere() -> vec3:
    """Uniform point strictly inside the unit ball, by rejection from the cube."""
    candidate = vec3(0.0, 0.0, 0.0)
    accepted = 0
    for _ in range(MAX_REJECTION_TRIES):
        if accepted == 0:
            candidate = vec3(_random_signed(), _random_signed(), _random_signed())
            if length_squared(candidate) < 1.0:
                accepted = 1
    if accepted == 0:
        candidate = vec3(0.0, 0.0, 0.0)
    return candidate


@ti.func
def random_unit_vector() -> vec3:
    """Uniform direction on the unit sphere."""
    p = random_in_unit_sphere()
    direction = vec3(0.0, 1.0, 0.0)
    if length_squared(p) > 1e-12:
        direction = tm.normalize(p)
    return direction


@ti.func
def random_in_unit_disk() -> vec3:
    """Uniform point ``(x, y, 0)`` strictly inside the unit disk."""
    candidate = vec3(0.0, 0.0, 0.0)
    accepted = 0
    for _ in range(MAX_REJECTION_TRIES):
        if accepted == 0:
            candidate = vec3(_random_signed(), _random_signed(), 0.0)
            if candidate.x * candidate.x + candidate.y * candidate.y < 1.0:
                accepted = 1
    if accepted == 0:
        candidate = vec3(0.0, 0.0, 0.0)
    return candidate
