"""Spheres and the hit records they produce.

``hit_sphere`` works with the half-b quadratic and returns the nearer root
that falls in ``[t_min, t_max]`` (both ends included), falling back to the
farther one. The radius carries a sign: dividing by it when forming the
normal makes a negative sphere face inward, which is how a hollow glass
shell is built from two concentric spheres.

Normals in a ``HitRecord`` always point against the ray that produced it;
``front_face`` keeps the side that was actually struck.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """Centre, signed radius and material id of one sphere."""

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Result of intersecting a ray with the scene.

    Attributes:
        hit: 1 for an intersection, 0 for a miss.
        t: Ray parameter at the intersection.
        point: World-space intersection point.
        normal: Unit normal facing the incoming ray.
        front_face: 1 when the ray struck the outer side.
        material_id: Material of the surface, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    origin = vec3(0.0, 0.0, 0.0)
    return HitRecord(hit=0, t=0.0, point=origin, normal=origin, front_face=0, material_id=-1)


@ti.func
def set_face_normal(ray_direction: vec3, outward_normal: vec3):
    """Return (normal, front_face) with the normal turned to face the ray."""
    front_face = 1
    if tm.dot(ray_direction, outward_normal) >= 0.0:
        front_face = 0
    return outward_normal * (2.0 * front_face - 1.0), front_face


@ti.func
def _in_range(t: ti.f32, t_min: ti.f32, t_max: ti.f32) -> ti.i32:
    inside = 0
    if t >= t_min and t <= t_max:
        inside = 1
    return inside


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Intersect ``ray_origin + t * ray_direction`` with ``sphere``.

    With ``oc = origin - center`` the roots of
    ``|d|^2 t^2 + 2 (d . oc) t + |oc|^2 - r^2 = 0`` are tried nearest first.
    The direction need not be unit length.
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    disc = half_b * half_b - a * c

    rec = make_miss_record()
    if disc >= 0.0:
        root_d = tm.sqrt(disc)
        near = (-half_b - root_d) / a
        far = (-half_b + root_d) / a

        t = far
        found = _in_range(far, t_min, t_max)
        if _in_range(near, t_min, t_max) == 1:
            t = near
            found = 1

        if found == 1:
            p = ray_origin + t * ray_direction
            normal, front_face = set_face_normal(ray_direction, (p - sphere.center) / sphere.radius)
            rec = HitRecord(
                hit=1,
                t=t,
                point=p,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )
    return rec
