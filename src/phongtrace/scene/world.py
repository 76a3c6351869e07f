"""The sphere list and the two questions kernels ask of it.

``intersect_world`` returns the closest hit in ``[t_min, t_max]``; each hit
found becomes the upper bound for the spheres after it. The bound is
inclusive, so when two spheres are hit at exactly the same distance the one
added later wins.

``occluding_hit`` answers the shadow-ray question for a point light. The
closest surface along the ray decides: it blocks when its material has
occlusion 0.0 and it lies on the near side of the light.
"""

import taichi as ti
import taichi.math as tm

from phongtrace.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record
from phongtrace.scene.registry import get_material_occlusion

vec3 = tm.vec3

MAX_SPHERES = 1024

spheres = Sphere.field(shape=MAX_SPHERES, layout=ti.Layout.SOA)
sphere_count = ti.field(dtype=ti.i32, shape=())


def clear_world() -> None:
    sphere_count[None] = 0


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Append a sphere and return its index.

    Raises:
        ValueError: For a zero radius.
        RuntimeError: When all sphere slots are used.
    """
    if radius == 0.0:
        raise ValueError("Sphere radius must be non-zero")

    slot = sphere_count[None]
    if slot >= MAX_SPHERES:
        raise RuntimeError(f"Sphere table is full ({MAX_SPHERES} entries)")

    spheres.center[slot] = vec3(center[0], center[1], center[2])
    spheres.radius[slot] = radius
    spheres.material_id[slot] = material_id
    sphere_count[None] = slot + 1
    return slot


def get_sphere_count() -> int:
    return int(sphere_count[None])


@ti.func
def intersect_world(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Closest hit over all spheres, or a miss record."""
    nearest = make_miss_record()
    bound = t_max
    for k in range(sphere_count[None]):
        candidate = hit_sphere(ray_origin, ray_direction, spheres[k], t_min, bound)
        if candidate.hit == 1:
            nearest = candidate
            bound = candidate.t
    return nearest


@ti.func
def occluding_hit(
    ray_origin: vec3,
    ray_direction: vec3,
    light_position: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """1 when the shadow ray from ``ray_origin`` toward the light is blocked.

    Blocking needs an opaque closest surface (occlusion 0.0) with
    ``dot(ray_direction, light_position - hit_point) > 0``.
    """
    blocked = 0
    rec = intersect_world(ray_origin, ray_direction, t_min, t_max)
    if rec.hit == 1:
        if get_material_occlusion(rec.material_id) == 0.0:
            if tm.dot(ray_direction, light_position - rec.point) > 0.0:
                blocked = 1
    return blocked
