"""Point lights and direct-light visibility queries.

Lights are point sources without distance falloff, each with a diffuse and
a specular intensity. They are stored in Taichi fields in insertion order;
that order decides which light ``first_visible_light`` reports.

A light illuminates a point with normal ``n`` when it is not behind the
surface (``dot(n, light - p) >= 0``) and a shadow ray from ``p`` toward it
is not blocked (see ``phongtrace.scene.world.occluding_hit``).
"""

import taichi as ti
import taichi.math as tm

from phongtrace.scene.world import occluding_hit

vec3 = tm.vec3

# Shadow rays start this far along the ray to avoid self-intersection
SHADOW_T_MIN = 0.001
SHADOW_T_MAX = 1e10

MAX_LIGHTS = 64

light_diffuse = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_specular = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lighting() -> None:
    """Remove all lights."""
    num_lights[None] = 0


def add_light(
    diffuse: tuple[float, float, float],
    specular: tuple[float, float, float],
    position: tuple[float, float, float],
) -> int:
    """Add a point light.

    Args:
        diffuse: Diffuse intensity (RGB), non-negative.
        specular: Specular intensity (RGB), non-negative.
        position: Light position in world space.

    Returns:
        The index of the added light.

    Raises:
        ValueError: If any intensity component is negative.
        RuntimeError: If the maximum number of lights is exceeded.
    """
    for name, color in (("diffuse", diffuse), ("specular", specular)):
        for i, component in enumerate(color):
            if component < 0.0:
                raise ValueError(f"Light {name} component {i} = {component} is negative")

    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    light_diffuse[idx] = vec3(diffuse[0], diffuse[1], diffuse[2])
    light_specular[idx] = vec3(specular[0], specular[1], specular[2])
    light_positions[idx] = vec3(position[0], position[1], position[2])
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights."""
    return int(num_lights[None])


@ti.func
def light_visible(point: vec3, normal: vec3, light_position: vec3) -> ti.i32:
    """Test whether a single point light illuminates a surface point.

    Args:
        point: The shaded point.
        normal: The surface normal at the point.
        light_position: Position of the light.

    Returns:
        1 if the light is in front of the surface and unoccluded, 0 otherwise.
    """
    visible = 0
    to_light = light_position - point
    if tm.dot(normal, to_light) >= 0.0:
        direction = tm.normalize(to_light)
        if occluding_hit(point, direction, light_position, SHADOW_T_MIN, SHADOW_T_MAX) == 0:
            visible = 1
    return visible


@ti.func
def first_visible_light(point: vec3, normal: vec3):
    """Find the first light, in insertion order, that illuminates a point.

    Args:
        point: The shaded point.
        normal: The surface normal at the point.

    Returns:
        A tuple of (lit, diffuse) where lit is 1 if some light is visible and
        diffuse is that light's diffuse intensity (black when unlit).
    """
    lit = 0
    diffuse = vec3(0.0, 0.0, 0.0)
    for k in range(num_lights[None]):
        if lit == 0:
            if light_visible(point, normal, light_positions[k]) == 1:
                lit = 1
                diffuse = light_diffuse[k]
    return lit, diffuse
