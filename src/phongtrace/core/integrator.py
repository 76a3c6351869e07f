"""Ray colour integration and scanline sampling.

A ray's colour follows four rules, applied at each bounce until one of them
ends the path:

1. No depth left: black.
2. Nothing hit in ``[T_MIN, T_MAX]``: the sky, white at the horizon fading
   to light blue overhead.
3. A hit from which no light is visible: black. The material is not asked.
4. Otherwise the material scatters. An absorbed ray is black; a scattered
   one multiplies its attenuation into the colour of the next bounce.

``ray_color`` runs these rules as a loop over bounces, keeping the running
product of attenuations, since a Taichi function cannot call itself.

A kernel launch renders one scanline with its columns spread over Taichi
threads. ``ti.random`` supplies every thread's samples and is seeded by
``ti.init(random_seed=...)``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, random_seed=0)
    >>> from phongtrace.camera.thin_lens import setup_camera
    >>> from phongtrace.core.integrator import render_image, setup_render_target
    >>> from phongtrace.scene.presets import create_hollow_sphere_scene
    >>> _, camera = create_hollow_sphere_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> render_image(num_samples=100, max_depth=50)
"""

from typing import Callable

import numpy as np
import taichi as ti
import taichi.math as tm

from phongtrace.camera.thin_lens import get_ray_jittered
from phongtrace.materials.dielectric import scatter_dielectric_by_id
from phongtrace.materials.lambertian import scatter_lambertian_by_id
from phongtrace.materials.metal import scatter_metal_by_id
from phongtrace.materials.phong import scatter_phong_by_id
from phongtrace.scene.lighting import first_visible_light
from phongtrace.scene.registry import MaterialType, get_material_type, get_material_type_index
from phongtrace.scene.world import intersect_world

vec3 = tm.vec3

MAX_DEPTH = 50

# Accepted hit distances; the lower bound keeps a bounce off its own surface
T_MIN = 0.001
T_MAX = 1e10

SKY_HORIZON = vec3(1.0, 1.0, 1.0)
SKY_ZENITH = vec3(0.5, 0.7, 1.0)

LAMBERTIAN = int(MaterialType.LAMBERTIAN)
METAL = int(MaterialType.METAL)
DIELECTRIC = int(MaterialType.DIELECTRIC)
PHONG = int(MaterialType.PHONG)


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky seen along ``direction``: lerp(white, (0.5, 0.7, 1.0), 0.5 * (y + 1))."""
    blend = 0.5 * (tm.normalize(direction).y + 1.0)
    return tm.mix(SKY_HORIZON, SKY_ZENITH, blend)


@ti.func
def _scatter_material(
    material_id: ti.i32,
    ray_origin: vec3,
    incident_direction: vec3,
    hit_point: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Route a hit to its material's scatter function.

    Phong needs ``ray_origin`` as its viewer position. An id whose type is
    not recognised absorbs the ray.
    """
    kind = get_material_type(material_id)
    slot = get_material_type_index(material_id)

    out_direction = vec3(0.0, 0.0, 0.0)
    out_attenuation = vec3(0.0, 0.0, 0.0)
    scattered = 0

    if kind == LAMBERTIAN:
        out_direction, out_attenuation, scattered = scatter_lambertian_by_id(slot, normal)
    elif kind == METAL:
        out_direction, out_attenuation, scattered = scatter_metal_by_id(
            slot, incident_direction, normal
        )
    elif kind == DIELECTRIC:
        out_direction, out_attenuation, scattered = scatter_dielectric_by_id(
            slot, incident_direction, normal, front_face
        )
    elif kind == PHONG:
        out_direction, out_attenuation, scattered = scatter_phong_by_id(
            slot, ray_origin, incident_direction, hit_point, normal
        )

    return out_direction, out_attenuation, scattered


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    """Colour arriving back along the ray ``origin + t * direction``.

    ``max_depth`` bounds the number of bounces; 0 gives black.
    """
    result = vec3(0.0, 0.0, 0.0)
    weight = vec3(1.0, 1.0, 1.0)
    o = origin
    d = direction
    tracing = 1

    for _ in range(max_depth):
        if tracing == 1:
            tracing = 0
            rec = intersect_world(o, d, T_MIN, T_MAX)
            if rec.hit == 0:
                result = weight * background_color(d)
            else:
                lit, _light = first_visible_light(rec.point, rec.normal)
                if lit == 1:
                    next_d, attenuation, scattered = _scatter_material(
                        rec.material_id, o, d, rec.point, rec.normal, rec.front_face
                    )
                    if scattered == 1:
                        weight *= attenuation
                        o = rec.point
                        d = next_d
                        tracing = 1

    return result


@ti.func
def _sanitize(color: vec3) -> vec3:
    """Zero out NaN, infinite and negative channels."""
    clean = color
    for k in ti.static(range(3)):
        if tm.isnan(color[k]) or tm.isinf(color[k]) or color[k] < 0.0:
            clean[k] = 0.0
    return clean


# =============================================================================
# Render Target
# =============================================================================

# Allocated once at the largest size so kernels never recompile on resize
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_width = ti.field(dtype=ti.i32, shape=())
_height = ti.field(dtype=ti.i32, shape=())
_ready = ti.field(dtype=ti.i32, shape=())

# Indexed [column, row], row 0 at the bottom of the image
_rgb_total = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_samples_taken = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))


def setup_render_target(width: int, height: int) -> None:
    """Make ``width`` x ``height`` the active image and zero its sums.

    Raises:
        ValueError: For a dimension below 1 or above the preallocated size.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be at least 1x1")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum of "
            f"{MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT}"
        )

    _width[None] = width
    _height[None] = height
    _ready[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    _rgb_total.fill(0.0)
    _samples_taken.fill(0)


def reset_render_target() -> None:
    """Return to the state before any setup_render_target call."""
    _ready[None] = 0
    _width[None] = 0
    _height[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """(width, height) of the active image."""
    return int(_width[None]), int(_height[None])


def _require_render_target() -> None:
    if _ready[None] == 0:
        raise RuntimeError("No render target; call setup_render_target() first")


# =============================================================================
# Kernels
# =============================================================================


@ti.kernel
def _render_scanline(
    row: ti.i32, width: ti.i32, height: ti.i32, num_samples: ti.i32, max_depth: ti.i32
):
    for col in range(width):
        row_total = vec3(0.0, 0.0, 0.0)
        for _ in range(num_samples):
            ray = get_ray_jittered(col, row, width, height)
            row_total += _sanitize(ray_color(ray.origin, ray.direction, max_depth))
        _rgb_total[col, row] += row_total
        _samples_taken[col, row] += num_samples


@ti.kernel
def _sample_pixel(
    col: ti.i32, row: ti.i32, width: ti.i32, height: ti.i32, max_depth: ti.i32
) -> vec3:
    ray = get_ray_jittered(col, row, width, height)
    return ray_color(ray.origin, ray.direction, max_depth)


@ti.kernel
def _trace(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    return ray_color(origin, direction, max_depth)


def _as_rgb(color) -> tuple[float, float, float]:
    return (float(color[0]), float(color[1]), float(color[2]))


# =============================================================================
# Python API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Colour of one ray against the current scene, as an (r, g, b) tuple."""
    return _as_rgb(_trace(vec3(*origin), vec3(*direction), max_depth))


def render_sample(pixel_i: int, pixel_j: int, max_depth: int = MAX_DEPTH) -> tuple[float, float, float]:
    """One jittered sample of pixel (column ``pixel_i``, row ``pixel_j``).

    Rows count up from the bottom. Nothing is accumulated.

    Raises:
        RuntimeError: Without an active render target.
    """
    _require_render_target()
    width, height = get_image_dimensions()
    return _as_rgb(_sample_pixel(pixel_i, pixel_j, width, height, max_depth))


def render_scanline(row: int, num_samples: int, max_depth: int = MAX_DEPTH) -> None:
    """Add ``num_samples`` samples to every pixel of ``row`` (0 is the bottom row).

    Raises:
        RuntimeError: Without an active render target.
        ValueError: For a row outside the image, fewer than one sample or a
            negative depth.
    """
    _require_render_target()

    width, height = get_image_dimensions()
    if not 0 <= row < height:
        raise ValueError(f"Row {row} outside image of height {height}")
    if num_samples < 1:
        raise ValueError(f"num_samples = {num_samples} must be at least 1")
    if max_depth < 0:
        raise ValueError(f"max_depth = {max_depth} must be non-negative")

    _render_scanline(row, width, height, num_samples, max_depth)


def render_image(
    num_samples: int = 1,
    max_depth: int = MAX_DEPTH,
    on_scanline: Callable[[int], None] | None = None,
) -> None:
    """Sample every row from the top of the image down.

    Repeated calls keep adding samples. ``on_scanline`` is told, before each
    row, how many rows are still to go counting the one about to render.

    Raises:
        RuntimeError: Without an active render target.
    """
    _require_render_target()

    _, height = get_image_dimensions()
    for row in reversed(range(height)):
        if on_scanline is not None:
            on_scanline(row + 1)
        render_scanline(row, num_samples, max_depth)


def get_total_samples() -> int:
    """Samples accumulated so far in the bottom-left pixel."""
    _require_render_target()
    return int(_samples_taken[0, 0])


def get_averaged_image_numpy() -> np.ndarray:
    """Mean linear colour per pixel, float32 (height, width, 3), top row first.

    Pixels without samples read as black.

    Raises:
        RuntimeError: Without an active render target.
    """
    _require_render_target()

    width, height = get_image_dimensions()
    totals = _rgb_total.to_numpy()[:width, :height]
    counts = _samples_taken.to_numpy()[:width, :height, None].astype(np.float32)

    mean = np.divide(totals, counts, out=np.zeros_like(totals), where=counts > 0)
    return np.ascontiguousarray(mean.transpose(1, 0, 2)[::-1], dtype=np.float32)
