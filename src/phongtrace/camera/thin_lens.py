"""Look-at camera with a thin lens for depth of field.

``setup_camera`` turns a ``ThinLensCamera`` into the frame the kernels use:

- ``w``, the unit vector from ``lookat`` back to ``lookfrom``;
- ``u = normalize(vup x w)``, image right;
- ``v = w x u``, image up;
- the focus plane, ``focus_dist`` in front of the camera, spanned by
  ``horizontal`` and ``vertical`` from its ``lower_left`` corner.

Each ray leaves from a random point of the lens disk (radius ``aperture / 2``)
and aims at the focus-plane point for image coordinates (s, t). Geometry on
the focus plane stays sharp. ``aperture = 0`` is a pinhole. Directions are
left unnormalized.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.camera.thin_lens import ThinLensCamera, setup_camera
    >>> setup_camera(
    ...     ThinLensCamera(
    ...         lookfrom=(13.0, 2.0, 3.0),
    ...         lookat=(0.0, 0.0, 0.0),
    ...         vup=(0.0, 1.0, 0.0),
    ...         vfov=20.0,
    ...         aspect_ratio=1.5,
    ...         aperture=0.1,
    ...         focus_dist=10.0,
    ...     )
    ... )
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from phongtrace.core.ray import Ray, make_ray, random_in_unit_disk

Vec3Tuple = tuple[float, float, float]


@dataclass
class ThinLensCamera:
    """Where the camera sits, where it looks, and its lens.

    Attributes:
        lookfrom: Eye position.
        lookat: Point at the centre of the image.
        vup: World direction that should appear upward.
        vfov: Vertical field of view, degrees.
        aspect_ratio: Image width over image height.
        aperture: Lens diameter; 0 disables defocus blur.
        focus_dist: Distance from the eye to the sharp plane.
    """

    lookfrom: Vec3Tuple
    lookat: Vec3Tuple
    vup: Vec3Tuple
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_dist: float = 1.0


# Frame written by setup_camera, read by get_ray
_eye = ti.Vector.field(3, dtype=ti.f32, shape=())
_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_up = ti.Vector.field(3, dtype=ti.f32, shape=())
_back = ti.Vector.field(3, dtype=ti.f32, shape=())
_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_corner = ti.Vector.field(3, dtype=ti.f32, shape=())
_lens_radius = ti.field(dtype=ti.f32, shape=())


def _unit(vector: np.ndarray) -> np.ndarray:
    return vector / np.linalg.norm(vector)


def setup_camera(camera: ThinLensCamera) -> None:
    """Load ``camera`` into the fields used by ray generation.

    Call from Python scope before any render. The camera does no checking of
    its own: ``lookfrom == lookat`` or a ``vup`` parallel to the line of sight
    leaves the frame undefined, and ``CameraConfig.validate`` rejects both
    before a camera is built.
    """
    eye = np.asarray(camera.lookfrom, dtype=np.float64)
    target = np.asarray(camera.lookat, dtype=np.float64)
    vup = np.asarray(camera.vup, dtype=np.float64)

    back = _unit(eye - target)
    right = _unit(np.cross(vup, back))
    up = np.cross(back, right)

    half_height = math.tan(math.radians(camera.vfov) / 2.0)
    plane_height = 2.0 * half_height * camera.focus_dist
    plane_width = camera.aspect_ratio * plane_height

    horizontal = plane_width * right
    vertical = plane_height * up
    corner = eye - 0.5 * (horizontal + vertical) - camera.focus_dist * back

    for target_field, value in (
        (_eye, eye),
        (_right, right),
        (_up, up),
        (_back, back),
        (_horizontal, horizontal),
        (_vertical, vertical),
        (_corner, corner),
    ):
        target_field[None] = value.tolist()
    _lens_radius[None] = 0.5 * camera.aperture


@ti.func
def get_ray(s: ti.f32, t: ti.f32) -> Ray:
    """Ray through image coordinates (s, t), both 0 at the bottom-left corner."""
    lens = _lens_radius[None] * random_in_unit_disk()
    shift = lens.x * _right[None] + lens.y * _up[None]
    start = _eye[None] + shift
    aim = _corner[None] + s * _horizontal[None] + t * _vertical[None]
    return make_ray(start, aim - start)


@ti.func
def get_ray_jittered(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Ray through a random point of pixel (column ``pixel_i``, row ``pixel_j``).

    Rows count up from the bottom. The coordinates are
    ``(i + rand) / (width - 1)`` and ``(j + rand) / (height - 1)``, with each
    denominator held at 1 or more.
    """
    span_s = ti.cast(ti.max(width - 1, 1), ti.f32)
    span_t = ti.cast(ti.max(height - 1, 1), ti.f32)
    s = (ti.cast(pixel_i, ti.f32) + ti.random(ti.f32)) / span_s
    t = (ti.cast(pixel_j, ti.f32) + ti.random(ti.f32)) / span_t
    return get_ray(s, t)


def get_camera_info() -> dict[str, tuple[float, ...] | float]:
    """Snapshot of the loaded frame, for logging and tests.

    Keys: origin, u, v, w, horizontal, vertical, lower_left, lens_radius.
    """
    vectors = {
        "origin": _eye,
        "u": _right,
        "v": _up,
        "w": _back,
        "horizontal": _horizontal,
        "vertical": _vertical,
        "lower_left": _corner,
    }
    info: dict[str, tuple[float, ...] | float] = {
        key: tuple(float(c) for c in field[None].to_numpy()) for key, field in vectors.items()
    }
    info["lens_radius"] = float(_lens_radius[None])
    return info
