"""Render configuration: image size, sampling, camera and scene selection.

Configuration is plain data and can be built in code, loaded from a JSON
document, or assembled by the command line. Nothing here touches Taichi
fields, so it is safe to import before ``ti.init``.

JSON layout (every key optional)::

    {
        "image_width": 400,
        "aspect_ratio": 1.7777,
        "samples_per_pixel": 100,
        "max_depth": 50,
        "seed": 0,
        "arch": "cpu",
        "scene": "hollow",
        "camera": {"lookfrom": [0, 0, 0], "lookat": [0, 0, -1], "vup": [0, 1, 0],
                   "vfov": 90, "aperture": 0.0, "focus_dist": 1.0},
        "scene_data": {"materials": [...], "spheres": [...], "lights": [...]}
    }

``scene`` names a preset; ``scene_data`` describes a scene inline and takes
precedence over the preset. Without a ``camera`` block the preset's camera
is used.
"""

import json
import math
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import numpy as np
import taichi as ti

# Matches the preallocated render target size
MAX_IMAGE_DIMENSION = 2048

SCENE_PRESETS = ("hollow", "random")
ARCHES = ("cpu", "gpu")

Vec3Tuple = tuple[float, float, float]


def _as_vec3(name: str, values: Any) -> Vec3Tuple:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {values!r}")
    return (float(values[0]), float(values[1]), float(values[2]))


@dataclass
class CameraConfig:
    """Camera placement and lens.

    Attributes:
        lookfrom: Camera position.
        lookat: Point the camera looks at.
        vup: Up direction.
        vfov: Vertical field of view in degrees, in (0, 180).
        aperture: Lens diameter, non-negative.
        focus_dist: Distance to the plane in focus. None means
            ``|lookfrom - lookat|``.
    """

    lookfrom: Vec3Tuple = (0.0, 0.0, 0.0)
    lookat: Vec3Tuple = (0.0, 0.0, -1.0)
    vup: Vec3Tuple = (0.0, 1.0, 0.0)
    vfov: float = 90.0
    aperture: float = 0.0
    focus_dist: float | None = None

    def resolved_focus_dist(self) -> float:
        if self.focus_dist is None:
            return math.dist(self.lookfrom, self.lookat)
        return self.focus_dist

    def validate(self) -> None:
        """Reject camera setups that leave the view basis undefined.

        Raises:
            ValueError: If the camera is degenerate.
        """
        view = np.array(self.lookfrom, dtype=np.float64) - np.array(self.lookat, dtype=np.float64)
        if not np.any(view):
            raise ValueError("Camera lookfrom and lookat must differ")
        if not np.any(np.cross(np.array(self.vup, dtype=np.float64), view)):
            raise ValueError("Camera vup must not be parallel to the view direction")
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"Camera vfov = {self.vfov} must be in (0, 180) degrees")
        if self.aperture < 0.0:
            raise ValueError(f"Camera aperture = {self.aperture} must be non-negative")
        if self.resolved_focus_dist() <= 0.0:
            raise ValueError(f"Camera focus_dist = {self.focus_dist} must be positive")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CameraConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown camera keys: {sorted(unknown)}")

        kwargs: dict[str, Any] = {}
        for key in ("lookfrom", "lookat", "vup"):
            if key in data:
                kwargs[key] = _as_vec3(key, data[key])
        for key in ("vfov", "aperture"):
            if key in data:
                kwargs[key] = float(data[key])
        if data.get("focus_dist") is not None:
            kwargs["focus_dist"] = float(data["focus_dist"])
        return cls(**kwargs)


@dataclass
class RenderConfig:
    """Everything needed to render one image.

    Attributes:
        image_width: Image width in pixels.
        aspect_ratio: Width divided by height.
        samples_per_pixel: Samples averaged into each pixel.
        max_depth: Recursion depth budget per sample.
        seed: Random seed for Taichi and the random scene layout.
        arch: Taichi backend, "cpu" or "gpu".
        scene: Name of a preset scene.
        camera: Camera override; None uses the preset's camera.
        scene_data: Inline scene description (materials, spheres, lights).
    """

    image_width: int = 256
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 100
    max_depth: int = 50
    seed: int = 0
    arch: str = "cpu"
    scene: str = "hollow"
    camera: CameraConfig | None = None
    scene_data: dict[str, Any] | None = field(default=None, repr=False)

    @property
    def image_height(self) -> int:
        return int(self.image_width / self.aspect_ratio)

    def validate(self) -> None:
        """Check every setting.

        Raises:
            ValueError: If any setting is out of range.
        """
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")
        for name, value in (("image_width", self.image_width), ("image_height", self.image_height)):
            if not 1 <= value <= MAX_IMAGE_DIMENSION:
                raise ValueError(f"{name} = {value} must be in [1, {MAX_IMAGE_DIMENSION}]")
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel = {self.samples_per_pixel} must be at least 1")
        if self.max_depth < 0:
            raise ValueError(f"max_depth = {self.max_depth} must be non-negative")
        if self.arch not in ARCHES:
            raise ValueError(f"arch = {self.arch!r} must be one of {ARCHES}")
        if self.scene_data is None and self.scene not in SCENE_PRESETS:
            raise ValueError(f"scene = {self.scene!r} must be one of {SCENE_PRESETS}")
        if self.camera is not None:
            self.camera.validate()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderConfig":
        """Build a config from a JSON-style dictionary.

        Raises:
            ValueError: If the dictionary has unknown keys or bad values.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")

        kwargs: dict[str, Any] = {}
        for key in ("image_width", "samples_per_pixel", "max_depth", "seed"):
            if key in data:
                kwargs[key] = int(data[key])
        if "aspect_ratio" in data:
            kwargs["aspect_ratio"] = float(data["aspect_ratio"])
        for key in ("arch", "scene"):
            if key in data:
                kwargs[key] = str(data[key])
        if data.get("camera") is not None:
            kwargs["camera"] = CameraConfig.from_dict(data["camera"])
        if data.get("scene_data") is not None:
            kwargs["scene_data"] = dict(data["scene_data"])

        config = cls(**kwargs)
        config.validate()
        return config

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if data["camera"] is None:
            del data["camera"]
        if data["scene_data"] is None:
            del data["scene_data"]
        return data


def load_config(path: str | Path) -> RenderConfig:
    """Load and validate a RenderConfig from a JSON file."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")
    return RenderConfig.from_dict(data)


def init_taichi(config: RenderConfig) -> None:
    """Initialize the Taichi runtime for a render.

    Must run before any module that declares Taichi fields is imported.
    """
    arch = ti.gpu if config.arch == "gpu" else ti.cpu
    ti.init(arch=arch, random_seed=config.seed)
