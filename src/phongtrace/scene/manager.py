"""Python-side scene builder.

``SceneManager`` owns the field registries behind a scene: spheres, point
lights and the four material tables. Material ids are handed out from a
single counter whatever the material type, and the registry records for
each id which table holds its parameters and how much light it lets
through to shadow rays.

Scenes are assembled before rendering starts. One material id may be shared
by any number of spheres.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> red = scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=red)
    >>> scene.add_light(diffuse=(1, 1, 1), specular=(1, 1, 1), position=(2, 0, -1))
"""

import logging
from dataclasses import dataclass
from typing import Any

from phongtrace.materials.dielectric import add_dielectric_material, clear_dielectric_materials
from phongtrace.materials.lambertian import add_lambertian_material, clear_lambertian_materials
from phongtrace.materials.metal import add_metal_material, clear_metal_materials
from phongtrace.materials.phong import add_phong_material, clear_phong_materials
from phongtrace.scene.lighting import MAX_LIGHTS, add_light, clear_lighting, get_light_count
from phongtrace.scene.registry import (
    MAX_MATERIALS,
    MaterialType,
    clear_material_registry,
    get_material_count,
    is_valid_material_id,
    register_material,
)
from phongtrace.scene.world import MAX_SPHERES, add_sphere, clear_world, get_sphere_count

logger = logging.getLogger(__name__)

Vec3Tuple = tuple[float, float, float]

# Serialized defaults for fields a scene document may leave out
_MATERIAL_DEFAULTS: dict[str, dict[str, Any]] = {
    "lambertian": {"albedo": (0.5, 0.5, 0.5)},
    "metal": {"albedo": (0.8, 0.8, 0.8), "fuzz": 0.0},
    "dielectric": {"ior": 1.5, "occlusion": 1.0},
    "phong": {
        "diffuse_coeff": 1.0,
        "specular_coeff": 0.0,
        "shine": 0.5,
        "exponent": 4,
        "albedo": (0.5, 0.5, 0.5),
        "fuzz": 0.0,
        "diffuse_probability": 1.0,
        "occlusion": 0.0,
        "ambient_coeff": 0.0,
    },
}

_VECTOR_KEYS = ("albedo", "center", "diffuse", "specular", "position")


@dataclass
class MaterialInfo:
    """Bookkeeping for one material id.

    ``params`` keeps the arguments exactly as they were given so the scene
    can be written back out.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    occlusion: float
    params: dict[str, Any]


@dataclass
class SphereInfo:
    sphere_index: int
    center: Vec3Tuple
    radius: float
    material_id: int


@dataclass
class LightInfo:
    light_index: int
    diffuse: Vec3Tuple
    specular: Vec3Tuple
    position: Vec3Tuple


def _as_vec3(values: Any) -> Vec3Tuple:
    if len(values) != 3:
        raise ValueError(f"Expected 3 components, got {len(values)}: {values!r}")
    return (float(values[0]), float(values[1]), float(values[2]))


def _jsonable(entry: dict[str, Any]) -> dict[str, Any]:
    """Copy ``entry`` with its vector values turned into lists."""
    return {key: list(value) if key in _VECTOR_KEYS else value for key, value in entry.items()}


class SceneManager:
    """Builds a scene into the Taichi registries and remembers what it built.

    Creating a manager empties every registry, so only one scene is live at a
    time.

    Attributes:
        materials: One MaterialInfo per material id, indexed by id.
        spheres: Spheres in insertion order.
        lights: Lights in insertion order, the order the direct-light gate
            scans them.

    Example:
        >>> scene = SceneManager()
        >>> glass = scene.add_dielectric_material(ior=1.5)
        >>> scene.add_sphere((-1, 0, -1), 0.5, glass)
        >>> scene.add_sphere((-1, 0, -1), -0.4, glass)  # hollow shell
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.lights: list[LightInfo] = []
        self.clear()

    def clear(self) -> None:
        """Drop every sphere, light and material."""
        for reset in (
            clear_world,
            clear_lighting,
            clear_lambertian_materials,
            clear_metal_materials,
            clear_dielectric_materials,
            clear_phong_materials,
            clear_material_registry,
        ):
            reset()
        self.materials.clear()
        self.spheres.clear()
        self.lights.clear()

    # =========================================================================
    # Materials
    # =========================================================================

    def _record(
        self,
        material_type: MaterialType,
        type_index: int,
        occlusion: float,
        params: dict[str, Any],
    ) -> int:
        material_id = register_material(material_type, type_index, occlusion)
        self.materials.append(
            MaterialInfo(material_id, material_type, type_index, occlusion, params)
        )
        logger.debug(
            "material %d -> %s[%d], occlusion %.2f",
            material_id,
            material_type.name.lower(),
            type_index,
            occlusion,
        )
        return material_id

    def add_lambertian_material(self, albedo: Vec3Tuple) -> int:
        """Register a matte material. It always casts shadows."""
        slot = add_lambertian_material(albedo)
        return self._record(MaterialType.LAMBERTIAN, slot, 0.0, {"albedo": albedo})

    def add_metal_material(self, albedo: Vec3Tuple, fuzz: float = 0.0) -> int:
        """Register a metal. It always casts shadows."""
        slot = add_metal_material(albedo, fuzz)
        return self._record(MaterialType.METAL, slot, 0.0, {"albedo": albedo, "fuzz": fuzz})

    def add_dielectric_material(self, ior: float = 1.5, occlusion: float = 1.0) -> int:
        """Register a glass-like material.

        With the default ``occlusion`` of 1.0 shadow rays pass straight
        through it; pass 0.0 for glass that casts a shadow.
        """
        slot = add_dielectric_material(ior)
        return self._record(
            MaterialType.DIELECTRIC, slot, occlusion, {"ior": ior, "occlusion": occlusion}
        )

    def add_phong_material(
        self,
        diffuse_coeff: float,
        specular_coeff: float,
        shine: float,
        exponent: int,
        albedo: Vec3Tuple,
        fuzz: float = 0.0,
        diffuse_probability: float = 1.0,
        occlusion: float = 0.0,
        ambient_coeff: float = 0.0,
    ) -> int:
        """Register a Phong material.

        Args:
            diffuse_coeff: Weight of the N.L term.
            specular_coeff: Weight of the highlight term.
            shine: Highlight sharpness; the stored factor is ``shine / exponent``.
            exponent: Integer highlight exponent, 1 or more.
            albedo: Colour of the bounced ray.
            fuzz: Blur of the mirror bounce.
            diffuse_probability: Chance that a bounce is matte rather than mirror.
            occlusion: Shadow-ray transparency, 0.0 blocks.
            ambient_coeff: Stored with the scene but not used in shading.

        Raises:
            ValueError: On any out-of-range parameter.
            RuntimeError: When a material table is full.
        """
        slot = add_phong_material(
            diffuse_coeff,
            specular_coeff,
            shine,
            exponent,
            albedo,
            fuzz,
            diffuse_probability,
        )
        params = dict(
            diffuse_coeff=diffuse_coeff,
            specular_coeff=specular_coeff,
            shine=shine,
            exponent=exponent,
            albedo=albedo,
            fuzz=fuzz,
            diffuse_probability=diffuse_probability,
            occlusion=occlusion,
            ambient_coeff=ambient_coeff,
        )
        return self._record(MaterialType.PHONG, slot, occlusion, params)

    def get_material_count(self) -> int:
        return get_material_count()

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """The MaterialInfo for ``material_id``, or None for an unknown id."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Spheres and Lights
    # =========================================================================

    def add_sphere(self, center: Vec3Tuple, radius: float, material_id: int) -> int:
        """Place a sphere; a negative radius turns its normals inward.

        Raises:
            ValueError: For an unregistered material id or a zero radius.
            RuntimeError: When the sphere table is full.
        """
        if not is_valid_material_id(material_id):
            raise ValueError(f"Invalid material_id: {material_id}")

        index = add_sphere(center, radius, material_id)
        self.spheres.append(SphereInfo(index, center, radius, material_id))
        return index

    def add_light(self, diffuse: Vec3Tuple, specular: Vec3Tuple, position: Vec3Tuple) -> int:
        """Place a point light.

        Raises:
            ValueError: For a negative intensity channel.
            RuntimeError: When the light table is full.
        """
        index = add_light(diffuse, specular, position)
        self.lights.append(LightInfo(index, diffuse, specular, position))
        return index

    # Sphere plus a fresh material; each returns (sphere_index, material_id)

    def add_lambertian_sphere(
        self, center: Vec3Tuple, radius: float, albedo: Vec3Tuple
    ) -> tuple[int, int]:
        material_id = self.add_lambertian_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metal_sphere(
        self, center: Vec3Tuple, radius: float, albedo: Vec3Tuple, fuzz: float = 0.0
    ) -> tuple[int, int]:
        material_id = self.add_metal_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def add_dielectric_sphere(
        self, center: Vec3Tuple, radius: float, ior: float = 1.5, occlusion: float = 1.0
    ) -> tuple[int, int]:
        material_id = self.add_dielectric_material(ior, occlusion)
        return self.add_sphere(center, radius, material_id), material_id

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    def get_light_count(self) -> int:
        return get_light_count()

    def log_summary(self) -> None:
        logger.debug(
            "Scene: %d materials, %d spheres, %d lights",
            self.get_material_count(),
            self.get_sphere_count(),
            self.get_light_count(),
        )

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Describe the scene as plain JSON-compatible data.

        Materials are listed in id order with a ``type`` key, so sphere
        ``material_id`` values stay valid after a reload.
        """
        return {
            "materials": [
                _jsonable({"type": info.material_type.name.lower(), **info.params})
                for info in self.materials
            ],
            "spheres": [
                _jsonable(
                    {
                        "center": sphere.center,
                        "radius": sphere.radius,
                        "material_id": sphere.material_id,
                    }
                )
                for sphere in self.spheres
            ],
            "lights": [
                _jsonable(
                    {
                        "diffuse": light.diffuse,
                        "specular": light.specular,
                        "position": light.position,
                    }
                )
                for light in self.lights
            ],
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Replace the current scene with one read from ``data``.

        Missing sections are empty and missing fields take their defaults.

        Raises:
            ValueError: For an unknown material type or invalid parameters.
        """
        self.clear()

        for entry in data.get("materials", []):
            self._material_from_dict(entry)

        for entry in data.get("spheres", []):
            self.add_sphere(
                _as_vec3(entry.get("center", (0.0, 0.0, 0.0))),
                float(entry.get("radius", 1.0)),
                int(entry.get("material_id", 0)),
            )

        for entry in data.get("lights", []):
            self.add_light(
                _as_vec3(entry.get("diffuse", (1.0, 1.0, 1.0))),
                _as_vec3(entry.get("specular", (1.0, 1.0, 1.0))),
                _as_vec3(entry.get("position", (0.0, 0.0, 0.0))),
            )

        self.log_summary()

    def _material_from_dict(self, entry: dict[str, Any]) -> int:
        kind = str(entry.get("type", "")).lower()
        if kind not in _MATERIAL_DEFAULTS:
            raise ValueError(f"Unknown material type: {kind}")

        params = {key: entry.get(key, default) for key, default in _MATERIAL_DEFAULTS[kind].items()}
        if "albedo" in params:
            params["albedo"] = _as_vec3(params["albedo"])

        if kind == "lambertian":
            return self.add_lambertian_material(params["albedo"])
        if kind == "metal":
            return self.add_metal_material(params["albedo"], float(params["fuzz"]))
        if kind == "dielectric":
            return self.add_dielectric_material(float(params["ior"]), float(params["occlusion"]))

        params["exponent"] = int(params["exponent"])
        for key in (
            "diffuse_coeff",
            "specular_coeff",
            "shine",
            "fuzz",
            "diffuse_probability",
            "occlusion",
            "ambient_coeff",
        ):
            params[key] = float(params[key])
        return self.add_phong_material(**params)

    # =========================================================================
    # Capacities
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_lights() -> int:
        return MAX_LIGHTS

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS
