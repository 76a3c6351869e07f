"""Ready-made demo scenes.

Two scenes are provided:

- ``create_hollow_sphere_scene``: a yellow ground sphere, a blue diffuse
  sphere sharing its place with a Phong sphere, and one white point light to
  the right. Optionally adds a hollow glass shell (outer sphere plus an inner
  sphere of negative radius) on the left and a gold metal sphere on the right.
- ``create_random_scene``: the "many spheres" cover scene with a grid of small
  random diffuse, metal and glass spheres around three large ones, seen
  through a camera with a small aperture.

Each factory clears the global scene storage, fills it, and returns the
SceneManager together with a matching ThinLensCamera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from phongtrace.scene.presets import create_hollow_sphere_scene
    >>> from phongtrace.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_hollow_sphere_scene()
    >>> setup_camera(camera)
"""

import math

import numpy as np

from phongtrace.camera.thin_lens import ThinLensCamera
from phongtrace.scene.manager import SceneManager

Vec3Tuple = tuple[float, float, float]

# =============================================================================
# Hollow Sphere Scene Constants
# =============================================================================

GROUND_ALBEDO = (0.8, 0.8, 0.0)
CENTRE_ALBEDO = (0.1, 0.2, 0.5)
METAL_ALBEDO = (0.8, 0.6, 0.2)
GLASS_IOR = 1.5

RIGHT_LIGHT_POSITION = (2.0, 0.0, -1.0)
TOP_LIGHT_POSITION = (0.0, 1.0, -1.0)

# =============================================================================
# Random Scene Constants
# =============================================================================

RANDOM_GRID_EXTENT = 11
SMALL_SPHERE_RADIUS = 0.2

# The cover scene has no light of its own; one overhead light lets the
# direct-light gate pass for most upward-facing surfaces
RANDOM_SCENE_LIGHT_POSITION = (0.0, 50.0, 0.0)


def create_hollow_sphere_scene(
    aspect_ratio: float = 16.0 / 9.0,
    *,
    include_hollow_glass: bool = False,
    include_top_light: bool = False,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the hollow sphere demo scene.

    Args:
        aspect_ratio: Image aspect ratio for the returned camera.
        include_hollow_glass: Add the glass shell on the left and the metal
            sphere on the right.
        include_top_light: Add a second light above the centre sphere with a
            red specular intensity.

    Returns:
        A tuple of (SceneManager, ThinLensCamera).
    """
    scene = SceneManager()

    ground_mat = scene.add_lambertian_material(albedo=GROUND_ALBEDO)
    centre_mat = scene.add_lambertian_material(albedo=CENTRE_ALBEDO)
    phong_mat = scene.add_phong_material(
        diffuse_coeff=1.0,
        specular_coeff=0.0,
        shine=0.5,
        exponent=4,
        albedo=CENTRE_ALBEDO,
        fuzz=0.0,
        diffuse_probability=1.0,
        occlusion=0.0,
        ambient_coeff=1.0,
    )

    scene.add_sphere(center=(0.0, -100.5, -1.0), radius=100.0, material_id=ground_mat)
    scene.add_sphere(center=(0.0, 0.0, -1.0), radius=0.5, material_id=centre_mat)

    if include_hollow_glass:
        outer_glass = scene.add_dielectric_material(ior=GLASS_IOR, occlusion=1.0)
        inner_glass = scene.add_dielectric_material(ior=GLASS_IOR, occlusion=1.0)
        metal_mat = scene.add_metal_material(albedo=METAL_ALBEDO, fuzz=0.0)

        scene.add_sphere(center=(-1.0, 0.0, -1.0), radius=0.5, material_id=outer_glass)
        scene.add_sphere(center=(-1.0, 0.0, -1.0), radius=-0.4, material_id=inner_glass)
        scene.add_sphere(center=(1.0, 0.0, -1.0), radius=0.5, material_id=metal_mat)

    scene.add_sphere(center=(0.0, 0.0, -1.0), radius=0.5, material_id=phong_mat)

    scene.add_light(diffuse=(1.0, 1.0, 1.0), specular=(1.0, 1.0, 1.0), position=RIGHT_LIGHT_POSITION)
    if include_top_light:
        scene.add_light(
            diffuse=(1.0, 1.0, 1.0), specular=(1.0, 0.0, 0.0), position=TOP_LIGHT_POSITION
        )

    lookfrom = (0.0, 0.0, 0.0)
    lookat = (0.0, 0.0, -1.0)
    camera = ThinLensCamera(
        lookfrom=lookfrom,
        lookat=lookat,
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=math.dist(lookfrom, lookat),
    )

    scene.log_summary()
    return scene, camera


def create_random_scene(
    seed: int = 0,
    aspect_ratio: float = 3.0 / 2.0,
    *,
    light_position: Vec3Tuple | None = RANDOM_SCENE_LIGHT_POSITION,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the random "many spheres" scene.

    Small spheres of radius 0.2 sit on a 23 x 23 grid, each jittered inside
    its cell. A sphere is diffuse with probability 0.8 (albedo is the product
    of two random colors), metal with probability 0.15 (albedo in [0.4, 1),
    fuzz in [0, 0.5)) and glass otherwise.

    Args:
        seed: Seed for the scene layout. The same seed gives the same scene.
        aspect_ratio: Image aspect ratio for the returned camera.
        light_position: Position of a white point light, or None for no light.

    Returns:
        A tuple of (SceneManager, ThinLensCamera).
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    ground_mat = scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
    scene.add_sphere(center=(0.0, -1000.0, 0.0), radius=1000.0, material_id=ground_mat)

    glass_mat = scene.add_dielectric_material(ior=GLASS_IOR, occlusion=1.0)

    for a in range(-RANDOM_GRID_EXTENT, RANDOM_GRID_EXTENT + 1):
        for b in range(-RANDOM_GRID_EXTENT, RANDOM_GRID_EXTENT + 1):
            choose_mat = rng.random()
            center = (
                a + rng.uniform(0.0, 0.9),
                SMALL_SPHERE_RADIUS,
                b + rng.uniform(0.0, 0.9),
            )

            if choose_mat < 0.8:
                albedo = tuple(float(x) for x in rng.random(3) * rng.random(3))
                material_id = scene.add_lambertian_material(albedo=albedo)
            elif choose_mat < 0.95:
                albedo = tuple(float(x) for x in rng.uniform(0.4, 1.0, 3))
                material_id = scene.add_metal_material(
                    albedo=albedo, fuzz=float(rng.uniform(0.0, 0.5))
                )
            else:
                material_id = glass_mat

            scene.add_sphere(center=center, radius=SMALL_SPHERE_RADIUS, material_id=material_id)

    brown_mat = scene.add_lambertian_material(albedo=(0.4, 0.2, 0.1))
    steel_mat = scene.add_metal_material(albedo=(0.7, 0.6, 0.5), fuzz=0.0)

    scene.add_sphere(center=(0.0, 1.0, 0.0), radius=1.0, material_id=glass_mat)
    scene.add_sphere(center=(-4.0, 1.0, 0.0), radius=1.0, material_id=brown_mat)
    scene.add_sphere(center=(4.0, 1.0, 0.0), radius=1.0, material_id=steel_mat)

    if light_position is not None:
        scene.add_light(diffuse=(1.0, 1.0, 1.0), specular=(1.0, 1.0, 1.0), position=light_position)

    camera = ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )

    scene.log_summary()
    return scene, camera


def _hollow_preset(aspect_ratio: float, seed: int) -> tuple[SceneManager, ThinLensCamera]:
    return create_hollow_sphere_scene(aspect_ratio)


def _random_preset(aspect_ratio: float, seed: int) -> tuple[SceneManager, ThinLensCamera]:
    return create_random_scene(seed, aspect_ratio)


# Preset name -> factory(aspect_ratio, seed)
PRESETS = {
    "hollow": _hollow_preset,
    "random": _random_preset,
}
