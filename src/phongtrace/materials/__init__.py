"""Materials module for light scattering models.

Components:
    lambertian: Ideal diffuse reflection (normal + random unit vector)
    metal: Mirror reflection with a fuzz perturbation
    dielectric: Glass-like refraction with Schlick reflectance
    phong: Direct Phong lighting combined with a diffuse or specular bounce

Each material provides a scatter function returning
(scattered_direction, attenuation, did_scatter) and a fixed-size registry
of parameters indexed by a type-local material index.
"""

from .dielectric import (
    DielectricMaterial,
    add_dielectric_material,
    clear_dielectric_materials,
    fresnel_reflectance,
    get_dielectric_ior,
    get_dielectric_material_count,
    scatter_dielectric,
    scatter_dielectric_by_id,
    will_reflect,
)
from .lambertian import (
    LambertianMaterial,
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    lambertian_direction,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .metal import (
    MetalMaterial,
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)
from .phong import (
    PhongMaterial,
    add_phong_material,
    clear_phong_materials,
    get_phong_material_count,
    phong_illumination,
    phong_specular_term,
    scatter_phong,
    scatter_phong_by_id,
)

__all__ = [
    # Lambertian
    "LambertianMaterial",
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    "lambertian_direction",
    # Metal
    "MetalMaterial",
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "DielectricMaterial",
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_ior",
    "fresnel_reflectance",
    "will_reflect",
    # Phong
    "PhongMaterial",
    "phong_illumination",
    "phong_specular_term",
    "scatter_phong",
    "scatter_phong_by_id",
    "add_phong_material",
    "clear_phong_materials",
    "get_phong_material_count",
]
