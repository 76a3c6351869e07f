"""Taichi-based ray tracer with Phong direct lighting.

This package renders scenes of spheres with stochastic recursive ray tracing:
- Thin-lens camera with depth of field
- Lambertian, metal, dielectric and Phong materials
- Point lights with hard shadows gating every bounce
- Scanline-parallel sampling with PPM and PNG output

Subpackages:
    core: Ray record, vector helpers, color integrator and render loop
    geometry: Sphere primitive and hit records
    materials: Scattering models and their parameter registries
    scene: World, lights, material ids, scene manager and presets
    camera: Thin-lens camera with ray generation
    output: Pixel encoding, PPM and PNG writers

Taichi fields are declared when subpackages are imported, so call
``ti.init`` (or ``phongtrace.config.init_taichi``) before importing them.
"""

__version__ = "0.1.0"
