"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive, hit record and ray-sphere intersection

Intersection routines are Taichi functions (@ti.func). Every primitive
orients its normal with set_face_normal so the normal always opposes the
incoming ray.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record, set_face_normal

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_miss_record",
    "set_face_normal",
]
