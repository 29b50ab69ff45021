"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) inlined into the
render kernels.
"""

from .sphere import HitRecord, Sphere, face_normal, hit_sphere, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "face_normal",
    "hit_sphere",
    "make_sphere",
]
