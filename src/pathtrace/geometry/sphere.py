"""Sphere primitive and ray-sphere intersection.

This module provides the Sphere and HitRecord dataclasses and the
ray-sphere intersection function.

The intersection solves |origin + t * direction - center|^2 = radius^2 in
the half-b form, which needs one fewer multiply and loses less precision
than the textbook b^2 - 4ac form:

    oc = center - origin
    a  = dot(direction, direction)
    h  = dot(direction, oc)
    c  = dot(oc, oc) - radius^2
    discriminant = h^2 - a*c
    t  = (h -/+ sqrt(discriminant)) / a

The direction is not assumed to be unit length; a carries its magnitude.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtrace.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.pathtrace.core.interval import Interval, interval_surrounds
from src.pathtrace.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (non-negative float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
            A miss is the absent result; the remaining fields are then unset.
        t: The ray parameter of the intersection, inside the queried interval.
        point: The 3D point where the ray intersected the sphere.
        normal: Unit surface normal, always facing against the incident ray.
        front_face: 1 if the ray arrived from outside the sphere, 0 if from
            inside (in which case normal is the inverted outward normal).
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def face_normal(direction: vec3, outward_normal: vec3):
    """Orient a surface normal against the incident ray.

    Args:
        direction: The incident ray direction.
        outward_normal: The unit normal pointing out of the surface.

    Returns:
        A tuple of (front_face, normal) where front_face is 1 when the ray
        hits the outside of the surface.
    """
    front_face = 1
    normal = outward_normal
    if tm.dot(direction, outward_normal) >= 0.0:
        front_face = 0
        normal = -outward_normal
    return front_face, normal


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, interval: Interval) -> HitRecord:
    """Test for ray-sphere intersection.

    The nearer root is tried first and the farther root only if the nearer
    one falls outside the interval, so a ray starting inside the sphere hits
    the far wall.

    Args:
        ray: The ray to test. Its direction need not be normalized.
        sphere: The sphere to test intersection against.
        interval: Accepted range of t. Both bounds are exclusive.

    Returns:
        A HitRecord. Check the hit field to determine if intersection occurred.
    """
    oc = sphere.center - ray.origin
    a = tm.dot(ray.direction, ray.direction)
    h = tm.dot(ray.direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = (h - sqrt_d) / a
        valid = interval_surrounds(interval, root)

        if not valid:
            root = (h + sqrt_d) / a
            valid = interval_surrounds(interval, root)

        if valid:
            did_hit = 1
            hit_t = root
            hit_point = ray_at(ray, root)

            # Unit length because the radius normalizes it
            outward_normal = (hit_point - sphere.center) / sphere.radius
            is_front_face, hit_normal = face_normal(ray.direction, outward_normal)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius.

    A negative radius is clamped to 0.
    """
    return Sphere(center=center, radius=ti.max(radius, 0.0))
