"""Sphere storage and closest-hit queries over the whole scene.

Spheres live in a fixed-capacity struct field in insertion order, each
paired with a material id. ``intersect_scene`` walks every sphere and
keeps the nearest hit, so the result depends only on distance.

Example:
    >>> from src.pathtrace.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    0
"""

import taichi as ti
import taichi.math as tm

from src.pathtrace.core.interval import Interval
from src.pathtrace.core.ray import Ray
from src.pathtrace.geometry.sphere import Sphere, hit_sphere

vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """A sphere HitRecord plus the material of the sphere that was hit.

    ``hit`` is 0 and ``material_id`` is -1 when nothing was hit; the other
    members are then meaningless.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


MAX_SPHERES = 1024

_spheres = Sphere.field(shape=MAX_SPHERES)
_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
_count = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Drop every sphere. Stale slots are overwritten by later adds."""
    _count[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Append a sphere and return its index.

    A negative radius is stored as 0. ``material_id`` is not checked here;
    an id with no registered material renders as an absorber.

    Raises:
        RuntimeError: If MAX_SPHERES spheres are already stored.
    """
    idx = int(_count[None])
    if idx == MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

    _spheres.center[idx] = [center[0], center[1], center[2]]
    _spheres.radius[idx] = max(float(radius), 0.0)
    _material_ids[idx] = material_id
    _count[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    return int(_count[None])


def get_sphere(idx: int) -> dict:
    """Read back sphere ``idx`` as a dict with center, radius and material_id.

    Raises:
        IndexError: If no sphere has that index.
    """
    if not 0 <= idx < get_sphere_count():
        raise IndexError(f"Sphere index {idx} out of range")
    center = _spheres.center[idx]
    return {
        "center": (float(center[0]), float(center[1]), float(center[2])),
        "radius": float(_spheres.radius[idx]),
        "material_id": int(_material_ids[idx]),
    }


@ti.func
def intersect_scene(ray: Ray, interval: Interval) -> SceneHitRecord:
    """Find the nearest sphere hit with t strictly inside ``interval``.

    Each hit pulls the upper bound of the search window in to its t, so a
    later sphere wins only when it is strictly closer.
    """
    window = Interval(lo=interval.lo, hi=interval.hi)
    closest = SceneHitRecord(hit=0, material_id=-1)

    for i in range(_count[None]):
        rec = hit_sphere(ray, _spheres[i], window)
        if rec.hit == 1:
            window.hi = rec.t
            closest = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                front_face=rec.front_face,
                material_id=_material_ids[i],
            )

    return closest
