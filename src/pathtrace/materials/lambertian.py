"""Ideal diffuse (Lambertian) scattering.

The scattered direction is the hit normal plus a uniformly random unit
vector. Its endpoint lands on the unit sphere resting on the surface, so
directions come out cosine-weighted around the normal. Attenuation is the
albedo, and a diffuse hit always produces an outgoing ray.
"""

import taichi as ti
import taichi.math as tm

from src.pathtrace.core.ray import near_zero, random_unit_vector

vec3 = tm.vec3


@ti.func
def lambertian_direction(normal: vec3, random_unit: vec3) -> vec3:
    """Return ``normal + random_unit``, or ``normal`` when the sum is near zero.

    The result is not normalized.
    """
    direction = normal + random_unit
    if near_zero(direction):
        direction = normal
    return direction


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, state: ti.u32):
    """Draw a diffuse bounce off a surface with unit normal ``normal``.

    Returns:
        (direction, attenuation, state) with the generator state advanced.
    """
    random_unit, rng = random_unit_vector(state)
    return lambertian_direction(normal, random_unit), albedo, rng


# Per-material parameters, indexed by the slot returned from
# add_lambertian_material()
MAX_LAMBERTIAN_MATERIALS = 256

_albedo = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
_count = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    _count[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Store a diffuse albedo and return its slot.

    Raises:
        ValueError: If albedo does not have 3 components or one is outside [0, 1].
        RuntimeError: If all MAX_LAMBERTIAN_MATERIALS slots are taken.
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    r, g, b = (float(c) for c in albedo)
    if not all(0.0 <= c <= 1.0 for c in (r, g, b)):
        raise ValueError(f"Lambertian albedo {tuple(albedo)} has a component outside [0, 1]")

    slot = int(_count[None])
    if slot == MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )
    _albedo[slot] = [r, g, b]
    _count[None] = slot + 1
    return slot


def get_lambertian_material_count() -> int:
    return int(_count[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    return _albedo[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, normal: vec3, state: ti.u32):
    """scatter_lambertian() with the albedo stored in ``material_idx``."""
    return scatter_lambertian(_albedo[material_idx], normal, state)
