"""Mirror (metal) scattering.

A metal reflects the incoming direction about the normal,
``R = I - 2 (I . N) N``, and tints the ray by its albedo. The incident
direction is not normalized first, so R has the same length as I.

Every metal carries a fuzz value in [0, 1]. It is validated and kept
alongside the albedo, but reflections are currently perfect mirrors
whatever the fuzz.
"""

import taichi as ti
import taichi.math as tm

from src.pathtrace.core.ray import reflect

vec3 = tm.vec3


@ti.func
def scatter_metal(albedo: vec3, incident_direction: vec3, normal: vec3):
    """Reflect ``incident_direction`` about ``normal``.

    Returns:
        (direction, attenuation). Metals never absorb.
    """
    return reflect(incident_direction, normal), albedo


MAX_METAL_MATERIALS = 256

_albedo = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
_fuzz = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
_count = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    _count[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Store a metal's albedo and fuzz, returning its slot.

    Args:
        albedo: Reflected fraction per channel, each in [0, 1].
        fuzz: Roughness in [0, 1]. Recorded only.

    Raises:
        ValueError: If albedo does not have 3 components, or an albedo
            component or fuzz is outside [0, 1].
        RuntimeError: If all MAX_METAL_MATERIALS slots are taken.
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    for channel, value in zip("RGB", albedo):
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Albedo {channel} = {value} is outside [0, 1]")
    if not 0.0 <= fuzz <= 1.0:
        raise ValueError(f"Fuzz = {fuzz} is outside [0, 1]")

    slot = int(_count[None])
    if slot == MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    _albedo[slot] = [albedo[0], albedo[1], albedo[2]]
    _fuzz[slot] = fuzz
    _count[None] = slot + 1
    return slot


def get_metal_material_count() -> int:
    return int(_count[None])


def get_metal_fuzz(material_idx: int) -> float:
    return float(_fuzz[material_idx])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    return _albedo[material_idx]


@ti.func
def scatter_metal_by_id(material_idx: ti.i32, incident_direction: vec3, normal: vec3):
    """scatter_metal() with the albedo stored in ``material_idx``."""
    return scatter_metal(_albedo[material_idx], incident_direction, normal)
