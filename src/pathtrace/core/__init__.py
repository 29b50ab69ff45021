"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, vector utilities and random directions
    interval: Real intervals used for hit ranges and color clamping
    sampler: Per-row pseudorandom number generation
    color: Clamp, gamma and quantize linear colors to 8 bits
    integrator: Radiance estimators and the row render kernel
    renderer: Batch rendering with progress reporting

All per-sample computation runs inside Taichi kernels.
"""

from .color import encode_color, encode_image, gamma_encode, linear_to_gamma
from .interval import (
    EMPTY,
    UNIVERSE,
    Interval,
    interval_clamp,
    interval_contains,
    interval_size,
    interval_surrounds,
    make_interval,
)
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_unit_vector,
    ray_at,
    reflect,
    sample_square,
    vec3,
)
from .sampler import next_float, next_range, next_u32, pcg_hash, seed_row

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from src.pathtrace.core.integrator or src.pathtrace.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "near_zero",
    "random_unit_vector",
    "sample_square",
    "Interval",
    "EMPTY",
    "UNIVERSE",
    "make_interval",
    "interval_size",
    "interval_contains",
    "interval_surrounds",
    "interval_clamp",
    "pcg_hash",
    "seed_row",
    "next_u32",
    "next_float",
    "next_range",
    "linear_to_gamma",
    "gamma_encode",
    "encode_color",
    "encode_image",
]
