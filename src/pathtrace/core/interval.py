"""Closed and open range queries on the real line.

An Interval bounds the ray parameter accepted by intersection tests and the
channel range accepted by color encoding.

Two membership tests are provided and they are NOT interchangeable:

    interval_contains(iv, x)   lo <= x <= hi   (inclusive)
    interval_surrounds(iv, x)  lo <  x <  hi   (strict)

Intersection code always uses ``interval_surrounds``.
"""

import math

import taichi as ti


@ti.dataclass
class Interval:
    """A range of real values.

    Attributes:
        lo: Lower bound (min).
        hi: Upper bound (max). An interval with hi < lo is empty.
    """

    lo: ti.f32
    hi: ti.f32


# Python-side bounds of the two degenerate intervals
EMPTY = (math.inf, -math.inf)
UNIVERSE = (-math.inf, math.inf)


@ti.func
def make_interval(lo: ti.f32, hi: ti.f32) -> Interval:
    """Create an interval within Taichi scope."""
    return Interval(lo=lo, hi=hi)


@ti.func
def interval_size(iv: Interval) -> ti.f32:
    return iv.hi - iv.lo


@ti.func
def interval_contains(iv: Interval, x: ti.f32) -> ti.i32:
    """Inclusive membership test: lo <= x <= hi."""
    return iv.lo <= x and x <= iv.hi


@ti.func
def interval_surrounds(iv: Interval, x: ti.f32) -> ti.i32:
    """Strict membership test: lo < x < hi."""
    return iv.lo < x and x < iv.hi


@ti.func
def interval_clamp(iv: Interval, x: ti.f32) -> ti.f32:
    """Saturate x to [lo, hi]."""
    result = x
    if x < iv.lo:
        result = iv.lo
    if x > iv.hi:
        result = iv.hi
    return result
