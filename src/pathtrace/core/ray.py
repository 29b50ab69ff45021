"""Ray data structure and vector utilities for Monte Carlo ray tracing.

This module provides the Ray dataclass and the vector helpers shared by the
geometry, material and camera modules. Everything here is a Taichi function
and is inlined into the render kernels.

Ray directions are never normalized implicitly: intersection code takes the
squared length of the direction into account, and the camera produces
unnormalized directions on purpose.

Random sampling functions take the caller's generator state and return the
advanced state (see ``src.pathtrace.core.sampler``).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

from src.pathtrace.core.sampler import next_range

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Components below this magnitude count as zero in near_zero()
NEAR_ZERO_EPSILON = 1e-8

# Lower bound on the squared length accepted by random_unit_vector(). Guards
# the normalization against vectors too short to divide by in f32.
MIN_SAMPLE_LENGTH_SQUARED = 1e-30


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    The input must not be the zero vector.
    """
    return v / tm.length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes v - 2 (v . n) n. The normal must be unit length; the incident
    vector may have any length and the result keeps that length.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The unit surface normal.

    Returns:
        The mirrored direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to catch degenerate scatter directions.

    Args:
        v: The vector to check.

    Returns:
        1 if every component has magnitude below NEAR_ZERO_EPSILON, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_vector(state: ti.u32, lo: ti.f32, hi: ti.f32):
    """Draw a vector with each component uniform in [lo, hi).

    Returns:
        A tuple of (vector, next_state).
    """
    x, rng = next_range(state, lo, hi)
    y, rng = next_range(rng, lo, hi)
    z, rng = next_range(rng, lo, hi)
    return vec3(x, y, z), rng


@ti.func
def random_unit_vector(state: ti.u32):
    """Generate a random unit vector uniformly distributed on the sphere.

    Rejection sampling: draw points in the cube [-1, 1)^3 until one falls
    inside the unit ball (excluding a tiny neighbourhood of the origin),
    then normalize it. Terminates with probability 1; there is no iteration
    cap.

    Args:
        state: The caller's generator state.

    Returns:
        A tuple of (unit_vector, next_state).
    """
    rng = state
    p = vec3(0.0, 0.0, 0.0)
    found = 0
    while found == 0:
        p, rng = random_vector(rng, -1.0, 1.0)
        len_sq = length_squared(p)
        if MIN_SAMPLE_LENGTH_SQUARED < len_sq and len_sq <= 1.0:
            found = 1
    return normalize(p), rng


@ti.func
def sample_square(state: ti.u32):
    """Draw a sub-pixel offset uniform in [-0.5, 0.5) on both axes.

    Returns:
        A tuple of (dx, dy, next_state).
    """
    dx, rng = next_range(state, -0.5, 0.5)
    dy, rng = next_range(rng, -0.5, 0.5)
    return dx, dy, rng
