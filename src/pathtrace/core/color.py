"""Display encoding of linear-light colors.

A pixel's averaged linear color is turned into an 8-bit RGB triple in three
steps, applied per channel:

    1. clamp to [0, 0.999]
    2. gamma encode with sqrt(x) (gamma 2)
    3. quantize with floor(255.999 * x)

The Taichi functions are used by the render kernel. ``encode_image`` is the
NumPy equivalent for images already pulled back into Python.
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtrace.core.interval import Interval, interval_clamp

vec3 = tm.vec3

# Channel range accepted before gamma encoding
INTENSITY_MIN = 0.0
INTENSITY_MAX = 0.999

# Scale applied before truncation to an 8-bit channel
QUANTIZE_SCALE = 255.999


@ti.func
def linear_to_gamma(linear: ti.f32) -> ti.f32:
    """Gamma 2 transform. Non-positive input maps to 0."""
    result = 0.0
    if linear > 0.0:
        result = ti.sqrt(linear)
    return result


@ti.func
def clamp_color(color: vec3) -> vec3:
    """Clamp each channel of a linear color to [0, 0.999]."""
    intensity = Interval(lo=INTENSITY_MIN, hi=INTENSITY_MAX)
    return vec3(
        interval_clamp(intensity, color.x),
        interval_clamp(intensity, color.y),
        interval_clamp(intensity, color.z),
    )


@ti.func
def gamma_encode(color: vec3) -> vec3:
    """Clamp then gamma encode a linear color.

    The result always lies in [0, sqrt(0.999)].
    """
    clamped = clamp_color(color)
    return vec3(
        linear_to_gamma(clamped.x),
        linear_to_gamma(clamped.y),
        linear_to_gamma(clamped.z),
    )


@ti.func
def encode_color(color: vec3):
    """Convert a linear color to an 8-bit RGB triple.

    Args:
        color: Averaged linear-light color.

    Returns:
        A ti.u8 3-vector.
    """
    encoded = gamma_encode(color)
    return ti.cast(ti.floor(QUANTIZE_SCALE * encoded), ti.u8)


def encode_image(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Encode a linear float image to 8-bit RGB.

    Mirrors the kernel-side encoding for arrays of shape (H, W, 3).

    Args:
        image: Linear-light image.

    Returns:
        uint8 array of the same shape.
    """
    clamped = np.clip(np.asarray(image, dtype=np.float32), INTENSITY_MIN, INTENSITY_MAX)
    encoded = np.sqrt(clamped)
    return np.floor(np.float32(QUANTIZE_SCALE) * encoded).astype(np.uint8)
