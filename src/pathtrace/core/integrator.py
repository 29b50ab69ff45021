"""Radiance estimators and the row render kernel.

This module turns camera rays into pixel colors. Two estimators are
provided:

    ray_color          material-recursive estimator (the default)
    ray_color_normals  visualizes surface normals, no bounces

The material estimator follows the recursive definition

    L(ray, 0)     = black
    L(ray, depth) = attenuation * L(scattered, depth - 1)   on a scattering hit
                  = black                                    on an absorbing hit
                  = sky(ray.direction)                       on a miss

and evaluates it as a loop carrying the product of attenuations
(throughput). Both forms give the same value for every depth.

Rendering is organized by image rows. Each row seeds its own generator from
its row index and the global seed, so a row's pixels do not depend on which
thread renders it or on the order rows are rendered in. The row loop is the
outermost loop of the kernel and therefore the parallel dimension.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtrace.camera.viewport import CameraConfig, setup_camera
    >>> from src.pathtrace.core.integrator import (
    ...     get_image_numpy, render_rows, setup_render_target
    ... )
    >>> from src.pathtrace.scene.presets import create_default_scene
    >>>
    >>> scene = create_default_scene()
    >>> config = CameraConfig(width=400)
    >>> setup_camera(config)
    >>> setup_render_target(config.width, config.height)
    >>> render_rows(0, config.height, samples_per_pixel=10, max_depth=10)
    >>> image = get_image_numpy()
"""

from enum import IntEnum

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtrace.camera.viewport import get_ray
from src.pathtrace.core.color import encode_color
from src.pathtrace.core.interval import Interval
from src.pathtrace.core.ray import Ray, make_ray, normalize
from src.pathtrace.core.sampler import seed_row
from src.pathtrace.materials.lambertian import scatter_lambertian_by_id
from src.pathtrace.materials.metal import scatter_metal_by_id
from src.pathtrace.scene.intersection import SceneHitRecord, intersect_scene
from src.pathtrace.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Accepted ray parameter range for scene hits. The lower bound keeps
# scattered rays from re-hitting the surface they left.
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient endpoints: straight down is white, straight up is light blue
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)


class RenderMode(IntEnum):
    """Which estimator the render kernel uses."""

    MATERIAL = 0
    NORMALS = 1


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Buffers are indexed [row, column] so the active region is already in
# (height, width, 3) image order.
_linear_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))
_pixel_buffer = ti.Vector.field(3, dtype=ti.u8, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.
    The buffers are preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT
    to avoid Taichi kernel recompilation issues.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _linear_buffer.fill(0.0)
    _pixel_buffer.fill(0)


def reset_render_target() -> None:
    """Forget the render target so it must be set up again."""
    _render_target_initialized[None] = 0
    _image_width[None] = 0
    _image_height[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Background
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Vertical white-to-blue gradient seen by rays that leave the scene.

    Args:
        direction: Ray direction, any non-zero length.

    Returns:
        The background radiance for that direction.
    """
    unit_direction = normalize(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * SKY_HORIZON_COLOR + a * SKY_ZENITH_COLOR


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(material_id: ti.i32, ray: Ray, rec: SceneHitRecord, state: ti.u32):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: The unified material ID of the hit surface.
        ray: The incoming ray.
        rec: The hit record for the incoming ray.
        state: The caller's generator state.

    Returns:
        A tuple of (attenuation, scattered_ray, did_scatter, next_state).
        did_scatter is 0 when the ray is absorbed, which is the case for
        every material type without a scatter function.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    # Default values
    rng = state
    attenuation = vec3(0.0, 0.0, 0.0)
    scattered_direction = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, rng = scatter_lambertian_by_id(
            type_index, rec.normal, rng
        )
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation = scatter_metal_by_id(
            type_index, ray.direction, rec.normal
        )
        did_scatter = 1

    scattered = make_ray(rec.point, scattered_direction)
    return attenuation, scattered, did_scatter, rng


# =============================================================================
# Estimators
# =============================================================================


@ti.func
def ray_color(ray: Ray, depth: ti.i32, state: ti.u32):
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to evaluate.
        depth: Remaining bounce budget. Zero or less yields black.
        state: The caller's generator state.

    Returns:
        A tuple of (radiance, next_state).
    """
    rng = state
    radiance = vec3(0.0, 0.0, 0.0)

    # Product of all attenuations along the path so far
    throughput = vec3(1.0, 1.0, 1.0)

    current = Ray(origin=ray.origin, direction=ray.direction)

    # Active flag for path continuation
    active = 1

    for _ in range(depth):
        if active == 1:
            rec = intersect_scene(current, Interval(lo=T_MIN, hi=T_MAX))

            if rec.hit == 0:
                radiance = throughput * sky_color(current.direction)
                active = 0
            else:
                attenuation, scattered, did_scatter, rng = _scatter_material(
                    rec.material_id, current, rec, rng
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    current = scattered

    # A path still active here ran out of depth and contributes black
    return radiance, rng


@ti.func
def ray_color_normals(ray: Ray) -> vec3:
    """Map the hit normal to a color, or return the sky on a miss.

    Each normal component in [-1, 1] maps linearly to [0, 1].
    """
    rec = intersect_scene(ray, Interval(lo=T_MIN, hi=T_MAX))
    color = sky_color(ray.direction)
    if rec.hit == 1:
        color = 0.5 * (rec.normal + vec3(1.0, 1.0, 1.0))
    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows_kernel(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.i32,
    mode: ti.template(),
    serialize: ti.template(),
):
    """Render every pixel of rows [row_start, row_end).

    The row loop runs in parallel unless serialize is set. Columns and
    samples within a row are evaluated in order from the row's own
    generator.
    """
    ti.loop_config(serialize=serialize)
    for j in range(row_start, row_end):
        rng = seed_row(j, seed)
        for i in range(width):
            total = vec3(0.0, 0.0, 0.0)
            for _ in range(samples_per_pixel):
                ray, rng = get_ray(i, j, rng)
                color = vec3(0.0, 0.0, 0.0)
                if ti.static(mode == int(RenderMode.NORMALS)):
                    color = ray_color_normals(ray)
                else:
                    color, rng = ray_color(ray, max_depth, rng)
                total += color

            linear = total / ti.cast(samples_per_pixel, ti.f32)
            _linear_buffer[j, i] = linear
            _pixel_buffer[j, i] = encode_color(linear)


@ti.kernel
def _trace_single_ray(
    origin: vec3,
    direction: vec3,
    depth: ti.i32,
    seed: ti.i32,
    mode: ti.template(),
) -> vec3:
    """Evaluate one estimator sample for an arbitrary ray.

    Used for testing and debugging.
    """
    ray = make_ray(origin, direction)
    color = vec3(0.0, 0.0, 0.0)
    if ti.static(mode == int(RenderMode.NORMALS)):
        color = ray_color_normals(ray)
    else:
        rng = seed_row(0, seed)
        color, rng = ray_color(ray, depth, rng)
    return color


# =============================================================================
# Public Rendering API
# =============================================================================


def render_rows(
    row_start: int,
    row_end: int,
    samples_per_pixel: int,
    max_depth: int,
    seed: int = 0,
    mode: RenderMode = RenderMode.MATERIAL,
    serialize: bool = False,
) -> None:
    """Render the rows [row_start, row_end) into the render target.

    Each pixel is the average of samples_per_pixel jittered samples. Both
    the linear average and its 8-bit encoding are stored. Rendering a range
    twice, or rendering ranges in any order, produces the same pixels.

    Args:
        row_start: First row to render (0 = top of the image).
        row_end: One past the last row to render.
        samples_per_pixel: Number of samples averaged per pixel.
        max_depth: Bounce budget for each sample.
        seed: Global seed mixed into each row's generator.
        mode: Estimator to use.
        serialize: Render rows one after another on a single thread.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the row range or sampling parameters are invalid.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if not 0 <= row_start <= row_end <= height:
        raise ValueError(
            f"Row range [{row_start}, {row_end}) is outside the image (height {height})"
        )
    if samples_per_pixel < 1:
        raise ValueError(f"Samples per pixel must be at least 1, got {samples_per_pixel}")
    if max_depth < 0:
        raise ValueError(f"Maximum depth must be non-negative, got {max_depth}")

    if row_start == row_end:
        return

    _render_rows_kernel(
        row_start,
        row_end,
        width,
        samples_per_pixel,
        max_depth,
        seed,
        int(mode),
        bool(serialize),
    )


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int,
    seed: int = 0,
    mode: RenderMode = RenderMode.MATERIAL,
) -> tuple[float, float, float]:
    """Evaluate one estimator sample for a ray given in Python scope.

    This is a Python-callable function for testing. For production rendering,
    use render_rows() which processes all pixels in parallel.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    color = _trace_single_ray(vec3(*origin), vec3(*direction), depth, seed, int(mode))
    return (float(color[0]), float(color[1]), float(color[2]))


def get_image_numpy() -> npt.NDArray[np.uint8]:
    """Get the encoded image as a NumPy array.

    Returns:
        uint8 array of shape (height, width, 3), row 0 at the top.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _pixel_buffer.to_numpy()
    return np.ascontiguousarray(full_image[:height, :width, :], dtype=np.uint8)


def get_linear_image_numpy() -> npt.NDArray[np.float32]:
    """Get the averaged linear-light image as a NumPy array.

    Returns:
        float32 array of shape (height, width, 3), row 0 at the top.
        Values are not clamped.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _linear_buffer.to_numpy()
    return np.ascontiguousarray(full_image[:height, :width, :], dtype=np.float32)
