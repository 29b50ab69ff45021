"""Fixed-orientation viewport camera for primary ray generation.

The camera sits at ``center`` and looks down -Z with +Y up. A viewport of
height ``viewport_height`` (2.0 world units by convention) is placed at
distance ``focal_length`` in front of it; its width follows the image's
pixel aspect ratio.

The viewport is sampled on a pixel grid:

    viewport_u = (viewport_width, 0, 0)        left to right
    viewport_v = (0, -viewport_height, 0)      top to bottom
    pixel_delta_u = viewport_u / width
    pixel_delta_v = viewport_v / height
    upper_left = center - (0, 0, focal_length) - viewport_u/2 - viewport_v/2
    pixel00 = upper_left + (pixel_delta_u + pixel_delta_v) / 2

Pixel (i, j) has its center at pixel00 + i*pixel_delta_u + j*pixel_delta_v,
so row j = 0 is the top of the image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtrace.camera.viewport import CameraConfig, setup_camera
    >>> config = CameraConfig(width=400, aspect_ratio=16.0 / 9.0)
    >>> setup_camera(config)
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti

from src.pathtrace.core.ray import Ray, make_ray, sample_square

# =============================================================================
# Camera Data Structures
# =============================================================================

DEFAULT_VIEWPORT_HEIGHT = 2.0


@dataclass
class CameraConfig:
    """Render configuration: image size, sampling and camera placement.

    Exactly one of ``height`` or ``aspect_ratio`` is normally given. When
    ``height`` is omitted it is derived as int(width / aspect_ratio),
    with a minimum of 1.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        aspect_ratio: Width divided by height, used only to derive height.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of ray bounces per sample.
        focal_length: Distance from the camera center to the viewport.
        viewport_height: Viewport height in world units.
        center: Camera position in world space (x, y, z).
        seed: Global seed mixed into every row's random stream.
    """

    width: int = 400
    height: int | None = None
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 100
    max_depth: int = 10
    focal_length: float = 1.0
    viewport_height: float = DEFAULT_VIEWPORT_HEIGHT
    center: tuple[float, float, float] = (0.0, 0.0, 0.0)
    seed: int = 0

    def __post_init__(self) -> None:
        if self.width < 1:
            raise ValueError(f"Image width must be at least 1, got {self.width}")
        if self.height is None:
            if self.aspect_ratio <= 0.0:
                raise ValueError(f"Aspect ratio must be positive, got {self.aspect_ratio}")
            self.height = max(1, int(self.width / self.aspect_ratio))
        elif self.height < 1:
            raise ValueError(f"Image height must be at least 1, got {self.height}")
        else:
            self.aspect_ratio = self.width / self.height

        if self.samples_per_pixel < 1:
            raise ValueError(
                f"Samples per pixel must be at least 1, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"Maximum depth must be non-negative, got {self.max_depth}")
        if self.focal_length <= 0.0:
            raise ValueError(f"Focal length must be positive, got {self.focal_length}")
        if self.viewport_height <= 0.0:
            raise ValueError(f"Viewport height must be positive, got {self.viewport_height}")

    @property
    def viewport_width(self) -> float:
        """Viewport width in world units, following the pixel aspect ratio."""
        return self.viewport_height * (self.width / self.height)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_center = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel00_loc = ti.Vector.field(3, dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(config: CameraConfig) -> None:
    """Initialize camera state from configuration.

    Computes the pixel grid from the configuration and stores it in Taichi
    fields. Must be called before rendering.

    Args:
        config: Image size and camera placement.
    """
    center = np.array(config.center, dtype=np.float64)

    viewport_u = np.array([config.viewport_width, 0.0, 0.0])
    viewport_v = np.array([0.0, -config.viewport_height, 0.0])

    pixel_delta_u = viewport_u / config.width
    pixel_delta_v = viewport_v / config.height

    upper_left = (
        center
        - np.array([0.0, 0.0, config.focal_length])
        - viewport_u / 2.0
        - viewport_v / 2.0
    )
    pixel00 = upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

    _camera_center[None] = center.tolist()
    _pixel_delta_u[None] = pixel_delta_u.tolist()
    _pixel_delta_v[None] = pixel_delta_v.tolist()
    _pixel00_loc[None] = pixel00.tolist()


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray_through(x: ti.f32, y: ti.f32) -> Ray:
    """Generate a ray through continuous pixel coordinates (x, y).

    Integer coordinates land on pixel centers. The direction runs from the
    camera center to the viewport point and is not normalized.
    """
    target = _pixel00_loc[None] + x * _pixel_delta_u[None] + y * _pixel_delta_v[None]
    origin = _camera_center[None]
    return make_ray(origin, target - origin)


@ti.func
def get_ray_center(pixel_i: ti.i32, pixel_j: ti.i32) -> Ray:
    """Generate the un-jittered ray through a pixel's center."""
    return get_ray_through(ti.cast(pixel_i, ti.f32), ti.cast(pixel_j, ti.f32))


@ti.func
def get_ray(pixel_i: ti.i32, pixel_j: ti.i32, state: ti.u32):
    """Generate a jittered ray for anti-aliasing.

    The sample position is offset from the pixel center by a uniform draw
    from [-0.5, 0.5) on both axes (box filter).

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        state: The row's generator state.

    Returns:
        A tuple of (ray, next_state).
    """
    dx, dy, rng = sample_square(state)
    ray = get_ray_through(
        ti.cast(pixel_i, ti.f32) + dx,
        ti.cast(pixel_j, ti.f32) + dy,
    )
    return ray, rng


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with center, pixel_delta_u, pixel_delta_v and pixel00.
    """

    def _as_tuple(field: ti.Field) -> tuple[float, float, float]:
        v = field[None]
        return (float(v[0]), float(v[1]), float(v[2]))

    return {
        "center": _as_tuple(_camera_center),
        "pixel_delta_u": _as_tuple(_pixel_delta_u),
        "pixel_delta_v": _as_tuple(_pixel_delta_v),
        "pixel00": _as_tuple(_pixel00_loc),
    }
