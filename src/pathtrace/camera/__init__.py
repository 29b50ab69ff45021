"""Camera module for view and ray generation.

Components:
    viewport: Fixed-orientation camera looking down -Z

The camera maps pixel (i, j) to a ray from the camera center through a
point on the viewport plane. Column i grows to the right and row j grows
downward, so row 0 is the top of the image.
"""

from .viewport import (
    CameraConfig,
    get_camera_info,
    get_ray,
    get_ray_center,
    get_ray_through,
    setup_camera,
)

__all__ = [
    "CameraConfig",
    "setup_camera",
    "get_ray",
    "get_ray_center",
    "get_ray_through",
    "get_camera_info",
]
