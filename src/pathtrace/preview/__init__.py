"""Preview module for rendered image output.

Components:
    export: PNG export through Pillow

Example:
    >>> from src.pathtrace.preview import save_png
    >>> save_png(image, "res/scene.png")
"""

from src.pathtrace.preview.export import (
    ImageWriteError,
    load_png,
    save_png,
    save_png_from_linear,
)

__all__ = [
    "ImageWriteError",
    "save_png",
    "save_png_from_linear",
    "load_png",
]
