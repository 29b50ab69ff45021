"""Image export utilities for rendered images.

This module writes rendered images to PNG files through Pillow.

A write goes to a temporary file next to the destination which is then
renamed over it, so a failed write never leaves a partial image behind.
Failures surface as ImageWriteError; nothing is retried.

Example:
    >>> from src.pathtrace.preview.export import save_png
    >>> image = renderer.render()
    >>> save_png(image, "res/scene.png")
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.pathtrace.core.color import encode_image

logger = logging.getLogger(__name__)


class ImageWriteError(RuntimeError):
    """Raised when an image cannot be written to its destination."""


def save_png(image: npt.NDArray[np.uint8], filepath: str | os.PathLike[str]) -> Path:
    """Save an 8-bit RGB image as a PNG file.

    Missing parent directories are created.

    Args:
        image: Array of shape (H, W, 3) with dtype uint8, row 0 at the top.
        filepath: Output file path.

    Returns:
        The path written.

    Raises:
        ValueError: If the array does not hold an 8-bit RGB image.
        ImageWriteError: If the file cannot be written.
    """
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got dtype {image.dtype}")

    path = Path(filepath)
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.stem}-", suffix=".png", dir=path.parent
        )
        with os.fdopen(fd, "wb") as fh:
            PILImage.fromarray(image).save(fh, format="PNG")
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as e:
        raise ImageWriteError(f"Failed to write image to {path}: {e}") from e
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)

    logger.info("Wrote %dx%d image to %s", image.shape[1], image.shape[0], path)
    return path


def save_png_from_linear(
    image: npt.NDArray[np.floating],
    filepath: str | os.PathLike[str],
) -> Path:
    """Encode a linear float image and save it as a PNG file.

    Channels are clamped to [0, 0.999], gamma 2 encoded and quantized the
    same way the render kernel encodes pixels.

    Args:
        image: Linear-light array of shape (H, W, 3).
        filepath: Output file path.

    Returns:
        The path written.
    """
    return save_png(encode_image(image), filepath)


def load_png(filepath: str | os.PathLike[str]) -> npt.NDArray[np.uint8]:
    """Read a PNG file back into an (H, W, 3) uint8 array."""
    with PILImage.open(filepath) as img:
        return np.asarray(img.convert("RGB"), dtype=np.uint8)
