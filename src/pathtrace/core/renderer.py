"""Renderer facade driving the row kernel in batches.

This module provides a convenient wrapper around the integrator that:
- Configures the camera and render target from one CameraConfig
- Renders the image in row batches with a progress callback
- Returns the finished 8-bit image

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtrace.camera.viewport import CameraConfig
    >>> from src.pathtrace.core.renderer import Renderer
    >>> from src.pathtrace.scene.presets import create_default_scene
    >>>
    >>> scene = create_default_scene()
    >>> renderer = Renderer(CameraConfig(width=400, samples_per_pixel=10))
    >>> image = renderer.render()
"""

import logging
import time
from collections.abc import Callable

import numpy as np
import numpy.typing as npt

from src.pathtrace.camera.viewport import CameraConfig, setup_camera
from src.pathtrace.core.integrator import (
    RenderMode,
    get_image_numpy,
    get_linear_image_numpy,
    render_rows,
    setup_render_target,
)

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Renders the current scene through a configured camera.

    The scene itself lives in global Taichi fields (see
    ``src.pathtrace.scene.manager``) and must not change during render().

    Attributes:
        config: The camera and sampling configuration.
    """

    def __init__(self, config: CameraConfig) -> None:
        """Set up the camera and render target.

        Args:
            config: The camera and sampling configuration.

        Raises:
            ValueError: If the image dimensions exceed the maximum size.
        """
        self.config = config
        setup_camera(config)
        setup_render_target(config.width, config.height)
        self._last_render_seconds: float | None = None

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.config.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return int(self.config.height)

    @property
    def last_render_seconds(self) -> float | None:
        """Wall-clock duration of the last completed render(), if any."""
        return self._last_render_seconds

    def render_rows(
        self,
        row_start: int,
        row_end: int,
        mode: RenderMode = RenderMode.MATERIAL,
        serialize: bool = False,
    ) -> None:
        """Render the rows [row_start, row_end) into the render target."""
        render_rows(
            row_start,
            row_end,
            samples_per_pixel=self.config.samples_per_pixel,
            max_depth=self.config.max_depth,
            seed=self.config.seed,
            mode=mode,
            serialize=serialize,
        )

    def render(
        self,
        callback: ProgressCallback | None = None,
        rows_per_batch: int = 1,
        mode: RenderMode = RenderMode.MATERIAL,
        serialize: bool = False,
    ) -> npt.NDArray[np.uint8]:
        """Render the full image.

        Rows are dispatched top to bottom in batches of rows_per_batch. The
        result does not depend on the batch size.

        Args:
            callback: Optional callback called after each batch.
                Receives (rows_done, total_rows).
            rows_per_batch: Number of rows per kernel launch.
            mode: Estimator to use.
            serialize: Render on a single thread.

        Returns:
            uint8 array of shape (height, width, 3).

        Raises:
            ValueError: If rows_per_batch is less than 1.

        Example:
            >>> def progress(done, total):
            ...     print(f"Scanlines remaining: {total - done}")
            >>> image = renderer.render(callback=progress)
        """
        if rows_per_batch < 1:
            raise ValueError(f"Rows per batch must be at least 1, got {rows_per_batch}")
        mode = RenderMode(mode)

        total_rows = self.height
        logger.info(
            "Rendering %dx%d, %d samples per pixel, max depth %d (%s)",
            self.width,
            self.height,
            self.config.samples_per_pixel,
            self.config.max_depth,
            mode.name.lower(),
        )

        start_time = time.perf_counter()
        row = 0
        while row < total_rows:
            row_end = min(row + rows_per_batch, total_rows)
            self.render_rows(row, row_end, mode=mode, serialize=serialize)
            row = row_end

            if callback is not None:
                callback(row, total_rows)

        self._last_render_seconds = time.perf_counter() - start_time
        logger.info("Render finished in %.3f s", self._last_render_seconds)

        return get_image_numpy()

    def get_image_numpy(self) -> npt.NDArray[np.uint8]:
        """Get the encoded image of the last render."""
        return get_image_numpy()

    def get_linear_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the averaged linear-light image of the last render."""
        return get_linear_image_numpy()

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples={self.config.samples_per_pixel}, max_depth={self.config.max_depth})"
        )
