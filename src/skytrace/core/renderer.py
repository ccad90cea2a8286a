"""Parallel frame renderer: per-row sample accumulation and quantization.

The frame kernel's outermost loop runs over image rows, which Taichi
distributes across its worker threads. Each row uses its own random stream
(stream index = row index) for camera jitter and bounces; the world and
camera fields are only read. For every pixel the row traces
``image_samples`` paths and stores the summed radiance.

After all rows finish, the summed radiance is converted to 8-bit color on
the host: divide by the sample count, apply gamma 2 (square root), scale to
[0, 256), clamp just below 256 and truncate.

With a fixed seed the output is pixel-identical across runs, thread counts
and row batch sizes, because every row's samples depend only on its own
stream.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from skytrace.core.renderer import FrameRenderer, RenderSettings
    >>> from skytrace.scene.demo import create_demo_scene
    >>>
    >>> world, camera = create_demo_scene(width=160, height=90)
    >>> renderer = FrameRenderer(world, camera, RenderSettings(image_samples=16, seed=1))
    >>> image = renderer.render()  # (90, 160, 3) uint8
    >>> renderer.save_image("demo.png")
"""

import logging
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from skytrace.camera.thin_lens import Camera, gen_ray, setup_camera
from skytrace.core.sampler import seed_streams
from skytrace.core.tracer import DEFAULT_MAX_DEPTH, trace
from skytrace.scene.world import World

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Type alias for progress callback
# Callback receives (rows_rendered, total_rows)
ProgressCallback = Callable[[int, int], None]

# Largest value below 256; truncating it gives 255
MAX_CHANNEL_VALUE = float(np.nextafter(256.0, 0.0))

DEFAULT_IMAGE_SAMPLES = 100

# =============================================================================
# Render Settings
# =============================================================================


@dataclass
class RenderSettings:
    """Parameters of a render that are not part of the scene or camera.

    Attributes:
        image_samples: Samples (paths) per pixel, at least 1.
        max_depth: Maximum path segments per sample, at least 0.
        seed: Root seed for the per-row random streams. None uses fresh
            entropy, so repeated renders differ.
        sun_probability: Probability in [0, 1] of attempting a sunward
            bounce at each hit. 0 gives plain diffuse bouncing.
    """

    image_samples: int = DEFAULT_IMAGE_SAMPLES
    max_depth: int = DEFAULT_MAX_DEPTH
    seed: int | None = None
    sun_probability: float = 0.0

    def validate(self) -> None:
        """Check the settings.

        Raises:
            ValueError: If any setting is out of range.
        """
        if self.image_samples < 1:
            raise ValueError(f"image_samples must be at least 1, got {self.image_samples}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if not 0.0 <= self.sun_probability <= 1.0:
            raise ValueError(f"sun_probability must be in [0, 1], got {self.sun_probability}")
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"seed must be non-negative, got {self.seed}")


# =============================================================================
# Render Target (Radiance Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Summed radiance per pixel, indexed [row, column]
_radiance_sum = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image dimensions and clear the radiance buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
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
    """Clear the radiance buffer to zero."""
    _radiance_sum.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Rendering Kernel
# =============================================================================


@ti.func
def _drop_nan(color: vec3) -> vec3:
    """Zero the NaN channels of a sample (degenerate bounce directions)."""
    result = color
    for c in ti.static(range(3)):
        if tm.isnan(result[c]):
            result[c] = 0.0
    return result


@ti.kernel
def _render_rows(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    samples: ti.i32,
    max_depth: ti.i32,
    sun_probability: ti.f32,
):
    """Trace all samples for rows [row_start, row_end) in parallel.

    Row y draws from stream y. Each pixel's samples are summed in a fixed
    order and written once.
    """
    for y in range(row_start, row_end):
        for x in range(width):
            total = vec3(0.0, 0.0, 0.0)
            for _ in range(samples):
                ray = gen_ray(y, x, y)
                color = trace(ray, max_depth, y, sun_probability)
                total += _drop_nan(color)
            _radiance_sum[y, x] = total


def render_rows(row_start: int, row_end: int, settings: RenderSettings) -> None:
    """Render a band of rows into the radiance buffer.

    The world, camera and random streams must already be uploaded.

    Raises:
        RuntimeError: If the render target has not been set up.
        ValueError: If the row range is outside the image.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    if not 0 <= row_start <= row_end <= height:
        raise ValueError(f"Row range [{row_start}, {row_end}) outside image height {height}")
    if row_start == row_end:
        return
    _render_rows(
        row_start,
        row_end,
        width,
        settings.image_samples,
        settings.max_depth,
        settings.sun_probability,
    )


def get_radiance_numpy() -> npt.NDArray[np.float32]:
    """Get the summed radiance of the active region, shape (height, width, 3).

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    return _radiance_sum.to_numpy()[:height, :width, :].copy()


# =============================================================================
# Quantization
# =============================================================================


def quantize_radiance(
    radiance_sum: npt.NDArray[np.floating], image_samples: int
) -> npt.NDArray[np.uint8]:
    """Convert summed radiance to 8-bit color.

    Averages over the samples, applies gamma 2 (square root), scales to
    [0, 256), clamps to [0, MAX_CHANNEL_VALUE] and truncates. Over-bright
    values saturate at 255 and negative values at 0.

    Args:
        radiance_sum: Summed radiance of shape (..., 3).
        image_samples: Number of samples in each sum.

    Returns:
        Array of the same shape with dtype uint8.

    Raises:
        ValueError: If image_samples is not positive.
    """
    if image_samples < 1:
        raise ValueError(f"image_samples must be at least 1, got {image_samples}")
    mean = radiance_sum.astype(np.float64) * (1.0 / image_samples)
    display = np.sqrt(np.maximum(mean, 0.0))
    scaled = np.clip(display * 256.0, 0.0, MAX_CHANNEL_VALUE)
    return scaled.astype(np.uint8)


# =============================================================================
# Frame Renderer
# =============================================================================


class FrameRenderer:
    """Renders one frame of a world through a camera.

    The renderer uploads the world, camera and freshly seeded row streams
    when a render starts, then renders rows in batches. Scene storage and
    the radiance buffer are module-level Taichi fields, so only one render
    can be in progress at a time.

    Attributes:
        world: The scene being rendered.
        camera: The camera configuration.
        settings: Sample count, depth limit, seed and sun bias.
    """

    def __init__(
        self,
        world: World,
        camera: Camera,
        settings: RenderSettings | None = None,
    ) -> None:
        """Validate the configuration.

        Raises:
            ValueError: If the camera or settings are invalid or the image
                exceeds the maximum supported size.
        """
        self.world = world
        self.camera = camera
        self.settings = settings if settings is not None else RenderSettings()

        self.camera.validate()
        self.settings.validate()
        if camera.image_width > MAX_IMAGE_WIDTH or camera.image_height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({camera.image_width}x{camera.image_height}) exceed "
                f"maximum supported ({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        self._rows_rendered = 0
        self._image: npt.NDArray[np.uint8] | None = None

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.camera.image_width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.camera.image_height

    @property
    def rows_rendered(self) -> int:
        """Number of rows finished in the current render."""
        return self._rows_rendered

    @property
    def is_complete(self) -> bool:
        """Whether every row of the current render is finished."""
        return self._image is not None

    def _prepare(self) -> None:
        setup_render_target(self.width, self.height)
        self.world.upload()
        setup_camera(self.camera)
        seed_streams(self.height, self.settings.seed)
        self._rows_rendered = 0
        self._image = None

    def render_progressive(
        self, rows_per_batch: int | None = None
    ) -> Generator[tuple[int, int], None, None]:
        """Render the frame, yielding progress after each batch of rows.

        Starts a fresh render. Abandoning the generator leaves the frame
        incomplete; partial results are not exposed.

        Args:
            rows_per_batch: Rows per kernel launch. None renders all rows
                in one launch.

        Yields:
            Tuple of (rows_rendered, total_rows).

        Raises:
            ValueError: If rows_per_batch is not positive.
        """
        if rows_per_batch is None:
            rows_per_batch = self.height
        if rows_per_batch <= 0:
            raise ValueError(f"rows_per_batch must be positive, got {rows_per_batch}")

        self._prepare()
        logger.info(
            "Rendering %dx%d, %d samples/pixel, max depth %d",
            self.width,
            self.height,
            self.settings.image_samples,
            self.settings.max_depth,
        )
        start_time = time.perf_counter()

        while self._rows_rendered < self.height:
            row_end = min(self._rows_rendered + rows_per_batch, self.height)
            render_rows(self._rows_rendered, row_end, self.settings)
            self._rows_rendered = row_end
            logger.debug("Rendered rows %d/%d", self._rows_rendered, self.height)
            yield (self._rows_rendered, self.height)

        self._image = quantize_radiance(get_radiance_numpy(), self.settings.image_samples)
        logger.info("Frame finished in %.2fs", time.perf_counter() - start_time)

    def render(
        self,
        rows_per_batch: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> npt.NDArray[np.uint8]:
        """Render the frame to completion.

        Args:
            rows_per_batch: Rows per kernel launch. None renders all rows
                in one launch.
            callback: Optional function called after each batch with
                (rows_rendered, total_rows).

        Returns:
            The image as a uint8 array of shape (height, width, 3), top row
            first.
        """
        for done, total in self.render_progressive(rows_per_batch):
            if callback is not None:
                callback(done, total)
        return self.get_image_uint8()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the finished 8-bit image.

        Raises:
            RuntimeError: If no render has completed.
        """
        if self._image is None:
            raise RuntimeError("No completed render. Call render() first.")
        return self._image.copy()

    def save_image(self, filepath: str) -> None:
        """Save the finished image as a PNG file.

        Raises:
            RuntimeError: If no render has completed.
        """
        from skytrace.preview.export import save_png

        save_png(self.get_image_uint8(), filepath)

    def __repr__(self) -> str:
        return (
            f"FrameRenderer(width={self.width}, height={self.height}, "
            f"samples={self.settings.image_samples}, rows_rendered={self.rows_rendered})"
        )


def render_frame(
    world: World,
    camera: Camera,
    settings: RenderSettings | None = None,
) -> npt.NDArray[np.uint8]:
    """Render a world through a camera and return the 8-bit image.

    Args:
        world: The scene.
        camera: The camera configuration.
        settings: Render settings; defaults to RenderSettings().

    Returns:
        A uint8 array of shape (image_height, image_width, 3), row-major,
        top row first.
    """
    return FrameRenderer(world, camera, settings).render()
