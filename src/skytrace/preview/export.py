"""Image export utilities for rendered frames.

The renderer produces a (height, width, 3) uint8 array, row-major with the
top row first. These helpers persist such arrays with Pillow and compare
them.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from skytrace.core.renderer import render_frame
    >>> from skytrace.preview.export import save_png
    >>>
    >>> image = render_frame(world, camera)
    >>> save_png(image, "output.png")
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def _check_rgb8(image: npt.NDArray[np.uint8]) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected dtype uint8, got {image.dtype}")


def save_png(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit RGB image as a PNG file.

    Args:
        image: Array of shape (H, W, 3) with dtype uint8, top row first.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array shape or dtype is not 8-bit RGB.
    """
    _check_rgb8(image)
    pil_image = PILImage.fromarray(np.ascontiguousarray(image))
    pil_image.save(str(filepath))


def load_png(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Load a PNG file as an (H, W, 3) uint8 array."""
    with PILImage.open(str(filepath)) as pil_image:
        return np.asarray(pil_image.convert("RGB"), dtype=np.uint8).copy()


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
