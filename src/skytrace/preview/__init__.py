"""Preview module for rendered output.

Components:
    export: PNG export and image comparison utilities

Example:
    >>> from skytrace.preview import save_png
    >>> save_png(image, "output.png")
"""

from skytrace.preview.export import compute_rmse, load_png, save_png

__all__ = [
    "save_png",
    "load_png",
    "compute_rmse",
]
