"""Support functions for convex shapes.

A support function maps a direction to the signed extent of a shape along
it. It is the building block for bounding-volume pruning; the tracer does
not use it yet, so it is kept apart from the intersection code.

Example:
    >>> from skytrace.scene.world import SphereInfo
    >>> from skytrace.geometry.convex import hull_support
    >>> hull_support(SphereInfo(center=(0.0, 0.0, -1.0), radius=0.5), (0.0, 0.0, -1.0))
    1.5
"""

from typing import Protocol, runtime_checkable

import numpy as np
import numpy.typing as npt

Direction = tuple[float, float, float] | npt.NDArray[np.float64]


@runtime_checkable
class Convex(Protocol):
    """A shape with a support function."""

    def support(self, direction: Direction) -> float:
        """Return the signed extent of the shape along ``direction``."""
        ...


def unit_direction(direction: Direction) -> npt.NDArray[np.float64]:
    """Normalize a direction.

    Raises:
        ValueError: If the direction has zero length.
    """
    d = np.asarray(direction, dtype=np.float64)
    norm = np.linalg.norm(d)
    if norm == 0.0:
        raise ValueError("Support direction must be non-zero")
    return d / norm


def hull_support(shape: Convex, direction: Direction) -> float:
    """Support function of the convex hull of a single shape.

    For one convex shape the hull is the shape itself, so this forwards to
    ``shape.support``.
    """
    return shape.support(direction)
