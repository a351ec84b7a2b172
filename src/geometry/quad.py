"""
Quadrilateral helpers.

A quad is a 4 x 2 float array of (x, y) corners ordered clockwise from the
top-left: TL, TR, BR, BL.  The order defines which output-rectangle corner
each point is mapped to.  All helpers return new arrays and never modify
their inputs.
"""

import math

import numpy as np

CORNER_LABELS = ("TL", "TR", "BR", "BL")


def as_quad(points) -> np.ndarray:
    """Return *points* as a validated float64 4 x 2 array (always a copy)."""
    quad = np.array(points, dtype=float)
    if quad.shape != (4, 2):
        raise ValueError(f"a quad needs 4 (x, y) points, got shape {quad.shape}")
    if not np.all(np.isfinite(quad)):
        raise ValueError("quad coordinates must be finite")
    return quad


def default_quad(width: float, height: float, inset: float = 10.0) -> np.ndarray:
    """Initial quad for a freshly loaded image: its border, inset on every side."""
    return np.array([
        [inset,         inset         ],
        [width - inset, inset         ],
        [width - inset, height - inset],
        [inset,         height - inset],
    ], dtype=float)


def flip_winding(quad) -> np.ndarray:
    """Swap the last two corners, turning a clockwise quad counter-clockwise."""
    flipped = as_quad(quad)
    flipped[[2, 3]] = flipped[[3, 2]]
    return flipped


def rescale_quad(quad, old_size: tuple, new_size: tuple) -> np.ndarray:
    """Keep a quad's relative position when its raster is resized.

    Parameters
    ----------
    quad : array_like
        4 x 2 corners in the old raster's pixel space.
    old_size, new_size : tuple of (width, height)
        Raster dimensions before and after the resize.
    """
    q = as_quad(quad)
    (ow, oh), (nw, nh) = old_size, new_size
    q[:, 0] = q[:, 0] / ow * nw
    q[:, 1] = q[:, 1] / oh * nh
    return q


def clamp_quad(quad, width: float, height: float) -> np.ndarray:
    """Clamp every corner into ``[0, width] x [0, height]``."""
    q = as_quad(quad)
    q[:, 0] = np.clip(q[:, 0], 0.0, width)
    q[:, 1] = np.clip(q[:, 1], 0.0, height)
    return q


def quad_aspect_ratio(quad) -> float:
    """Width / height of the quad's axis-aligned extent.

    Width is measured along the top edge (``|x_TR - x_TL|``) and height
    along the left edge (``|y_BL - y_TL|``).
    """
    q = as_quad(quad)
    width = abs(q[1, 0] - q[0, 0])
    height = abs(q[3, 1] - q[0, 1])
    if height == 0:
        raise ValueError("quad has zero height; aspect ratio is undefined")
    return width / height


def output_size(base_size: float, quad=None, maintain_aspect: bool = False,
                min_size: int = 64) -> tuple:
    """Resolve the ``(width, height)`` of the rectified image.

    The base size is floored and raised to at least *min_size*.  Without
    aspect locking the output is square.  With it, the longer side of the
    quad gets the base size and the shorter side is scaled down (floored)
    to preserve the quad's aspect ratio.

    Returns
    -------
    (width, height) : tuple of int
    """
    base = max(int(min_size), int(math.floor(base_size)))
    if not maintain_aspect or quad is None:
        return base, base

    ratio = quad_aspect_ratio(quad)
    if ratio > 1:
        return base, int(math.floor(base / ratio))
    return int(math.floor(base * ratio)), base
