"""
Bilinear resampling of RGBA pixel buffers.

Fractional coordinates are resolved by blending the four surrounding pixels:
a horizontal lerp along the upper and lower rows, followed by a vertical
lerp between the two.  Coordinates beyond the buffer are clamped to the
nearest edge pixel (never wrapped or mirrored), so a sample exactly on an
integer coordinate reproduces that pixel.
"""

import numpy as np


def _lerp(a, b, t):
    return a + (b - a) * t


def bilinear_sample(image: np.ndarray, x, y) -> np.ndarray:
    """Sample *image* at fractional pixel coordinate(s) ``(x, y)``.

    Parameters
    ----------
    image : np.ndarray
        H x W x C pixel buffer (C = 4 for RGBA).
    x, y : float or np.ndarray
        Column / row coordinates; scalars or equally shaped arrays of
        finite values.

    Returns
    -------
    np.ndarray
        Float64 samples: shape ``(C,)`` for scalar coordinates, otherwise
        ``x.shape + (C,)``.
    """
    height, width = image.shape[:2]
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)

    fx = np.floor(x)
    fy = np.floor(y)
    tx = np.clip(x - fx, 0.0, 1.0)[..., np.newaxis]
    ty = np.clip(y - fy, 0.0, 1.0)[..., np.newaxis]

    x0 = np.clip(fx, 0, width - 1).astype(np.intp)
    y0 = np.clip(fy, 0, height - 1).astype(np.intp)
    x1 = np.clip(fx + 1, 0, width - 1).astype(np.intp)
    y1 = np.clip(fy + 1, 0, height - 1).astype(np.intp)

    p00 = image[y0, x0].astype(float)
    p10 = image[y0, x1].astype(float)
    p01 = image[y1, x0].astype(float)
    p11 = image[y1, x1].astype(float)

    top = _lerp(p00, p10, tx)
    bottom = _lerp(p01, p11, tx)
    return _lerp(top, bottom, ty)


def to_uint8(samples: np.ndarray) -> np.ndarray:
    """Round float samples to the nearest integer and clip into ``0..255``."""
    return np.clip(np.rint(samples), 0, 255).astype(np.uint8)
