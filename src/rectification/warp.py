"""
Perspective rectification via inverse warping and bilinear sampling.

The homography is estimated so that it maps the output rectangle onto the
marked source quad.  Every output pixel is then inverse-mapped into the
source and sampled with bilinear interpolation; pixels that land outside
the source image are left transparent black.
"""

import numpy as np

from src.geometry.homography import apply_homography, compute_homography, destination_rectangle
from src.geometry.quad import as_quad
from src.sampling.bilinear import bilinear_sample, to_uint8


def rectify(source: np.ndarray, src_quad, out_width: int, out_height: int,
            rows_per_block: int = None) -> np.ndarray:
    """Rectify the region of *source* inside *src_quad*.

    Parameters
    ----------
    source : np.ndarray
        H x W x 4 uint8 RGBA source buffer.  Only read.
    src_quad : array_like
        4 x 2 (x, y) source corners, clockwise from top-left.  Corner *i*
        is mapped to corner *i* of the output rectangle.
    out_width, out_height : int
        Size of the rectified image in pixels.
    rows_per_block : int, optional
        Number of output rows mapped per vectorised pass.  Defaults to the
        whole image; smaller blocks bound the temporary memory used.

    Returns
    -------
    np.ndarray
        out_height x out_width x 4 uint8 RGBA buffer.

    Raises
    ------
    SingularMatrixError
        If the quad does not determine a unique transform.  Raised before
        any output is allocated.
    """
    if source.ndim != 3 or source.shape[2] != 4:
        raise ValueError(f"source must be H x W x 4 RGBA, got shape {source.shape}")
    out_width, out_height = int(out_width), int(out_height)
    if out_width < 1 or out_height < 1:
        raise ValueError(f"output size must be positive, got {out_width} x {out_height}")
    if rows_per_block is not None and int(rows_per_block) < 1:
        raise ValueError(f"rows_per_block must be at least 1, got {rows_per_block}")

    quad = as_quad(src_quad)
    H = compute_homography(quad, destination_rectangle(out_width, out_height))

    out = np.zeros((out_height, out_width, 4), dtype=np.uint8)
    block = out_height if rows_per_block is None else int(rows_per_block)
    for y_start in range(0, out_height, block):
        y_stop = min(y_start + block, out_height)
        warp_rows(source, H, out, y_start, y_stop)

    return out


def warp_rows(source: np.ndarray, H: np.ndarray, out: np.ndarray,
              y_start: int, y_stop: int) -> None:
    """Fill output rows ``y_start:y_stop`` of *out* in place.

    *H* maps output coordinates to source coordinates.  Rows are
    independent of each other, so disjoint row ranges may be filled
    concurrently.
    """
    src_h, src_w = source.shape[:2]
    ys, xs = np.mgrid[y_start:y_stop, 0:out.shape[1]]
    sx, sy = apply_homography(H, xs, ys)

    # NaN compares false, so non-finite coordinates stay transparent
    inside = (sx >= 0) & (sy >= 0) & (sx < src_w) & (sy < src_h)
    if not np.any(inside):
        return

    samples = bilinear_sample(source, sx[inside], sy[inside])
    out[y_start:y_stop][inside] = to_uint8(samples)
