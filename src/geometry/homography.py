"""
Homography estimation from four point correspondences.

A planar homography (projective transformation) maps the output rectangle
onto the quadrilateral marked in the source image.  With the bottom-right
entry fixed at 1, the remaining eight coefficients h0..h7 are the solution
of an 8 x 8 linear system built from the four corner correspondences.

The estimated matrix always maps **destination (rectangle) coordinates to
source (quad) coordinates**, so the rasterizer can inverse-map every output
pixel without ever inverting a matrix.
"""

from itertools import combinations

import numpy as np

from src.geometry.quad import as_quad
from src.geometry.solver import PIVOT_TOLERANCE, SingularMatrixError, solve_linear_system


def destination_rectangle(width: int, height: int) -> np.ndarray:
    """Corners of a *width* x *height* canvas, clockwise from top-left.

    The far corners sit at ``width - 1`` / ``height - 1`` (the last pixel
    centres), and the rasterizer maps exactly these integer coordinates, so
    the same rectangle must be used for estimation and rasterization.
    """
    w = float(width - 1)
    h = float(height - 1)
    return np.array([
        [0.0, 0.0],
        [w,   0.0],
        [w,   h  ],
        [0.0, h  ],
    ])


def check_nondegenerate(quad: np.ndarray, tol: float = PIVOT_TOLERANCE) -> None:
    """Raise :class:`SingularMatrixError` if three corners are collinear.

    Two coincident corners make every triple containing both collinear, so
    duplicates are rejected by the same test.  The area tolerance scales
    with the squared extent of the quad.
    """
    span = float(np.max(np.ptp(quad, axis=0)))
    limit = tol * max(span, 1.0) ** 2

    for i, j, k in combinations(range(4), 3):
        a, b, c = quad[i], quad[j], quad[k]
        cross = (b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])
        if abs(cross) <= limit:
            raise SingularMatrixError(
                f"corners {i}, {j}, {k} are collinear or coincide")


def compute_homography(src_quad, dst_quad) -> np.ndarray:
    """Estimate the 3x3 homography mapping *dst_quad* onto *src_quad*.

    Each correspondence ``(xd, yd) -> (xs, ys)`` contributes two equations
    in the unknowns h0..h7 (h8 = 1)::

        h0*xd + h1*yd + h2 - h6*xd*xs - h7*yd*xs = xs
        h3*xd + h4*yd + h5 - h6*xd*ys - h7*yd*ys = ys

    Parameters
    ----------
    src_quad : array_like
        4 x 2 array of (x, y) source corners, clockwise from top-left.
    dst_quad : array_like
        4 x 2 array of (x, y) destination corners in the same order.

    Returns
    -------
    H : np.ndarray
        3 x 3 homography with ``H[2, 2] == 1`` such that
        ``src ≈ H @ dst`` in homogeneous coordinates.

    Raises
    ------
    SingularMatrixError
        If either quad is degenerate or the linear system is singular.
    """
    src = as_quad(src_quad)
    dst = as_quad(dst_quad)
    check_nondegenerate(src)
    check_nondegenerate(dst)

    A = np.zeros((8, 8))
    b = np.zeros(8)
    for i in range(4):
        xs, ys = src[i]
        xd, yd = dst[i]
        r1, r2 = 2 * i, 2 * i + 1

        A[r1] = [xd, yd, 1, 0,  0,  0, -xd * xs, -yd * xs]
        b[r1] = xs
        A[r2] = [0,  0,  0, xd, yd, 1, -xd * ys, -yd * ys]
        b[r2] = ys

    h = solve_linear_system(A, b)
    return np.append(h, 1.0).reshape(3, 3)


def apply_homography(H: np.ndarray, x, y):
    """Map point(s) through *H* with homogeneous division.

    *x* and *y* may be scalars or equally shaped arrays.  A zero
    homogeneous divisor yields ``inf``/``nan`` coordinates rather than an
    exception; callers treat those as out of bounds.

    Returns
    -------
    (x', y') : tuple
        Transformed coordinates, same shape as the inputs.
    """
    h = np.asarray(H, dtype=float).ravel()
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)

    X = h[0] * x + h[1] * y + h[2]
    Y = h[3] * x + h[4] * y + h[5]
    W = h[6] * x + h[7] * y + 1.0

    with np.errstate(divide="ignore", invalid="ignore"):
        return X / W, Y / W
