"""
Dense linear-system solver.

Gauss–Jordan elimination with partial pivoting on the augmented matrix
``[A | b]``.  Every pivot column is eliminated from all other rows, not only
the rows below it, so the reduced system's last column is the solution and
no back-substitution pass is needed.  At the 8 x 8 size used for homography
estimation the extra work is negligible.
"""

import numpy as np

PIVOT_TOLERANCE = 1e-12


class SingularMatrixError(ValueError):
    """Raised when a system has no unique solution (pivot below tolerance)."""


def solve_linear_system(A: np.ndarray, b: np.ndarray,
                        tol: float = PIVOT_TOLERANCE) -> np.ndarray:
    """Solve ``A @ x = b`` for a square matrix *A*.

    Parameters
    ----------
    A : np.ndarray
        n x n coefficient matrix.
    b : np.ndarray
        Length-n right-hand side.
    tol : float
        Smallest pivot magnitude accepted before the system is declared
        singular.

    Returns
    -------
    np.ndarray
        Length-n float64 solution vector.

    Raises
    ------
    SingularMatrixError
        If a pivot's magnitude falls below *tol*.
    """
    A = np.asarray(A, dtype=float)
    b = np.asarray(b, dtype=float).ravel()
    n = A.shape[0]
    if A.ndim != 2 or A.shape[1] != n:
        raise ValueError(f"A must be square, got shape {A.shape}")
    if b.shape[0] != n:
        raise ValueError(f"b has length {b.shape[0]}, expected {n}")

    M = np.hstack([A, b[:, np.newaxis]])

    for col in range(n):
        # First row with the largest magnitude wins ties
        piv = col
        for r in range(col + 1, n):
            if abs(M[r, col]) > abs(M[piv, col]):
                piv = r

        pivot = M[piv, col]
        if not abs(pivot) >= tol:
            raise SingularMatrixError(
                f"pivot {pivot!r} in column {col} is below tolerance {tol}")

        if piv != col:
            M[[col, piv]] = M[[piv, col]]

        M[col, col:] = M[col, col:] / pivot

        for r in range(n):
            if r == col:
                continue
            f = M[r, col]
            M[r, col:] = M[r, col:] - f * M[col, col:]

    return M[:, n].copy()
