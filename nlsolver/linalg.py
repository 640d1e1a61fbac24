"""Dense linear solves and vector helpers shared by both iteration methods."""

import numpy as np

from nlsolver.errors import SingularMatrixError

PIVOT_TOLERANCE = 1e-15


def norm(v) -> float:
    """Euclidean (L2) norm."""
    return float(np.sqrt(np.dot(v, v)))


def solve_linear(A, b) -> np.ndarray:
    """Solve ``A x = b`` by Gaussian elimination with partial pivoting.

    Works on its own augmented copy, so *A* and *b* are left untouched.
    Raises :class:`SingularMatrixError` when a pivot falls below
    ``PIVOT_TOLERANCE`` or when the inputs or the result are not finite.
    """
    A = np.asarray(A, dtype=float)
    b = np.asarray(b, dtype=float)
    n = A.shape[0]
    if A.shape != (n, n) or b.shape != (n,):
        raise ValueError(
            f"Expected an n×n matrix and length-n vector, got {A.shape} and {b.shape}."
        )
    if not (np.all(np.isfinite(A)) and np.all(np.isfinite(b))):
        raise SingularMatrixError("Non-finite entries in linear system.")

    aug = np.empty((n, n + 1))
    aug[:, :n] = A
    aug[:, n] = b

    # Forward elimination
    for i in range(n):
        max_row = i + int(np.argmax(np.abs(aug[i:, i])))
        if max_row != i:
            aug[[i, max_row]] = aug[[max_row, i]]
        pivot = aug[i, i]
        if abs(pivot) < PIVOT_TOLERANCE:
            raise SingularMatrixError(f"Pivot {pivot:.3e} in column {i} is below tolerance.")
        factors = aug[i + 1:, i] / pivot
        aug[i + 1:, i:] -= np.outer(factors, aug[i, i:])

    # Back substitution
    x = np.zeros(n)
    for i in range(n - 1, -1, -1):
        x[i] = (aug[i, n] - np.dot(aug[i, i + 1:n], x[i + 1:])) / aug[i, i]

    if not np.all(np.isfinite(x)):
        raise SingularMatrixError("Linear solve produced non-finite values.")
    return x
