"""Forward-difference Jacobian used by Newton's method."""

import numpy as np

_CBRT_EPS = float(np.cbrt(np.finfo(float).eps))
MIN_STEP = 1e-8


def step_size(xj: float) -> float:
    """Finite-difference step for one coordinate: cbrt(eps)·max(|x_j|, 1), floored at 1e-8."""
    h = _CBRT_EPS * max(abs(xj), 1.0)
    return max(h, MIN_STEP)


def residuals(functions, x) -> np.ndarray:
    """Evaluate every function of the system at *x*."""
    return np.array([f(x) for f in functions], dtype=float)


def estimate_jacobian(functions, x, fx):
    """Return ``(J, evaluations)`` for the system at *x*.

    *fx* must hold the residuals already evaluated at *x*; each column costs
    one full residual evaluation at the perturbed point, so a build spends
    n² function evaluations.
    """
    n = len(x)
    J = np.empty((n, n))
    x_plus = np.array(x, dtype=float)
    evaluations = 0
    for j in range(n):
        h = step_size(x[j])
        x_plus[j] = x[j] + h
        f_plus = residuals(functions, x_plus)
        evaluations += n
        J[:, j] = (f_plus - fx) / h
        x_plus[j] = x[j]
    return J, evaluations
