"""Backtracking line search on the residual norm."""

import numpy as np

from nlsolver.linalg import norm

SUFFICIENT_DECREASE = 1e-4


def halving_sequence(count: int) -> tuple:
    """``(1, 1/2, 1/4, ...)`` with *count* entries."""
    return tuple(0.5 ** k for k in range(count))


def backtrack(functions, x, dx, current_error: float, alphas):
    """Return ``(alpha, evaluations)`` for the step ``x + alpha·dx``.

    Tries each alpha in order and takes the first that satisfies
    ``‖f(x + alpha·dx)‖ < current_error·(1 - 1e-4·alpha)``.  When none
    does, the last alpha is taken anyway.
    """
    n = len(x)
    evaluations = 0
    for alpha in alphas:
        x_new = x + alpha * dx
        f_new = np.array([f(x_new) for f in functions], dtype=float)
        evaluations += n
        if norm(f_new) < current_error * (1.0 - SUFFICIENT_DECREASE * alpha):
            return alpha, evaluations
    return alphas[-1], evaluations
