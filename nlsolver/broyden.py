"""
Broyden's quasi-Newton ("secant") method.

No true Jacobian is ever formed.  The loop owns an approximate Jacobian
``B`` and mutates it in place with rank-one secant updates after every
accepted step; a singular ``B`` is replaced by the identity.
"""

import logging

import numpy as np

from nlsolver.errors import SingularMatrixError
from nlsolver.jacobian import residuals
from nlsolver.linalg import norm, solve_linear
from nlsolver.linesearch import backtrack, halving_sequence
from nlsolver.state import IterationState, SolveResult, fallback_step

logger = logging.getLogger(__name__)

METHOD_NAME = "Secant"
LINE_SEARCH_ALPHAS = halving_sequence(5)
SEED_OFFSET = 0.001
MAX_STALLS = 10


def broyden_update(B: np.ndarray, x, x_prev, fx, fx_prev) -> bool:
    """Apply ``B += ((y - B·s)·sᵀ) / ‖s‖²`` in place.

    ``s = x - x_prev`` and ``y = fx - fx_prev``.  Returns False (and leaves
    *B* alone) when ``‖s‖² < 1e-16``.  If the update makes *B* non-finite it
    is reset to the identity.
    """
    s = np.asarray(x) - np.asarray(x_prev)
    y = np.asarray(fx) - np.asarray(fx_prev)
    s_norm_sq = float(np.dot(s, s))
    if s_norm_sq < 1e-16:
        return False
    B += np.outer(y - B @ s, s) / s_norm_sq
    if not np.all(np.isfinite(B)):
        logger.debug("Broyden update produced non-finite entries; resetting to identity")
        B[:] = np.eye(B.shape[0])
    return True


def solve(functions, x0, epsilon: float, max_iterations: int,
          cancel_token=None) -> SolveResult:
    """Run Broyden's method from *x0* until the residual norm drops below *epsilon*."""
    n = len(x0)
    state = IterationState(x=x0)

    # Deterministic second point to seed the first secant pair.
    x_prev = state.x + SEED_OFFSET * np.arange(1, n + 1)
    state.evaluate(functions)
    fx_prev = residuals(functions, x_prev)
    state.function_evaluations += n

    B = np.eye(n)
    broyden_update(B, state.x, x_prev, state.fx, fx_prev)

    prev_error = state.error
    stalls = 0

    for it in range(max_iterations):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        error = state.error
        logger.debug("Secant it=%d error=%.3e", it, error)
        if error < epsilon:
            logger.info("Secant converged after %d iterations (error=%.3e)", it + 1, error)
            return state.result(it + 1, True, METHOD_NAME)

        if abs(error - prev_error) < epsilon * 1e-3:
            stalls += 1
            if stalls > MAX_STALLS:
                logger.info("Secant stalled at iteration %d; restarting from midpoint", it)
                state.x = (state.x + x_prev) / 2.0
                state.evaluate(functions)
                stalls = 0
        else:
            stalls = 0
        prev_error = error

        try:
            state.dx = solve_linear(B, -state.fx)
        except SingularMatrixError as exc:
            logger.debug("Secant it=%d: %s; using damped step and identity B", it, exc)
            state.dx = fallback_step(state.fx)
            B[:] = np.eye(n)

        step_norm = norm(state.dx)
        if step_norm > 1.0:
            state.dx = state.dx / step_norm

        alpha, evals = backtrack(functions, state.x, state.dx, norm(state.fx),
                                 LINE_SEARCH_ALPHAS)
        state.function_evaluations += evals

        x_prev = state.x.copy()
        fx_prev = state.fx.copy()
        state.x = state.x + alpha * state.dx
        state.evaluate(functions)

        displacement = norm(state.x - x_prev)
        if displacement > epsilon * 1e-2:
            broyden_update(B, state.x, x_prev, state.fx, fx_prev)

        if it > 5 and displacement < epsilon * 1e-4:
            converged = state.error < epsilon * 10
            logger.info("Secant stalled at iteration %d (error=%.3e, converged=%s)",
                        it + 1, state.error, converged)
            return state.result(it + 1, converged, METHOD_NAME)

    logger.info("Secant hit the iteration limit %d (error=%.3e)", max_iterations, state.error)
    return state.result(max_iterations, state.error < epsilon, METHOD_NAME)
