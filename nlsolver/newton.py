"""
Newton-Raphson iteration with a finite-difference Jacobian.

Each iteration rebuilds the Jacobian, solves ``J·dx = -f(x)`` and walks
along ``dx`` with a backtracking line search.  A singular Jacobian is not
an error: the step falls back to a small damped move against the
residual and the iteration carries on.
"""

import logging

from nlsolver.errors import SingularMatrixError
from nlsolver.jacobian import estimate_jacobian
from nlsolver.linalg import norm, solve_linear
from nlsolver.linesearch import backtrack, halving_sequence
from nlsolver.state import IterationState, SolveResult, fallback_step

logger = logging.getLogger(__name__)

METHOD_NAME = "Newton"
LINE_SEARCH_ALPHAS = halving_sequence(8)


def solve(functions, x0, epsilon: float, max_iterations: int,
          cancel_token=None) -> SolveResult:
    """Run Newton's method from *x0* until the residual norm drops below *epsilon*."""
    n = len(x0)
    state = IterationState(x=x0)

    for it in range(max_iterations):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        error = state.evaluate(functions)
        logger.debug("Newton it=%d error=%.3e", it, error)

        # dx still holds the previous iteration's step (zeros on the first pass).
        if error < epsilon or (it > 5 and norm(state.dx) < epsilon * 1e-4):
            logger.info("Newton converged after %d iterations (error=%.3e)", it + 1, error)
            return state.result(it + 1, True, METHOD_NAME)

        J, evals = estimate_jacobian(functions, state.x, state.fx)
        state.function_evaluations += evals
        state.jacobian_evaluations += n * n

        try:
            state.dx = solve_linear(J, -state.fx)
        except SingularMatrixError as exc:
            logger.debug("Newton it=%d: %s; using damped step", it, exc)
            state.dx = fallback_step(state.fx)

        alpha, evals = backtrack(functions, state.x, state.dx, error, LINE_SEARCH_ALPHAS)
        state.function_evaluations += evals
        state.x = state.x + alpha * state.dx

        if it > 10 and norm(state.dx) < epsilon * 1e-3:
            error = state.evaluate(functions)
            converged = error < epsilon * 10
            logger.info("Newton stalled at iteration %d (error=%.3e, converged=%s)",
                        it + 1, error, converged)
            return state.result(it + 1, converged, METHOD_NAME)

    error = state.evaluate(functions)
    logger.info("Newton hit the iteration limit %d (error=%.3e)", max_iterations, error)
    return state.result(max_iterations, error < epsilon, METHOD_NAME)
