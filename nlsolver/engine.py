"""
Entry point for solving a system of nonlinear equations.

Validates the request, compiles one evaluator per equation and hands the
system to the chosen iteration method.  Every validation failure happens
here, before the first iteration.
"""

import logging
import math
from typing import Optional, Sequence

import numpy as np

from nlsolver import broyden, newton
from nlsolver.cancellation import CancellationToken
from nlsolver.errors import InputValidationError
from nlsolver.expression import MAX_VARIABLES, ExpressionEvaluator, split_equation
from nlsolver.state import SolveResult

logger = logging.getLogger(__name__)

MIN_EQUATIONS = 2
MAX_EQUATIONS = MAX_VARIABLES
EPSILON_RANGE = (1e-8, 1e-2)
MAX_ITERATIONS_RANGE = (10, 10000)

_METHODS = {
    "newton": newton.solve,
    "secant": broyden.solve,
}

_TRIG_FUNC_NAMES = (
    "sin", "cos", "tan", "cot", "sec", "csc",
    "asin", "acos", "atan",
    "sinh", "cosh", "tanh",
)


# ── Validation ──────────────────────────────────────────────────────────

def validate_inputs(equations, x0, epsilon: float, max_iterations: int) -> None:
    """Check sizes and numeric ranges; raise :class:`InputValidationError`."""
    if equations is None or len(equations) == 0:
        raise InputValidationError("At least two equations are required.")
    if x0 is None or len(x0) == 0:
        raise InputValidationError("An initial guess x0 is required.")
    if len(equations) != len(x0):
        raise InputValidationError(
            f"Number of equations ({len(equations)}) must match number of "
            f"variables ({len(x0)})."
        )
    if len(equations) < MIN_EQUATIONS:
        raise InputValidationError(f"Minimum {MIN_EQUATIONS} equations required.")
    if len(equations) > MAX_EQUATIONS:
        raise InputValidationError(
            f"Maximum number of variables/equations is {MAX_EQUATIONS}."
        )
    if not all(isinstance(eq, str) for eq in equations):
        raise InputValidationError("Every equation must be a string.")
    try:
        values = [float(v) for v in x0]
    except (TypeError, ValueError):
        raise InputValidationError("Initial guess must contain only numbers.")
    if not all(math.isfinite(v) for v in values):
        raise InputValidationError("Initial guess must contain only finite numbers.")
    lo, hi = EPSILON_RANGE
    if isinstance(epsilon, bool) or not isinstance(epsilon, (int, float, np.floating)):
        raise InputValidationError("Epsilon must be a number.")
    if not (lo <= epsilon <= hi):
        raise InputValidationError(f"Epsilon must be between {lo:g} and {hi:g}.")
    lo, hi = MAX_ITERATIONS_RANGE
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, (int, np.integer)):
        raise InputValidationError("Maximum iterations must be an integer.")
    if not (lo <= max_iterations <= hi):
        raise InputValidationError(f"Maximum iterations must be between {lo} and {hi}.")


def validate_method(method: str) -> str:
    """Return the normalised method key (``"newton"`` or ``"secant"``)."""
    key = method.strip().lower() if isinstance(method, str) else None
    if key not in _METHODS:
        raise InputValidationError("Method must be 'newton' or 'secant'.")
    return key


def validate_no_trigonometric(equations) -> None:
    for equation in equations:
        lowered = equation.lower()
        for name in _TRIG_FUNC_NAMES:
            if name in lowered:
                raise InputValidationError(
                    "Sorry, trigonometric expressions are not supported "
                    f"(found '{name}' in '{equation.strip()}')."
                )


def build_system(equations: Sequence[str]) -> list:
    """Compile each ``"<expr> = 0"`` into an :class:`ExpressionEvaluator`."""
    n = len(equations)
    return [ExpressionEvaluator(split_equation(eq), n_vars=n) for eq in equations]


# ── Main public entry point ─────────────────────────────────────────────

def solve(equations: Sequence[str], x0: Sequence[float], epsilon: float,
          method: str = "newton", max_iterations: int = 1000,
          cancel_token: Optional[CancellationToken] = None) -> SolveResult:
    """
    Solve ``equations`` (each ``"<expression> = 0"``) starting from *x0*.

    Raises :class:`InputValidationError` or :class:`ParseError` before any
    iteration when the request is invalid, and :class:`SolveCancelled` if
    *cancel_token* fires mid-solve.  Running out of iterations is not an
    error: the result simply has ``converged=False``.
    """
    validate_inputs(equations, x0, epsilon, max_iterations)
    key = validate_method(method)
    validate_no_trigonometric(equations)
    functions = build_system(equations)

    logger.info("Solving %d-equation system with %s (epsilon=%g, max_iterations=%d)",
                len(functions), key, epsilon, max_iterations)
    x_start = np.array([float(v) for v in x0])
    return _METHODS[key](functions, x_start, float(epsilon), int(max_iterations),
                         cancel_token=cancel_token)
