"""NonlinearSolver — dense nonlinear system solving (Newton and Broyden)."""

from nlsolver.cancellation import CancellationToken
from nlsolver.complexity import ComplexityEstimate, estimate_complexity
from nlsolver.engine import solve
from nlsolver.errors import (
    InputValidationError,
    ParseError,
    SingularMatrixError,
    SolveCancelled,
)
from nlsolver.expression import ExpressionEvaluator, evaluate
from nlsolver.state import SolveResult

__all__ = [
    "CancellationToken",
    "ComplexityEstimate",
    "ExpressionEvaluator",
    "InputValidationError",
    "ParseError",
    "SingularMatrixError",
    "SolveCancelled",
    "SolveResult",
    "estimate_complexity",
    "evaluate",
    "solve",
]
