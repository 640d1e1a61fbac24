"""
Closed-form cost estimates for a solve.

Pure formulas: nothing here runs or inspects an iteration.  The update
period ``p`` only shapes the secant estimate; neither iteration method
throttles its Jacobian or Broyden updates by it.  Newton always reports
``p = 1``.
"""

import math
from dataclasses import dataclass

from nlsolver.errors import InputValidationError

LINE_SEARCH_EVALS = 6
BROYDEN_OVERHEAD = 1.5
BYTES_PER_FLOAT = 8


@dataclass(frozen=True)
class ComplexityEstimate:
    system_size: int
    iterations: int
    method: str
    time_complexity: float
    time_notation: str
    estimated_operations: int
    space_complexity: float
    space_notation: str
    estimated_memory_bytes: int
    update_period: int

    def to_dict(self) -> dict:
        return dict(self.__dict__)


def _base_memory(n: int) -> int:
    return (n * n + 4 * n) * BYTES_PER_FLOAT


def _space_notation(n: int) -> str:
    return f"O(n²) = O({n}²) = O({n * n})"


def _newton_time(n: int, k: int) -> tuple:
    func_evals = k * n
    jacobian_cost = k * n * n
    gaussian_cost = k * n ** 3
    line_search_cost = k * n * LINE_SEARCH_EVALS
    ops = func_evals + jacobian_cost + gaussian_cost + line_search_cost
    value = k * n ** 3 + k * n * LINE_SEARCH_EVALS
    notation = (f"O(k n³ + k n (ls={LINE_SEARCH_EVALS})) "
                f"≈ O({k} n³ + {k * LINE_SEARCH_EVALS} n)")
    return value, notation, ops


def _secant_time(n: int, k: int, p: int) -> tuple:
    num_updates = math.ceil(k / p)
    base_evals = k * n * 2
    broyden_solve = num_updates * n ** 3
    # The overhead factor is truncated to an integer multiplier.
    broyden_update = k * n * n * int(BROYDEN_OVERHEAD)
    line_search_cost = k * n * LINE_SEARCH_EVALS
    ops = base_evals + broyden_solve + broyden_update + line_search_cost
    value = k * n * n + (k * n ** 3) / p + k * n * LINE_SEARCH_EVALS
    notation = (f"O(k n² (Broyden) + (k/p) n³ + k n (ls={LINE_SEARCH_EVALS})) "
                f"≈ O({k} n² + {num_updates} n³ + {k * LINE_SEARCH_EVALS} n)")
    return value, notation, ops


def estimate_complexity(n: int, iterations: int, method: str,
                        update_period: int = 5) -> ComplexityEstimate:
    """Estimate time/space cost of running *method* for *iterations* steps on an n-system."""
    if not (2 <= n <= 10):
        raise InputValidationError("System size must be between 2 and 10.")
    if iterations < 1:
        raise InputValidationError("Iterations must be at least 1.")
    if update_period < 1:
        raise InputValidationError("Update period must be at least 1.")

    is_newton = "newton" in method.lower()
    if is_newton:
        value, notation, ops = _newton_time(n, iterations)
        memory = _base_memory(n)
        reported_period = 1
    else:
        value, notation, ops = _secant_time(n, iterations, update_period)
        memory = _base_memory(n) + 2 * n * n * BYTES_PER_FLOAT
        reported_period = update_period

    return ComplexityEstimate(
        system_size=n,
        iterations=iterations,
        method=method,
        time_complexity=float(value),
        time_notation=notation,
        estimated_operations=int(ops),
        space_complexity=float(n * n),
        space_notation=_space_notation(n),
        estimated_memory_bytes=int(memory),
        update_period=reported_period,
    )
