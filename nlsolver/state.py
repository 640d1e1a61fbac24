"""Iteration state and the result value returned by a solve."""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from nlsolver.linalg import norm


@dataclass(frozen=True)
class SolveResult:
    solution: np.ndarray
    iterations: int
    final_error: float
    converged: bool
    function_evaluations: int
    jacobian_evaluations: int
    method_used: str

    def to_dict(self) -> dict:
        return {
            "solution": [float(v) for v in self.solution],
            "iterations": self.iterations,
            "final_error": self.final_error,
            "converged": self.converged,
            "function_evaluations": self.function_evaluations,
            "jacobian_evaluations": self.jacobian_evaluations,
            "method_used": self.method_used,
        }


@dataclass
class IterationState:
    """Mutable working set owned by one running solve."""

    x: np.ndarray
    fx: Optional[np.ndarray] = None
    dx: Optional[np.ndarray] = None
    error: float = float("inf")
    function_evaluations: int = 0
    jacobian_evaluations: int = 0

    def __post_init__(self) -> None:
        self.x = np.array(self.x, dtype=float)
        n = self.x.size
        if self.fx is None:
            self.fx = np.zeros(n)
        if self.dx is None:
            self.dx = np.zeros(n)

    def evaluate(self, functions) -> float:
        """Refresh ``fx`` and ``error`` at the current ``x``."""
        self.fx = np.array([f(self.x) for f in functions], dtype=float)
        self.function_evaluations += self.x.size
        self.error = norm(self.fx)
        return self.error

    def result(self, iterations: int, converged: bool, method: str) -> SolveResult:
        solution = self.x.copy()
        solution.setflags(write=False)
        return SolveResult(
            solution=solution,
            iterations=int(iterations),
            final_error=float(self.error),
            converged=bool(converged),
            function_evaluations=self.function_evaluations,
            jacobian_evaluations=self.jacobian_evaluations,
            method_used=method,
        )


def fallback_step(fx) -> np.ndarray:
    """Damped step ``-0.01/(1+‖fx‖) · fx`` used when the linear solve fails."""
    step = 0.01 / (1.0 + norm(fx))
    return -step * np.asarray(fx, dtype=float)
