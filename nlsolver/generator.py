"""
Random demo systems with a known approximate root.

Equation i has the shape ``a·xi + b·xi·xj + d·xi·xi + c = 0`` where the
constant ``c`` is chosen so a random "true" solution almost satisfies it
(within ±0.2).  All randomness comes from the generator passed in.
"""

from typing import Optional

import numpy as np

from nlsolver.errors import InputValidationError


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    return np.random.default_rng(seed)


def var_name(index: int) -> str:
    """0-based storage index → ``x1``-style name."""
    return f"x{index + 1}"


def format_number(value: float, rng: np.random.Generator) -> str:
    """Fixed-point text with 2–7 decimals; negatives wrapped as ``(-v)``."""
    decimals = int(rng.integers(2, 8))
    formatted = f"{value:.{decimals}f}"
    return f"({formatted})" if value < 0 else formatted


def _other_index(i: int, n: int, rng: np.random.Generator) -> int:
    j = i
    while j == i:
        j = int(rng.integers(n))
    return j


def _build_equation(i: int, n: int, true_solution: np.ndarray,
                    rng: np.random.Generator) -> str:
    xi = var_name(i)
    parts = []

    a = (rng.random() * 3 + 0.5) * (1 if rng.integers(2) == 0 else -1)
    parts.append(f"{format_number(a, rng)}*{xi}")
    constant = a * true_solution[i]

    j = _other_index(i, n, rng)
    b = (rng.random() * 2 - 1) * 1.5
    parts.append(f" + {format_number(b, rng)}*{xi}*{var_name(j)}")
    constant += b * true_solution[i] * true_solution[j]

    d = rng.random() * 2
    parts.append(f" + {format_number(d, rng)}*{xi}*{xi}")
    constant += d * true_solution[i] * true_solution[i]

    c = -constant + (rng.random() * 0.4 - 0.2)
    if c < 0:
        parts.append(f" - {format_number(abs(c), rng)}")
    else:
        parts.append(f" + {format_number(c, rng)}")
    return "".join(parts) + " = 0"


def generate_system(n: int, rng: Optional[np.random.Generator] = None) -> list:
    """Return *n* equation strings in ``x1..xn``."""
    if not (2 <= n <= 10):
        raise InputValidationError("Number of equations must be between 2 and 10.")
    rng = rng if rng is not None else make_rng()
    true_solution = rng.random(n) * 4 - 2
    return [_build_equation(i, n, true_solution, rng) for i in range(n)]


def generate_initial_guess(n: int, rng: Optional[np.random.Generator] = None) -> list:
    """Uniform starting point in [-0.75, 0.75)ⁿ."""
    rng = rng if rng is not None else make_rng()
    return [float(v) for v in rng.random(n) * 1.5 - 0.75]
