"""Independent check of a solution by substituting it with SymPy."""

import re

from sympy import Symbol
from sympy.parsing.sympy_parser import parse_expr, standard_transformations

from nlsolver.expression import MAX_VARIABLES, split_equation

_SYMBOLS = {f"x{k}": Symbol(f"x{k}") for k in range(1, MAX_VARIABLES + 1)}


def _parse_side(expr_str: str):
    """Parse a left-hand side into a SymPy expression."""
    s = expr_str.strip().replace(",", ".")
    # x01 and x1 name the same variable
    s = re.sub(r"x0+(\d)", r"x\1", s)
    try:
        return parse_expr(s, local_dict=dict(_SYMBOLS),
                          transformations=standard_transformations)
    except Exception as e:
        raise ValueError(f"Could not parse expression: '{expr_str}'. Error: {e}") from e


def verify_solution(equations, solution, epsilon: float) -> dict:
    """Substitute *solution* into every equation and report the residuals.

    Returns ``{"verification_steps": [...], "residual_norm": float,
    "validation_status": "pass" | "fail"}``.  The status passes when the
    residual norm is below ``10·epsilon``.

    SymPy multiplies every factor of a term, so a term written with three
    or more variables is checked in full here even though the solver's
    evaluator keeps only the first two.
    """
    subs = {_SYMBOLS[f"x{i + 1}"]: float(v) for i, v in enumerate(solution)}
    steps = []
    total = 0.0
    for i, equation in enumerate(equations, 1):
        lhs = _parse_side(split_equation(equation))
        residual = float(lhs.subs(subs).evalf())
        total += residual * residual
        steps.append({
            "step_number": i,
            "equation": equation.strip(),
            "residual": residual,
            "within_tolerance": abs(residual) < epsilon * 10,
        })
    residual_norm = total ** 0.5
    return {
        "verification_steps": steps,
        "residual_norm": residual_norm,
        "validation_status": "pass" if residual_norm < epsilon * 10 else "fail",
    }
