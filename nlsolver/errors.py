"""Exception types raised by the nonlinear solver."""


class InputValidationError(ValueError):
    """Bad solve parameters: sizes, ranges, method token or forbidden tokens."""


class ParseError(ValueError):
    """An equation could not be parsed by the expression grammar."""


class SingularMatrixError(ArithmeticError):
    """Pivot below threshold (or non-finite data) during Gaussian elimination.

    Internal only. The iteration loops catch it and switch to the damped
    fallback step, so it never reaches a caller of ``solve``.
    """


class SolveCancelled(RuntimeError):
    """The solve was cancelled (explicitly or by its deadline)."""
