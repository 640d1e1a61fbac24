"""
Parser and evaluator for the left-hand side of ``<expression> = 0``.

Grammar (whitespace ignored, ``,`` accepted as the decimal separator)::

    expr   := [sign] term {('+' | '-') term}
    term   := factor {'*' factor}
    factor := number | '(' '-' number ')' | 'x' digits

Numeric factors multiply into the term's coefficient.  A term keeps at
most two variable factors; a third or later one is accepted by the
parser and then ignored, so ``x1*x2*x3`` evaluates as ``x1*x2``.
"""

import re
from typing import Optional, Sequence

from nlsolver.errors import ParseError

MAX_VARIABLES = 10

_TOKEN_RE = re.compile(r"(?P<number>[0-9.]+)|(?P<var>x[0-9]*)|(?P<op>[-+*()])")


def _normalize(expr_str: str) -> str:
    return re.sub(r"\s+", "", expr_str).replace(",", ".")


def _tokenize(expr_str: str) -> list:
    """Split *expr_str* into ``(kind, text)`` tokens."""
    s = _normalize(expr_str)
    tokens = []
    pos = 0
    while pos < len(s):
        m = _TOKEN_RE.match(s, pos)
        if m is None:
            raise ParseError(
                f"Unexpected character '{s[pos]}' in expression '{expr_str}'."
            )
        tokens.append((m.lastgroup, m.group()))
        pos = m.end()
    return tokens


def _parse_number(text: str) -> float:
    if text.count(".") > 1 or text == ".":
        raise ParseError(f"Invalid number format: '{text}'.")
    return float(text)


def _parse_var(text: str) -> int:
    """Return the 0-based storage index for a variable token like ``x3``."""
    digits = text[1:]
    if not digits:
        raise ParseError("Variable 'x' must be followed by its number (x1..x10).")
    number = int(digits)
    if number < 1 or number > MAX_VARIABLES:
        raise ParseError(
            f"Variable '{text}' is out of range. Use x1..x{MAX_VARIABLES}."
        )
    return number - 1


class _Parser:
    """Recursive-descent parser producing a list of ``(coef, indices)`` terms."""

    def __init__(self, expr_str: str) -> None:
        self.source = expr_str
        self.tokens = _tokenize(expr_str)
        self.pos = 0

    def _peek(self):
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return (None, None)

    def _next(self):
        tok = self._peek()
        self.pos += 1
        return tok

    def parse(self) -> list:
        if not self.tokens:
            raise ParseError("Empty expression: write the left-hand side before '= 0'.")
        sign = 1.0
        if self._peek() in (("op", "-"), ("op", "+")):
            sign = -1.0 if self._next()[1] == "-" else 1.0
        terms = [self._term(sign)]
        while self._peek() in (("op", "+"), ("op", "-")):
            sign = 1.0 if self._next()[1] == "+" else -1.0
            terms.append(self._term(sign))
        if self.pos < len(self.tokens):
            raise ParseError(
                f"Unexpected '{self._peek()[1]}' in expression '{self.source}'."
            )
        return terms

    def _term(self, sign: float) -> tuple:
        coef = 1.0
        indices = []
        while True:
            kind, value = self._factor()
            if kind == "number":
                coef *= value
            elif len(indices) < 2:
                indices.append(value)
            if self._peek() != ("op", "*"):
                break
            self._next()
        return sign * coef, tuple(indices)

    def _factor(self) -> tuple:
        kind, text = self._next()
        if kind == "number":
            return "number", _parse_number(text)
        if kind == "var":
            return "var", _parse_var(text)
        if (kind, text) == ("op", "("):
            if self._next() != ("op", "-"):
                raise ParseError(
                    "Parenthesised literals must be negative, e.g. (-2.5)."
                )
            num_kind, num_text = self._next()
            if num_kind != "number":
                raise ParseError(
                    f"Invalid number format inside parentheses in '{self.source}'."
                )
            value = _parse_number(num_text)
            if self._next() != ("op", ")"):
                raise ParseError(f"Unmatched parenthesis in '{self.source}'.")
            return "number", -value
        if kind is None:
            raise ParseError(f"Expression '{self.source}' ends unexpectedly.")
        raise ParseError(f"Unexpected '{text}' in expression '{self.source}'.")


class ExpressionEvaluator:
    """One equation's residual function, compiled once and evaluated many times.

    When *n_vars* is given, every referenced variable must fit a system of
    that size.
    """

    def __init__(self, expression: str, n_vars: Optional[int] = None) -> None:
        self.expression = expression
        self._terms = _Parser(expression).parse()
        if n_vars is not None:
            for _, indices in self._terms:
                for idx in indices:
                    if idx >= n_vars:
                        raise ParseError(
                            f"Variable 'x{idx + 1}' is not part of a "
                            f"{n_vars}-variable system."
                        )

    @property
    def terms(self) -> list:
        return list(self._terms)

    def __call__(self, x: Sequence[float]) -> float:
        total = 0.0
        for coef, indices in self._terms:
            value = coef
            for idx in indices:
                value *= x[idx]
            total += value
        return float(total)

    def __repr__(self) -> str:
        return f"ExpressionEvaluator({self.expression!r})"


def split_equation(equation_str: str) -> str:
    """Return the left-hand side of ``"<expression> = 0"``."""
    if "=" not in equation_str:
        raise ParseError("Equation must contain '='. Example: 2*x1 + x2 = 0")
    parts = equation_str.split("=")
    if len(parts) != 2:
        raise ParseError("Equation must contain exactly one '=' sign.")
    lhs_str, rhs_str = parts[0].strip(), parts[1].strip()
    try:
        rhs_val = float(_normalize(rhs_str))
    except ValueError:
        rhs_val = None
    if rhs_val != 0.0:
        raise ParseError(
            f"Equation '{equation_str.strip()}' must end with '= 0'. "
            "Format: expression = 0"
        )
    return lhs_str


def evaluate(expression: str, x: Sequence[float]) -> float:
    """Parse and evaluate *expression* at *x* in one call."""
    return ExpressionEvaluator(expression, n_vars=len(x))(x)
