import numpy as np

from nlsolver.expression import ExpressionEvaluator
from nlsolver.jacobian import MIN_STEP, estimate_jacobian, residuals, step_size


def _system(*exprs):
    return [ExpressionEvaluator(e, n_vars=len(exprs)) for e in exprs]


def test_step_size_scales_with_magnitude() -> None:
    base = np.cbrt(np.finfo(float).eps)
    assert step_size(0.0) == base
    assert step_size(0.5) == base
    assert step_size(-100.0) == base * 100.0
    assert step_size(0.0) >= MIN_STEP


def test_linear_system_jacobian_matches_coefficients() -> None:
    funcs = _system("2*x1 + 3*x2 + (-1)", "x1 + (-4)*x2")
    x = np.array([0.3, -0.7])
    J, evals = estimate_jacobian(funcs, x, residuals(funcs, x))
    np.testing.assert_allclose(J, [[2.0, 3.0], [1.0, -4.0]], atol=1e-6)
    assert evals == 4


def test_quadratic_terms_forward_difference() -> None:
    funcs = _system("x1*x1 + x2", "x1*x2 + (-1)")
    x = np.array([2.0, 3.0])
    J, _ = estimate_jacobian(funcs, x, residuals(funcs, x))
    np.testing.assert_allclose(J, [[4.0, 1.0], [3.0, 2.0]], atol=1e-4)


def test_evaluation_count_is_n_squared() -> None:
    n = 4
    exprs = [f"x{i + 1}*x{i + 1} + x{(i + 1) % n + 1}" for i in range(n)]
    funcs = _system(*exprs)
    x = np.ones(n)
    _, evals = estimate_jacobian(funcs, x, residuals(funcs, x))
    assert evals == n * n


def test_point_is_not_modified() -> None:
    funcs = _system("x1 + x2", "x1 + (-1)*x2")
    x = np.array([1.0, 2.0])
    estimate_jacobian(funcs, x, residuals(funcs, x))
    np.testing.assert_array_equal(x, [1.0, 2.0])
