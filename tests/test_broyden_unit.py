"""Tests for Broyden's (secant) method."""

import logging

import numpy as np
import pytest

from nlsolver import broyden, linesearch
from nlsolver.cancellation import CancellationToken
from nlsolver.errors import SingularMatrixError, SolveCancelled
from nlsolver.expression import ExpressionEvaluator
from nlsolver.jacobian import residuals
from nlsolver.linalg import norm


def _system(*exprs):
    return [ExpressionEvaluator(e, n_vars=len(exprs)) for e in exprs]


LINEAR = ("1*x1 + 1*x2 + (-2)", "1*x1 + (-1)*x2")
CIRCLE = ("1*x1*x1 + 1*x2*x2 + (-4)", "x1 + (-1)*x2")


# ── Rank-one update ─────────────────────────────────────────────────────

class TestBroydenUpdate:
    def test_secant_condition_holds(self):
        B = np.eye(2)
        x, x_prev = np.array([1.0, 2.0]), np.zeros(2)
        fx, fx_prev = np.array([3.0, 1.0]), np.zeros(2)
        assert broyden.broyden_update(B, x, x_prev, fx, fx_prev) is True
        np.testing.assert_allclose(B @ (x - x_prev), fx - fx_prev, atol=1e-12)

    def test_tiny_step_is_skipped(self):
        B = np.eye(2)
        x = np.array([1.0, 1.0])
        applied = broyden.broyden_update(B, x, x + 1e-9, np.ones(2), np.zeros(2))
        assert applied is False
        np.testing.assert_array_equal(B, np.eye(2))

    def test_non_finite_result_resets_to_identity(self):
        B = np.eye(2)
        with np.errstate(all="ignore"):
            broyden.broyden_update(B, np.array([1.0, 0.0]), np.zeros(2),
                                   np.array([np.inf, 0.0]), np.zeros(2))
        np.testing.assert_array_equal(B, np.eye(2))

    def test_update_is_in_place(self):
        B = np.eye(2)
        ref = B
        broyden.broyden_update(B, np.array([1.0, 0.0]), np.zeros(2),
                               np.array([2.0, 5.0]), np.zeros(2))
        assert ref is B
        np.testing.assert_allclose(B[:, 0], [2.0, 5.0])


# ── Full solves ─────────────────────────────────────────────────────────

class TestSolve:
    def test_linear_system(self):
        result = broyden.solve(_system(*LINEAR), np.zeros(2), 1e-6, 100)
        assert result.converged is True
        np.testing.assert_allclose(result.solution, [1.0, 1.0], atol=1e-5)
        assert result.jacobian_evaluations == 0
        assert result.method_used == "Secant"

    def test_quadratic_system(self):
        result = broyden.solve(_system(*CIRCLE), np.array([1.0, 0.5]), 1e-8, 500)
        assert result.converged is True
        np.testing.assert_allclose(result.solution, [np.sqrt(2), np.sqrt(2)], atol=1e-6)

    def test_final_error_below_initial_error(self):
        funcs = _system(*CIRCLE)
        x0 = np.array([1.0, 0.5])
        result = broyden.solve(funcs, x0, 1e-8, 500)
        assert result.converged is True
        assert result.final_error < norm(residuals(funcs, x0))

    def test_reported_error_matches_solution(self):
        funcs = _system(*LINEAR)
        result = broyden.solve(funcs, np.array([0.3, -0.2]), 1e-6, 100)
        assert abs(norm(residuals(funcs, result.solution)) - result.final_error) < 1e-9

    def test_already_at_root(self):
        funcs = _system(*LINEAR)
        result = broyden.solve(funcs, np.array([1.0, 1.0]), 1e-6, 100)
        assert result.converged is True
        assert result.iterations == 1
        # x and the seeded second point, nothing else
        assert result.function_evaluations == 4

    def test_deterministic(self):
        funcs = _system(*CIRCLE)
        a = broyden.solve(funcs, np.array([1.0, 0.5]), 1e-8, 500)
        b = broyden.solve(funcs, np.array([1.0, 0.5]), 1e-8, 500)
        assert a.iterations == b.iterations
        np.testing.assert_array_equal(a.solution, b.solution)

    def test_singular_fallback_keeps_going(self, monkeypatch):
        def _singular(A, b):
            raise SingularMatrixError("forced")

        monkeypatch.setattr(broyden, "solve_linear", _singular)
        funcs = _system(*LINEAR)
        result = broyden.solve(funcs, np.zeros(2), 1e-6, 30)
        assert np.all(np.isfinite(result.solution))
        assert result.converged is False
        assert result.final_error < norm(residuals(funcs, np.zeros(2)))

    def test_pre_cancelled_token(self):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(SolveCancelled):
            broyden.solve(_system(*LINEAR), np.zeros(2), 1e-6, 100, cancel_token=token)


# ── Stalls, early exit and step clipping ────────────────────────────────

CONSTANT = ("0*x1 + 1", "0*x2 + 1")


def _frozen_line_search(functions, x, dx, current_error, alphas):
    return 0.0, 0


class TestStallHandling:
    def test_constant_residual_restarts_from_midpoint(self, caplog):
        caplog.set_level(logging.INFO, logger="nlsolver.broyden")
        result = broyden.solve(_system(*CONSTANT), np.zeros(2), 1e-6, 40)
        restarts = [r for r in caplog.records if "restarting from midpoint" in r.getMessage()]
        # the 11th unchanged error in a row triggers a restart
        assert [r.args[0] for r in restarts] == [10, 21, 32]
        assert result.converged is False
        assert result.iterations == 40
        assert result.final_error == pytest.approx(np.sqrt(2))

    @pytest.mark.parametrize("offset,converged", [(3e-7, True), (3e-5, False)])
    def test_tiny_displacement_exits_after_sixth_iteration(self, monkeypatch, offset, converged):
        monkeypatch.setattr(broyden, "backtrack", _frozen_line_search)
        funcs = _system(*LINEAR)
        x0 = np.array([1.0 + offset, 1.0])
        result = broyden.solve(funcs, x0, 1e-7, 100)
        # it=6 is the first pass allowed to stop; iterations counts it+1
        assert result.iterations == 7
        assert result.converged is converged
        assert result.final_error == pytest.approx(norm(residuals(funcs, x0)))
        np.testing.assert_array_equal(result.solution, x0)

    @pytest.mark.parametrize("raw,expected", [
        ([30.0, 40.0], [0.6, 0.8]),
        ([0.3, 0.4], [0.3, 0.4]),
    ])
    def test_step_is_clipped_to_unit_norm(self, monkeypatch, raw, expected):
        seen = []

        def _recording_backtrack(functions, x, dx, current_error, alphas):
            seen.append(np.array(dx))
            return linesearch.backtrack(functions, x, dx, current_error, alphas)

        monkeypatch.setattr(broyden, "solve_linear", lambda A, b: np.array(raw))
        monkeypatch.setattr(broyden, "backtrack", _recording_backtrack)
        broyden.solve(_system(*LINEAR), np.zeros(2), 1e-6, 1)
        np.testing.assert_allclose(seen[0], expected)
