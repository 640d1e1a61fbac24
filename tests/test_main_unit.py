import logging
from pathlib import Path

import pytest

import main as entry
from nlsolver import settings


@pytest.fixture(autouse=True)
def _tmp_settings(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(settings, "_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setattr(settings, "_DATA_FILE", str(tmp_path / "data" / "nlsolver.json"))


def test_main_solves_linear_system(capsys) -> None:
    code = entry.main(["1*x1 + 1*x2 + (-2) = 0", "1*x1 + (-1)*x2 = 0", "--x0", "0", "0"])
    out = capsys.readouterr().out
    assert code == 0
    assert "x1 = 1" in out
    assert "x2 = 1" in out
    assert "method: Newton" in out


def test_main_secant_with_seeded_guess(capsys) -> None:
    code = entry.main(["1*x1 + 1*x2 + (-2) = 0", "1*x1 + (-1)*x2 = 0",
                       "--method", "secant", "--seed", "3"])
    assert code == 0
    assert "method: Secant" in capsys.readouterr().out


def test_main_reports_parse_error(capsys) -> None:
    code = entry.main(["2*x1 + x2", "x1 = 0", "--x0", "0", "0"])
    assert code == 2
    assert capsys.readouterr().err.startswith("ERROR: ")


def test_main_reports_non_convergence(capsys) -> None:
    # x1² + 1 = 0 has no real root
    code = entry.main(["1*x1*x1 + 1 = 0", "1*x2 = 0", "--x0", "0.5", "0",
                       "--max-iterations", "10"])
    assert code == 1
    assert "converged: False" in capsys.readouterr().out


def test_parser_defaults_follow_settings() -> None:
    settings.save_settings({"method": "secant", "max_iterations": 42})
    args = entry.build_parser().parse_args(["x1 = 0", "x2 = 0"])
    assert args.method == "secant"
    assert args.max_iterations == 42
    assert args.x0 is None


def test_verbose_flag_sets_debug(monkeypatch) -> None:
    seen = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: seen.update(kw))
    entry.main(["1*x1 = 0", "1*x2 = 0", "--x0", "1", "1", "-v"])
    assert seen["level"] == logging.DEBUG
