"""
NonlinearSolver — Entry point.

Solve a system from the command line, e.g.::

    python main.py "1*x1 + 1*x2 + (-2) = 0" "1*x1 + (-1)*x2 = 0" --x0 0 0
"""

import argparse
import logging
import sys

from nlsolver import engine, settings
from nlsolver.generator import generate_initial_guess, make_rng


def build_parser() -> argparse.ArgumentParser:
    defaults = settings.get_settings()
    parser = argparse.ArgumentParser(description="Solve a system of nonlinear equations.")
    parser.add_argument("equations", nargs="+", help='equations like "2*x1 + x2 = 0"')
    parser.add_argument("--x0", nargs="+", type=float, default=None,
                        help="initial guess (random when omitted)")
    parser.add_argument("--method", default=defaults["method"], choices=["newton", "secant"])
    parser.add_argument("--epsilon", type=float, default=defaults["epsilon"])
    parser.add_argument("--max-iterations", type=int, default=defaults["max_iterations"])
    parser.add_argument("--seed", type=int, default=None, help="seed for the random initial guess")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every iteration")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    x0 = args.x0
    if x0 is None:
        x0 = generate_initial_guess(len(args.equations), make_rng(args.seed))

    try:
        result = engine.solve(args.equations, x0, args.epsilon,
                              method=args.method, max_iterations=args.max_iterations)
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    for i, value in enumerate(result.solution, 1):
        print(f"x{i} = {value:.10g}")
    print(f"method: {result.method_used}  iterations: {result.iterations}  "
          f"error: {result.final_error:.3e}  converged: {result.converged}")
    return 0 if result.converged else 1


if __name__ == "__main__":
    sys.exit(main())
