"""
Run one solve on a background worker under a wall-clock deadline.

The solve itself is synchronous; the worker keeps the caller responsive
and the shared :class:`CancellationToken` lets a timeout stop the
iteration at its next check instead of abandoning a running thread.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout

from nlsolver import engine
from nlsolver.cancellation import CancellationToken
from nlsolver.errors import SolveCancelled

logger = logging.getLogger(__name__)


def solve_with_deadline(equations, x0, epsilon, method, max_iterations,
                        timeout_seconds: float = 120.0, cancel_token=None):
    """Solve on a worker thread; raise :class:`SolveCancelled` past *timeout_seconds*."""
    token = cancel_token if cancel_token is not None else CancellationToken()
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="nlsolver") as pool:
        future = pool.submit(
            engine.solve, equations, x0, epsilon, method, max_iterations,
            cancel_token=token,
        )
        try:
            return future.result(timeout=timeout_seconds)
        except FuturesTimeout:
            token.cancel()
            logger.warning("Solve exceeded %.1fs deadline; cancelling", timeout_seconds)
            raise SolveCancelled(
                f"Solve did not finish within {timeout_seconds:g} seconds."
            )
