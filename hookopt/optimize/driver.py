"""Driver loop: steps, hook dispatch and termination."""

from __future__ import annotations

import copy
import math
from typing import Any, Optional, Sequence

import numpy as np

from ..logging import get_logger
from .core import Array, ConfigurationError, Problem, Solution, Status, as_problem
from .hooks import Hook, stopping_hooks, transform_hooks
from .state import AlgorithmState
from .utils import is_finite

logger = get_logger(__name__)


def _advance(problem: Problem, state: AlgorithmState, transforms: Sequence[Hook]) -> Optional[str]:
    """Run one step plus transforms on ``state``; return a failure message or None.

    ``state.x`` is only overwritten with finite values.
    """
    candidate = state.step(problem)
    if not math.isfinite(state.grad_norm):
        return f"non-finite gradient at iteration {state.k + 1}"
    if not is_finite(candidate):
        return f"step produced a non-finite iterate at iteration {state.k + 1}"
    state.x = candidate
    for hook in transforms:
        candidate = np.asarray(hook.run_after_iteration(state), dtype=float)
        if candidate.shape != state.x.shape:
            raise ConfigurationError(
                f"{hook!r} returned shape {candidate.shape}, iterate has shape {state.x.shape}"
            )
        if not is_finite(candidate):
            return f"{hook!r} produced a non-finite iterate at iteration {state.k + 1}"
        state.x = candidate
    state.k += 1
    return None


def minimize_inplace(problem: Any, state: AlgorithmState, **context: Any) -> Solution:
    """
    Run ``state`` on ``problem`` until a stopping hook fires, mutating ``state``.

    Args:
        problem: :class:`Problem` or a bare objective callable (its gradient is
            then approximated by finite differences).
        state: Algorithm state; its iterate, counters and hooks are updated in
            place.
        **context: Named values handed to every stopping hook, e.g. a target
            point ``z``.

    Returns:
        Solution viewing the final state. A non-finite gradient, iterate or
        final objective value ends the run with ``Status.NUMERICAL_ERROR``
        and leaves the last finite iterate in ``state.x``.

    Raises:
        ConfigurationError: Before the first step if the state cannot run.
            A run without a firing stopping hook does not return.
    """
    problem = as_problem(problem)
    if not isinstance(state, AlgorithmState):
        raise TypeError(f"state must be an AlgorithmState, got {type(state).__name__}")
    state.check(problem)
    transforms = transform_hooks(state.hooks)
    stops = stopping_hooks(state.hooks)
    logger.info(
        "starting %s: dim=%d step_size=%g transforms=%d stopping=%d",
        type(state).__name__,
        state.dim,
        state.step_size,
        len(transforms),
        len(stops),
    )

    status = Status.STOPPED
    message = ""
    while True:
        failure = _advance(problem, state, transforms)
        if failure is not None:
            status = Status.NUMERICAL_ERROR
            message = failure
            break
        logger.debug("k=%d grad_norm=%.6e", state.k, state.grad_norm)
        fired = next((h for h in stops if h.is_stopping_condition(state, context)), None)
        if fired is not None:
            message = f"{fired!r} fired after {state.k} iterations"
            break

    value = float(problem.fun(state.x))
    state.nfev += 1
    if status is Status.STOPPED and not math.isfinite(value):
        status = Status.NUMERICAL_ERROR
        message = f"non-finite objective value after {state.k} iterations"

    if status is Status.NUMERICAL_ERROR:
        logger.warning("run terminated: %s", message)
    else:
        logger.info("run finished: %s, f=%.6e", message, value)

    return Solution(
        x=state.x,
        fun=value,
        nit=state.k,
        status=status,
        message=message,
        grad_norm=state.grad_norm,
        nfev=state.nfev,
        njev=state.njev,
        state=state,
    )


def minimize(problem: Any, state: AlgorithmState, **context: Any) -> Solution:
    """
    Run a deep copy of ``state``; the caller's state is left untouched.

    Hooks are copied along with the state, so their private counters in the
    caller's object are unchanged too. See :func:`minimize_inplace`.
    """
    if not isinstance(state, AlgorithmState):
        raise TypeError(f"state must be an AlgorithmState, got {type(state).__name__}")
    return minimize_inplace(problem, copy.deepcopy(state), **context)


def get_iterate(obj: Any) -> Array:
    """Return the current iterate of a state or the final iterate of a solution."""
    if isinstance(obj, (Solution, AlgorithmState)):
        return obj.x
    raise TypeError(f"expected a Solution or an AlgorithmState, got {type(obj).__name__}")


__all__ = ["minimize_inplace", "minimize", "get_iterate"]
