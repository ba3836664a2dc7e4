"""
Halpern (anchored) iteration as a post-iteration hook.

Given the raw output ``T(x_k)`` of a step rule, treated as the value of a
non-expansive map ``T``, the hook returns

    x_{k+1} = λ_{k+1} x₀ + (1 - λ_{k+1}) T(x_k)

for a fixed anchor ``x₀``. For schedules with ``λ_k -> 0``, ``Σ λ_k = ∞`` and
``Σ |λ_{k+1} - λ_k| < ∞`` the iterates converge to the fixed point of ``T``
nearest to the anchor. For a gradient step with admissible step size the fixed
points of ``T`` are the minimizers of ``f``, so the run selects the minimizer
closest to ``x₀``.

The schedule conditions are not checked at runtime; a schedule violating them
still runs but loses the convergence guarantee.

References:
    - B. Halpern, *Fixed points of nonexpanding maps*, Bull. AMS 73 (1967)
    - R. Wittmann, *Approximation of fixed points of nonexpansive mappings*,
      Arch. Math. 58 (1992)
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Callable

import numpy as np

from .core import Array, ConfigurationError
from .hooks import Capability, Hook

if TYPE_CHECKING:
    from .state import AlgorithmState

Schedule = Callable[[int], float]


def harmonic_schedule(k: int) -> float:
    """λ_k = 1/k. Returns the anchor itself on the first call."""
    return 1.0 / k


def halpern_schedule(k: int) -> float:
    """λ_k = 1/(k + 1)."""
    return 1.0 / (k + 1)


class HalpernIteration(Hook):
    """
    Anchor every iterate towards ``anchor`` with weights from ``schedule``.

    Args:
        anchor: Fixed anchor point, same dimension as the iterate.
        schedule: Maps the 1-based call index to a weight in ``[0, 1]``.
            The hook keeps the index itself; the m-th transform uses
            ``schedule(m)``.

    Raises:
        ValueError: From :meth:`run_after_iteration` when the schedule returns
            a non-finite value or one outside ``[0, 1]``.
    """

    capabilities = Capability.RUN_AFTER_ITERATION

    def __init__(self, anchor: Any, schedule: Schedule = harmonic_schedule) -> None:
        if not callable(schedule):
            raise TypeError(f"schedule must be callable, got {type(schedule)}")
        anchor = np.array(anchor, dtype=float, copy=True)
        if anchor.ndim != 1 or not np.all(np.isfinite(anchor)):
            raise ConfigurationError("anchor must be a finite 1D vector")
        self.anchor = anchor
        self.schedule = schedule
        self._k = 0

    @property
    def step_index(self) -> int:
        """Number of transforms applied so far."""
        return self._k

    def check(self, state: "AlgorithmState") -> None:
        if self.anchor.shape != state.x.shape:
            raise ConfigurationError(
                f"anchor has shape {self.anchor.shape}, iterate has shape {state.x.shape}"
            )

    def reset(self) -> None:
        self._k = 0

    def run_after_iteration(self, state: "AlgorithmState") -> Array:
        self._k += 1
        lam = float(self.schedule(self._k))
        if not math.isfinite(lam) or not 0.0 <= lam <= 1.0:
            raise ValueError(f"schedule({self._k}) = {lam} is not in [0, 1]")
        return lam * self.anchor + (1.0 - lam) * state.x

    def __repr__(self) -> str:
        return f"HalpernIteration(anchor={self.anchor.tolist()!r}, step_index={self._k})"


__all__ = ["Schedule", "HalpernIteration", "harmonic_schedule", "halpern_schedule"]
