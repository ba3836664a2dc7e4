"""
Algorithm states and their step rules.

A state owns everything a run mutates: the iterate ``x``, the iteration
counter ``k``, the step size, the ordered hook list and rule-specific
configuration. ``step`` computes the raw next iterate without storing it; the
driver loop stores it, runs the post-iteration hooks and the stopping checks.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional

import numpy as np

from .core import Array, ConfigurationError, Problem, Projection
from .hooks import Hook, validate_hooks
from .utils import as_iterate, compute_gradient, is_finite


class AlgorithmState(ABC):
    """
    Base class for the mutable record shared by all step rules.

    Subclasses implement :meth:`step`; the base itself cannot be instantiated.

    Args:
        x: Initial iterate. Its dimension is fixed for the whole run.
        step_size: Positive, finite step size η.
        hooks: Ordered hooks. May be empty at construction but a run refuses
            to start without at least one stopping hook.

    Attributes:
        k: Completed iterations.
        grad_norm: Norm of the last gradient evaluated by ``step``.
        nfev: Objective evaluations spent by the step rule.
        njev: Gradient evaluations spent by the step rule.

    Raises:
        ConfigurationError: For a missing or invalid option, or a non-empty
            hook list without any stopping hook.
    """

    def __init__(self, x: Any, step_size: Optional[float], hooks: Iterable[Hook] = ()) -> None:
        self.x = as_iterate(x)
        if step_size is None:
            raise ConfigurationError("step_size is required")
        step_size = float(step_size)
        if not math.isfinite(step_size) or step_size <= 0.0:
            raise ConfigurationError(f"step_size must be positive and finite, got {step_size}")
        self.step_size = step_size
        self.hooks: List[Hook] = list(hooks)
        if self.hooks:
            validate_hooks(self.hooks)
        self.k = 0
        self.grad_norm = math.nan
        self.nfev = 0
        self.njev = 0

    @property
    def dim(self) -> int:
        return int(self.x.size)

    @abstractmethod
    def step(self, problem: Problem) -> Array:
        """
        Return the raw next iterate for ``problem`` without storing it.

        Implementations set ``grad_norm`` and the evaluation counters. A
        non-finite result is returned as is; the driver turns it into
        ``Status.NUMERICAL_ERROR``.
        """
        pass

    def check(self, problem: Problem) -> None:
        """
        Validate the state against ``problem`` before a run.

        Raises:
            ConfigurationError: If the hooks cannot stop the run, a hook
                rejects the state, or ``problem.dim`` disagrees with ``x``.
        """
        validate_hooks(self.hooks)
        if problem.dim is not None and int(problem.dim) != self.dim:
            raise ConfigurationError(
                f"problem dimension {problem.dim} does not match iterate dimension {self.dim}"
            )
        for hook in self.hooks:
            hook.check(self)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(x={self.x!r}, step_size={self.step_size}, "
            f"k={self.k}, hooks={self.hooks!r})"
        )


class GradientDescentState(AlgorithmState):
    """
    Gradient descent: ``x_{k+1} = x_k - η ∇f(x_k)``.

    For convex, L-smooth ``f`` and ``η < 2/L`` the objective values are
    non-increasing. The rule has no stopping logic of its own.
    """

    def step(self, problem: Problem) -> Array:
        grad, fev, jev = compute_gradient(problem, self.x)
        self.nfev += fev
        self.njev += jev
        if grad.shape != self.x.shape:
            raise ConfigurationError(
                f"gradient has shape {grad.shape}, iterate has shape {self.x.shape}"
            )
        self.grad_norm = float(np.linalg.norm(grad))
        return self.x - self.step_size * grad


class ProjectedGradientDescentState(GradientDescentState):
    """
    Projected gradient descent: ``x_{k+1} = t(x_k - η ∇f(x_k))``.

    Args:
        projection: Single-argument projection ``t`` onto the feasible set.
            Bind extra parameters beforehand, e.g. with
            :func:`hookopt.convex.simplex_projection` or
            ``functools.partial``.

    Every iterate after the first step is feasible.
    """

    def __init__(
        self,
        x: Any,
        step_size: Optional[float],
        projection: Optional[Projection],
        hooks: Iterable[Hook] = (),
    ) -> None:
        if projection is None:
            raise ConfigurationError("projection is required for projected gradient descent")
        if not callable(projection):
            raise ConfigurationError(f"projection must be callable, got {type(projection)}")
        super().__init__(x, step_size, hooks)
        self.projection = projection

    def _project(self, y: Array) -> Array:
        projected = np.asarray(self.projection(y), dtype=float)
        if projected.shape != y.shape:
            raise ConfigurationError(
                f"projection returned shape {projected.shape}, iterate has shape {y.shape}"
            )
        return projected

    def check(self, problem: Problem) -> None:
        super().check(problem)
        self._project(self.x.copy())

    def step(self, problem: Problem) -> Array:
        y = super().step(problem)
        # Non-finite points are left for the driver to report, never projected.
        if not math.isfinite(self.grad_norm) or not is_finite(y):
            return y
        return self._project(y)


__all__ = ["AlgorithmState", "GradientDescentState", "ProjectedGradientDescentState"]
