"""Core interfaces shared by the step rules, hooks and the driver loop."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional

import numpy as np

if TYPE_CHECKING:
    from .state import AlgorithmState

Array = np.ndarray
Objective = Callable[[Array], float]
Gradient = Callable[[Array], Array]
Projection = Callable[[Array], Array]


class HookoptError(Exception):
    """Base class for errors raised by hookopt."""


class ConfigurationError(HookoptError, ValueError):
    """Raised before a run starts when the algorithm state cannot be run.

    Missing or invalid options, a hook list without any stopping condition
    and dimension mismatches between the iterate, an anchor or a projection
    output all end up here.
    """


class Status(Enum):
    """Exit status of a run."""

    STOPPED = "stopped"
    NUMERICAL_ERROR = "numerical_error"


@dataclass(frozen=True)
class Problem:
    """Objective of a run.

    ``fun`` maps an iterate to a scalar. ``grad`` maps an iterate to the
    gradient; when omitted a central finite-difference approximation is used.
    ``dim``, when given, is checked against the initial iterate.
    """

    fun: Objective
    grad: Optional[Gradient] = None
    dim: Optional[int] = None

    def __post_init__(self) -> None:
        if not callable(self.fun):
            raise TypeError(f"fun must be callable, got {type(self.fun)}")
        if self.grad is not None and not callable(self.grad):
            raise TypeError(f"grad must be callable, got {type(self.grad)}")
        if self.dim is not None and int(self.dim) < 1:
            raise ValueError(f"dim must be a positive integer, got {self.dim}")


def as_problem(problem: Any) -> Problem:
    """Return ``problem`` as a :class:`Problem`, wrapping bare callables."""
    if isinstance(problem, Problem):
        return problem
    if callable(problem):
        return Problem(fun=problem)
    raise TypeError(f"expected a Problem or a callable objective, got {type(problem)}")


@dataclass
class Solution:
    """
    Result view over the final algorithm state of a run.

    Attributes:
        x: Final iterate (the same array object as ``state.x``).
        fun: Objective value at ``x``.
        nit: Number of completed iterations.
        status: How the run ended.
        message: Human-readable explanation of ``status``.
        grad_norm: Norm of the last gradient evaluated by the step rule.
        nfev: Objective evaluations, including finite-difference ones.
        njev: Calls to the user-supplied gradient.
        state: The algorithm state the run operated on.
    """

    x: Array
    fun: float
    nit: int
    status: Status
    message: str
    grad_norm: float
    nfev: int
    njev: int
    state: "AlgorithmState"

    @property
    def success(self) -> bool:
        return self.status is Status.STOPPED


__all__ = [
    "Array",
    "Objective",
    "Gradient",
    "Projection",
    "HookoptError",
    "ConfigurationError",
    "Status",
    "Problem",
    "as_problem",
    "Solution",
]
