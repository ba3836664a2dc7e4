"""Hook-driven iterative optimisation.

Example
-------
>>> import numpy as np
>>> from hookopt.optimize import GradientDescentState, Problem, StopWhen, minimize
>>> problem = Problem(fun=lambda x: float(x @ x), grad=lambda x: 2 * x, dim=2)
>>> stop = StopWhen(lambda state: np.linalg.norm(state.x) < 1e-8)
>>> state = GradientDescentState(np.array([3.0, -4.0]), step_size=0.1, hooks=[stop])
>>> sol = minimize(problem, state)
>>> bool(np.linalg.norm(sol.x) < 1e-8)
True
"""

from .core import (
    ConfigurationError,
    HookoptError,
    Problem,
    Solution,
    Status,
)
from .driver import get_iterate, minimize, minimize_inplace
from .halpern import HalpernIteration, halpern_schedule, harmonic_schedule
from .hooks import (
    Capability,
    Hook,
    RecordIterates,
    StopAfterIteration,
    StopWhen,
    StopWhenChangeLess,
    StopWhenGradientNormLess,
)
from .state import AlgorithmState, GradientDescentState, ProjectedGradientDescentState
from .utils import approx_grad, autograd_gradient

__all__ = [
    "AlgorithmState",
    "Capability",
    "ConfigurationError",
    "GradientDescentState",
    "HalpernIteration",
    "Hook",
    "HookoptError",
    "Problem",
    "ProjectedGradientDescentState",
    "RecordIterates",
    "Solution",
    "Status",
    "StopAfterIteration",
    "StopWhen",
    "StopWhenChangeLess",
    "StopWhenGradientNormLess",
    "approx_grad",
    "autograd_gradient",
    "get_iterate",
    "halpern_schedule",
    "harmonic_schedule",
    "minimize",
    "minimize_inplace",
]
