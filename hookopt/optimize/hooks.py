"""
Capability-tagged hooks injected into the driver loop.

A hook declares what it can do through :class:`Capability` and implements the
matching method:

* ``IS_STOPPING_CONDITION`` -> :meth:`Hook.is_stopping_condition`
* ``RUN_AFTER_ITERATION``   -> :meth:`Hook.run_after_iteration`

Each iteration the driver first feeds the raw step-rule output through every
``RUN_AFTER_ITERATION`` hook in list order, each one consuming the previous
hook's output, then evaluates the ``IS_STOPPING_CONDITION`` hooks in list
order and stops on the first one that returns True. Reordering hooks changes
the result.
"""

from __future__ import annotations

from enum import Flag, auto
from typing import TYPE_CHECKING, Any, Callable, List, Mapping, Optional, Sequence

import numpy as np

from .core import Array, ConfigurationError

if TYPE_CHECKING:
    from .state import AlgorithmState

Predicate = Callable[..., bool]


class Capability(Flag):
    """Capabilities a hook can declare."""

    NONE = 0
    IS_STOPPING_CONDITION = auto()
    RUN_AFTER_ITERATION = auto()


_CAPABILITY_METHODS = {
    Capability.IS_STOPPING_CONDITION: "is_stopping_condition",
    Capability.RUN_AFTER_ITERATION: "run_after_iteration",
}


class Hook:
    """
    Base class for injected behaviour.

    Subclasses set the class attribute ``capabilities`` and override the
    method belonging to every capability they declare; this is enforced when
    the subclass is defined. Hooks may keep private counters but must not
    touch the algorithm configuration held by the state.
    """

    capabilities: Capability = Capability.NONE

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for capability, method in _CAPABILITY_METHODS.items():
            if capability in cls.capabilities and getattr(cls, method) is getattr(Hook, method):
                raise TypeError(
                    f"{cls.__name__} declares {capability.name} but does not implement {method}()"
                )

    def supports(self, capability: Capability) -> bool:
        """Return True if this hook declares ``capability``."""
        if capability is Capability.NONE:
            raise ValueError("query a concrete capability, not Capability.NONE")
        return capability in self.capabilities

    def is_stopping_condition(self, state: "AlgorithmState", context: Mapping[str, Any]) -> bool:
        raise NotImplementedError(f"{type(self).__name__} is not a stopping condition")

    def run_after_iteration(self, state: "AlgorithmState") -> Array:
        raise NotImplementedError(f"{type(self).__name__} does not transform iterates")

    def check(self, state: "AlgorithmState") -> None:
        """Validate against the state at run start. Default: nothing to check."""

    def reset(self) -> None:
        """Clear private counters. Default: nothing to clear."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def stopping_hooks(hooks: Sequence[Hook]) -> List[Hook]:
    """Return the stopping-condition hooks of ``hooks`` in order."""
    return [h for h in hooks if h.supports(Capability.IS_STOPPING_CONDITION)]


def transform_hooks(hooks: Sequence[Hook]) -> List[Hook]:
    """Return the post-iteration hooks of ``hooks`` in order."""
    return [h for h in hooks if h.supports(Capability.RUN_AFTER_ITERATION)]


def validate_hooks(hooks: Sequence[Any]) -> None:
    """
    Check that ``hooks`` holds Hook instances and at least one stopping hook.

    Raises:
        ConfigurationError: Otherwise. Without a stopping hook the driver
            loop could never terminate.
    """
    for position, hook in enumerate(hooks):
        if not isinstance(hook, Hook):
            raise ConfigurationError(
                f"hooks[{position}] must be a Hook instance, got {type(hook).__name__}"
            )
    if not stopping_hooks(hooks):
        raise ConfigurationError(
            "no hook supports IS_STOPPING_CONDITION; the run could never terminate"
        )


class StopWhen(Hook):
    """
    Stopping hook wrapping ``predicate(state, **context) -> bool``.

    The context holds the named values passed to ``minimize``; a predicate
    that ignores some of them should accept ``**kwargs``.

    Example:
        >>> stop = StopWhen(lambda state, z: np.linalg.norm(state.x - z) < 1e-6)
    """

    capabilities = Capability.IS_STOPPING_CONDITION

    def __init__(self, predicate: Predicate) -> None:
        if not callable(predicate):
            raise TypeError(f"predicate must be callable, got {type(predicate)}")
        self.predicate = predicate

    def is_stopping_condition(self, state: "AlgorithmState", context: Mapping[str, Any]) -> bool:
        return bool(self.predicate(state, **context))

    def __repr__(self) -> str:
        return f"StopWhen({getattr(self.predicate, '__name__', self.predicate)!r})"


class StopAfterIteration(Hook):
    """Stop once ``max_iter`` iterations have completed."""

    capabilities = Capability.IS_STOPPING_CONDITION

    def __init__(self, max_iter: int) -> None:
        if int(max_iter) < 1:
            raise ValueError(f"max_iter must be at least 1, got {max_iter}")
        self.max_iter = int(max_iter)

    def is_stopping_condition(self, state: "AlgorithmState", context: Mapping[str, Any]) -> bool:
        return state.k >= self.max_iter

    def __repr__(self) -> str:
        return f"StopAfterIteration({self.max_iter})"


class StopWhenChangeLess(Hook):
    """
    Stop when consecutive iterates are closer than ``tol``.

    The previous iterate is captured at run start and after every check.
    """

    capabilities = Capability.IS_STOPPING_CONDITION

    def __init__(self, tol: float) -> None:
        if not tol > 0:
            raise ValueError(f"tol must be positive, got {tol}")
        self.tol = float(tol)
        self._previous: Optional[Array] = None

    def check(self, state: "AlgorithmState") -> None:
        self._previous = state.x.copy()

    def reset(self) -> None:
        self._previous = None

    def is_stopping_condition(self, state: "AlgorithmState", context: Mapping[str, Any]) -> bool:
        previous, self._previous = self._previous, state.x.copy()
        if previous is None:
            return False
        return float(np.linalg.norm(state.x - previous)) < self.tol

    def __repr__(self) -> str:
        return f"StopWhenChangeLess({self.tol!r})"


class StopWhenGradientNormLess(Hook):
    """
    Stop when the gradient norm seen by the last step falls below ``tol``.

    The gradient is the one the step rule evaluated at the pre-step iterate.
    For projected steps it does not vanish at constrained optima.
    """

    capabilities = Capability.IS_STOPPING_CONDITION

    def __init__(self, tol: float) -> None:
        if not tol > 0:
            raise ValueError(f"tol must be positive, got {tol}")
        self.tol = float(tol)

    def is_stopping_condition(self, state: "AlgorithmState", context: Mapping[str, Any]) -> bool:
        return state.grad_norm < self.tol

    def __repr__(self) -> str:
        return f"StopWhenGradientNormLess({self.tol!r})"


class RecordIterates(Hook):
    """Identity transform keeping a copy of every ``every``-th iterate."""

    capabilities = Capability.RUN_AFTER_ITERATION

    def __init__(self, every: int = 1) -> None:
        if int(every) < 1:
            raise ValueError(f"every must be at least 1, got {every}")
        self.every = int(every)
        self.history: List[Array] = []
        self._calls = 0

    def run_after_iteration(self, state: "AlgorithmState") -> Array:
        self._calls += 1
        if self._calls % self.every == 0:
            self.history.append(state.x.copy())
        return state.x

    def reset(self) -> None:
        self.history = []
        self._calls = 0

    def __repr__(self) -> str:
        return f"RecordIterates(every={self.every})"


__all__ = [
    "Capability",
    "Hook",
    "Predicate",
    "StopWhen",
    "StopAfterIteration",
    "StopWhenChangeLess",
    "StopWhenGradientNormLess",
    "RecordIterates",
    "stopping_hooks",
    "transform_hooks",
    "validate_hooks",
]
