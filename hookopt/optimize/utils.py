"""Gradient helpers and iterate validation.

Gradients are either supplied with the :class:`~hookopt.optimize.core.Problem`,
approximated with central finite differences, or built from PyTorch autograd
for objectives written against ``torch`` tensors.
"""

from __future__ import annotations

from typing import Any, Callable

import numpy as np
import torch

from .core import Array, ConfigurationError, Gradient, Objective, Problem


def as_iterate(x: Any, name: str = "x") -> Array:
    """Return ``x`` as a fresh 1D float64 array or raise ConfigurationError."""
    if x is None:
        raise ConfigurationError(f"{name} is required")
    try:
        arr = np.array(x, dtype=float, copy=True)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be a real vector: {exc}") from exc
    if arr.ndim != 1 or arr.size == 0:
        raise ConfigurationError(
            f"{name} must be a non-empty 1D vector, got shape {arr.shape}"
        )
    if not np.all(np.isfinite(arr)):
        raise ConfigurationError(f"{name} must contain only finite values")
    return arr


def is_finite(x: Array) -> bool:
    """Return True if every entry of ``x`` is finite."""
    return bool(np.all(np.isfinite(x)))


def approx_grad(
    fun: Objective, x: Array, eps: float = 1e-6, return_evals: bool = False
) -> Array | tuple[Array, int]:
    """Compute a central-difference gradient approximation.

    Parameters
    ----------
    fun:
        Objective function returning a scalar given x.
    x:
        Point where the gradient is approximated.
    eps:
        Perturbation size for finite differences.
    return_evals:
        Also return the number of objective evaluations spent.
    """
    if eps <= 0:
        raise ValueError("eps must be positive")
    x = np.asarray(x, dtype=float)
    grad = np.zeros_like(x)
    step = np.zeros_like(x)
    for i in range(x.size):
        step[i] = eps
        grad[i] = (fun(x + step) - fun(x - step)) / (2.0 * eps)
        step[i] = 0.0
    if return_evals:
        return grad, 2 * x.size
    return grad


def autograd_gradient(fun: Callable[[torch.Tensor], torch.Tensor]) -> Gradient:
    """
    Build a NumPy gradient callable from a torch-differentiable objective.

    ``fun`` must accept a 1D float64 tensor and return a scalar tensor. The
    returned callable accepts and returns NumPy arrays, so it can be used as
    ``Problem.grad``.

    Raises (when the returned callable is invoked):
        ValueError: If ``fun`` does not return a scalar tensor.
        RuntimeError: If autograd produced no gradient for the input.
    """

    def grad(x: Array) -> Array:
        params = torch.as_tensor(np.asarray(x, dtype=float), dtype=torch.float64)
        params = params.clone().detach().requires_grad_(True)
        value = fun(params)
        if not isinstance(value, torch.Tensor) or value.ndim != 0:
            raise ValueError("objective must return a scalar tensor (0D)")
        (g,) = torch.autograd.grad(value, params, allow_unused=True)
        if g is None:
            raise RuntimeError("autograd did not produce a gradient for the iterate")
        return g.detach().cpu().numpy()

    return grad


def compute_gradient(problem: Problem, x: Array) -> tuple[Array, int, int]:
    """Return gradient along with (nfev_increment, njev_increment)."""
    if problem.grad is not None:
        return np.asarray(problem.grad(x), dtype=float), 0, 1
    grad, evals = approx_grad(problem.fun, x, return_evals=True)
    return grad, int(evals), 0


__all__ = [
    "as_iterate",
    "is_finite",
    "approx_grad",
    "autograd_gradient",
    "compute_gradient",
]
