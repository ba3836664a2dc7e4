"""
Euclidean projection operators onto simple constraint sets.

Every operator is a pure function of a 1D real vector: it returns a new array,
never aliases its input, and returns points already in the target set
unchanged up to floating-point rounding. Extra parameters are bound with the
``*_projection`` constructors, which return single-argument callables that
projected gradient descent can use directly.

References:
    - J. Duchi et al., *Efficient projections onto the l1-ball for learning
      in high dimensions*, ICML (2008)
    - A. Kyrillidis et al., *Sparse projections onto the simplex*, ICML (2013)
"""

from __future__ import annotations

import math
from functools import partial
from typing import Any, Optional, Sequence

import numpy as np

from ..optimize.core import Array, Projection


def _as_vector(x: Any) -> Array:
    arr = np.array(x, dtype=float, copy=True)
    if arr.ndim != 1 or arr.size == 0:
        raise ValueError(f"input must be a non-empty 1D array, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError("input must contain only finite values")
    return arr


def _check_sigma(sigma: float) -> float:
    sigma = float(sigma)
    if not math.isfinite(sigma) or sigma <= 0.0:
        raise ValueError(f"sigma must be positive and finite, got {sigma}")
    return sigma


def _check_budget(k: int, upper: int, name: str = "k") -> int:
    if int(k) != k or k < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {k}")
    return min(int(k), upper)


def _top_k(scores: Array, k: int) -> Array:
    """Indices of the ``k`` largest scores; equal scores keep the lowest index."""
    return np.argsort(-scores, kind="stable")[:k]


def project_simplex(x: Any, sigma: float = 1.0) -> Array:
    """
    Project ``x`` onto the scaled simplex ``{y >= 0 : sum(y) = sigma}``.

    Sort-based exact projection in ``O(d log d)``: with ``u`` the coordinates
    sorted in descending order, ``rho`` is the largest index for which
    ``u_rho - (sum_{i<=rho} u_i - sigma) / rho > 0`` and the result is
    ``max(x - tau, 0)`` with ``tau = (sum_{i<=rho} u_i - sigma) / rho``.

    The projection is invariant to adding a constant to every coordinate, so
    the input is shifted by its maximum first to keep the cumulative sums
    small.

    Raises:
        ValueError: For non-1D or non-finite input, or ``sigma <= 0``.
    """
    sigma = _check_sigma(sigma)
    x = _as_vector(x)
    shifted = x - x.max()
    u = np.sort(shifted)[::-1]
    cssv = np.cumsum(u) - sigma
    ind = np.arange(1, u.size + 1)
    rho = int(np.nonzero(u - cssv / ind > 0)[0][-1]) + 1
    tau = cssv[rho - 1] / rho
    return np.maximum(shifted - tau, 0.0)


def simplex_projection(sigma: float = 1.0) -> Projection:
    """Return ``project_simplex`` with ``sigma`` bound."""
    return partial(project_simplex, sigma=_check_sigma(sigma))


def gssp(x: Any, k: int, sigma: float = 1.0) -> Array:
    """
    Greedy Selector and Simplex Projector.

    Exact Euclidean projection onto the k-sparse scaled simplex
    ``{y >= 0 : sum(y) = sigma, |supp(y)| <= k}``: keep the ``k`` largest
    coordinates, project them onto the ``sigma``-simplex and zero the rest.
    Equal values are selected lowest index first.

    Raises:
        ValueError: For invalid input, ``sigma <= 0`` or ``k < 1``.
    """
    sigma = _check_sigma(sigma)
    x = _as_vector(x)
    k = _check_budget(k, x.size)
    if k < 1:
        raise ValueError("k must be at least 1: the sparse simplex is empty otherwise")
    support = _top_k(x, k)
    out = np.zeros_like(x)
    out[support] = project_simplex(x[support], sigma)
    return out


def gssp_projection(k: int, sigma: float = 1.0) -> Projection:
    """Return ``gssp`` with ``k`` and ``sigma`` bound."""
    if int(k) != k or k < 1:
        raise ValueError(f"k must be a positive integer, got {k}")
    return partial(gssp, k=int(k), sigma=_check_sigma(sigma))


def _check_groups(groups: Sequence[Any], dim: int) -> list[Array]:
    checked = []
    seen = np.zeros(dim, dtype=bool)
    for position, group in enumerate(groups):
        idx = np.asarray(group, dtype=int).reshape(-1)
        if idx.size == 0:
            raise ValueError(f"groups[{position}] is empty")
        if idx.min() < 0 or idx.max() >= dim:
            raise ValueError(f"groups[{position}] has indices outside [0, {dim})")
        if np.any(seen[idx]) or np.unique(idx).size != idx.size:
            raise ValueError(f"groups[{position}] overlaps another group")
        seen[idx] = True
        checked.append(idx)
    return checked


def hard_threshold(x: Any, k: int, groups: Optional[Sequence[Any]] = None) -> Array:
    """
    Project ``x`` onto the set of k-sparse (or k-group-sparse) vectors.

    Without ``groups`` the ``k`` coordinates of largest magnitude are kept.
    With ``groups`` (disjoint index sequences) the ``k`` groups of largest
    Euclidean norm are kept and coordinates outside any group are zeroed.
    Ties go to the lowest coordinate index, or to the group listed first.

    Raises:
        ValueError: For invalid input, a negative budget, or overlapping or
            out-of-range groups.
    """
    x = _as_vector(x)
    out = np.zeros_like(x)
    if groups is None:
        keep = _top_k(np.abs(x), _check_budget(k, x.size))
        out[keep] = x[keep]
        return out
    checked = _check_groups(groups, x.size)
    norms = np.array([np.linalg.norm(x[idx]) for idx in checked])
    for position in _top_k(norms, _check_budget(k, len(checked))):
        idx = checked[position]
        out[idx] = x[idx]
    return out


def sparse_projection(k: int, groups: Optional[Sequence[Any]] = None) -> Projection:
    """Return ``hard_threshold`` with ``k`` and ``groups`` bound."""
    if int(k) != k or k < 0:
        raise ValueError(f"k must be a non-negative integer, got {k}")
    if groups is not None:
        groups = [np.asarray(g, dtype=int).reshape(-1) for g in groups]
    return partial(hard_threshold, k=int(k), groups=groups)


def project_box(x: Any, lb: Optional[Any] = None, ub: Optional[Any] = None) -> Array:
    """
    Project ``x`` onto the box defined by ``lb`` and ``ub``.

    Bounds may be scalars or vectors; ``None`` leaves that side unbounded.

    Raises:
        ValueError: If some lower bound exceeds the matching upper bound.
    """
    projected = _as_vector(x)
    if lb is not None and ub is not None and np.any(np.asarray(lb) > np.asarray(ub)):
        raise ValueError("lower bound must not exceed upper bound")
    if lb is not None:
        projected = np.maximum(projected, lb)
    if ub is not None:
        projected = np.minimum(projected, ub)
    return projected


def box_projection(lb: Optional[Any] = None, ub: Optional[Any] = None) -> Projection:
    """Return ``project_box`` with the bounds bound."""
    return partial(project_box, lb=lb, ub=ub)


__all__ = [
    "project_simplex",
    "simplex_projection",
    "gssp",
    "gssp_projection",
    "hard_threshold",
    "sparse_projection",
    "project_box",
    "box_projection",
]
