"""Pytest configuration and shared fixtures for hookopt tests.

This module provides:
- A deterministic numpy RNG fixture
- Global numpy/torch seeding for reproducible runs
- Small objective fixtures shared by the optimisation tests
"""

import os

import numpy as np
import pytest
import torch

from hookopt.optimize import Problem


def _seed() -> int:
    return int(os.environ.get("TEST_RNG_SEED", "0"))


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    return np.random.default_rng(_seed())


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Seed the global numpy and torch generators for every test."""
    np.random.seed(_seed())
    torch.manual_seed(_seed())


@pytest.fixture
def sum_of_squares() -> Problem:
    """f(x) = sum(x_i^2) with its exact gradient."""

    def fun(x: np.ndarray) -> float:
        return float(np.sum(x**2))

    def grad(x: np.ndarray) -> np.ndarray:
        return 2.0 * x

    return Problem(fun=fun, grad=grad)
