"""
Example: hook-driven descent with hookopt

This example shows plain gradient descent, projected gradient descent on the
simplex, and Halpern-anchored descent selecting one minimizer out of a line of
minimizers. Every run is terminated by hooks.
"""

import numpy as np

from hookopt import (
    GradientDescentState,
    HalpernIteration,
    Problem,
    ProjectedGradientDescentState,
    StopAfterIteration,
    StopWhen,
    StopWhenChangeLess,
    harmonic_schedule,
    minimize,
    simplex_projection,
)


def sum_of_squares() -> Problem:
    return Problem(fun=lambda x: float(np.sum(x**2)), grad=lambda x: 2.0 * x, dim=2)


def example_gradient_descent():
    print("=" * 60)
    print("Example 1: Gradient descent on sum(x^2)")
    print("=" * 60)
    state = GradientDescentState(
        np.array([100.0, 50.0]),
        step_size=0.1,
        hooks=[StopWhen(lambda s: np.linalg.norm(s.x) < 1e-8)],
    )
    sol = minimize(sum_of_squares(), state)
    print(f"Status: {sol.status}")
    print(f"Solution: x = {sol.x}")
    print(f"Iterations: {sol.nit}")
    print()


def example_projected_gradient_descent():
    print("=" * 60)
    print("Example 2: Projected gradient descent on the unit simplex")
    print("=" * 60)
    state = ProjectedGradientDescentState(
        np.array([100.0, 50.0]),
        step_size=0.1,
        projection=simplex_projection(1.0),
        hooks=[StopWhenChangeLess(1e-12), StopAfterIteration(1_000)],
    )
    sol = minimize(sum_of_squares(), state)
    print(f"Status: {sol.status}")
    print(f"Solution: x = {sol.x}")
    print(f"Iterations: {sol.nit}")
    print()


def example_halpern_anchoring():
    print("=" * 60)
    print("Example 3: Halpern anchoring picks the minimizer nearest the anchor")
    print("=" * 60)
    a = np.array([1.0, 1.0])
    problem = Problem(
        fun=lambda x: 0.5 * (a @ x - 1.0) ** 2,
        grad=lambda x: (a @ x - 1.0) * a,
        dim=2,
    )
    anchor = np.array([3.0, 0.0])
    state = GradientDescentState(
        np.array([100.0, 50.0]),
        step_size=0.25,
        hooks=[HalpernIteration(anchor, harmonic_schedule), StopAfterIteration(5_000)],
    )
    sol = minimize(problem, state)
    print(f"Anchor: {anchor}")
    print(f"Anchored solution: x = {sol.x}")
    print("Nearest minimizer to the anchor: [2. -1.]")
    print()


if __name__ == "__main__":
    example_gradient_descent()
    example_projected_gradient_descent()
    example_halpern_anchoring()
    print("All examples completed")
