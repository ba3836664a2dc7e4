"""Tests for the anchored (Halpern) post-iteration hook."""

import numpy as np
import pytest

from hookopt.optimize import (
    ConfigurationError,
    GradientDescentState,
    HalpernIteration,
    Problem,
    StopAfterIteration,
    StopWhen,
    StopWhenChangeLess,
    halpern_schedule,
    harmonic_schedule,
    minimize,
    minimize_inplace,
)


def test_first_transform_with_harmonic_schedule_returns_anchor(sum_of_squares):
    anchor = np.array([10.0, 10.0])
    state = GradientDescentState(
        np.array([100.0, 50.0]),
        0.1,
        hooks=[HalpernIteration(anchor, harmonic_schedule), StopAfterIteration(1)],
    )
    sol = minimize(sum_of_squares, state)
    assert np.allclose(sol.x, anchor)


def test_blend_uses_one_based_schedule_index(sum_of_squares):
    anchor = np.array([1.0, -1.0])
    seen = []

    def schedule(k):
        seen.append(k)
        return 0.25

    hook = HalpernIteration(anchor, schedule)
    state = GradientDescentState(np.array([4.0, 2.0]), 0.25, hooks=[hook, StopAfterIteration(2)])
    sol = minimize_inplace(sum_of_squares, state)
    # T(x) = 0.5 x for this step size
    x1 = 0.25 * anchor + 0.75 * (0.5 * np.array([4.0, 2.0]))
    x2 = 0.25 * anchor + 0.75 * (0.5 * x1)
    assert seen == [1, 2]
    assert hook.step_index == 2
    assert np.allclose(sol.x, x2)


def test_halpern_gradient_descent_converges_to_minimizer(sum_of_squares):
    # With λ_k = 1/k the iterates behave like 5 x₀ / k, so the successive
    # change drops below 1e-6 once k is in the thousands.
    anchor = np.array([10.0, 10.0])
    state = GradientDescentState(
        np.array([100.0, 50.0]),
        0.1,
        hooks=[
            HalpernIteration(anchor, lambda k: 1.0 / k),
            StopWhenChangeLess(1e-6),
            StopAfterIteration(50_000),
        ],
    )
    sol = minimize(sum_of_squares, state)
    assert sol.success
    assert sol.nit < 50_000
    assert np.linalg.norm(sol.x) < 1e-2
    assert np.allclose(sol.x * sol.nit, 5.0 * anchor, rtol=1e-2)


def test_halpern_selects_minimizer_nearest_anchor():
    # f(x) = 0.5 (x1 + x2 - 1)^2 is minimized on a whole line.
    a = np.array([1.0, 1.0])
    problem = Problem(
        fun=lambda x: 0.5 * (a @ x - 1.0) ** 2,
        grad=lambda x: (a @ x - 1.0) * a,
    )
    x0 = np.array([100.0, 50.0])
    anchor = np.array([3.0, 0.0])

    plain = GradientDescentState(x0, 0.25, hooks=[StopAfterIteration(200)])
    anchored = GradientDescentState(
        x0,
        0.25,
        hooks=[HalpernIteration(anchor, harmonic_schedule), StopAfterIteration(5_000)],
    )
    plain_sol = minimize(problem, plain)
    anchored_sol = minimize(problem, anchored)

    # Plain descent lands on the projection of its start point, the anchored
    # run on the projection of the anchor.
    assert np.allclose(plain_sol.x, [25.5, -24.5], atol=1e-8)
    assert np.allclose(anchored_sol.x, [2.0, -1.0], atol=1e-3)


def test_halpern_schedule_alternative_never_hits_anchor(sum_of_squares):
    anchor = np.array([1.0, 1.0])
    state = GradientDescentState(
        np.array([2.0, 2.0]), 0.25, hooks=[HalpernIteration(anchor, halpern_schedule), StopAfterIteration(1)]
    )
    sol = minimize(sum_of_squares, state)
    assert np.allclose(sol.x, 0.5 * anchor + 0.5 * np.array([1.0, 1.0]))


def test_minimize_does_not_advance_callers_hook(sum_of_squares):
    hook = HalpernIteration(np.zeros(2))
    state = GradientDescentState(np.ones(2), 0.1, hooks=[hook, StopAfterIteration(3)])
    minimize(sum_of_squares, state)
    assert hook.step_index == 0
    minimize_inplace(sum_of_squares, state)
    assert hook.step_index == 3
    hook.reset()
    assert hook.step_index == 0


def test_anchor_dimension_mismatch_is_configuration_error(sum_of_squares):
    state = GradientDescentState(
        np.ones(3), 0.1, hooks=[HalpernIteration(np.zeros(2)), StopAfterIteration(1)]
    )
    with pytest.raises(ConfigurationError, match="anchor has shape"):
        minimize(sum_of_squares, state)


def test_invalid_anchor_and_schedule():
    with pytest.raises(ConfigurationError):
        HalpernIteration(np.array([np.inf, 0.0]))
    with pytest.raises(TypeError):
        HalpernIteration(np.zeros(2), schedule=0.5)


def test_schedule_value_outside_unit_interval_raises(sum_of_squares):
    state = GradientDescentState(
        np.ones(2), 0.1, hooks=[HalpernIteration(np.zeros(2), lambda k: 2.0), StopAfterIteration(1)]
    )
    with pytest.raises(ValueError, match=r"schedule\(1\)"):
        minimize(sum_of_squares, state)


def test_halpern_alone_cannot_stop_a_run():
    with pytest.raises(ConfigurationError):
        GradientDescentState(np.ones(2), 0.1, hooks=[HalpernIteration(np.zeros(2))])
    state = GradientDescentState(np.ones(2), 0.1)
    state.hooks.append(HalpernIteration(np.zeros(2)))
    with pytest.raises(ConfigurationError):
        minimize(lambda x: float(x @ x), state)


def test_stop_when_residual_to_target(sum_of_squares):
    anchor = np.array([10.0, 10.0])
    state = GradientDescentState(
        np.array([100.0, 50.0]),
        0.1,
        hooks=[
            HalpernIteration(anchor, harmonic_schedule),
            StopWhen(lambda s, z: np.linalg.norm(s.x - z) < 1e-1),
        ],
    )
    sol = minimize(sum_of_squares, state, z=np.zeros(2))
    assert np.linalg.norm(sol.x) < 1e-1
    # ‖x_k‖ ≈ 50 √2 / k
    assert 600 < sol.nit < 800
