"""hookopt - iterative optimisation with composable stopping and transform hooks."""

__version__ = "0.1.0"

# Projection operators
from .convex import (
    box_projection,
    gssp,
    gssp_projection,
    hard_threshold,
    project_box,
    project_simplex,
    simplex_projection,
    sparse_projection,
)

# Logging
from .logging import configure_logging, get_logger, set_log_level

# Hooks, step rules and the driver loop
from .optimize import (
    AlgorithmState,
    Capability,
    ConfigurationError,
    GradientDescentState,
    HalpernIteration,
    Hook,
    HookoptError,
    Problem,
    ProjectedGradientDescentState,
    RecordIterates,
    Solution,
    Status,
    StopAfterIteration,
    StopWhen,
    StopWhenChangeLess,
    StopWhenGradientNormLess,
    approx_grad,
    autograd_gradient,
    get_iterate,
    halpern_schedule,
    harmonic_schedule,
    minimize,
    minimize_inplace,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "Problem",
    "Solution",
    "Status",
    "HookoptError",
    "ConfigurationError",
    # Hooks
    "Capability",
    "Hook",
    "StopWhen",
    "StopAfterIteration",
    "StopWhenChangeLess",
    "StopWhenGradientNormLess",
    "RecordIterates",
    "HalpernIteration",
    "harmonic_schedule",
    "halpern_schedule",
    # Step rules
    "AlgorithmState",
    "GradientDescentState",
    "ProjectedGradientDescentState",
    # Driver
    "minimize",
    "minimize_inplace",
    "get_iterate",
    # Gradients
    "approx_grad",
    "autograd_gradient",
    # Projections
    "project_simplex",
    "simplex_projection",
    "gssp",
    "gssp_projection",
    "hard_threshold",
    "sparse_projection",
    "project_box",
    "box_projection",
    # Logging
    "get_logger",
    "set_log_level",
    "configure_logging",
]
