"""
Projection operators for constrained step rules.

The operators are plain NumPy functions independent of the driver loop. Use
the ``*_projection`` constructors to bind their parameters before handing them
to :class:`hookopt.optimize.ProjectedGradientDescentState`.
"""

from . import projections
from .projections import (
    box_projection,
    gssp,
    gssp_projection,
    hard_threshold,
    project_box,
    project_simplex,
    simplex_projection,
    sparse_projection,
)

__all__ = [
    "projections",
    "box_projection",
    "gssp",
    "gssp_projection",
    "hard_threshold",
    "project_box",
    "project_simplex",
    "simplex_projection",
    "sparse_projection",
]
