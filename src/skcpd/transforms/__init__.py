"""
The :mod:`skcpd.transforms` module gathers the transforms driven by the
registration loop.
"""

from .base import RegistrationResult, Transform
from .kernels import affinity
from .nonrigid import (
    DEFAULT_BETA,
    DEFAULT_LAMBDA,
    DEFAULT_LINKED,
    Nonrigid,
    estimate_sigma2,
    regularization_term,
    update_points,
)
from .solvers import (
    regularized_system,
    solve_displacement,
    solve_performance,
    solve_precision,
)

__all__ = [
    "DEFAULT_BETA",
    "DEFAULT_LAMBDA",
    "DEFAULT_LINKED",
    "Nonrigid",
    "RegistrationResult",
    "Transform",
    "affinity",
    "estimate_sigma2",
    "regularization_term",
    "regularized_system",
    "solve_displacement",
    "solve_performance",
    "solve_precision",
    "update_points",
]
