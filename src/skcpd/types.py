"""Types aliases for skcpd."""

from enum import Enum

import torch
from jaxtyping import Float32, Float64

from .globals import float_dtype

correspondence = {
    torch.float32: Float32,
    torch.float64: Float64,
}

JaxFloat = correspondence[float_dtype]

# Type aliases
Number = int | float

# Numerical types
Float1dTensor = JaxFloat[torch.Tensor, "_"]
Float2dTensor = JaxFloat[torch.Tensor, "_ _"]
FloatScalar = JaxFloat[torch.Tensor, ""]

# Point sets: rows are points and columns are spatial dimensions. Shapes are
# left unnamed so that mismatches are reported with a ShapeError by the
# functions themselves.
Points = JaxFloat[torch.Tensor, "_ _"]

# Square (n_points, n_points) Gaussian kernel matrix over the moving points
AffinityMatrix = JaxFloat[torch.Tensor, "_ _"]

# Per-point coefficients of the displacement field, shape (n_points, dim)
DisplacementWeights = JaxFloat[torch.Tensor, "_ _"]

PointMasses = JaxFloat[torch.Tensor, "_"]


class NonrigidPolicy(Enum):
    """Numerical strategy used to solve the nonrigid linear system.

    ``PRECISION`` relies on a column-pivoted QR decomposition, robust to
    rank-deficient systems. ``PERFORMANCE`` relies on a plain Householder QR
    decomposition and assumes the system is well conditioned.
    """

    PRECISION = "precision"
    PERFORMANCE = "performance"
