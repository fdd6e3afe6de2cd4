"""Correspondence probabilities between the fixed and the moving point sets.

This is the expectation step of Coherent Point Drift: the moving points are
the centroids of a Gaussian mixture (plus a uniform outlier component) and
the fixed points are the data. The posterior probabilities are aggregated
into the quantities consumed by the transforms.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import log, pi

import torch

from .errors import ConfigurationError, ShapeError
from .globals import float_dtype
from .input_validation import convert_inputs, typecheck
from .input_validation.converters import as_tensor
from .types import Float1dTensor, Float2dTensor, FloatScalar, Number, Points


@dataclass
class Probabilities:
    """Aggregated correspondence probabilities.

    Parameters
    ----------
    p1
        (n_moving,) correspondence mass of each moving point.
    pt1
        (n_fixed,) correspondence mass of each fixed point.
    px
        (n_moving, dim) correspondence-weighted fixed points.
    l
        Running value of the negative log-likelihood. Transforms may add
        their own regularization term to it, it is never reset.
    """

    p1: Float1dTensor
    pt1: Float1dTensor
    px: Float2dTensor
    l: float = 0.0

    def __setattr__(self, name, value) -> None:
        # The aggregates are converted on every assignment, not only by the
        # constructor
        if name in ("p1", "pt1", "px"):
            value = as_tensor(value, dtype=float_dtype)
        elif name == "l":
            value = float(value)
        super().__setattr__(name, value)

    @property
    def total_mass(self) -> float:
        """Total correspondence mass."""
        return float(self.p1.sum())


@convert_inputs
@typecheck
def default_sigma2(fixed: Points, moving: Points) -> float:
    """Initial noise variance.

    Mean squared distance between all the pairs of fixed and moving points,
    divided by the dimension.
    """
    if fixed.shape[1] != moving.shape[1]:
        msg = (
            "Fixed and moving points must have the same dimension, got "
            f"{fixed.shape[1]} and {moving.shape[1]}."
        )
        raise ShapeError(msg)

    n_fixed, dim = fixed.shape
    n_moving = moving.shape[0]

    sigma2 = (
        n_moving * (fixed * fixed).sum()
        + n_fixed * (moving * moving).sum()
        - 2 * fixed.sum(dim=0) @ moving.sum(dim=0)
    ) / (n_fixed * n_moving * dim)
    return float(sigma2)


@convert_inputs
@typecheck
def compute_probabilities(
    fixed: Points,
    moving: Points,
    sigma2: Number | FloatScalar,
    outliers: Number = 0.1,
) -> Probabilities:
    """Compute the correspondence probabilities.

    Parameters
    ----------
    fixed
        (n_fixed, dim) fixed points.
    moving
        (n_moving, dim) moving points, centroids of the mixture.
    sigma2
        Variance of the Gaussian components.
    outliers
        Weight of the uniform outlier component, in [0, 1).

    Returns
    -------
    Probabilities
        The aggregated probabilities, with ``l`` set to the negative
        log-likelihood of the fixed points.
    """
    if fixed.shape[1] != moving.shape[1]:
        msg = (
            "Fixed and moving points must have the same dimension, got "
            f"{fixed.shape[1]} and {moving.shape[1]}."
        )
        raise ShapeError(msg)

    if not 0 <= outliers < 1:
        msg = f"outliers must be in [0, 1), got {outliers}."
        raise ConfigurationError(msg)

    n_fixed, dim = fixed.shape
    n_moving = moving.shape[0]
    sigma2 = float(sigma2)

    ksig = -2.0 * sigma2
    outlier_weight = (outliers * n_moving * (-ksig * pi) ** (0.5 * dim)) / (
        (1 - outliers) * n_fixed
    )

    # (n_fixed, n_moving) unnormalized posteriors
    d2 = torch.cdist(
        fixed, moving, compute_mode="donot_use_mm_for_euclid_dist"
    ) ** 2
    p = torch.exp(d2 / ksig)

    sp = p.sum(dim=1) + outlier_weight
    p = p / sp[:, None]

    p1 = p.sum(dim=0)
    pt1 = 1 - outlier_weight / sp
    px = p.T @ fixed
    l = float(-torch.log(sp).sum()) + dim * n_fixed * log(sigma2) / 2

    return Probabilities(p1=p1, pt1=pt1, px=px, l=l)
