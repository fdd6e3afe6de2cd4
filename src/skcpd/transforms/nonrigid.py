r"""Nonrigid Coherent Point Drift.

The moving points are displaced by a smooth vector field $v = G W$, where $G$
is a Gaussian affinity matrix over the moving points and $W$ the displacement
weights. At each iteration, $W$ is the solution of a linear system
regularized by $\lambda \sigma^2$, the moving points are updated and the
noise variance $\sigma^2$ is estimated again from the correspondence
probabilities.
"""

from __future__ import annotations

from typing import Literal

import torch

from ..errors import (
    ConfigurationError,
    DegenerateInputError,
    NotInitializedError,
    ShapeError,
)
from ..input_validation import convert_inputs, typecheck
from ..probabilities import Probabilities
from ..types import (
    AffinityMatrix,
    DisplacementWeights,
    FloatScalar,
    NonrigidPolicy,
    Number,
    Points,
)
from .base import RegistrationResult
from .kernels import affinity
from .solvers import solve_displacement

DEFAULT_BETA = 3.0
DEFAULT_LAMBDA = 3.0
DEFAULT_LINKED = True


def check_probabilities(
    fixed: Points, moving: Points, probabilities: Probabilities
) -> None:
    """Check that the probabilities match the point sets.

    Raises
    ------
    ShapeError
        If the dimensions of the point sets or the sizes of the probabilities
        are not consistent.
    DegenerateInputError
        If the total correspondence mass is not positive.
    """
    n_fixed, dim = fixed.shape
    n_moving = moving.shape[0]

    if moving.shape[1] != dim:
        msg = (
            "Fixed and moving points must have the same dimension, got "
            f"{dim} and {moving.shape[1]}."
        )
        raise ShapeError(msg)

    expected = {
        "p1": (n_moving,),
        "pt1": (n_fixed,),
        "px": (n_moving, dim),
    }
    for name, shape in expected.items():
        value = getattr(probabilities, name)
        if not isinstance(value, torch.Tensor):
            msg = (
                f"probabilities.{name} must be a tensor, got "
                f"{type(value).__name__}."
            )
            raise ShapeError(msg)

        if tuple(value.shape) != shape:
            msg = (
                f"The shape of probabilities.{name} is not correct. "
                f"Expected {shape}, got {tuple(value.shape)}."
            )
            raise ShapeError(msg)

    if not probabilities.total_mass > 0:
        msg = (
            "The total correspondence mass sum(p1) must be positive, got "
            f"{probabilities.total_mass}."
        )
        raise DegenerateInputError(msg)


@typecheck
def update_points(
    moving: Points, affinity: AffinityMatrix, weights: DisplacementWeights
) -> Points:
    """Displace the moving points by the field ``affinity @ weights``."""
    return moving + affinity @ weights


@typecheck
def estimate_sigma2(
    fixed: Points, points: Points, probabilities: Probabilities
) -> float:
    r"""Estimate the noise variance after a nonrigid update.

    $$ \sigma^2 = | \sum d(P^T 1) X^2 + \sum d(P 1) T^2 - 2 tr((P X)^T T) |
    / (N_P D) $$

    where $X$ are the fixed points, $T$ the updated moving points and
    $N_P$ the total correspondence mass. The absolute value absorbs the small
    negative values produced by cancellation, zero is a valid result.
    """
    check_probabilities(fixed, points, probabilities)
    dim = fixed.shape[1]

    p1, pt1, px = probabilities.p1, probabilities.pt1, probabilities.px
    sigma2 = (
        ((fixed**2) * pt1[:, None]).sum()
        + ((points**2) * p1[:, None]).sum()
        - 2 * torch.trace(px.T @ points)
    )
    return float(sigma2.abs()) / (probabilities.total_mass * dim)


@typecheck
def regularization_term(
    weights: DisplacementWeights, affinity: AffinityMatrix, lambda_: Number
) -> float:
    """Smoothness penalty ``lambda / 2 * tr(W^T G W)``."""
    return lambda_ / 2 * float(torch.trace(weights.T @ affinity @ weights))


class Nonrigid:
    """Nonrigid Coherent Point Drift transform.

    Parameters
    ----------
    policy
        Decomposition used to solve the linear system at each iteration.
        "precision" uses a column-pivoted QR decomposition, robust to
        rank-deficient systems (duplicated points, small beta).
        "performance" uses a plain Householder QR decomposition.
    beta
        Bandwidth of the Gaussian affinity.
    lambda_
        Strength of the smoothness regularization.
    linked
        Whether the fixed and moving point sets share the same scale when
        they are normalized by the registration loop.
    persist_weights
        If False, the displacement weights used by
        ``modify_probabilities`` are the ones set by ``init`` (zero) and the
        likelihood is left unchanged. If True, they are replaced by the
        weights solved at each iteration.
    """

    @typecheck
    def __init__(
        self,
        policy: NonrigidPolicy
        | Literal["precision", "performance"] = NonrigidPolicy.PRECISION,
        beta: Number = DEFAULT_BETA,
        lambda_: Number = DEFAULT_LAMBDA,
        linked: bool = DEFAULT_LINKED,
        persist_weights: bool = False,
    ) -> None:
        """Class constructor."""
        self.policy = NonrigidPolicy(policy)
        self.persist_weights = persist_weights
        self.beta(beta)
        self.lambda_(lambda_)
        self.linked(linked)

        self._affinity = None
        self._weights = None

    @typecheck
    def beta(self, value: Number | None = None) -> Nonrigid | float:
        """Get or set the bandwidth of the affinity.

        Setting beta does not rebuild the affinity matrix, ``init`` must be
        called again.
        """
        if value is None:
            return self._beta

        if value <= 0:
            msg = f"beta must be positive, got {value}."
            raise ConfigurationError(msg)
        self._beta = float(value)
        return self

    @typecheck
    def lambda_(self, value: Number | None = None) -> Nonrigid | float:
        """Get or set the regularization strength."""
        if value is None:
            return self._lambda

        if value <= 0:
            msg = f"lambda must be positive, got {value}."
            raise ConfigurationError(msg)
        self._lambda = float(value)
        return self

    @typecheck
    def linked(self, value: bool | None = None) -> Nonrigid | bool:
        """Get or set whether the scales of the point sets are linked."""
        if value is None:
            return self._linked

        self._linked = value
        return self

    @property
    def affinity_matrix(self) -> AffinityMatrix | None:
        """The affinity matrix built by ``init``."""
        return self._affinity

    @property
    def weights(self) -> DisplacementWeights | None:
        """The stored displacement weights."""
        return self._weights

    @convert_inputs
    @typecheck
    def init(self, fixed: Points, moving: Points) -> None:
        """Initialize the transform for a pair of point sets.

        Must be called again if the number of moving points changes.

        Parameters
        ----------
        fixed
            The fixed points.
        moving
            The moving points.
        """
        if fixed.shape[1] != moving.shape[1]:
            msg = (
                "Fixed and moving points must have the same dimension, got "
                f"{fixed.shape[1]} and {moving.shape[1]}."
            )
            raise ShapeError(msg)

        self._affinity = affinity(moving, moving, self._beta)
        self._weights = torch.zeros_like(moving)

    @convert_inputs
    @typecheck
    def compute_one_iteration(
        self,
        fixed: Points,
        moving: Points,
        probabilities: Probabilities,
        sigma2: Number | FloatScalar,
    ) -> RegistrationResult:
        """Compute one iteration of the nonrigid transform.

        Parameters
        ----------
        fixed
            The (n_fixed, dim) fixed points.
        moving
            The (n_moving, dim) moving points, as passed to ``init``.
        probabilities
            The correspondence probabilities between the point sets.
        sigma2
            The current noise variance.

        Returns
        -------
        RegistrationResult
            The updated moving points and the new noise variance.

        Raises
        ------
        NotInitializedError
            If ``init`` was not called for a moving set of this size.
        ShapeError
            If the point sets and the probabilities are not consistent.
        DegenerateInputError
            If the total correspondence mass is not positive.
        """
        if self._affinity is None:
            msg = "The transform must be initialized with init()."
            raise NotInitializedError(msg)

        if self._affinity.shape[0] != moving.shape[0]:
            msg = (
                f"The transform was initialized for {self._affinity.shape[0]}"
                f" moving points, got {moving.shape[0]}. Call init() again."
            )
            raise NotInitializedError(msg)

        check_probabilities(fixed, moving, probabilities)

        weights = solve_displacement(
            p1=probabilities.p1,
            affinity=self._affinity,
            moving=moving,
            px=probabilities.px,
            lambda_=self._lambda,
            sigma2=float(sigma2),
            policy=self.policy,
        )
        points = update_points(moving, self._affinity, weights)
        new_sigma2 = estimate_sigma2(fixed, points, probabilities)

        if self.persist_weights:
            self._weights = weights

        return RegistrationResult(points=points, sigma2=new_sigma2)

    @typecheck
    def modify_probabilities(self, probabilities: Probabilities) -> None:
        """Add the smoothness penalty to the running likelihood.

        The penalty is computed with the stored displacement weights, see
        ``persist_weights``.
        """
        if self._weights is None:
            msg = "The transform must be initialized with init()."
            raise NotInitializedError(msg)

        probabilities.l += regularization_term(
            self._weights, self._affinity, self._lambda
        )
