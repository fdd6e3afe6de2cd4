"""Registration between two point sets."""

from __future__ import annotations

import time
from warnings import warn

from ..errors import ConfigurationError, ShapeError
from ..globals import float_eps
from ..input_validation import convert_inputs, typecheck
from ..normalization import Normalization
from ..probabilities import compute_probabilities, default_sigma2
from ..transforms import (
    DEFAULT_BETA,
    DEFAULT_LAMBDA,
    Nonrigid,
    RegistrationResult,
    Transform,
)
from ..types import Number, Points


class Registration:
    """Registration class.

    This class runs the expectation-maximization loop of Coherent Point
    Drift. It must be initialized with a transform. The registration is
    performed by calling the fit method with the fixed and moving point sets
    as arguments. At each iteration, the correspondence probabilities are
    computed between the fixed points and the current moving points, then
    the transform updates the moving points and the noise variance.
    """

    @typecheck
    def __init__(
        self,
        *,
        transform: Transform,
        max_iterations: int = 150,
        tolerance: Number = 1e-5,
        outliers: Number = 0.1,
        sigma2: Number | None = None,
        normalize: bool = True,
        verbose: int = 0,
    ) -> None:
        """Initialize the registration object.

        Parameters
        ----------
        transform
            a transform object (from skcpd.transforms)
        max_iterations
            maximum number of iterations of the loop.
        tolerance
            the loop stops when the relative change of the negative
            log-likelihood is below this value.
        outliers
            weight of the uniform outlier component, in [0, 1).
        sigma2
            initial noise variance. If None, it is computed from the point
            sets.
        normalize
            if True, the point sets are centered and rescaled before the
            registration and the result is mapped back to the frame of the
            fixed points.
        verbose
            positive to print the noise variance after each iteration.
        """
        if max_iterations < 1:
            msg = f"max_iterations must be at least 1, got {max_iterations}."
            raise ConfigurationError(msg)

        if tolerance < 0:
            msg = f"tolerance must be non-negative, got {tolerance}."
            raise ConfigurationError(msg)

        if not 0 <= outliers < 1:
            msg = f"outliers must be in [0, 1), got {outliers}."
            raise ConfigurationError(msg)

        if sigma2 is not None and sigma2 <= 0:
            msg = f"sigma2 must be positive, got {sigma2}."
            raise ConfigurationError(msg)

        self.transform = transform
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.outliers = outliers
        self.sigma2 = sigma2
        self.normalize = normalize
        self.verbose = verbose

    @convert_inputs
    @typecheck
    def fit(self, *, fixed: Points, moving: Points) -> Registration:
        """Register the moving point set onto the fixed point set.

        After calling this method, the result can be accessed with the
        result_ attribute, the number of iterations with the n_iterations_
        attribute, the final noise variance with the sigma2_ attribute and
        the successive values of the negative log-likelihood with the
        likelihood_history_ attribute.

        Parameters
        ----------
        fixed
            the (n_fixed, dim) fixed points.
        moving
            the (n_moving, dim) moving points.

        Raises
        ------
        ShapeError
            if the point sets do not have the same dimension.

        Returns
        -------
        Registration
            self
        """
        start = time.perf_counter()

        if fixed.shape[1] != moving.shape[1]:
            msg = (
                "Fixed and moving points must have the same dimension, got "
                f"{fixed.shape[1]} and {moving.shape[1]}."
            )
            raise ShapeError(msg)

        normalization = None
        if self.normalize:
            normalization = Normalization.from_point_sets(
                fixed, moving, linked=self.transform.linked()
            )
            fixed, moving = normalization.fixed, normalization.moving

        sigma2 = self.sigma2
        if sigma2 is None:
            sigma2 = default_sigma2(fixed, moving)

        self.transform.init(fixed, moving)

        result = RegistrationResult(points=moving, sigma2=sigma2)
        likelihood_history = []
        n_iterations = 0
        ntol = self.tolerance + 10.0
        likelihood = 0.0

        while (
            n_iterations < self.max_iterations
            and ntol > self.tolerance
            and result.sigma2 > 10 * float_eps
        ):
            probabilities = compute_probabilities(
                fixed, result.points, result.sigma2, self.outliers
            )
            self.transform.modify_probabilities(probabilities)

            if probabilities.l != 0:
                ntol = abs((probabilities.l - likelihood) / probabilities.l)
            else:
                ntol = abs(probabilities.l - likelihood)
            likelihood = probabilities.l
            likelihood_history.append(likelihood)

            # The transforms are expressed with respect to the initial
            # moving points
            result = self.transform.compute_one_iteration(
                fixed, moving, probabilities, result.sigma2
            )
            n_iterations += 1

            if self.verbose > 0:
                print(
                    f"Iteration {n_iterations}: sigma2 = {result.sigma2:.3e},"
                    f" tolerance = {ntol:.3e}"
                )

        if n_iterations == self.max_iterations and ntol > self.tolerance:
            warn(
                f"The registration did not converge in {self.max_iterations}"
                + f" iterations (relative change {ntol:.3e} > tolerance"
                + f" {self.tolerance:.3e}).",
                stacklevel=2,
            )

        if normalization is not None:
            result.denormalize(normalization)

        result.iterations = n_iterations
        result.runtime = time.perf_counter() - start

        self.result_ = result
        self.n_iterations_ = n_iterations
        self.sigma2_ = result.sigma2
        self.likelihood_history_ = likelihood_history

        return self


def nonrigid(
    fixed: Points,
    moving: Points,
    *,
    beta: Number = DEFAULT_BETA,
    lambda_: Number = DEFAULT_LAMBDA,
    **kwargs,
) -> RegistrationResult:
    """Nonrigid registration with the column-pivoted QR solver.

    Extra keyword arguments are passed to :class:`Registration`.
    """
    transform = Nonrigid(policy="precision", beta=beta, lambda_=lambda_)
    registration = Registration(transform=transform, **kwargs)
    return registration.fit(fixed=fixed, moving=moving).result_


def nonrigid_quick(
    fixed: Points,
    moving: Points,
    *,
    beta: Number = DEFAULT_BETA,
    lambda_: Number = DEFAULT_LAMBDA,
    **kwargs,
) -> RegistrationResult:
    """Nonrigid registration with the unpivoted Householder QR solver.

    Faster than :func:`nonrigid`, but assumes that the linear systems solved
    at each iteration are well conditioned.
    """
    transform = Nonrigid(policy="performance", beta=beta, lambda_=lambda_)
    registration = Registration(transform=transform, **kwargs)
    return registration.fit(fixed=fixed, moving=moving).result_
