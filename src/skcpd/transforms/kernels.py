"""Gaussian affinity used to smooth the nonrigid displacement field."""

from math import sqrt

from ..errors import ConfigurationError, ShapeError
from ..input_validation import convert_inputs, typecheck
from ..types import AffinityMatrix, Number, Points


@convert_inputs
@typecheck
def affinity(
    points_a: Points, points_b: Points, beta: Number
) -> AffinityMatrix:
    r"""Compute the Gaussian affinity matrix $G_{a}^{b}$.

    The matrix is a $(n_a x n_b)$ matrix where $n_a$ is the number of points
    in $a$ and $n_b$ is the number of points in $b$. The (i, j) entry is:

    $$ G(a_i, b_j) = \exp(- || a_i - b_j ||^2 / (2 \beta^2)) $$

    When ``points_a`` and ``points_b`` are the same point set, the matrix is
    symmetric and positive semi-definite.

    Parameters
    ----------
    points_a
        The first set of points.
    points_b
        The second set of points.
    beta
        Bandwidth of the kernel.

    Returns
    -------
        The affinity matrix.

    Raises
    ------
    ConfigurationError
        If beta is not positive.
    ShapeError
        If the two point sets do not have the same dimension.
    """
    if beta <= 0:
        msg = f"beta must be positive, got {beta}."
        raise ConfigurationError(msg)

    if points_a.shape[1] != points_b.shape[1]:
        msg = (
            "The two point sets must have the same dimension, got "
            f"{points_a.shape[1]} and {points_b.shape[1]}."
        )
        raise ShapeError(msg)

    a = points_a / (sqrt(2) * beta)
    b = points_b / (sqrt(2) * beta)

    G = (-((a[:, None, :] - b[None, :, :]) ** 2).sum(dim=2)).exp()

    assert G.shape == (points_a.shape[0], points_b.shape[0])
    return G
