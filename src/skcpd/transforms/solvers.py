r"""Solvers for the regularized linear system of nonrigid CPD.

At each iteration, the displacement weights $W$ are the solution of

$$ (d(P_1) G + \lambda \sigma^2 I) W = P X - d(P_1) Y $$

where $G$ is the affinity matrix over the moving points $Y$, $d(P_1)$ the
diagonal matrix of the correspondence masses and $P X$ the weighted fixed
points. Two strategies are available: a column-pivoted QR decomposition that
copes with rank-deficient systems, and a plain Householder QR decomposition
that is faster but assumes the system is well conditioned. Neither raises on
singular systems.
"""

import numpy as np
import scipy.linalg
import torch

from ..input_validation import typecheck
from ..types import (
    AffinityMatrix,
    DisplacementWeights,
    Float2dTensor,
    FloatScalar,
    Number,
    NonrigidPolicy,
    PointMasses,
    Points,
)


@typecheck
def regularized_system(
    p1: PointMasses,
    affinity: AffinityMatrix,
    moving: Points,
    px: Points,
    lambda_: Number,
    sigma2: Number | FloatScalar,
) -> tuple[Float2dTensor, Float2dTensor]:
    """Left and right hand sides of the nonrigid linear system."""
    n_points = moving.shape[0]
    identity = torch.eye(n_points, dtype=moving.dtype, device=moving.device)

    lhs = p1[:, None] * affinity + lambda_ * sigma2 * identity
    rhs = px - p1[:, None] * moving
    return lhs, rhs


@typecheck
def solve_precision(lhs: Float2dTensor, rhs: Float2dTensor) -> Float2dTensor:
    """Solve ``lhs @ x = rhs`` with a column-pivoted QR decomposition.

    The numerical rank is read on the diagonal of R. Components of the
    solution beyond this rank are set to zero, so that rank-deficient systems
    return a least-squares consistent solution instead of raising.
    """
    a = lhs.detach().cpu().numpy()
    b = rhs.detach().cpu().numpy()

    q, r, perm = scipy.linalg.qr(a, pivoting=True)
    c = q.T @ b

    diagonal = np.abs(np.diag(r))
    threshold = np.finfo(a.dtype).eps * a.shape[0]
    rank = 0 if diagonal.size == 0 else int(
        np.sum(diagonal > threshold * diagonal.max())
    )

    z = np.zeros_like(b)
    if rank > 0:
        z[:rank] = scipy.linalg.solve_triangular(r[:rank, :rank], c[:rank])

    x = np.zeros_like(b)
    x[perm] = z
    return torch.from_numpy(x).to(dtype=rhs.dtype, device=rhs.device)


@typecheck
def solve_performance(lhs: Float2dTensor, rhs: Float2dTensor) -> Float2dTensor:
    """Solve ``lhs @ x = rhs`` with an unpivoted Householder QR decomposition.

    Singular systems are not detected: the triangular solve silently returns
    non-finite values.
    """
    q, r = torch.linalg.qr(lhs)
    return torch.linalg.solve_triangular(r, q.T @ rhs, upper=True)


@typecheck
def solve_displacement(
    p1: PointMasses,
    affinity: AffinityMatrix,
    moving: Points,
    px: Points,
    lambda_: Number,
    sigma2: Number | FloatScalar,
    policy: NonrigidPolicy = NonrigidPolicy.PRECISION,
) -> DisplacementWeights:
    """Solve the nonrigid linear system for the displacement weights.

    Parameters
    ----------
    p1
        Correspondence mass of each moving point.
    affinity
        Affinity matrix over the moving points.
    moving
        The moving points.
    px
        Correspondence-weighted fixed points.
    lambda_
        Regularization strength.
    sigma2
        Current noise variance.
    policy
        The decomposition used to solve the system.

    Returns
    -------
    DisplacementWeights
        The (n_points, dim) displacement weights.
    """
    lhs, rhs = regularized_system(
        p1=p1,
        affinity=affinity,
        moving=moving,
        px=px,
        lambda_=lambda_,
        sigma2=sigma2,
    )

    if policy is NonrigidPolicy.PRECISION:
        return solve_precision(lhs, rhs)
    else:
        return solve_performance(lhs, rhs)
