"""Tests for the Gaussian affinity."""

import pytest
import torch
from hypothesis import given, settings
from hypothesis import strategies as st

import skcpd

from .utils import random_points, triangle


def test_affinity_simple():
    """Compare the affinity with a direct computation."""
    points = triangle()
    squared_distances = torch.tensor(
        [[0, 1, 1], [1, 0, 2], [1, 2, 0]], dtype=skcpd.float_dtype
    )

    beta = 0.5
    expected = (-squared_distances / (2 * beta**2)).exp()

    G = skcpd.affinity(points, points, beta)
    assert G.shape == (3, 3)
    assert torch.allclose(G, expected)


def test_affinity_rectangular():
    """The affinity between two different point sets is (n_a, n_b)."""
    a = random_points(5, 3, seed=1)
    b = random_points(7, 3, seed=2)

    G = skcpd.affinity(a, b, 2.0)
    assert G.shape == (5, 7)
    assert torch.allclose(G, skcpd.affinity(b, a, 2.0).T)


@given(
    n_points=st.integers(min_value=1, max_value=40),
    dim=st.integers(min_value=1, max_value=3),
    beta=st.floats(min_value=0.05, max_value=10),
    seed=st.integers(min_value=0, max_value=1000),
)
@settings(deadline=None)
def test_affinity_symmetric_positive(n_points, dim, beta, seed):
    """The affinity of a point set with itself is symmetric and PSD."""
    points = random_points(n_points, dim, seed=seed)
    G = skcpd.affinity(points, points, beta)

    assert torch.equal(G, G.T)
    assert torch.allclose(G.diagonal(), torch.ones(n_points, dtype=G.dtype))
    assert torch.linalg.eigvalsh(G).min() >= -1e-8


def test_affinity_converts_inputs():
    """Lists and float32 tensors are converted to the library dtype."""
    G = skcpd.affinity([[0, 0], [1, 0]], torch.rand(3, 2), 1.0)
    assert G.dtype == skcpd.float_dtype
    assert G.shape == (2, 3)


def test_affinity_errors():
    points = triangle()

    with pytest.raises(skcpd.ConfigurationError, match="beta"):
        skcpd.affinity(points, points, 0.0)

    with pytest.raises(skcpd.ConfigurationError):
        skcpd.affinity(points, points, -1)

    with pytest.raises(skcpd.ShapeError):
        skcpd.affinity(points, random_points(3, 3), 1.0)
