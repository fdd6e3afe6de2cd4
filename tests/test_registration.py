"""Tests for the registration loop."""

import pytest
import torch
from hypothesis import given, settings
from hypothesis import strategies as st

import skcpd

from .utils import create_point_cloud, random_points


def surface():
    return create_point_cloud(n_points=6, f=lambda x, y: 0.5 * x**2 - y**2)


def deform(points):
    return points + 0.1 * torch.sin(2 * points)


def mean_distance(a, b):
    return float(((a - b) ** 2).sum(dim=1).sqrt().mean())


@pytest.mark.parametrize("register", [skcpd.nonrigid, skcpd.nonrigid_quick])
def test_nonrigid_registration(register):
    """The registration brings a deformed surface closer to the original."""
    fixed = surface()
    moving = deform(fixed)

    result = register(fixed, moving)

    assert result.points.shape == moving.shape
    assert result.iterations >= 1
    assert result.sigma2 >= 0
    assert result.runtime > 0
    assert mean_distance(result.points, fixed) < mean_distance(moving, fixed)


def test_strategies_agree():
    fixed = surface()
    moving = deform(fixed)

    precise = skcpd.nonrigid(fixed, moving, max_iterations=20)
    quick = skcpd.nonrigid_quick(fixed, moving, max_iterations=20)

    assert torch.allclose(precise.points, quick.points, atol=1e-4)


def test_translation():
    """A translation is absorbed by the normalization."""
    fixed = surface()
    moving = fixed + torch.tensor([0.5, -0.2, 1.0], dtype=fixed.dtype)

    result = skcpd.nonrigid(fixed, moving)
    assert mean_distance(result.points, fixed) < 5e-2


def test_registration_attributes():
    fixed = random_points(12, 2, seed=0)
    moving = random_points(10, 2, seed=1)

    registration = skcpd.Registration(
        transform=skcpd.Nonrigid(), max_iterations=5, tolerance=0
    )
    with pytest.warns(UserWarning, match="did not converge"):
        out = registration.fit(fixed=fixed, moving=moving)

    assert out is registration
    assert registration.n_iterations_ == 5
    assert registration.result_.iterations == 5
    assert registration.sigma2_ == registration.result_.sigma2
    assert len(registration.likelihood_history_) == 5


@pytest.mark.filterwarnings("ignore::UserWarning")
@given(
    n_fixed=st.integers(min_value=3, max_value=20),
    n_moving=st.integers(min_value=3, max_value=20),
    dim=st.integers(min_value=2, max_value=3),
    normalize=st.booleans(),
    persist_weights=st.booleans(),
    policy=st.sampled_from(["precision", "performance"]),
    seed=st.integers(min_value=0, max_value=1000),
)
@settings(deadline=None, max_examples=10)
def test_registration_hypothesis(
    n_fixed, n_moving, dim, normalize, persist_weights, policy, seed
):
    fixed = random_points(n_fixed, dim, seed=seed)
    moving = random_points(n_moving, dim, seed=seed + 1)

    registration = skcpd.Registration(
        transform=skcpd.Nonrigid(
            policy=policy, persist_weights=persist_weights
        ),
        max_iterations=10,
        normalize=normalize,
    )
    registration.fit(fixed=fixed, moving=moving)

    assert registration.result_.points.shape == moving.shape
    assert 1 <= registration.n_iterations_ <= 10
    assert registration.sigma2_ >= 0


def test_initial_sigma2_and_verbose(capsys):
    fixed = random_points(8, 2, seed=0)
    moving = random_points(8, 2, seed=1)

    registration = skcpd.Registration(
        transform=skcpd.Nonrigid(),
        sigma2=0.5,
        verbose=1,
        max_iterations=3,
        tolerance=0,
    )
    with pytest.warns(UserWarning):
        registration.fit(fixed=fixed.numpy(), moving=moving.tolist())

    captured = capsys.readouterr()
    assert "Iteration 1: sigma2" in captured.out


def test_registration_errors():
    transform = skcpd.Nonrigid()

    with pytest.raises(skcpd.ConfigurationError):
        skcpd.Registration(transform=transform, max_iterations=0)

    with pytest.raises(skcpd.ConfigurationError):
        skcpd.Registration(transform=transform, tolerance=-1)

    with pytest.raises(skcpd.ConfigurationError):
        skcpd.Registration(transform=transform, outliers=1.0)

    with pytest.raises(skcpd.ConfigurationError):
        skcpd.Registration(transform=transform, sigma2=0)

    with pytest.raises(skcpd.InputTypeError):
        skcpd.Registration(transform="nonrigid")

    with pytest.raises(skcpd.ShapeError):
        skcpd.Registration(transform=transform).fit(
            fixed=random_points(4, 2), moving=random_points(4, 3)
        )


def test_entry_points():
    """The one-shot registrations are exposed at the top level."""
    assert skcpd.nonrigid is skcpd.tasks.nonrigid
    assert skcpd.nonrigid_quick is skcpd.tasks.nonrigid_quick
    assert callable(skcpd.nonrigid)

    fixed = surface()
    result = skcpd.nonrigid(fixed, fixed + 0.1)
    assert result.points.shape == fixed.shape
