"""Tests for the normalization of point sets."""

import pytest
import torch

import skcpd

from .utils import random_points


@pytest.mark.parametrize("linked", [True, False])
def test_normalization(linked):
    fixed = 10 * random_points(20, 3, seed=0) + 4
    moving = 2 * random_points(15, 3, seed=1) - 1

    normalization = skcpd.Normalization.from_point_sets(
        fixed, moving, linked=linked
    )

    assert torch.allclose(
        normalization.fixed.mean(dim=0),
        torch.zeros(3, dtype=fixed.dtype),
        atol=1e-12,
    )
    assert torch.allclose(
        normalization.moving.mean(dim=0),
        torch.zeros(3, dtype=fixed.dtype),
        atol=1e-12,
    )

    fixed_radius = float((normalization.fixed**2).sum(dim=1).mean().sqrt())
    moving_radius = float((normalization.moving**2).sum(dim=1).mean().sqrt())
    if linked:
        assert normalization.fixed_scale == normalization.moving_scale
        assert fixed_radius == pytest.approx(1.0)
        assert moving_radius < 1.0
    else:
        assert fixed_radius == pytest.approx(1.0)
        assert moving_radius == pytest.approx(1.0)

    # denormalize maps back to the frame of the fixed points
    assert torch.allclose(
        normalization.denormalize(normalization.fixed), fixed
    )


def test_result_denormalize():
    fixed = 5 * random_points(10, 2, seed=0)
    normalization = skcpd.Normalization.from_point_sets(fixed, fixed)

    result = skcpd.RegistrationResult(points=normalization.moving, sigma2=0.1)
    result.denormalize(normalization)

    assert torch.allclose(result.points, fixed)
    assert result.sigma2 == 0.1


def test_normalization_shape_error():
    with pytest.raises(skcpd.ShapeError):
        skcpd.Normalization.from_point_sets(
            random_points(4, 2), random_points(4, 3)
        )
