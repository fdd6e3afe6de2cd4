"""Normalization of the point sets before a registration."""

from __future__ import annotations

from dataclasses import dataclass

import torch

from .errors import ShapeError
from .input_validation import convert_inputs, typecheck
from .types import Float1dTensor, Points


@dataclass
class Normalization:
    """Centered and rescaled copies of the fixed and moving point sets.

    Both point sets are centered on their mean and divided by their root mean
    square radius. If ``linked`` is True, the two sets share the largest of
    the two scales so that their relative size is preserved.
    """

    fixed_mean: Float1dTensor
    fixed_scale: float
    moving_mean: Float1dTensor
    moving_scale: float
    fixed: Points
    moving: Points

    @classmethod
    @convert_inputs
    @typecheck
    def from_point_sets(
        cls, fixed: Points, moving: Points, linked: bool = True
    ) -> Normalization:
        """Normalize a pair of point sets."""
        if fixed.shape[1] != moving.shape[1]:
            msg = (
                "Fixed and moving points must have the same dimension, got "
                f"{fixed.shape[1]} and {moving.shape[1]}."
            )
            raise ShapeError(msg)

        fixed_mean = fixed.mean(dim=0)
        moving_mean = moving.mean(dim=0)
        fixed = fixed - fixed_mean
        moving = moving - moving_mean

        fixed_scale = float(torch.sqrt((fixed**2).sum() / fixed.shape[0]))
        moving_scale = float(torch.sqrt((moving**2).sum() / moving.shape[0]))
        if linked:
            fixed_scale = moving_scale = max(fixed_scale, moving_scale)

        return cls(
            fixed_mean=fixed_mean,
            fixed_scale=fixed_scale,
            moving_mean=moving_mean,
            moving_scale=moving_scale,
            fixed=fixed / fixed_scale,
            moving=moving / moving_scale,
        )

    def denormalize(self, points: Points) -> Points:
        """Map points from the normalized frame to the fixed set's frame."""
        return points * self.fixed_scale + self.fixed_mean
