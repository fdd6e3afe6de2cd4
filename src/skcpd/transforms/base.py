"""Interface shared by the transforms driven by the registration loop."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from ..normalization import Normalization
from ..probabilities import Probabilities
from ..types import FloatScalar, Number, Points


@dataclass
class RegistrationResult:
    """Result of one iteration, or of a whole registration.

    Parameters
    ----------
    points
        The (n_moving, dim) updated moving points.
    sigma2
        The estimated noise variance.
    iterations
        Number of iterations of the registration loop (0 for a single
        iteration result).
    runtime
        Duration of the registration, in seconds.
    """

    points: Points
    sigma2: float
    iterations: int = 0
    runtime: float = 0.0

    def denormalize(self, normalization: Normalization) -> None:
        """Express the points in the frame of the original fixed points."""
        self.points = normalization.denormalize(self.points)


@runtime_checkable
class Transform(Protocol):
    """A transform that can be driven by the registration loop.

    A transform is initialized once with the fixed and moving point sets,
    then each call to ``compute_one_iteration`` returns the moving points
    updated from the current correspondence probabilities.
    """

    def init(self, fixed: Points, moving: Points) -> None:
        ...

    def compute_one_iteration(
        self,
        fixed: Points,
        moving: Points,
        probabilities: Probabilities,
        sigma2: Number | FloatScalar,
    ) -> RegistrationResult:
        ...

    def modify_probabilities(self, probabilities: Probabilities) -> None:
        ...

    def linked(self, value: bool | None = None):
        ...
