"""Scikit-CPD: Coherent Point Drift registration in python."""

from .errors import (
    ConfigurationError,
    DegenerateInputError,
    InputTypeError,
    NotInitializedError,
    ShapeError,
)
from .globals import float_dtype
from .input_validation import convert_inputs, typecheck
from .normalization import Normalization
from .probabilities import Probabilities, compute_probabilities, default_sigma2
from .transforms import *
from .tasks import Registration, nonrigid, nonrigid_quick
from .types import NonrigidPolicy

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_BETA",
    "DEFAULT_LAMBDA",
    "DEFAULT_LINKED",
    "ConfigurationError",
    "DegenerateInputError",
    "InputTypeError",
    "Nonrigid",
    "NonrigidPolicy",
    "NotInitializedError",
    "Normalization",
    "Probabilities",
    "Registration",
    "RegistrationResult",
    "ShapeError",
    "Transform",
    "affinity",
    "compute_probabilities",
    "convert_inputs",
    "default_sigma2",
    "float_dtype",
    "nonrigid",
    "nonrigid_quick",
    "tasks",
    "transforms",
    "typecheck",
]
