"""Custom errors for the skcpd package."""

from beartype.roar import BeartypeCallHintParamViolation
from jaxtyping import TypeCheckError

InputTypeError = (TypeCheckError, BeartypeCallHintParamViolation)


class ShapeError(Exception):
    """Raised when an input has an invalid shape."""


class ConfigurationError(ValueError):
    """Raised when a configuration value is out of its admissible range."""


class DegenerateInputError(Exception):
    """Raised when the input carries no usable correspondence mass."""


class NotInitializedError(Exception):
    """Raised when a transform is used before being initialized."""
