"""Runtime checks of tensor arguments."""

from beartype import beartype
from jaxtyping import jaxtyped


def typecheck(func):
    """Check the arguments and the return value of a function at runtime.

    Tensor annotations (dtype and number of dimensions) are handled by
    jaxtyping, the other annotations by beartype. Failures raise one of the
    errors gathered in ``skcpd.errors.InputTypeError``.
    """
    return jaxtyped(typechecker=beartype)(func)
