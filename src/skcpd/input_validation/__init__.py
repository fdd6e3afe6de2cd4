"""Input validation module

Decorators used on the public functions of the library: ``typecheck``
checks the annotations at runtime and ``convert_inputs`` casts array-like
arguments to tensors of the library dtype.

Notes
-----
Decorators written for this module must use `functools.wraps`, beartype
reads the annotations of the decorated function through the metadata it
preserves.
"""

from .converters import convert_inputs
from .typechecking import typecheck
