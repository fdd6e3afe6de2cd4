"""Converters for arguments."""

import itertools
from functools import wraps
from inspect import isclass, signature
from types import UnionType
from typing import Union, get_args, get_origin, get_type_hints

import jaxtyping
import numpy as np
import torch

admissible_dtypes = {
    "float32": torch.float32,
    "float64": torch.float64,
    "int64": torch.int64,
}


def detect_array_dtypes(t):
    if get_origin(t) in [Union, UnionType]:
        # If type is a Union, we iterate through the types
        # and return a list of acceptable dtypes, without duplicates
        return list(
            set(
                itertools.chain(*[detect_array_dtypes(a) for a in get_args(t)])
            )
        )

    # We only bother converting to specific dtypes.
    # More vague annotations (e.g. "Float") are not affected.
    elif isclass(t) and issubclass(t, jaxtyping.AbstractArray):
        if len(t.dtypes) == 1 and t.dtypes[0] in admissible_dtypes:
            return list(t.dtypes)
        else:
            return []

    else:
        return []


def closest_dtype(dtype, target_dtypes):
    float_targets = sorted(t for t in target_dtypes if t.startswith("float"))
    int_targets = [t for t in target_dtypes if t.startswith("int")]

    if len(float_targets) > 1:
        msg = f"Unsupported target dtype: {target_dtypes}"
        raise NotImplementedError(msg)

    # Integer coordinates are promoted to floats when the annotation does
    # not accept integers
    if float_targets and (dtype.is_floating_point or not int_targets):
        return admissible_dtypes[float_targets[0]]
    elif int_targets and not dtype.is_floating_point:
        return torch.int64
    else:
        return dtype


def as_tensor(value, dtype=None):
    """Convert lists, tuples, numpy arrays and scalars to tensors.

    Tensors are cast to ``dtype`` if it is provided. Other values are
    returned unchanged.
    """
    if isinstance(value, list | tuple):
        value = torch.tensor(value)

    if isinstance(value, np.generic):
        value = np.asarray(value)

    if isinstance(value, np.ndarray):
        value = torch.from_numpy(value)

    if isinstance(value, torch.Tensor):
        if torch.is_complex(value):
            msg = "Complex tensors are not supported"
            raise ValueError(msg)

        if dtype is not None:
            value = value.to(dtype=dtype)

    return value


def convert_inputs(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        sig = signature(func)
        bound_args = sig.bind(*args, **kwargs)
        bound_args.apply_defaults()

        # Iterate through the function's parameters and type hints
        for param_name, param_type in get_type_hints(func).items():

            # Do not waste time on default arguments
            if param_name in bound_args.arguments:

                # Detect if type hints require a specific float and/or int64
                # dtype. More vague types (e.g. "Int") are not converted
                target_dtypes = detect_array_dtypes(param_type)
                if target_dtypes:  # is not []

                    # At this point, we know that the parameter has been set
                    # and that it is supposed to be a torch.Tensor.
                    # Lists, tuples and numpy arrays are turned into tensors
                    # and tensors with another dtype are cast. Other types of
                    # values are left untouched and beartype raises an error
                    # if they do not match the annotation.
                    value = as_tensor(bound_args.arguments[param_name])

                    if isinstance(value, torch.Tensor):
                        dtype = closest_dtype(value.dtype, target_dtypes)
                        bound_args.arguments[param_name] = value.to(
                            dtype=dtype
                        )

        return func(*bound_args.args, **bound_args.kwargs)

    return wrapper
