"""Conversion of caller-supplied selector data into torch tensors."""

import logging

import numpy as np
import torch

from tensor_key.tensor_key import INDEX_DTYPE, KeyConversionError, _type_name

logger = logging.getLogger(__name__)


def _is_shareable(array: np.ndarray) -> bool:
    """Whether torch can wrap the array's memory directly."""
    return (array.flags.writeable
            and array.dtype.isnative
            and all(s >= 0 for s in array.strides))


def array_to_tensor(array: np.ndarray, inplace: bool = False) -> torch.Tensor:
    """Convert a numpy array to a torch tensor.

    The array's memory is shared when possible. Read-only arrays, arrays
    with negative strides and arrays in non-native byte order are copied
    first, unless ``inplace`` is set, in which case sharing is required.

    Raises:
        KeyConversionError: If sharing is required but impossible, or torch
            does not support the array's dtype
    """
    if not _is_shareable(array):
        if inplace:
            raise KeyConversionError(_type_name(array),
                                     "array memory cannot be shared (read-only, negative strides or non-native byte order)")
        logger.debug(f"Copying non-shareable array of shape {array.shape}")
        array = np.ascontiguousarray(array.astype(array.dtype.newbyteorder("="), copy=True))
    try:
        return torch.from_numpy(array)
    except TypeError as e:
        raise KeyConversionError(_type_name(array), f"unsupported array dtype {array.dtype}") from e


def native_to_tensor(item) -> torch.Tensor:
    """Adapt a tensor-like value to a torch tensor.

    Accepts torch tensors, wrappers exposing a torch tensor as ``.data`` and
    any other object implementing the DLPack protocol.
    """
    if torch.is_tensor(item):
        return item
    data = getattr(item, "data", None)
    if torch.is_tensor(data):
        return data
    try:
        return torch.from_dlpack(item)
    except (AttributeError, BufferError, RuntimeError, TypeError, ValueError) as e:
        raise KeyConversionError(_type_name(item), "cannot cast index to tensor") from e


def _element_to_tensor(element) -> torch.Tensor:
    if isinstance(element, np.ndarray):
        return array_to_tensor(element)
    if torch.is_tensor(element) or hasattr(element, "__dlpack__"):
        return native_to_tensor(element)
    return torch.as_tensor(element)


def sequence_to_tensor(sequence) -> torch.Tensor:
    """Materialize a list or tuple of selector values into one tensor.

    Nested lists and tuples become extra dimensions. Elements that are
    already arrays or tensors are converted one by one and stacked. An empty
    sequence gives an empty int64 tensor.

    Raises:
        KeyConversionError: If the sequence is ragged or not numeric
    """
    if len(sequence) == 0:
        return torch.empty(0, dtype=INDEX_DTYPE)
    try:
        if any(isinstance(e, np.ndarray) or hasattr(e, "__dlpack__") for e in sequence):
            return torch.stack([_element_to_tensor(e) for e in sequence])
        return torch.as_tensor(sequence)
    except KeyConversionError:
        raise
    except (TypeError, ValueError, RuntimeError) as e:
        raise KeyConversionError(_type_name(sequence), str(e)) from e
