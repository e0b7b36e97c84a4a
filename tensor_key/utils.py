"""Utility functions for range key processing.

This module contains the helpers that turn Python slices into the integer
fields of a ``Range`` key and, on the storage side, resolve a ``Range`` against
the length of the axis it addresses.
"""

import operator

from tensor_key.tensor_key import (
    DEFAULT_REVERSE_START,
    DEFAULT_REVERSE_STOP,
    DEFAULT_START,
    DEFAULT_STEP,
    DEFAULT_STOP,
    KeyConversionError,
    Range,
)


def unpack_slice(slc: slice) -> tuple[int, int, int]:
    """Extract integer start, stop and step from a slice.

    Omitted fields are replaced by the same defaults Python uses when it
    unpacks a slice, which depend on the sign of the step.

    Args:
        slc: Slice with None or integer-like fields

    Returns:
        tuple: (start, stop, step) as plain ints

    Examples:
        unpack_slice(slice(None, 5)) -> (0, 5, 1)
        unpack_slice(slice(None, None, -1)) -> (sys.maxsize, -sys.maxsize - 1, -1)

    Raises:
        KeyConversionError: If a field is not an integer or the step is zero
    """
    try:
        step = DEFAULT_STEP if slc.step is None else operator.index(slc.step)
        if step == 0:
            raise KeyConversionError("slice", "slice step cannot be zero")
        if slc.start is None:
            start = DEFAULT_START if step > 0 else DEFAULT_REVERSE_START
        else:
            start = operator.index(slc.start)
        if slc.stop is None:
            stop = DEFAULT_STOP if step > 0 else DEFAULT_REVERSE_STOP
        else:
            stop = operator.index(slc.stop)
    except TypeError as e:
        raise KeyConversionError("slice", f"slice fields must be integers or None ({e})") from e
    return int(start), int(stop), int(step)


def _resolve_bound(value: int, is_default: bool, default: int, dim_size: int, lower: int, upper: int) -> int:
    if is_default:
        return default
    if value < 0:
        value += dim_size
    return min(max(value, lower), upper)


def resolve_range(key: Range, dim_size: int) -> range:
    """Resolve a range key against the length of its axis.

    Omitted bounds take the full extent of the axis in the direction of the
    step. Explicit bounds are wrapped when negative and then clamped, the same
    way ``slice.indices`` does it.

    Args:
        key: Range key to resolve
        dim_size: Length of the addressed axis

    Returns:
        range: Concrete positions selected along the axis

    Examples:
        resolve_range(Range(0, 5, 1, start_is_default=True), 10) -> range(0, 5)
        resolve_range(Range(-3, sys.maxsize, 1, stop_is_default=True), 10) -> range(7, 10)
    """
    step = key.step
    if step > 0:
        lower, upper = 0, dim_size
        start_default, stop_default = 0, dim_size
    else:
        lower, upper = -1, dim_size - 1
        start_default, stop_default = dim_size - 1, -1
    start = _resolve_bound(key.start, key.start_is_default, start_default, dim_size, lower, upper)
    stop = _resolve_bound(key.stop, key.stop_is_default, stop_default, dim_size, lower, upper)
    return range(start, stop, step)


def range_length(key: Range, dim_size: int) -> int:
    """Number of positions a range key selects on an axis of the given length."""
    return len(resolve_range(key, dim_size))
