"""Canonical indexing keys.

Every index expression a caller hands to a tensor is eventually reduced to an
ordered sequence of the three key types defined here. The storage engine only
ever sees these keys, never the raw caller values.
"""

from dataclasses import dataclass
import sys
from typing import Union

import torch

# CONSTANTS
INDEX_DTYPE = torch.int64
MASK_DTYPE = torch.bool

# Values substituted for omitted slice fields, identical to Python's own slice unpacking
DEFAULT_STEP = 1
DEFAULT_START = 0
DEFAULT_STOP = sys.maxsize
DEFAULT_REVERSE_START = sys.maxsize
DEFAULT_REVERSE_STOP = -sys.maxsize - 1

# ERROR MESSAGES
UNSUPPORTED_INDEX_TYPE_MSG = "Unsupported index type {type_name}. Expected int, slice, list, tuple, numpy.ndarray or tensor."
KEY_CONVERSION_ERROR_MSG = "Cannot convert {type_name} index to a tensor key: {reason}"


# CUSTOM EXCEPTIONS
class TensorKeyError(Exception):
    """Base exception for index key resolution."""
    pass

class UnsupportedIndexType(TensorKeyError, TypeError):
    """Raised when an index item matches none of the supported kinds."""

    def __init__(self, type_name: str):
        super().__init__(UNSUPPORTED_INDEX_TYPE_MSG.format(type_name=type_name))
        self.type_name = type_name

class KeyConversionError(TensorKeyError, ValueError):
    """Raised when an index item looks supported but cannot be adapted."""

    def __init__(self, type_name: str, reason: str):
        super().__init__(KEY_CONVERSION_ERROR_MSG.format(type_name=type_name, reason=reason))
        self.type_name = type_name
        self.reason = reason


def _type_name(obj) -> str:
    """Qualified runtime type name of an object, e.g. 'numpy.float64'."""
    cls = type(obj)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def _dtype_to_str(dtype: torch.dtype) -> str:
    """Serialize a torch.dtype to a compact string (e.g., 'int64')."""
    s = str(dtype)
    if s.startswith("torch."):
        return s.split(".")[-1]
    return s


@dataclass(frozen=True)
class ScalarIndex:
    """Select a single position along one axis.

    Negative positions are kept as given; the storage engine resolves them
    against the axis length.
    """
    index: int

    def __repr__(self) -> str:
        return f"ScalarIndex({self.index})"


@dataclass(frozen=True)
class Range:
    """A half-open stepped range along one axis.

    ``start``, ``stop`` and ``step`` always hold integers. When the caller
    omitted a field the value is the substituted default and the matching
    ``*_is_default`` flag is set. The flags, not the values, decide whether a
    bound is resolved against the axis length later on.
    """
    start: int
    stop: int
    step: int
    start_is_default: bool = False
    stop_is_default: bool = False
    step_is_default: bool = False

    def to_slice(self) -> slice:
        """Equivalent Python slice, with omitted fields restored to None."""
        return slice(None if self.start_is_default else self.start,
                     None if self.stop_is_default else self.stop,
                     None if self.step_is_default else self.step)

    def __repr__(self) -> str:
        s = self.to_slice()
        return f"Range(start={s.start}, stop={s.stop}, step={s.step})"


@dataclass(frozen=True, eq=False)
class Gather:
    """Fancy indexing by an int64 position tensor or a boolean mask."""
    selector: torch.Tensor

    def __post_init__(self):
        if not isinstance(self.selector, torch.Tensor):
            raise TypeError(f"Gather selector must be a torch.Tensor, got {_type_name(self.selector)}")
        if self.selector.dtype not in (INDEX_DTYPE, MASK_DTYPE):
            raise TypeError(f"Gather selector must be int64 or bool, got {_dtype_to_str(self.selector.dtype)}")

    @property
    def is_mask(self) -> bool:
        return self.selector.dtype == MASK_DTYPE

    def __eq__(self, other) -> bool:
        if not isinstance(other, Gather):
            return NotImplemented
        return (self.selector.dtype == other.selector.dtype
                and self.selector.shape == other.selector.shape
                and bool(torch.equal(self.selector, other.selector)))

    __hash__ = None

    def __repr__(self) -> str:
        return f"Gather(shape={tuple(self.selector.shape)}, dtype={_dtype_to_str(self.selector.dtype)})"


IndexKey = Union[ScalarIndex, Range, Gather]
INDEX_KEY_TYPES = (ScalarIndex, Range, Gather)


def normalize_selector(selector: torch.Tensor) -> torch.Tensor:
    """Bring a selector tensor to one of the two dtypes the storage engine accepts.

    Boolean selectors are masks and keep their dtype. Anything else is cast to
    int64, which truncates floating point values. No copy is made when the
    selector is already int64, so normalizing twice gives the same tensor as
    normalizing once.
    """
    if selector.dtype == MASK_DTYPE:
        return selector
    return selector.to(INDEX_DTYPE)
