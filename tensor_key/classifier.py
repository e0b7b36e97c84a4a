"""Classification of caller index items into canonical keys.

Supported items, checked in this order:

1. int (and numpy integer scalars)  -> ScalarIndex
2. slice                            -> Range
3. list                             -> Gather over one axis
4. tuple                            -> one key per element at the top level,
                                       a single Gather when nested
5. numpy.ndarray                    -> Gather
6. tensor (torch.Tensor, tensor_key.Tensor or any DLPack exporter) -> Gather

Anything else raises UnsupportedIndexType.
"""

import logging
from typing import Optional, Union

import numpy as np
import torch

from tensor_key.converter import array_to_tensor, native_to_tensor, sequence_to_tensor
from tensor_key.tensor_key import (
    Gather,
    IndexKey,
    Range,
    ScalarIndex,
    UnsupportedIndexType,
    _type_name,
    normalize_selector,
)
from tensor_key.utils import unpack_slice

# Caller-facing index expression accepted by Tensor.__getitem__/__setitem__
IndexItem = Union[int, np.integer, slice, list, tuple, np.ndarray, torch.Tensor]
IndexExpression = Union[IndexItem, tuple[IndexItem, ...]]

logger = logging.getLogger(__name__)


def _is_scalar_integer(item) -> bool:
    # bool is an int subclass but is never a position
    return isinstance(item, (int, np.integer)) and not isinstance(item, bool)


def _is_native_tensor(item) -> bool:
    return torch.is_tensor(item) or hasattr(item, "__dlpack__")


def to_tensor_key(item: IndexItem, log: Optional[logging.Logger] = None) -> IndexKey:
    """Convert one index item to a canonical key.

    Tuples handled here are nested inside a top-level tuple and address a
    single axis, so they are materialized the same way as lists.

    Args:
        item: Index item to classify
        log: Logger for diagnostics, defaults to this module's logger

    Returns:
        IndexKey: ScalarIndex, Range or Gather

    Raises:
        UnsupportedIndexType: If the item's type is not supported
        KeyConversionError: If the item cannot be adapted to a key
    """
    log = log or logger
    if _is_scalar_integer(item):
        key = ScalarIndex(int(item))
    elif isinstance(item, slice):
        start, stop, step = unpack_slice(item)
        key = Range(start, stop, step,
                    start_is_default=item.start is None,
                    stop_is_default=item.stop is None,
                    step_is_default=item.step is None)
    elif isinstance(item, (list, tuple)):
        key = Gather(normalize_selector(sequence_to_tensor(item)))
    elif isinstance(item, np.ndarray):
        key = Gather(normalize_selector(array_to_tensor(item, inplace=False)))
    elif _is_native_tensor(item):
        key = Gather(normalize_selector(native_to_tensor(item)))
    else:
        raise UnsupportedIndexType(_type_name(item))
    log.debug(f"Classified {_type_name(item)} index as {key!r}")
    return key


def to_tensor_keys(expression: IndexExpression, log: Optional[logging.Logger] = None) -> list[IndexKey]:
    """Convert a full index expression to an ordered list of keys.

    A top-level tuple spans several axes: each element is classified on its
    own and addresses the next axis. Every other expression, lists included,
    addresses one axis and yields a single key.

    Examples:
        to_tensor_keys([3, 4, 5]) -> [Gather(shape=(3,), dtype=int64)]
        to_tensor_keys((3, 4, 5)) -> [ScalarIndex(3), ScalarIndex(4), ScalarIndex(5)]
        to_tensor_keys((slice(1, 2), [0, 1])) -> [Range(start=1, stop=2, step=None), Gather(shape=(2,), dtype=int64)]
    """
    if isinstance(expression, tuple):
        return [to_tensor_key(item, log=log) for item in expression]
    return [to_tensor_key(expression, log=log)]
